from dataclasses import asdict, dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional

from .conversion import U64_MAX, effective_rate, require_u64, require_u8
from .errors import InvalidRate


def _decode_text(name: str, value) -> str:
    if isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError as e:
            raise ValueError(f"{name} is not valid UTF-8") from e
    if not isinstance(value, str):
        raise ValueError(f"{name} must be text, got {type(value).__name__}")
    return value


@dataclass
class VaultParams:
    """Creation parameters for an exchange vault"""

    rate: int
    rate_decimals: int
    symbol: str
    name: str
    description: str
    input_asset: str
    icon_url: Optional[str] = None

    def __post_init__(self):
        require_u64("rate", self.rate)
        require_u8("rate_decimals", self.rate_decimals)
        if self.rate == 0:
            raise InvalidRate("Rate must be greater than zero")

        self.symbol = _decode_text("symbol", self.symbol)
        self.name = _decode_text("name", self.name)
        self.description = _decode_text("description", self.description)
        if self.icon_url is not None:
            self.icon_url = _decode_text("icon_url", self.icon_url)

        if not self.symbol:
            raise ValueError("Symbol must not be empty")
        if not self.input_asset:
            raise ValueError("Input asset must not be empty")

    @classmethod
    def par(cls, symbol: str, name: str, input_asset: str, rate_decimals: int = 0,
            description: str = "", icon_url: Optional[str] = None) -> 'VaultParams':
        """One output unit per input unit"""
        require_u8("rate_decimals", rate_decimals)
        return cls(
            rate=10 ** rate_decimals,
            rate_decimals=rate_decimals,
            symbol=symbol,
            name=name,
            description=description,
            input_asset=input_asset,
            icon_url=icon_url,
        )

    @classmethod
    def from_multiplier(cls, multiplier: str, symbol: str, name: str, input_asset: str,
                        description: str = "", icon_url: Optional[str] = None) -> 'VaultParams':
        """Build rate and decimals from a decimal multiplier such as "2.5" """
        try:
            value = Decimal(multiplier)
        except InvalidOperation as e:
            raise ValueError(f"Invalid multiplier {multiplier!r}") from e
        if not value.is_finite() or value <= 0:
            raise InvalidRate(f"Multiplier must be positive, got {multiplier}")

        exponent = value.normalize().as_tuple().exponent
        rate_decimals = max(0, -exponent)
        rate = int(value.scaleb(rate_decimals))
        if rate > U64_MAX:
            raise ValueError(f"Multiplier {multiplier} does not fit a u64 rate")

        return cls(
            rate=rate,
            rate_decimals=rate_decimals,
            symbol=symbol,
            name=name,
            description=description,
            input_asset=input_asset,
            icon_url=icon_url,
        )

    def effective_rate(self) -> Decimal:
        return effective_rate(self.rate, self.rate_decimals)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'VaultParams':
        return cls(
            rate=data['rate'],
            rate_decimals=data.get('rate_decimals', 0),
            symbol=data['symbol'],
            name=data['name'],
            description=data.get('description', ""),
            input_asset=data['input_asset'],
            icon_url=data.get('icon_url'),
        )
