"""
Rate conversion arithmetic

Amounts are u64, rates are u64 and decimals are u8. Products are checked
against the u128 range and results are narrowed back to u64 explicitly, so
no conversion ever wraps or truncates silently.
"""

from decimal import Decimal

from .errors import ArithmeticOverflow, DivisionByZero

U8_MAX = (1 << 8) - 1
U64_MAX = (1 << 64) - 1
U128_MAX = (1 << 128) - 1


def _require_uint(name: str, value: int, limit: int) -> int:
    # bool is an int subclass; reject it along with floats and negatives
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {type(value).__name__}")
    if not (0 <= value <= limit):
        raise ValueError(f"{name} must be between 0 and {limit}, got {value}")
    return value


def require_u64(name: str, value: int) -> int:
    """Validate that value is in the u64 domain"""
    return _require_uint(name, value, U64_MAX)


def require_u8(name: str, value: int) -> int:
    """Validate that value is in the u8 domain"""
    return _require_uint(name, value, U8_MAX)


def _narrow_u128(value: int) -> int:
    if value > U128_MAX:
        raise ArithmeticOverflow(f"Intermediate value {value} exceeds u128")
    return value


def _narrow_u64(value: int) -> int:
    if value > U64_MAX:
        raise ArithmeticOverflow(f"Result {value} exceeds u64")
    return value


def scale_factor(decimals: int) -> int:
    """10^decimals as a checked u128"""
    require_u8("decimals", decimals)
    return _narrow_u128(10 ** decimals)


def checked_add_u64(a: int, b: int) -> int:
    return _narrow_u64(a + b)


def checked_sub_u64(a: int, b: int) -> int:
    if b > a:
        raise ArithmeticOverflow(f"Subtraction {a} - {b} underflows u64")
    return a - b


def output_amount(rate: int, input_amount: int, decimals: int) -> int:
    """
    Output units issued for input_amount at rate / 10^decimals.

    Computes floor(input_amount * rate / 10^decimals). Rounding down means
    the vault never issues more output than the input warrants.
    """
    require_u64("rate", rate)
    require_u64("input_amount", input_amount)
    divisor = scale_factor(decimals)
    if divisor == 0:
        raise DivisionByZero("Decimal scale divisor is zero")

    product = _narrow_u128(input_amount * rate)
    return _narrow_u64(product // divisor)


def input_amount(rate: int, output_amount: int, decimals: int) -> int:
    """
    Input units released for output_amount at rate / 10^decimals.

    Computes ceil(output_amount * 10^decimals / rate). Rounding up means
    retiring output never releases more reserve than it warrants.
    """
    require_u64("rate", rate)
    require_u64("output_amount", output_amount)
    if rate == 0:
        raise DivisionByZero("Rate is zero")

    numerator = _narrow_u128(output_amount * scale_factor(decimals))
    return _narrow_u64(-(-numerator // rate))


def effective_rate(rate: int, decimals: int) -> Decimal:
    """Human-readable multiplier rate / 10^decimals"""
    require_u64("rate", rate)
    require_u8("decimals", decimals)
    return Decimal(rate).scaleb(-decimals)
