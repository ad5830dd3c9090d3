"""
Error taxonomy for vault and ledger operations.

Every failure is a precondition violation: the operation aborts with no
state change and the caller must resubmit with corrected inputs.
"""


class VaultError(ValueError):
    """Base class for all vault failures"""
    code = -1


class WrongOwnerCap(VaultError):
    """Owner capability is bound to a different vault"""
    code = 0


class InsufficientReserves(VaultError):
    """Requested input exceeds the vault reserve"""
    code = 1


class InvalidRate(VaultError):
    """Rate must be strictly positive"""
    code = 2


class InvalidMetadata(VaultError):
    """Metadata is not the one bound to the vault"""
    code = 3


class ArithmeticOverflow(VaultError):
    """Intermediate or final value exceeds its integer range"""
    code = 4


class DivisionByZero(VaultError):
    """Conversion divisor is zero"""
    code = 5


class AssetMismatch(VaultError):
    """Coin is not of the asset the operation expects"""
    code = 10


class IssuerAlreadyAttached(VaultError):
    """Issuer handle already belongs to another vault"""
    code = 11


# Ledger (host) failures

class LedgerError(VaultError):
    code = 20


class ObjectNotFound(LedgerError):
    code = 21


class ObjectNotOwned(LedgerError):
    code = 22


class ImmutableObject(LedgerError):
    code = 23


class CoinAlreadySpent(LedgerError):
    code = 24


class InvalidSignature(LedgerError):
    code = 25


class InsufficientBalance(LedgerError):
    code = 26
