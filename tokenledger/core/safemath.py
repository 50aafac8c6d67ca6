# tokenledger/core/safemath.py

UINT256_MAX = 2 ** 256 - 1

class TokenLedgerError(Exception):
    """Base class for every rejection raised by the token ledger."""
    pass

class InvalidAmountError(TokenLedgerError, ValueError):
    """Raised when a value is not an unsigned 256-bit integer."""
    pass

class ArithmeticOverflowError(TokenLedgerError, ArithmeticError):
    """Raised when a checked addition would exceed UINT256_MAX."""
    pass

class ArithmeticUnderflowError(TokenLedgerError, ArithmeticError):
    """Raised when a checked subtraction would go below zero."""
    pass

def require_amount(value, label: str = "amount") -> int:
    """
    Validate that value is an unsigned 256-bit integer and return it.
    bool is rejected even though it subclasses int.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmountError(
            f"{label} must be an integer, got {type(value).__name__}")
    if value < 0:
        raise InvalidAmountError(f"{label} must not be negative: {value}")
    if value > UINT256_MAX:
        raise InvalidAmountError(f"{label} exceeds uint256 range: {value}")
    return value

def checked_add(a: int, b: int) -> int:
    result = a + b
    if result > UINT256_MAX:
        raise ArithmeticOverflowError(f"Overflow: {a} + {b} > UINT256_MAX")
    return result

def checked_sub(a: int, b: int) -> int:
    if b > a:
        raise ArithmeticUnderflowError(f"Underflow: {a} - {b} < 0")
    return a - b
