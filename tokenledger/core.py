"""
Core types and pure functions for the token ledger.

This module provides the foundational data structures for the ledger:
1. Constants: MAX_BALANCE, ACCOUNT_ID_LENGTH
2. Immutable data structures: AccountId
3. Results and exceptions: ExecuteResult, LedgerError and its subclasses
4. Validation: validate_amount for every amount entering the public API
5. Protocols: LedgerView for read-only ledger access

Nothing in this module mutates ledger state.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Protocol, runtime_checkable


# ============================================================================
# CONSTANTS
# ============================================================================

# Balances mirror an unsigned 128-bit integer.
BALANCE_BITS = 128
MAX_BALANCE = 2 ** BALANCE_BITS - 1

# Account identifiers are opaque 32-byte values supplied by the host.
ACCOUNT_ID_LENGTH = 32


# ============================================================================
# ACCOUNT IDENTIFIERS
# ============================================================================

@dataclass(frozen=True, slots=True, order=True)
class AccountId:
    """
    Opaque fixed-size account identifier.

    The ledger only compares and hashes identifiers; it never looks inside
    the bytes. Ordering exists so summations and listings are deterministic.

    Attributes:
        raw: Exactly ACCOUNT_ID_LENGTH bytes.
    """
    raw: bytes

    def __post_init__(self):
        if not isinstance(self.raw, (bytes, bytearray)):
            raise ValueError(f"AccountId must be bytes, got {type(self.raw).__name__}")
        if len(self.raw) != ACCOUNT_ID_LENGTH:
            raise ValueError(
                f"AccountId must be {ACCOUNT_ID_LENGTH} bytes, got {len(self.raw)}"
            )
        if isinstance(self.raw, bytearray):
            object.__setattr__(self, 'raw', bytes(self.raw))

    @classmethod
    def from_hex(cls, text: str) -> AccountId:
        """Parse a hex string, with or without a 0x prefix."""
        if not isinstance(text, str):
            raise ValueError(f"Account hex must be a str, got {type(text).__name__}")
        if text.startswith(("0x", "0X")):
            text = text[2:]
        try:
            raw = bytes.fromhex(text)
        except ValueError as e:
            raise ValueError(f"Invalid account hex {text!r}: {e}") from e
        return cls(raw)

    @classmethod
    def filled(cls, byte: int) -> AccountId:
        """Identifier made of one repeated byte, e.g. filled(0x01)."""
        if not 0 <= byte <= 0xFF:
            raise ValueError(f"Fill byte must be in [0, 255], got {byte}")
        return cls(bytes([byte]) * ACCOUNT_ID_LENGTH)

    def hex(self) -> str:
        return "0x" + self.raw.hex()

    def __repr__(self) -> str:
        h = self.raw.hex()
        return f"AccountId(0x{h[:8]}…{h[-4:]})"


def _check_account(account: AccountId, role: str) -> None:
    if not isinstance(account, AccountId):
        raise TypeError(f"{role} must be an AccountId, got {type(account).__name__}")


# ============================================================================
# AMOUNT VALIDATION
# ============================================================================

def validate_amount(value: int, name: str = "value") -> int:
    """
    Check that value is a representable balance.

    Args:
        value: Amount to check
        name: Argument name used in error messages

    Returns:
        The value unchanged

    Raises:
        TypeError: If value is not an int (bool is rejected too)
        ValueError: If value is negative or exceeds MAX_BALANCE
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")
    if value > MAX_BALANCE:
        raise ValueError(f"{name} exceeds MAX_BALANCE: {value}")
    return value


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """Base exception for all ledger-related errors."""
    pass


class InsufficientBalance(LedgerError):
    """Raised by raise_for_error() when a debit would make a balance negative."""
    pass


class InsufficientAllowance(LedgerError):
    """Raised by raise_for_error() when a delegated transfer exceeds the allowance."""
    pass


class BalanceOverflow(LedgerError):
    """Raised by raise_for_error() when a credit would exceed MAX_BALANCE."""
    pass


# ============================================================================
# RESULTS
# ============================================================================

class ExecuteResult(Enum):
    """
    Outcome of a mutating ledger operation.

    APPLIED: The operation was validated and applied.
    INSUFFICIENT_BALANCE: The source account cannot cover the amount.
    INSUFFICIENT_ALLOWANCE: The spender's remaining allowance cannot cover the amount.
    BALANCE_OVERFLOW: Crediting the destination would exceed MAX_BALANCE.

    Every result other than APPLIED leaves the ledger untouched.
    """
    APPLIED = "applied"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    INSUFFICIENT_ALLOWANCE = "insufficient_allowance"
    BALANCE_OVERFLOW = "balance_overflow"

    @property
    def ok(self) -> bool:
        return self is ExecuteResult.APPLIED

    def raise_for_error(self) -> None:
        """Raise the matching LedgerError subclass unless the result is APPLIED."""
        if self.ok:
            return
        raise _RESULT_ERRORS[self](self.value)


_RESULT_ERRORS = {
    ExecuteResult.INSUFFICIENT_BALANCE: InsufficientBalance,
    ExecuteResult.INSUFFICIENT_ALLOWANCE: InsufficientAllowance,
    ExecuteResult.BALANCE_OVERFLOW: BalanceOverflow,
}


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class LedgerView(Protocol):
    """
    Read-only interface to ledger state.

    Functions accepting a LedgerView declare that they only query the ledger.
    The Ledger class implements this protocol but also provides mutation
    methods.
    """

    def total_supply(self) -> int:
        """Return the fixed total supply."""
        ...

    def balance_of(self, account: AccountId) -> int:
        """Return the balance of an account, 0 if it never held units."""
        ...

    def allowance(self, owner: AccountId, spender: AccountId) -> int:
        """Return what spender may still move out of owner's balance."""
        ...

    def holders(self) -> Dict[AccountId, int]:
        """Return all non-zero balances."""
        ...
