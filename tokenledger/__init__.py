"""
tokenledger - Fungible Token Ledger

A fixed-supply token ledger: balances, allowances, direct and delegated
transfers, and an event log of everything that happened.

Usage:
    from tokenledger import Ledger, AccountId, ExecuteResult

    alice = AccountId.filled(0x01)
    bob = AccountId.filled(0x02)
    carol = AccountId.filled(0x03)

    # Deploy: the whole supply is minted to the deployer
    token = Ledger(alice, 1_000)

    # Direct transfer
    token.transfer(alice, bob, 100)

    # Delegated transfer: alice lets carol move up to 50 of her units
    token.approve(alice, carol, 50)
    result = token.transfer_from(carol, alice, bob, 30)
    assert result == ExecuteResult.APPLIED
"""

# Core types
from .core import (
    AccountId,
    ExecuteResult,
    LedgerView,
    LedgerError,
    InsufficientBalance,
    InsufficientAllowance,
    BalanceOverflow,
    validate_amount,
    MAX_BALANCE,
    BALANCE_BITS,
    ACCOUNT_ID_LENGTH,
)

# Events
from .events import (
    Transfer,
    Approve,
    LedgerEvent,
    EventHandler,
)

# Storage
from .storage import (
    KeyValueStorage,
    MemoryStorage,
    BalanceStore,
    AllowanceStore,
    read_or_zero,
    write_or_clear,
)

# Ledger
from .ledger import Ledger, Caller

__all__ = [
    # Core
    'AccountId', 'ExecuteResult', 'LedgerView',
    'LedgerError', 'InsufficientBalance', 'InsufficientAllowance', 'BalanceOverflow',
    'validate_amount', 'MAX_BALANCE', 'BALANCE_BITS', 'ACCOUNT_ID_LENGTH',
    # Events
    'Transfer', 'Approve', 'LedgerEvent', 'EventHandler',
    # Storage
    'KeyValueStorage', 'MemoryStorage', 'BalanceStore', 'AllowanceStore',
    'read_or_zero', 'write_or_clear',
    # Ledger
    'Ledger', 'Caller',
]

__version__ = '1.0.0'
