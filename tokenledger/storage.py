"""
storage.py - Key/value stores behind the ledger

The ledger does not own a persistence engine. It is written against the
KeyValueStorage protocol, and the host supplies the medium (MemoryStorage by
default). Two typed stores sit on top of it:

- BalanceStore: account -> balance
- AllowanceStore: (owner, spender) -> remaining allowance

Both stores read absent keys as zero and never keep an explicit zero entry,
so untouched accounts cost no storage.
"""

from __future__ import annotations
from typing import Any, Dict, Hashable, Iterator, Optional, Protocol, Tuple, runtime_checkable

from .core import AccountId, MAX_BALANCE, LedgerError, validate_amount


@runtime_checkable
class KeyValueStorage(Protocol):
    """
    Minimal key/value contract a storage medium must honour.

    Keys are hashable, values are non-negative ints. get() returns None for
    absent keys.
    """

    def get(self, key: Hashable) -> Optional[int]:
        ...

    def set(self, key: Hashable, value: int) -> None:
        ...

    def delete(self, key: Hashable) -> None:
        ...

    def items(self) -> Iterator[Tuple[Any, int]]:
        ...

    def __len__(self) -> int:
        ...


class MemoryStorage:
    """Dict-backed KeyValueStorage."""

    def __init__(self, initial: Optional[Dict[Hashable, int]] = None):
        self._data: Dict[Hashable, int] = dict(initial or {})

    def get(self, key: Hashable) -> Optional[int]:
        return self._data.get(key)

    def set(self, key: Hashable, value: int) -> None:
        self._data[key] = value

    def delete(self, key: Hashable) -> None:
        self._data.pop(key, None)

    def items(self) -> Iterator[Tuple[Any, int]]:
        return iter(list(self._data.items()))

    def copy(self) -> MemoryStorage:
        return MemoryStorage(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"MemoryStorage({len(self._data)} entries)"


def read_or_zero(storage: KeyValueStorage, key: Hashable) -> int:
    """Read a stored amount, treating an absent key as 0."""
    value = storage.get(key)
    return 0 if value is None else value


def write_or_clear(storage: KeyValueStorage, key: Hashable, value: int) -> None:
    """Store an amount; a zero amount removes the key instead."""
    if value == 0:
        storage.delete(key)
    else:
        storage.set(key, value)


def _copy_storage(storage: KeyValueStorage) -> MemoryStorage:
    return MemoryStorage(dict(storage.items()))


class BalanceStore:
    """
    Account balances over a KeyValueStorage.

    The store does not enforce conservation on its own; the Ledger only ever
    changes balances through apply(), which writes a whole set of balances
    after every one of them has been validated.
    """

    def __init__(self, storage: Optional[KeyValueStorage] = None):
        self._storage = storage if storage is not None else MemoryStorage()

    def get(self, account: AccountId) -> int:
        return read_or_zero(self._storage, account)

    def set(self, account: AccountId, value: int) -> None:
        write_or_clear(self._storage, account, validate_amount(value, "balance"))

    def apply(self, updates: Dict[AccountId, int]) -> None:
        """
        Write several new balances as one unit.

        All values are checked before the first write, so either every
        balance in updates is written or none is.

        Raises:
            LedgerError: If any new balance is outside [0, MAX_BALANCE]
        """
        for account, value in updates.items():
            if value < 0 or value > MAX_BALANCE:
                raise LedgerError(f"Balance for {account!r} out of range: {value}")
        for account, value in updates.items():
            write_or_clear(self._storage, account, value)

    def holders(self) -> Dict[AccountId, int]:
        """All accounts with a non-zero balance, in account order."""
        return dict(sorted((a, v) for a, v in self._storage.items() if v))

    def total(self) -> int:
        """Sum of all stored balances (accounts summed in sorted order)."""
        return sum(v for _, v in sorted(self._storage.items()))

    def copy(self) -> BalanceStore:
        return BalanceStore(_copy_storage(self._storage))

    def __len__(self) -> int:
        return len(self._storage)


class AllowanceStore:
    """Remaining allowances keyed by (owner, spender) over a KeyValueStorage."""

    def __init__(self, storage: Optional[KeyValueStorage] = None):
        self._storage = storage if storage is not None else MemoryStorage()

    def get(self, owner: AccountId, spender: AccountId) -> int:
        return read_or_zero(self._storage, (owner, spender))

    def set(self, owner: AccountId, spender: AccountId, value: int) -> None:
        write_or_clear(self._storage, (owner, spender), validate_amount(value, "allowance"))

    def granted_by(self, owner: AccountId) -> Dict[AccountId, int]:
        """Non-zero allowances owner has granted, keyed by spender."""
        return dict(sorted(
            (spender, v) for (o, spender), v in self._storage.items() if o == owner and v
        ))

    def copy(self) -> AllowanceStore:
        return AllowanceStore(_copy_storage(self._storage))

    def __len__(self) -> int:
        return len(self._storage)
