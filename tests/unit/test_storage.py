"""
test_storage.py - Unit tests for storage.py

Tests:
- MemoryStorage: KeyValueStorage contract
- read_or_zero / write_or_clear: lazy default and no stored zeros
- BalanceStore: get/set, apply() all-or-nothing, holders, total
- AllowanceStore: pair keys, granted_by
"""

import pytest

from tokenledger import (
    AccountId, MemoryStorage, KeyValueStorage, BalanceStore, AllowanceStore,
    LedgerError, MAX_BALANCE, read_or_zero, write_or_clear,
)


A = AccountId.filled(0x0A)
B = AccountId.filled(0x0B)
C = AccountId.filled(0x0C)


class TestMemoryStorage:
    """Tests for the in-memory storage medium."""

    def test_implements_protocol(self):
        assert isinstance(MemoryStorage(), KeyValueStorage)

    def test_absent_key_is_none(self):
        assert MemoryStorage().get("missing") is None

    def test_set_get_delete(self):
        storage = MemoryStorage()
        storage.set("k", 5)
        assert storage.get("k") == 5
        assert len(storage) == 1
        storage.delete("k")
        assert storage.get("k") is None
        assert len(storage) == 0

    def test_delete_missing_is_noop(self):
        storage = MemoryStorage()
        storage.delete("k")
        assert len(storage) == 0

    def test_copy_is_independent(self):
        storage = MemoryStorage({"k": 1})
        copied = storage.copy()
        copied.set("k", 2)
        assert storage.get("k") == 1


class TestLazyDefaults:
    """Absent keys read as zero; zero is never stored."""

    def test_read_or_zero_absent(self):
        assert read_or_zero(MemoryStorage(), A) == 0

    def test_write_zero_clears(self):
        storage = MemoryStorage({A: 7})
        write_or_clear(storage, A, 0)
        assert storage.get(A) is None
        assert len(storage) == 0

    def test_write_zero_on_absent_creates_nothing(self):
        storage = MemoryStorage()
        write_or_clear(storage, A, 0)
        assert len(storage) == 0


class TestBalanceStore:
    """Tests for BalanceStore."""

    def test_default_zero(self):
        assert BalanceStore().get(A) == 0

    def test_set_and_get(self):
        store = BalanceStore()
        store.set(A, 42)
        assert store.get(A) == 42

    def test_set_rejects_negative(self):
        with pytest.raises(ValueError):
            BalanceStore().set(A, -1)

    def test_apply_writes_all(self):
        store = BalanceStore()
        store.set(A, 10)
        store.apply({A: 4, B: 6})
        assert store.get(A) == 4
        assert store.get(B) == 6

    def test_apply_zero_removes_entry(self):
        store = BalanceStore()
        store.set(A, 10)
        store.apply({A: 0, B: 10})
        assert len(store) == 1
        assert store.holders() == {B: 10}

    def test_apply_out_of_range_writes_nothing(self):
        store = BalanceStore()
        store.set(A, 10)
        with pytest.raises(LedgerError, match="out of range"):
            store.apply({A: 5, B: MAX_BALANCE + 1})
        assert store.get(A) == 10
        assert store.get(B) == 0

    def test_holders_sorted_non_zero(self):
        store = BalanceStore()
        store.set(C, 3)
        store.set(A, 1)
        store.set(B, 0)
        assert list(store.holders().items()) == [(A, 1), (C, 3)]

    def test_total(self):
        store = BalanceStore()
        store.set(A, 1)
        store.set(B, 2)
        assert store.total() == 3

    def test_uses_supplied_storage(self):
        medium = MemoryStorage()
        store = BalanceStore(medium)
        store.set(A, 9)
        assert medium.get(A) == 9

    def test_copy_is_independent(self):
        store = BalanceStore()
        store.set(A, 1)
        copied = store.copy()
        copied.set(A, 2)
        assert store.get(A) == 1


class TestAllowanceStore:
    """Tests for AllowanceStore."""

    def test_default_zero(self):
        assert AllowanceStore().get(A, B) == 0

    def test_pair_is_directional(self):
        store = AllowanceStore()
        store.set(A, B, 5)
        assert store.get(A, B) == 5
        assert store.get(B, A) == 0

    def test_set_overwrites(self):
        store = AllowanceStore()
        store.set(A, B, 5)
        store.set(A, B, 3)
        assert store.get(A, B) == 3

    def test_zero_clears_entry(self):
        store = AllowanceStore()
        store.set(A, B, 5)
        store.set(A, B, 0)
        assert len(store) == 0

    def test_granted_by(self):
        store = AllowanceStore()
        store.set(A, C, 2)
        store.set(A, B, 1)
        store.set(B, C, 9)
        assert store.granted_by(A) == {B: 1, C: 2}
        assert store.granted_by(C) == {}

    def test_allowance_above_max_raises(self):
        with pytest.raises(ValueError):
            AllowanceStore().set(A, B, MAX_BALANCE + 1)
