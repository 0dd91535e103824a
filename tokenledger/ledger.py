"""
ledger.py - Stateful Fungible-Token Ledger

The Ledger class is the central state manager for the token. It is the only
module that mutates balances and allowances, ensuring controlled and
auditable changes.

Key responsibilities:
    - Implements LedgerView protocol for safe read-only access
    - Mints the whole, fixed supply to the deploying account at construction
    - Executes transfers, approvals and delegated transfers atomically
      (validate first, then write; a rejected call changes nothing)
    - Emits Transfer/Approve events into an append-only event log
    - Rebuilds state from the event log (replay) and checks conservation
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional, Tuple

from .core import (
    AccountId, ExecuteResult, LedgerError, MAX_BALANCE,
    validate_amount, _check_account,
)
from .events import Approve, EventHandler, LedgerEvent, Transfer
from .storage import AllowanceStore, BalanceStore, KeyValueStorage


class Ledger:
    """
    Fungible-token ledger with a fixed total supply.

    Every mutating method takes the caller explicitly. Authenticating that
    caller is the host's job; the ledger trusts what it is given.

    Invariants:
        - Sum of all balances == total_supply() in every reachable state
          (set_balance in test mode is the only way around it)
        - No balance is ever negative or above MAX_BALANCE
        - Rejected operations leave balances, allowances and the event log untouched

    Thread Safety:
        Not thread-safe. Hosts serving concurrent callers must process one
        call at a time per Ledger instance.

    Example:
        alice, bob = AccountId.filled(0x01), AccountId.filled(0x02)
        token = Ledger(alice, 1_000)
        token.transfer(alice, bob, 10)
        token.balance_of(bob)          # 10
    """

    def __init__(
        self,
        deployer: AccountId,
        initial_supply: int,
        name: str = "token",
        verbose: bool = True,
        test_mode: bool = False,
        balance_storage: Optional[KeyValueStorage] = None,
        allowance_storage: Optional[KeyValueStorage] = None,
    ):
        """
        Deploy a ledger and mint the entire supply to the deployer.

        Args:
            deployer: Caller creating the ledger; receives initial_supply
            initial_supply: Fixed total supply (0 is allowed)
            name: Ledger identifier used in output
            verbose: Print every applied and rejected operation (default: True)
            test_mode: Enable set_balance() (default: False)
            balance_storage: Storage medium for balances (default: in memory)
            allowance_storage: Storage medium for allowances (default: in memory)

        Raises:
            ValueError: If a supplied storage medium is not empty
        """
        _check_account(deployer, "deployer")
        validate_amount(initial_supply, "initial_supply")
        for label, medium in (("balance", balance_storage), ("allowance", allowance_storage)):
            if medium is not None and len(medium) != 0:
                raise ValueError(f"{label} storage must be empty at deployment")

        self.name = name
        self.verbose = verbose
        self._test_mode = test_mode
        self._total_supply = initial_supply
        self._balances = BalanceStore(balance_storage)
        self._allowances = AllowanceStore(allowance_storage)
        self.event_log: List[LedgerEvent] = []
        self._subscribers: List[EventHandler] = []
        # Monotonic sequence counter for event ordering
        self._next_sequence: int = 0

        self._balances.set(deployer, initial_supply)
        self._emit(Transfer(
            source=None,
            dest=deployer,
            value=initial_supply,
            sequence_number=self._take_sequence(),
        ))

    # ========================================================================
    # LedgerView PROTOCOL IMPLEMENTATION (read-only methods)
    # ========================================================================

    def total_supply(self) -> int:
        """The supply fixed at construction."""
        return self._total_supply

    def balance_of(self, account: AccountId) -> int:
        """
        Get the balance of an account.

        Returns:
            Current balance (0 if the account never held units)
        """
        return self._balances.get(account)

    def allowance(self, owner: AccountId, spender: AccountId) -> int:
        """
        Get how many units spender may still move out of owner's balance.

        Returns:
            Remaining allowance (0 if none was granted)
        """
        return self._allowances.get(owner, spender)

    def holders(self) -> Dict[AccountId, int]:
        """All accounts with a non-zero balance."""
        return self._balances.holders()

    def allowances_of(self, owner: AccountId) -> Dict[AccountId, int]:
        """All non-zero allowances granted by owner, keyed by spender."""
        return self._allowances.granted_by(owner)

    def verify_conservation(self) -> Dict[str, Any]:
        """
        Verify that the sum of all balances equals the total supply.

        Returns:
            Dict with keys:
            - 'valid': bool - True if the balances add up
            - 'total_supply': int - Supply fixed at construction
            - 'sum_of_balances': int - Current sum across all accounts
            - 'difference': int - sum_of_balances - total_supply

        Example:
            result = token.verify_conservation()
            assert result['valid'], f"Conservation violated: {result['difference']}"
        """
        current = self._balances.total()
        return {
            'valid': current == self._total_supply,
            'total_supply': self._total_supply,
            'sum_of_balances': current,
            'difference': current - self._total_supply,
        }

    # ========================================================================
    # OPERATIONS (Mutating)
    # ========================================================================

    def transfer(self, caller: AccountId, to: AccountId, value: int) -> ExecuteResult:
        """
        Move value units from caller to `to`.

        Returns:
            ExecuteResult.APPLIED if successful
            ExecuteResult.INSUFFICIENT_BALANCE if caller holds less than value
            ExecuteResult.BALANCE_OVERFLOW if crediting `to` would overflow
        """
        _check_account(caller, "caller")
        _check_account(to, "to")
        validate_amount(value)
        return self._transfer_from_to(caller, to, value)

    def approve(self, caller: AccountId, spender: AccountId, value: int) -> ExecuteResult:
        """
        Set spender's allowance over caller's units to exactly value.

        The previous allowance is overwritten, not added to. Approving more
        than the caller holds is allowed; balances are checked at spend time.
        Approving 0 revokes the allowance.

        Returns:
            ExecuteResult.APPLIED (approval cannot fail)
        """
        _check_account(caller, "caller")
        _check_account(spender, "spender")
        validate_amount(value)
        self._allowances.set(caller, spender, value)
        self._emit(Approve(
            owner=caller,
            spender=spender,
            value=value,
            sequence_number=self._take_sequence(),
        ))
        return ExecuteResult.APPLIED

    def transfer_from(
        self,
        caller: AccountId,
        source: AccountId,
        dest: AccountId,
        value: int,
    ) -> ExecuteResult:
        """
        Move value units from source to dest on source's behalf.

        The caller is the spender. The allowance is checked first; the
        balance transfer runs next, and the allowance is only reduced once
        the transfer has been applied.

        Returns:
            ExecuteResult.APPLIED if successful
            ExecuteResult.INSUFFICIENT_ALLOWANCE if caller may not move value units
            ExecuteResult.INSUFFICIENT_BALANCE if source holds less than value
            ExecuteResult.BALANCE_OVERFLOW if crediting dest would overflow
        """
        _check_account(caller, "caller")
        _check_account(source, "source")
        _check_account(dest, "dest")
        validate_amount(value)

        allowance = self._allowances.get(source, caller)
        if allowance < value:
            return self._reject("transfer_from", ExecuteResult.INSUFFICIENT_ALLOWANCE,
                                f"{caller!r} may move {allowance} of {source!r}, requested {value}")

        return self._transfer_from_to(
            source, dest, value, spender=caller, remaining_allowance=allowance - value
        )

    def _transfer_from_to(
        self,
        source: AccountId,
        dest: AccountId,
        value: int,
        spender: Optional[AccountId] = None,
        remaining_allowance: Optional[int] = None,
    ) -> ExecuteResult:
        """
        Shared transfer primitive used by transfer() and transfer_from().

        Computes every new balance before writing any of them, then applies
        them together with the spender's reduced allowance (delegated
        transfers only). The Transfer event is emitted last, so subscribers
        always see the fully applied state.
        """
        result, updates = self._validate_transfer(source, dest, value)
        if not result.ok:
            return self._reject("transfer", result,
                                f"{source!r}→{dest!r} {value} (balance {self._balances.get(source)})")

        self._balances.apply(updates)
        if spender is not None:
            self._allowances.set(source, spender, remaining_allowance)
        self._emit(Transfer(
            source=source,
            dest=dest,
            value=value,
            sequence_number=self._take_sequence(),
            spender=spender,
        ))
        return ExecuteResult.APPLIED

    def _validate_transfer(
        self,
        source: AccountId,
        dest: AccountId,
        value: int,
    ) -> Tuple[ExecuteResult, Dict[AccountId, int]]:
        """
        Validate a transfer and compute the balances it would write.

        Checks performed:
        1. Source balance covers value
        2. Destination credit stays within MAX_BALANCE

        Returns:
            Tuple of (result, updates). updates maps account -> new balance
            and is empty unless result is APPLIED. A self-transfer nets to
            no change at all.
        """
        from_balance = self._balances.get(source)
        if from_balance < value:
            return ExecuteResult.INSUFFICIENT_BALANCE, {}

        if source == dest:
            return ExecuteResult.APPLIED, {}

        to_balance = self._balances.get(dest)
        if to_balance > MAX_BALANCE - value:
            return ExecuteResult.BALANCE_OVERFLOW, {}

        return ExecuteResult.APPLIED, {
            source: from_balance - value,
            dest: to_balance + value,
        }

    def set_balance(self, account: AccountId, value: int) -> None:
        """
        Set an account's balance directly.

        WARNING: This bypasses conservation and emits no event. It is only
        available in test mode.

        Raises:
            LedgerError: If called when test_mode is False
        """
        if not self._test_mode:
            raise LedgerError(
                "set_balance() is disabled in production mode. "
                "Use transfer() to modify balances. "
                "Set test_mode=True when creating Ledger for testing."
            )
        _check_account(account, "account")
        self._balances.set(account, value)

    # ========================================================================
    # EVENTS
    # ========================================================================

    def subscribe(self, handler: EventHandler) -> None:
        """
        Register a handler called with every event emitted from now on.

        Handlers run after the operation is fully applied and logged. An
        exception raised by a handler propagates to the caller of the
        operation, but the operation stays applied and the remaining
        handlers are not called for that event.
        """
        self._subscribers.append(handler)

    def unsubscribe(self, handler: EventHandler) -> None:
        """
        Remove a previously registered handler.

        Raises:
            ValueError: If handler is not subscribed
        """
        self._subscribers.remove(handler)

    def _take_sequence(self) -> int:
        sequence = self._next_sequence
        self._next_sequence += 1
        return sequence

    def _emit(self, event: LedgerEvent) -> None:
        # Log first (always - audit trail is mandatory), then notify
        self.event_log.append(event)
        if self.verbose:
            print(f"✓ [{self.name}] {event!r}")
        for handler in list(self._subscribers):
            handler(event)

    def _reject(self, operation: str, result: ExecuteResult, detail: str) -> ExecuteResult:
        if self.verbose:
            print(f"✗ [{self.name}] REJECTED {operation}: {result.value} ({detail})")
        return result

    # ========================================================================
    # LEDGER OPERATIONS
    # ========================================================================

    def as_caller(self, account: AccountId) -> Caller:
        """Bind a host-supplied caller identity to this ledger."""
        _check_account(account, "account")
        return Caller(self, account)

    def clone(self) -> Ledger:
        """
        Create a deep copy of this ledger.

        Balances, allowances, the event log and the sequence counter are all
        independent of the original. Subscribers are not copied.

        Returns:
            A new Ledger instance with identical state
        """
        cloned = Ledger.__new__(Ledger)
        cloned.name = self.name
        cloned.verbose = self.verbose
        cloned._test_mode = self._test_mode
        cloned._total_supply = self._total_supply
        cloned._balances = self._balances.copy()
        cloned._allowances = self._allowances.copy()
        cloned.event_log = list(self.event_log)
        cloned._subscribers = []
        cloned._next_sequence = self._next_sequence
        return cloned

    def replay(self) -> Ledger:
        """
        Create a new ledger by replaying the event log.

        The first event must be the mint; every later event is re-executed
        through the public operations, delegated transfers through
        transfer_from() so allowances are rebuilt as well.

        Note: Balances set via set_balance() are NOT replayed because they
        are not part of the event log.

        Returns:
            New Ledger instance with replayed state

        Raises:
            LedgerError: If the log does not start with a mint or an event is rejected
        """
        if not self.event_log or not (
            isinstance(self.event_log[0], Transfer) and self.event_log[0].is_mint
        ):
            raise LedgerError("Replay failed: event log does not start with a mint")

        mint = self.event_log[0]
        new_ledger = Ledger(
            mint.dest,
            mint.value,
            name=f"{self.name}_replayed",
            verbose=self.verbose,
            test_mode=self._test_mode,
        )

        for event in self.event_log[1:]:
            if isinstance(event, Approve):
                result = new_ledger.approve(event.owner, event.spender, event.value)
            elif event.is_mint:
                raise LedgerError(f"Replay failed at event {event.sequence_number}: second mint")
            elif event.spender is not None:
                result = new_ledger.transfer_from(event.spender, event.source, event.dest, event.value)
            else:
                result = new_ledger.transfer(event.source, event.dest, event.value)
            if not result.ok:
                raise LedgerError(f"Replay failed at event {event.sequence_number}: {result.value}")

        return new_ledger

    def __repr__(self) -> str:
        return (f"Ledger({self.name!r}, supply={self._total_supply}, "
                f"holders={len(self._balances)}, events={len(self.event_log)})")


class Caller:
    """
    A ledger bound to one caller identity.

    The host authenticates the account once and hands out a Caller; every
    operation then runs as that account.

    Example:
        alice = token.as_caller(alice_id)
        alice.approve(bob_id, 50)
    """

    def __init__(self, ledger: Ledger, account: AccountId):
        self.ledger = ledger
        self.account = account

    @property
    def balance(self) -> int:
        return self.ledger.balance_of(self.account)

    def transfer(self, to: AccountId, value: int) -> ExecuteResult:
        return self.ledger.transfer(self.account, to, value)

    def approve(self, spender: AccountId, value: int) -> ExecuteResult:
        return self.ledger.approve(self.account, spender, value)

    def transfer_from(self, source: AccountId, dest: AccountId, value: int) -> ExecuteResult:
        return self.ledger.transfer_from(self.account, source, dest, value)

    def __repr__(self) -> str:
        return f"Caller({self.account!r} on {self.ledger.name!r})"
