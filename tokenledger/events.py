"""
events.py - Ledger domain events

Events are just data: immutable records of what the ledger did, appended to
the ledger's event log and handed to subscribers. Delivery to external
observers is the subscriber's business.

Core concepts:
1. Transfer: units moved between accounts (source=None marks the initial mint)
2. Approve: an owner set a spender's allowance
3. EventHandler: plain function called with each event after it is logged
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Optional, Tuple, Union

from .core import AccountId


@dataclass(frozen=True, slots=True)
class Transfer:
    """
    Units moved from source to dest.

    Attributes:
        source: Debited account, or None for the mint at construction
        dest: Credited account
        value: Number of units moved
        sequence_number: Position in the ledger's event log
        spender: Account that moved the units on source's behalf (delegated transfers only)
    """
    source: Optional[AccountId]
    dest: Optional[AccountId]
    value: int
    sequence_number: int
    spender: Optional[AccountId] = None

    @property
    def is_mint(self) -> bool:
        return self.source is None

    @property
    def topics(self) -> Tuple[Optional[AccountId], ...]:
        """Indexed fields an observer can filter on."""
        return (self.source, self.dest)

    def __repr__(self) -> str:
        src = "mint" if self.source is None else repr(self.source)
        via = f" via {self.spender!r}" if self.spender is not None else ""
        return f"Transfer#{self.sequence_number}({self.value}: {src}→{self.dest!r}{via})"


@dataclass(frozen=True, slots=True)
class Approve:
    """
    Owner set spender's allowance to value (overwrite, not increment).

    Attributes:
        owner: Account whose units may be moved
        spender: Account allowed to move them
        value: New allowance
        sequence_number: Position in the ledger's event log
    """
    owner: AccountId
    spender: AccountId
    value: int
    sequence_number: int

    @property
    def topics(self) -> Tuple[AccountId, ...]:
        return (self.owner, self.spender)

    def __repr__(self) -> str:
        return f"Approve#{self.sequence_number}({self.owner!r}→{self.spender!r} = {self.value})"


LedgerEvent = Union[Transfer, Approve]

# Handler type: (event) -> None
EventHandler = Callable[[LedgerEvent], None]
