"""
conftest.py - Shared pytest fixtures for token ledger tests

Provides common fixtures used across unit, functional and conformance tests:
- Named accounts (alice, bob, carol, dave)
- Ledgers (fresh 100-unit token, test-mode token)
- Comparison utilities
"""

import pytest
from typing import Any, Dict

from tokenledger import AccountId, Ledger


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def ledger_snapshot(ledger: Ledger, accounts) -> Dict[str, Any]:
    """Capture everything a rejected operation must leave unchanged."""
    return {
        "balances": {a: ledger.balance_of(a) for a in accounts},
        "allowances": {(o, s): ledger.allowance(o, s) for o in accounts for s in accounts},
        "events": list(ledger.event_log),
    }


def compare_ledgers(ledger1: Ledger, ledger2: Ledger) -> Dict[str, Any]:
    """Compare balances, per-owner allowances and supply of two ledgers."""
    owners = set(ledger1.holders()) | set(ledger2.holders())
    for event in ledger1.event_log + ledger2.event_log:
        owners.add(getattr(event, "owner", None))
    owners.discard(None)

    allowance_diffs = [
        owner for owner in owners
        if ledger1.allowances_of(owner) != ledger2.allowances_of(owner)
    ]
    return {
        "equal": (
            ledger1.holders() == ledger2.holders()
            and ledger1.total_supply() == ledger2.total_supply()
            and not allowance_diffs
        ),
        "holders": (ledger1.holders(), ledger2.holders()),
        "allowance_diffs": allowance_diffs,
    }


# =============================================================================
# ACCOUNT FIXTURES
# =============================================================================

@pytest.fixture
def alice():
    return AccountId.filled(0x01)


@pytest.fixture
def bob():
    return AccountId.filled(0x02)


@pytest.fixture
def carol():
    return AccountId.filled(0x03)


@pytest.fixture
def dave():
    return AccountId.filled(0x04)


@pytest.fixture
def accounts(alice, bob, carol, dave):
    return [alice, bob, carol, dave]


# =============================================================================
# LEDGER FIXTURES
# =============================================================================

@pytest.fixture
def token(alice):
    """100-unit token deployed by alice."""
    return Ledger(alice, 100, name="test", verbose=False)


@pytest.fixture
def test_token(alice):
    """100-unit token with set_balance() enabled."""
    return Ledger(alice, 100, name="test", verbose=False, test_mode=True)


# =============================================================================
# UTILITY FIXTURES
# =============================================================================

@pytest.fixture
def snapshot():
    """ledger_snapshot(ledger, accounts) as a fixture."""
    return ledger_snapshot


@pytest.fixture
def compare():
    """compare_ledgers(ledger1, ledger2) as a fixture."""
    return compare_ledgers
