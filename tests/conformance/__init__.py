"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the token ledger.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. conservation.py - Sum of balances equals the fixed supply; no negative balances
2. atomicity.py - Rejected operations change nothing
3. determinism.py - Replaying the event log reproduces the ledger

These tests use hypothesis for property-based testing.
"""
