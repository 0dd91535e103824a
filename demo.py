"""
Example: Deploying a token, transferring directly and through an allowance.

Shows the full lifecycle of a fixed-supply token: the mint at deployment,
direct transfers, approvals, delegated transfers, rejected operations, and
rebuilding the ledger from its event log.
"""

from tokenledger import AccountId, Ledger


def main():
    print("=" * 80)
    print("TOKEN LEDGER - Transfers and Allowances")
    print("=" * 80)
    print()

    treasury = AccountId.filled(0x01)
    alice = AccountId.filled(0x02)
    exchange = AccountId.filled(0x03)

    print("Example 1: Deployment")
    print("-" * 80)
    print("The treasury deploys the token; the whole supply is minted to it.")
    print()
    token = Ledger(treasury, 1_000_000, name="demo", verbose=True)
    print(f"Total supply: {token.total_supply():,}")
    print()

    print("Example 2: Direct transfer")
    print("-" * 80)
    token.transfer(treasury, alice, 5_000)
    print(f"Alice balance: {token.balance_of(alice):,}")
    print()

    print("Example 3: Delegated transfer")
    print("-" * 80)
    print("Alice lets the exchange move up to 2,000 of her units.")
    print()
    token.approve(alice, exchange, 2_000)
    token.transfer_from(exchange, alice, treasury, 1_500)
    print(f"Remaining allowance: {token.allowance(alice, exchange):,}")
    print()

    print("Example 4: Rejected operations")
    print("-" * 80)
    print("The exchange tries to exceed its allowance; alice tries to overspend.")
    print()
    result = token.transfer_from(exchange, alice, exchange, 1_000)
    print(f"Result: {result.value}")
    result = token.transfer(alice, exchange, 10_000)
    print(f"Result: {result.value}")
    print()

    print("Example 5: Audit")
    print("-" * 80)
    check = token.verify_conservation()
    print(f"Conservation valid: {check['valid']} "
          f"({check['sum_of_balances']:,} / {check['total_supply']:,})")
    token.verbose = False
    replayed = token.replay()
    print(f"Replayed holders match: {replayed.holders() == token.holders()}")
    for account, balance in token.holders().items():
        print(f"  {account.hex()[:10]}…  {balance:>12,}")


if __name__ == "__main__":
    main()
