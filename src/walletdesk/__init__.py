"""Non-custodial wallet desk: balances and transfers for a connected wallet."""

__version__ = "0.1.0"
