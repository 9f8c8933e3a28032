"""claimledger: yes/no claim verdicts committed to an append-only ledger."""

__version__ = "0.3.0"
