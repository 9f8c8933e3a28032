"""
Commitments and the append-only ledger they are written to.

Modules:
    - hasher: canonical serialization and SHA-256 fingerprints
    - retry: fixed-backoff retry policy
    - base: LedgerClient contract
    - memory / ethereum: ledger backends
    - submitter: write, read-back verification and decode
"""
