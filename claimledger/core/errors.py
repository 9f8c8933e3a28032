"""
Error taxonomy for the evaluation, refutation and ledger pipelines.

Every error carries the HTTP status the API layer renders it with.
"""

from typing import Optional


class ClaimLedgerError(Exception):
    status_code: int = 500

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


class InvalidInput(ClaimLedgerError):
    status_code = 400


class ConfigurationError(ClaimLedgerError):
    pass


# ----------------------------------------------------------------------------
# Evidence
# ----------------------------------------------------------------------------


class EvidenceSourceError(ClaimLedgerError):
    pass


class EvidenceUnavailable(EvidenceSourceError):
    pass


class MalformedUpstreamResponse(EvidenceSourceError):
    pass


class EvaluationFailed(ClaimLedgerError):
    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"Failed to evaluate question: {cause}", cause=cause)


# ----------------------------------------------------------------------------
# Refutation
# ----------------------------------------------------------------------------


class RefutationFailed(ClaimLedgerError):
    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"Failed to refute evaluation: {cause}", cause=cause)


class InsufficientRefutationEvidence(ClaimLedgerError):
    def __init__(self, required: int, found: int) -> None:
        super().__init__(
            f"Refutation needs at least {required} sources to override the original verdict, found {found}"
        )
        self.required = required
        self.found = found


class PriorRecordNotFound(ClaimLedgerError):
    pass


# ----------------------------------------------------------------------------
# Ledger / signing
# ----------------------------------------------------------------------------


class LedgerError(ClaimLedgerError):
    pass


class LedgerTransientError(LedgerError):
    pass


class RecordNotFoundError(LedgerError):
    pass


class SigningUnavailable(ClaimLedgerError):
    pass
