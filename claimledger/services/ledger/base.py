from abc import ABC, abstractmethod


class LedgerClient(ABC):
    """
    Append-only store addressed by transaction identifiers.

    `write` returns the identifier of the new record. `read` returns the exact
    bytes stored under an identifier or raises RecordNotFoundError.
    Implementations raise LedgerTransientError for failures worth retrying
    and LedgerError for everything else.
    """

    name: str = "ledger"

    @abstractmethod
    async def write(self, data: bytes) -> str:
        raise NotImplementedError

    @abstractmethod
    async def read(self, identifier: str) -> bytes:
        raise NotImplementedError

    def explorer_url(self, identifier: str) -> str | None:
        return None

    async def aclose(self) -> None:
        return None
