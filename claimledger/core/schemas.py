from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class EvaluateRequest(BaseModel):
    question: Optional[str] = None


class RefuteRequest(BaseModel):
    originalEvaluation: Optional[Dict[str, Any]] = None
    transactionHash: Optional[str] = None


class Source(BaseModel):
    title: str
    url: str


class EvaluationResponse(BaseModel):
    question: str
    sources: List[Source]
    answer: bool
    hash: str
    status: str = "evaluated"


class LedgerEvaluationResponse(EvaluationResponse):
    tx_hash: Optional[str] = None
    explorer_url: Optional[str] = None
    ledger_error: Optional[str] = None


class RefutationResponse(BaseModel):
    originalQuestion: str
    originalAnswer: bool
    refuteAnswer: bool
    sources: List[Source]
    originalSourceCount: int
    refuteSourceCount: int
    accepted: bool
    status: str


class LedgerRefutationResponse(RefutationResponse):
    refutation_tx_hash: Optional[str] = None
    refutation_explorer_url: Optional[str] = None
    ledger_error: Optional[str] = None
