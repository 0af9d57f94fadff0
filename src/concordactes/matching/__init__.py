"""Module de rapprochement : matcher et réconciliation d'un lot."""

from concordactes.matching.matcher import Matcher
from concordactes.matching.reconciler import Reconciler
from concordactes.matching.schema import (
    CandidateRecord,
    MatchVerdict,
    MissingAct,
    ReconciliationResult,
    Scheme,
    SubmittedRecord,
)

__all__ = [
    "Matcher",
    "Reconciler",
    "CandidateRecord",
    "MatchVerdict",
    "MissingAct",
    "ReconciliationResult",
    "Scheme",
    "SubmittedRecord",
]
