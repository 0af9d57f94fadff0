"""Rapprochement d'un lot CSV complet avec les actes extraits de la base."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence

from concordactes.matching.matcher import Matcher
from concordactes.matching.schema import (
    CandidateRecord,
    MissingAct,
    ReconciliationResult,
    Scheme,
    SubmittedRecord,
)

logger = logging.getLogger(__name__)

REASON_SPECIAL_STATUS = "dossier_en_C9"

SpecialStatusLookup = Callable[[str, str], bool]


def index_by_acte_id(candidates: Iterable[CandidateRecord]) -> dict[str, list[CandidateRecord]]:
    """Index acte_id -> candidats (doublons conservés, ordre d'origine)."""
    by_id: dict[str, list[CandidateRecord]] = {}
    for c in candidates:
        by_id.setdefault(c.acte_id, []).append(c)
    return by_id


class Reconciler:
    """Orchestre le matcher sur un lot et agrège les totaux par nomenclature."""

    def __init__(
        self,
        matcher: Matcher | None = None,
        special_status_lookup: SpecialStatusLookup | None = None,
    ) -> None:
        self.matcher = matcher or Matcher()
        self.special_status_lookup = special_status_lookup

    def reconcile(
        self,
        submitted_batch: Sequence[SubmittedRecord],
        candidate_batch: Iterable[CandidateRecord],
    ) -> ReconciliationResult:
        """
        Rapproche chaque ligne CSV, dans l'ordre du fichier.

        Pour une ligne manquante, le type est lu depuis type_acte (CCAM par défaut)
        et la recherche de statut spécial peut remplacer la raison par dossier_en_C9.
        Les erreurs de cette recherche sont propagées telles quelles.
        """
        by_id = index_by_acte_id(candidate_batch)
        result = ReconciliationResult(total_submitted=len(submitted_batch))

        for row in submitted_batch:
            candidates = by_id.get(row.acte_id, [])
            verdict = self.matcher.match(row, candidates)

            if verdict.matched and verdict.scheme is not None:
                result.total_found += 1
                result.by_scheme[verdict.scheme]["found"] += 1
                continue

            result.total_missing += 1
            missing_scheme = Scheme.parse(row.type_acte)
            result.by_scheme[missing_scheme]["missing"] += 1

            reason = verdict.reason
            if self._has_special_status(row):
                reason = REASON_SPECIAL_STATUS
            result.missing_list.append(MissingAct(id=row.acte_id, type=missing_scheme, reason=reason))

        logger.debug(
            "Rapprochement: %d lignes, %d trouvées, %d manquantes",
            result.total_submitted,
            result.total_found,
            result.total_missing,
        )
        return result

    def _has_special_status(self, row: SubmittedRecord) -> bool:
        if self.special_status_lookup is None:
            return False
        # Un dossier sans numéro d'intervention ou de venue ne peut pas être en C9.
        if not row.num_intervention or not row.num_venue:
            return False
        return bool(self.special_status_lookup(row.num_intervention, row.num_venue))
