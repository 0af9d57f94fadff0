"""Contraintes d'appariement entre une ligne CSV et ses candidats en base."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from concordactes.matching.schema import CandidateRecord, MatchVerdict, Scheme, SubmittedRecord
from concordactes.normalize import norm_text, normalize_coeff, parse_date_acte, parse_number

REASON_NOT_FOUND = "acte_introuvable_en_bdd"
REASON_TYPE_MISMATCH = "type_acte_mismatch"
REASON_ACTE_ID = "acte_id_mismatch"
REASON_CODE_ACTE = "code_acte_mismatch"
REASON_COEFF = "activite_ou_coeff_mismatch"
REASON_INTERVENTION = "num_intervention_mismatch"
REASON_VENUE = "num_venue_mismatch"
REASON_INVALID_DATE = "invalid_date_format"
REASON_DATE = "date_mismatch"
REASON_UNKNOWN = "raison_inconnue"

Constraint = Callable[[SubmittedRecord, CandidateRecord], bool]


def same_acte_id(csv: SubmittedRecord, db: CandidateRecord) -> bool:
    return norm_text(csv.acte_id) == norm_text(db.acte_id)


def same_code_acte(csv: SubmittedRecord, db: CandidateRecord) -> bool:
    return norm_text(csv.code_acte) == norm_text(db.code_acte)


def same_activite_ou_coeff(csv: SubmittedRecord, db: CandidateRecord) -> bool:
    """
    Compare l'activité (CCAM, texte) ou le coefficient (NGAP, numérique).

    La virgule décimale du CSV est convertie en point. Si les deux valeurs sont
    numériques, égalité flottante stricte ; sinon comparaison texte sans casse.
    """
    csv_coeff = csv.activite_ou_coeff.strip()
    db_coeff = db.activite_ou_coeff.strip()

    csv_num = parse_number(normalize_coeff(csv_coeff))
    db_num = parse_number(db_coeff)
    if csv_num is not None and db_num is not None:
        return csv_num == db_num
    return csv_coeff.lower() == db_coeff.lower()


def same_num_intervention(csv: SubmittedRecord, db: CandidateRecord) -> bool:
    return norm_text(csv.num_intervention) == norm_text(db.num_intervention)


def same_num_venue(csv: SubmittedRecord, db: CandidateRecord) -> bool:
    return norm_text(csv.num_venue) == norm_text(db.novenu)


def has_valid_dates(csv: SubmittedRecord, db: CandidateRecord) -> bool:
    return parse_date_acte(csv.date_acte) is not None and parse_date_acte(db.date_acte) is not None


class Matcher:
    """Applique la chaîne de contraintes à une ligne CSV et ses candidats."""

    def __init__(self, date_tolerance_minutes: int = 0) -> None:
        self.date_tolerance_minutes = max(0, int(date_tolerance_minutes))
        # L'ordre détermine la raison rapportée.
        self.constraints: list[tuple[str, Constraint]] = [
            (REASON_ACTE_ID, same_acte_id),
            (REASON_CODE_ACTE, same_code_acte),
            (REASON_COEFF, same_activite_ou_coeff),
            (REASON_INTERVENTION, same_num_intervention),
            (REASON_VENUE, same_num_venue),
            (REASON_INVALID_DATE, has_valid_dates),
            (REASON_DATE, self.dates_within_tolerance),
        ]

    def dates_within_tolerance(self, csv: SubmittedRecord, db: CandidateRecord) -> bool:
        csv_dt = parse_date_acte(csv.date_acte)
        db_dt = parse_date_acte(db.date_acte)
        if csv_dt is None or db_dt is None:
            return False
        diff_min = abs((csv_dt - db_dt).total_seconds()) / 60
        return diff_min <= self.date_tolerance_minutes

    def check_constraints(self, csv: SubmittedRecord, db: CandidateRecord) -> str | None:
        """Retourne la raison de la première contrainte non respectée, None si toutes passent."""
        for reason, constraint in self.constraints:
            if not constraint(csv, db):
                return reason
        return None

    def match(self, csv: SubmittedRecord, candidates: Sequence[CandidateRecord]) -> MatchVerdict:
        """
        Cherche un candidat respectant toutes les contraintes.

        Le premier candidat conforme l'emporte. Sans correspondance, la raison
        rapportée est celle du premier candidat du bon type uniquement.
        """
        if not candidates:
            return MatchVerdict(matched=False, reason=REASON_NOT_FOUND)

        expected = Scheme.parse(csv.type_acte)
        typed_candidates = [c for c in candidates if norm_text(c.scheme) == expected.value.lower()]
        if not typed_candidates:
            return MatchVerdict(matched=False, reason=REASON_TYPE_MISMATCH)

        for db in typed_candidates:
            if self.check_constraints(csv, db) is None:
                return MatchVerdict(matched=True, scheme=expected)

        reason = self.check_constraints(csv, typed_candidates[0])
        return MatchVerdict(matched=False, reason=reason or REASON_UNKNOWN)
