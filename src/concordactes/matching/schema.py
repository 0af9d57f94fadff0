"""Schémas et types pour le rapprochement."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from concordactes.normalize import safe_str

SUBMITTED_FIELDS = (
    "date_acte",
    "num_intervention",
    "num_venue",
    "acte_id",
    "code_acte",
    "activite_ou_coeff",
    "type_acte",
)


class Scheme(str, Enum):
    """Nomenclature d'un acte."""

    NGAP = "NGAP"
    CCAM = "CCAM"

    @classmethod
    def parse(cls, value: Any) -> Scheme:
        """Normalise (casse, espaces) ; CCAM si la valeur est absente ou inconnue."""
        text = safe_str(value).strip().upper()
        try:
            return cls(text)
        except ValueError:
            return cls.CCAM


@dataclass(frozen=True)
class SubmittedRecord:
    """Une ligne du fichier CSV déposé."""

    date_acte: str = ""
    num_intervention: str = ""
    num_venue: str = ""
    acte_id: str = ""
    code_acte: str = ""
    activite_ou_coeff: str = ""
    type_acte: str = ""

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> SubmittedRecord:
        return cls(**{name: safe_str(row.get(name)) for name in SUBMITTED_FIELDS})


@dataclass(frozen=True)
class CandidateRecord:
    """Une ligne retournée par la requête NGAP ou CCAM."""

    acte_id: str
    code_acte: str
    activite_ou_coeff: str
    num_intervention: str
    venum: str  # numéro de venue (jointure), jamais comparé
    novenu: str  # numéro de venue comparé à num_venue
    date_acte: str
    scheme: str
    acte_internum: str = ""

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> CandidateRecord:
        """Construit un candidat depuis une ligne aux clés en minuscules ('typefrom' accepté pour scheme)."""
        scheme = row.get("scheme", row.get("typefrom"))
        return cls(
            acte_id=safe_str(row.get("acte_id")),
            code_acte=safe_str(row.get("code_acte")),
            activite_ou_coeff=safe_str(row.get("activite_ou_coeff")),
            num_intervention=safe_str(row.get("num_intervention")),
            venum=safe_str(row.get("venum")),
            novenu=safe_str(row.get("novenu")),
            date_acte=safe_str(row.get("date_acte")),
            scheme=safe_str(scheme),
            acte_internum=safe_str(row.get("acte_internum")),
        )


@dataclass(frozen=True)
class MatchVerdict:
    """Verdict du matcher pour une ligne CSV."""

    matched: bool
    scheme: Scheme | None = None
    reason: str = ""


@dataclass(frozen=True)
class MissingAct:
    """Acte absent de la base, avec la raison de la discordance."""

    id: str
    type: Scheme
    reason: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "type": self.type.value, "reason": self.reason}


def _empty_by_scheme() -> dict[Scheme, dict[str, int]]:
    return {scheme: {"found": 0, "missing": 0} for scheme in Scheme}


@dataclass
class ReconciliationResult:
    """Résultat agrégé d'un rapprochement."""

    total_submitted: int = 0
    total_found: int = 0
    total_missing: int = 0
    missing_list: list[MissingAct] = field(default_factory=list)
    by_scheme: dict[Scheme, dict[str, int]] = field(default_factory=_empty_by_scheme)

    def to_dict(self) -> dict[str, Any]:
        """Forme JSON renvoyée à l'appelant."""
        return {
            "total_csv": self.total_submitted,
            "total_found": self.total_found,
            "total_missing": self.total_missing,
            "missing_acts_list": [m.to_dict() for m in self.missing_list],
            "by_type": {
                scheme.value: dict(self.by_scheme.get(scheme, {"found": 0, "missing": 0})) for scheme in Scheme
            },
        }
