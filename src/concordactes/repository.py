"""Requêtes paramétrées sur les tables d'actes NGAP et CCAM."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import DateTime, bindparam, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from concordactes.database import DatabaseError
from concordactes.matching.schema import CandidateRecord, Scheme
from concordactes.normalize import format_date_acte

logger = logging.getLogger(__name__)

DEFAULT_SPECIAL_STATUS_CODE = "C9"

_ACTS_SQL = """
    SELECT
        a.noacte        AS acte_id,
        a.{code_col}    AS code_acte,
        a.{coeff_col}   AS activite_ou_coeff,
        a.internum      AS acte_internum,
        i.nodossier     AS num_intervention,
        v.vennum        AS venum,
        v.novenue       AS novenu,
        a.dateexec      AS date_acte,
        '{scheme}'      AS scheme
    FROM {table} a
    LEFT JOIN oc_intervention i ON i.internum = a.internum
    LEFT JOIN o_venue v         ON v.vennum   = i.vennum
    WHERE a.noacte IN :ids
"""

# (nomenclature, table, colonne code, colonne activité/coefficient), NGAP d'abord.
_SCHEME_TABLES = (
    (Scheme.NGAP, "oc_actengap", "lettrecle", "coefficient"),
    (Scheme.CCAM, "oc_acteccam", "codeacte", "activite"),
)

_SPECIAL_STATUS_SQL = text(
    """
    SELECT 1
    FROM W_SERVEURACTE
    WHERE cocode = :code
      AND nodossier = :nodossier
      AND novenue = :novenue
    """
)


def _acts_query(scheme: Scheme, table: str, code_col: str, coeff_col: str):
    sql = _ACTS_SQL.format(scheme=scheme.value, table=table, code_col=code_col, coeff_col=coeff_col)
    return text(sql).bindparams(bindparam("ids", expanding=True)).columns(date_acte=DateTime)


def _chunks(items: Sequence[str], size: int) -> list[Sequence[str]]:
    size = max(1, size)
    return [items[i : i + size] for i in range(0, len(items), size)]


class ActeRepository:
    """Accès aux actes en base et au statut spécial des dossiers."""

    def __init__(self, engine: Engine, special_status_code: str = DEFAULT_SPECIAL_STATUS_CODE) -> None:
        self.engine = engine
        self.special_status_code = special_status_code
        self._queries = [_acts_query(*table_def) for table_def in _SCHEME_TABLES]

    def fetch_by_acte_ids(self, acte_ids: Sequence[str]) -> list[CandidateRecord]:
        """
        Retourne les actes NGAP puis CCAM dont le numéro figure dans acte_ids.

        Raises:
            DatabaseError: Si une requête échoue.
        """
        if not acte_ids:
            return []
        ids = [str(i) for i in acte_ids]
        rows: list[CandidateRecord] = []
        try:
            with self.engine.connect() as conn:
                for query in self._queries:
                    for row in conn.execute(query, {"ids": ids}).mappings():
                        record = {str(k).lower(): v for k, v in row.items()}
                        record["date_acte"] = format_date_acte(record.get("date_acte"))
                        rows.append(CandidateRecord.from_row(record))
        except SQLAlchemyError as e:
            logger.error("Erreur base de données: %s", e)
            raise DatabaseError(f"Base indisponible: {e}") from e
        return rows

    def fetch_chunked(self, acte_ids: Sequence[str], chunk_size: int = 800) -> list[CandidateRecord]:
        """Découpe acte_ids en lots de chunk_size et concatène les résultats dans l'ordre."""
        if not acte_ids:
            return []
        all_rows: list[CandidateRecord] = []
        for chunk in _chunks(list(acte_ids), chunk_size):
            rows = self.fetch_by_acte_ids(chunk)
            logger.debug("Lot de %d identifiants: %d lignes", len(chunk), len(rows))
            all_rows.extend(rows)
        return all_rows

    def has_special_status(self, num_intervention: str, num_venue: str) -> bool:
        """
        Vérifie si le dossier (intervention, venue) porte le code de statut spécial.

        Raises:
            DatabaseError: Si la requête échoue.
        """
        params = {"code": self.special_status_code, "nodossier": num_intervention, "novenue": num_venue}
        try:
            with self.engine.connect() as conn:
                return conn.execute(_SPECIAL_STATUS_SQL, params).first() is not None
        except SQLAlchemyError as e:
            logger.error("Erreur base de données: %s", e)
            raise DatabaseError(f"Base indisponible: {e}") from e
