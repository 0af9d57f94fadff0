"""Traitement complet d'un fichier déposé : lecture, extraction en base, rapprochement."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any

from concordactes.config import ConcordActesError, Config, ConfigError, ConfigFileError
from concordactes.database import DatabaseError
from concordactes.io_csv import CsvFileError, CsvFormatError, load_submitted_csv
from concordactes.matching.matcher import Matcher
from concordactes.matching.reconciler import Reconciler
from concordactes.matching.schema import ReconciliationResult, SubmittedRecord
from concordactes.repository import ActeRepository

logger = logging.getLogger(__name__)


class UploadError(ConcordActesError):
    """Fichier refusé avant ou pendant le traitement."""

    def __init__(self, code: str, message: str, status: int = 400, **details: Any) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = status
        self.details = details


def _elapsed_ms(start: float) -> int:
    return int(round((time.perf_counter() - start) * 1000))


def collect_acte_ids(rows: list[SubmittedRecord]) -> list[str]:
    """Identifiants non vides, dédoublonnés, dans l'ordre de première apparition."""
    return list(dict.fromkeys(r.acte_id for r in rows if r.acte_id))


class ReconciliationService:
    """Enchaîne validation du fichier, lecture CSV, extraction en base et rapprochement."""

    def __init__(self, config: Config, repository: ActeRepository) -> None:
        self.config = config
        self.repository = repository

    def validate_file(self, path: Path) -> int:
        """Contrôle existence, taille et extension ; retourne la taille en octets."""
        if not path.is_file():
            raise UploadError("NO_FILE", f"Fichier manquant: {path}")
        size = path.stat().st_size
        if size <= 0:
            raise UploadError("EMPTY_FILE", "Fichier vide.")
        if size > self.config.upload_max_size:
            raise UploadError(
                "FILE_TOO_LARGE",
                f"Fichier trop volumineux ({size} octets).",
                413,
                max=self.config.upload_max_size,
            )
        if path.suffix.lower() != ".csv":
            raise UploadError("INVALID_EXTENSION", "Extension .csv requise", 415)
        return size

    def reconcile(self, rows: list[SubmittedRecord]) -> tuple[ReconciliationResult, int]:
        """Extrait les candidats et rapproche ; retourne (résultat, t_sql_ms)."""
        acte_ids = collect_acte_ids(rows)
        if not acte_ids:
            raise UploadError("NO_IDS", "Aucun acte_id valide détecté.", 422)
        if len(acte_ids) > self.config.max_ids:
            raise UploadError(
                "TOO_MANY_IDS",
                f"Trop d'identifiants ({len(acte_ids)}).",
                413,
                limit=self.config.max_ids,
            )

        t_sql_start = time.perf_counter()
        candidates = self.repository.fetch_chunked(acte_ids, self.config.chunk_size)
        t_sql_ms = _elapsed_ms(t_sql_start)

        reconciler = Reconciler(
            Matcher(self.config.date_tolerance_minutes),
            self.repository.has_special_status,
        )
        return reconciler.reconcile(rows, candidates), t_sql_ms

    def process_file(self, filepath: str | Path) -> dict[str, Any]:
        """
        Traite un fichier CSV déposé et construit la réponse JSON.

        Returns:
            {"ok": True, "stats": {"t_parse_ms", "t_sql_ms"}, "result": {...}}

        Raises:
            UploadError: Si le fichier est refusé.
            DatabaseError: Si la base est indisponible.
        """
        result, stats = self.process(filepath)
        return build_response(result, stats)

    def process(self, filepath: str | Path) -> tuple[ReconciliationResult, dict[str, int]]:
        """Comme process_file, mais retourne le résultat et les temps de traitement."""
        path = Path(filepath)
        size = self.validate_file(path)

        t_parse_start = time.perf_counter()
        try:
            rows = load_submitted_csv(path)
        except CsvFormatError as e:
            raise UploadError("INVALID_CSV", str(e), 422) from e
        except CsvFileError as e:
            raise UploadError("INVALID_CSV", str(e), 400) from e
        t_parse_ms = _elapsed_ms(t_parse_start)

        if not rows:
            raise UploadError("NO_ROWS", "Aucune ligne lisible", 422)

        result, t_sql_ms = self.reconcile(rows)

        logger.info(
            "Upload traité: total_csv=%d found=%d missing=%d t_parse_ms=%d t_sql_ms=%d size=%d",
            result.total_submitted,
            result.total_found,
            result.total_missing,
            t_parse_ms,
            t_sql_ms,
            size,
        )

        return result, {"t_parse_ms": t_parse_ms, "t_sql_ms": t_sql_ms}


def build_response(result: ReconciliationResult, stats: dict[str, int]) -> dict[str, Any]:
    return {"ok": True, "stats": dict(stats), "result": result.to_dict()}


def error_response(exc: Exception) -> tuple[dict[str, Any], int]:
    """Traduit une exception en (corps JSON d'erreur, statut HTTP équivalent)."""
    if isinstance(exc, UploadError):
        return {"error": {"code": exc.code, "message": exc.message, **exc.details}}, exc.status
    if isinstance(exc, DatabaseError):
        return {"error": {"code": "DB_UNAVAILABLE", "message": "Base indisponible"}}, 502
    if isinstance(exc, (ConfigError, ConfigFileError)):
        return {"error": {"code": "CONFIG_ERROR", "message": str(exc)}}, 500
    return {"error": {"code": "INTERNAL_ERROR", "message": "Erreur interne"}}, 500
