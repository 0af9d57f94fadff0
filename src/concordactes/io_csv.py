"""Lecture du CSV déposé avec validation des en-têtes."""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from concordactes.config import ConcordActesError
from concordactes.matching.schema import SUBMITTED_FIELDS, SubmittedRecord

logger = logging.getLogger(__name__)

CSV_SEPARATOR = ";"
HEADER_LINE_DISPLAY = "DATE_ACTE;NUM_INTERVENTION;NUM_VENUE;ACTE_ID;CODE_ACTE;ACTIVITE_OU_COEFF;TYPE_ACTE"


class CsvFileError(ConcordActesError):
    """Erreur de chargement d'un fichier CSV (fichier absent, illisible)."""


class CsvFormatError(ConcordActesError):
    """En-têtes CSV absentes ou incorrectes."""


def _read_csv(path: Path, encoding: str) -> pd.DataFrame:
    return pd.read_csv(
        path,
        sep=CSV_SEPARATOR,
        dtype=str,
        encoding=encoding,
        header=0,
        keep_default_na=False,
        skip_blank_lines=True,
        index_col=False,
        engine="python",
    )


def _validate_header(columns: list[str]) -> None:
    header = [str(c).strip().lower() for c in columns]
    if len(header) < len(SUBMITTED_FIELDS):
        raise CsvFormatError("En-têtes CSV invalides ou manquants.")
    if tuple(header) != SUBMITTED_FIELDS:
        raise CsvFormatError(f"En-têtes CSV incorrectes. Attendues: {HEADER_LINE_DISPLAY}")


def load_submitted_csv(filepath: str | Path) -> list[SubmittedRecord]:
    """
    Charge le CSV (séparateur ';') en lignes normalisées.

    Les valeurs sont trimées et code_acte passé en majuscules. Les lignes
    incomplètes sont ignorées avec un avertissement.

    Raises:
        CsvFileError: Si le fichier est absent ou illisible.
        CsvFormatError: Si les en-têtes ne correspondent pas au format attendu.
    """
    path = Path(filepath)
    if not path.exists():
        raise CsvFileError(f"Fichier introuvable: {path}")

    try:
        try:
            df = _read_csv(path, "utf-8-sig")
        except UnicodeDecodeError:
            df = _read_csv(path, "latin-1")
    except pd.errors.EmptyDataError as e:
        raise CsvFormatError("En-têtes CSV invalides ou manquants.") from e
    except (pd.errors.ParserError, OSError, UnicodeDecodeError) as e:
        raise CsvFileError(f"Erreur CSV {path}: {e}") from e

    _validate_header(list(df.columns))
    df.columns = list(SUBMITTED_FIELDS)

    incomplete = df.isna().any(axis=1)
    n_incomplete = int(incomplete.sum())
    if n_incomplete:
        logger.warning("%d ligne(s) CSV incomplète(s) ignorée(s).", n_incomplete)
        df = df[~incomplete].copy()

    for col in SUBMITTED_FIELDS:
        df[col] = df[col].str.strip()
    df["code_acte"] = df["code_acte"].str.upper()

    return [SubmittedRecord.from_row(row) for row in df.to_dict(orient="records")]
