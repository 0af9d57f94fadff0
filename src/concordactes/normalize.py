"""Normalisation des valeurs comparées (texte, coefficients, dates)."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any

DATE_ACTE_FORMAT = "%d/%m/%Y %H:%M"

# Chaîne numérique : signe optionnel, chiffres avec partie décimale optionnelle, exposant optionnel.
_NUMERIC_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_DATE_ACTE_RE = re.compile(r"\d{1,2}/\d{1,2}/\d{4} \d{1,2}:\d{2}")


def safe_str(val: Any) -> str:
    """Convertit une valeur en chaîne pour affichage/stockage."""
    if val is None or (isinstance(val, float) and (val != val or val == float("inf"))):
        return ""
    return str(val)


def norm_text(s: Any) -> str:
    """
    Normalise une valeur pour comparaison : conversion en chaîne, strip, lower.

    None (ou NaN) donne une chaîne vide.
    """
    return safe_str(s).strip().lower()


def parse_number(s: str) -> float | None:
    """
    Retourne la valeur flottante d'une chaîne numérique, None sinon.

    Les espaces en début/fin sont tolérés ; "inf", "nan" et "1_000" ne sont pas numériques.
    """
    text = s.strip()
    if not _NUMERIC_RE.fullmatch(text):
        return None
    return float(text)


def normalize_coeff(s: Any) -> str:
    """Trim et séparateur décimal virgule -> point."""
    return safe_str(s).strip().replace(",", ".")


def parse_date_acte(s: Any) -> datetime | None:
    """
    Parse une date au format dd/mm/yyyy HH:MM.

    Returns:
        datetime, ou None si la valeur est vide ou ne respecte pas le format.
    """
    text = safe_str(s).strip()
    if not _DATE_ACTE_RE.fullmatch(text):
        return None
    try:
        return datetime.strptime(text, DATE_ACTE_FORMAT)
    except ValueError:
        return None


def format_date_acte(value: Any) -> str:
    """Formate une date de la base au format dd/mm/yyyy HH:MM (les chaînes passent inchangées)."""
    if isinstance(value, datetime):
        return value.strftime(DATE_ACTE_FORMAT)
    return safe_str(value)
