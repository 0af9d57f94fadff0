"""Export des actes manquants (CSV, xlsx)."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pandas as pd

from concordactes.matching.schema import ReconciliationResult

MISSING_COLUMNS = ["acte_id", "type_acte", "raison_discordance"]


def build_missing_df(result: ReconciliationResult) -> pd.DataFrame:
    """Une ligne par acte manquant, dans l'ordre du fichier déposé."""
    rows = [
        {"acte_id": m.id, "type_acte": m.type.value, "raison_discordance": m.reason or ""}
        for m in result.missing_list
    ]
    return pd.DataFrame(rows, columns=MISSING_COLUMNS)


def default_export_name(now: datetime | None = None) -> str:
    """Nom de fichier horodaté : Actes_Manquants_YYYYMMDD_HHMM.csv."""
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M")
    return f"Actes_Manquants_{stamp}.csv"


def export_missing_csv(result: ReconciliationResult, output_path: str | Path) -> Path:
    """
    Écrit la liste des actes manquants (séparateur ';', utf-8).

    Returns:
        Chemin du fichier écrit.
    """
    path = Path(output_path)
    build_missing_df(result).to_csv(path, sep=";", index=False, encoding="utf-8")
    return path


def save_xlsx(output_path: str | Path, sheets: dict[str, pd.DataFrame]) -> None:
    """Sauvegarde plusieurs DataFrames dans un classeur xlsx (une feuille par entrée)."""
    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        for sheet_name, df in sheets.items():
            # Excel limite les noms de feuille à 31 caractères
            df.to_excel(writer, sheet_name=str(sheet_name)[:31], index=False)
