"""Tests de l'export des actes manquants."""

from datetime import datetime
from pathlib import Path

import pandas as pd

from concordactes.export import build_missing_df, default_export_name, export_missing_csv, save_xlsx
from concordactes.matching.schema import MissingAct, ReconciliationResult, Scheme


def _result() -> ReconciliationResult:
    return ReconciliationResult(
        total_submitted=3,
        total_found=1,
        total_missing=2,
        missing_list=[
            MissingAct("007", Scheme.NGAP, "code_acte_mismatch"),
            MissingAct("42", Scheme.CCAM, "dossier_en_C9"),
        ],
    )


def test_build_missing_df() -> None:
    df = build_missing_df(_result())
    assert list(df.columns) == ["acte_id", "type_acte", "raison_discordance"]
    assert df.values.tolist() == [["007", "NGAP", "code_acte_mismatch"], ["42", "CCAM", "dossier_en_C9"]]


def test_build_missing_df_empty() -> None:
    df = build_missing_df(ReconciliationResult())
    assert df.empty
    assert list(df.columns) == ["acte_id", "type_acte", "raison_discordance"]


def test_export_missing_csv(tmp_path: Path) -> None:
    path = export_missing_csv(_result(), tmp_path / "manquants.csv")
    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines == [
        "acte_id;type_acte;raison_discordance",
        "007;NGAP;code_acte_mismatch",
        "42;CCAM;dossier_en_C9",
    ]


def test_default_export_name() -> None:
    assert default_export_name(datetime(2025, 3, 4, 5, 6)) == "Actes_Manquants_20250304_0506.csv"


def test_save_xlsx(tmp_path: Path) -> None:
    out = tmp_path / "rapport.xlsx"
    save_xlsx(out, {"Manquants": build_missing_df(_result()), "REPORT": pd.DataFrame({"Key": ["a"], "Value": [1]})})
    sheets = pd.read_excel(out, sheet_name=None, engine="openpyxl", dtype=str)
    assert list(sheets) == ["Manquants", "REPORT"]
    assert sheets["Manquants"]["acte_id"].tolist() == ["007", "42"]
