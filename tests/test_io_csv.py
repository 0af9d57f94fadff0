"""Tests de lecture du CSV déposé."""

import logging
from pathlib import Path

import pytest

from concordactes.io_csv import CsvFormatError, load_submitted_csv
from concordactes.matching.schema import SubmittedRecord

HEADER = "DATE_ACTE;NUM_INTERVENTION;NUM_VENUE;ACTE_ID;CODE_ACTE;ACTIVITE_OU_COEFF;TYPE_ACTE"


def _write(tmp_path: Path, content: str, encoding: str = "utf-8") -> Path:
    path = tmp_path / "actes.csv"
    path.write_bytes(content.encode(encoding))
    return path


def test_load_and_normalize(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        f"{HEADER}\n"
        "01/01/2025 09:00; I1 ;V1;123; abc ;2,5;NGAP\n"
        "\n"
        "02/01/2025 10:00;I2;V2;124;DEF;1;CCAM\n",
    )
    rows = load_submitted_csv(path)
    assert rows == [
        SubmittedRecord("01/01/2025 09:00", "I1", "V1", "123", "ABC", "2,5", "NGAP"),
        SubmittedRecord("02/01/2025 10:00", "I2", "V2", "124", "DEF", "1", "CCAM"),
    ]


def test_header_case_insensitive_and_bom(tmp_path: Path) -> None:
    path = _write(tmp_path, "\ufeff" + HEADER.lower() + "\n01/01/2025 09:00;I1;V1;007;A;1;CCAM\n")
    rows = load_submitted_csv(path)
    assert len(rows) == 1
    assert rows[0].acte_id == "007"


def test_latin1_fallback(tmp_path: Path) -> None:
    path = _write(tmp_path, f"{HEADER}\n01/01/2025 09:00;I1;V1;1;A;activité;CCAM\n", encoding="latin-1")
    rows = load_submitted_csv(path)
    assert rows[0].activite_ou_coeff == "activité"


def test_empty_values_are_kept(tmp_path: Path) -> None:
    path = _write(tmp_path, f"{HEADER}\n01/01/2025 09:00;;V1;1;A;1;\n")
    rows = load_submitted_csv(path)
    assert rows[0].num_intervention == ""
    assert rows[0].type_acte == ""


def test_incomplete_lines_skipped(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = _write(
        tmp_path,
        f"{HEADER}\n"
        "01/01/2025 09:00;I1;V1;1;A;1;CCAM\n"
        "01/01/2025 09:00;I1;V1\n"
        "01/01/2025 09:00;I1;V1;3;A;1;NGAP\n",
    )
    with caplog.at_level(logging.WARNING):
        rows = load_submitted_csv(path)
    assert [r.acte_id for r in rows] == ["1", "3"]
    assert "incomplète" in caplog.text


def test_trailing_separator_keeps_columns_aligned(tmp_path: Path) -> None:
    """Un ";" final (export Excel) ne décale pas les colonnes."""
    path = _write(
        tmp_path,
        f"{HEADER}\n"
        "01/01/2025 09:00;I1;V1;123;abc;1;CCAM;\n"
        "02/01/2025 14:30;I2;V2;N2;K;1,0;NGAP;\n",
    )
    rows = load_submitted_csv(path)
    assert rows[0] == SubmittedRecord(
        date_acte="01/01/2025 09:00",
        num_intervention="I1",
        num_venue="V1",
        acte_id="123",
        code_acte="ABC",
        activite_ou_coeff="1",
        type_acte="CCAM",
    )
    assert [r.acte_id for r in rows] == ["123", "N2"]
    assert rows[1].type_acte == "NGAP"


def test_fields_beyond_header_ignored(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        f"{HEADER}\n"
        "01/01/2025 09:00;I1;V1;1;A;1;CCAM\n"
        "01/01/2025 09:00;I1;V1;2;A;1;NGAP;extra\n",
    )
    rows = load_submitted_csv(path)
    assert [(r.acte_id, r.type_acte) for r in rows] == [("1", "CCAM"), ("2", "NGAP")]


def test_wrong_header(tmp_path: Path) -> None:
    path = _write(tmp_path, "DATE;NUM_INTERVENTION;NUM_VENUE;ACTE_ID;CODE_ACTE;ACTIVITE_OU_COEFF;TYPE_ACTE\n")
    with pytest.raises(CsvFormatError, match="En-têtes CSV incorrectes"):
        load_submitted_csv(path)


def test_too_few_header_columns(tmp_path: Path) -> None:
    path = _write(tmp_path, "DATE_ACTE;ACTE_ID\n01/01/2025 09:00;1\n")
    with pytest.raises(CsvFormatError, match="invalides ou manquants"):
        load_submitted_csv(path)


def test_extra_header_column_rejected(tmp_path: Path) -> None:
    path = _write(tmp_path, f"{HEADER};ORIGINE\n")
    with pytest.raises(CsvFormatError, match="incorrectes"):
        load_submitted_csv(path)


def test_empty_file(tmp_path: Path) -> None:
    path = _write(tmp_path, "")
    with pytest.raises(CsvFormatError):
        load_submitted_csv(path)


def test_header_only(tmp_path: Path) -> None:
    path = _write(tmp_path, f"{HEADER}\n")
    assert load_submitted_csv(path) == []
