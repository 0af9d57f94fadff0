"""Fixtures partagées : base SQLite des actes NGAP/CCAM."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

SCHEMA = [
    "CREATE TABLE o_venue (vennum TEXT PRIMARY KEY, novenue TEXT)",
    "CREATE TABLE oc_intervention (internum TEXT PRIMARY KEY, nodossier TEXT, vennum TEXT)",
    "CREATE TABLE oc_actengap (noacte TEXT, lettrecle TEXT, coefficient REAL, internum TEXT, dateexec DATETIME)",
    "CREATE TABLE oc_acteccam (noacte TEXT, codeacte TEXT, activite TEXT, internum TEXT, dateexec DATETIME)",
    "CREATE TABLE W_SERVEURACTE (cocode TEXT, nodossier TEXT, novenue TEXT)",
]

SEED = [
    "INSERT INTO o_venue VALUES ('10', 'V1'), ('20', 'V2')",
    "INSERT INTO oc_intervention VALUES ('100', 'I1', '10'), ('200', 'I2', '20')",
    # NGAP
    "INSERT INTO oc_actengap VALUES ('N1', 'C', 2.5, '100', '2025-01-01 09:00:00')",
    "INSERT INTO oc_actengap VALUES ('N2', 'K', 1.0, '200', '2025-01-02 14:30:00')",
    # CCAM
    "INSERT INTO oc_acteccam VALUES ('123', 'ABC', '1', '100', '2025-01-01 09:00:00')",
    "INSERT INTO oc_acteccam VALUES ('124', 'DEF', '4', '200', '2025-01-02 10:00:00')",
    # même identifiant dans les deux nomenclatures
    "INSERT INTO oc_actengap VALUES ('DUP', 'C', 1.0, '100', '2025-01-03 08:00:00')",
    "INSERT INTO oc_acteccam VALUES ('DUP', 'XYZ', '1', '100', '2025-01-03 08:00:00')",
    # dossier en C9
    "INSERT INTO W_SERVEURACTE VALUES ('C9', 'I2', 'V2')",
    "INSERT INTO W_SERVEURACTE VALUES ('C1', 'I1', 'V1')",
]


def create_acts_database(url: str) -> Engine:
    engine = create_engine(url)
    with engine.begin() as conn:
        for stmt in SCHEMA + SEED:
            conn.execute(text(stmt))
    return engine


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "actes.db"


@pytest.fixture
def acts_engine(db_path: Path) -> Iterator[Engine]:
    engine = create_acts_database(f"sqlite:///{db_path.as_posix()}")
    yield engine
    engine.dispose()
