"""Génération du rapport et onglet REPORT."""

from __future__ import annotations

from collections import Counter
from datetime import datetime

import pandas as pd

from concordactes import __version__
from concordactes.config import Config
from concordactes.matching.schema import ReconciliationResult, Scheme


def missing_by_reason(result: ReconciliationResult) -> dict[str, int]:
    """Nombre d'actes manquants par raison, du plus fréquent au moins fréquent."""
    return dict(Counter(m.reason for m in result.missing_list).most_common())


def build_report_df(
    result: ReconciliationResult,
    config: Config,
) -> pd.DataFrame:
    """
    Construit le DataFrame pour l'onglet REPORT.

    Contient : totaux, détail NGAP/CCAM, manquants par raison, paramètres,
    horodatage, version.
    """
    rows = [
        ("Metric", "Value"),
        ("nb_csv_rows", result.total_submitted),
        ("nb_found", result.total_found),
        ("nb_missing", result.total_missing),
    ]
    for scheme in Scheme:
        counts = result.by_scheme[scheme]
        rows.append((f"{scheme.value}_found", counts["found"]))
        rows.append((f"{scheme.value}_missing", counts["missing"]))

    rows.extend([("", ""), ("Reasons", "")])
    for reason, count in missing_by_reason(result).items():
        rows.append((f"reason_{reason}", count))

    rows.extend(
        [
            ("", ""),
            ("Parameters", ""),
            ("date_tolerance_minutes", config.date_tolerance_minutes),
            ("chunk_size", config.chunk_size),
            ("special_status_code", config.special_status_code),
            ("", ""),
            ("timestamp", datetime.now().isoformat()),
            ("version", __version__),
        ]
    )

    return pd.DataFrame(rows, columns=["Key", "Value"])


def print_report_console(result: ReconciliationResult) -> None:
    """Affiche un résumé du rapport en console."""
    ngap = result.by_scheme[Scheme.NGAP]
    ccam = result.by_scheme[Scheme.CCAM]

    print("\n=== ConcordActes Report ===")
    print(f"  Lignes CSV:       {result.total_submitted}")
    print(f"  Trouvés:          {result.total_found}")
    print(f"  Manquants:        {result.total_missing}")
    print(f"  NGAP:             {ngap['found']} trouvés / {ngap['missing']} manquants")
    print(f"  CCAM:             {ccam['found']} trouvés / {ccam['missing']} manquants")
    for reason, count in missing_by_reason(result).items():
        print(f"    - {reason}: {count}")
    print(f"  Version:          {__version__}")
    print(f"  Timestamp:        {datetime.now().isoformat()}")
    print("===========================\n")
