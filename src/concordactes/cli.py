"""Interface en ligne de commande ConcordActes."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from concordactes import __version__
from concordactes.config import ConcordActesError, Config
from concordactes.database import build_engine
from concordactes.export import build_missing_df, default_export_name, export_missing_csv, save_xlsx
from concordactes.io_csv import load_submitted_csv
from concordactes.logging_config import setup_logging
from concordactes.report import build_report_df, print_report_console
from concordactes.repository import ActeRepository
from concordactes.service import ReconciliationService, build_response, error_response

logger = logging.getLogger(__name__)


def cmd_check_csv(filepath: str) -> int:
    """Valide les en-têtes et compte les lignes lisibles d'un CSV."""
    try:
        rows = load_submitted_csv(filepath)
    except ConcordActesError as e:
        print(f"Erreur: {e}")
        return 1
    print(f"{filepath}: {len(rows)} ligne(s) lisible(s)")
    return 0


def _print_error(exc: Exception, as_json: bool) -> None:
    body, status = error_response(exc)
    logger.error("Traitement refusé (%d): %s", status, exc)
    if as_json:
        print(json.dumps(body, ensure_ascii=False))
    else:
        print(f"Erreur: {body['error']['message']}")


def cmd_run(
    csv_path: str,
    config_path: str,
    *,
    output_path: str | None = None,
    export_csv: str | None = None,
    as_json: bool = False,
    tolerance: int | None = None,
) -> int:
    """Exécute le rapprochement d'un fichier CSV."""
    try:
        config = Config.load(config_path)
        if tolerance is not None:
            config.date_tolerance_minutes = max(0, tolerance)
        setup_logging(config.numeric_log_level, config.log_file)

        repository = ActeRepository(build_engine(config), config.special_status_code)
        service = ReconciliationService(config, repository)
        result, stats = service.process(csv_path)

        if export_csv is not None:
            export_path = Path(export_csv)
            if export_path.is_dir():
                export_path = export_path / default_export_name()
            export_missing_csv(result, export_path)

        if output_path:
            sheets = {"Manquants": build_missing_df(result), "REPORT": build_report_df(result, config)}
            save_xlsx(output_path, sheets)
    except ConcordActesError as e:
        _print_error(e, as_json)
        return 1
    except Exception as e:
        logger.exception("Erreur inattendue")
        _print_error(e, as_json)
        return 1

    if as_json:
        print(json.dumps(build_response(result, stats), ensure_ascii=False, indent=2))
        return 0

    print_report_console(result)
    if export_csv is not None:
        print(f"Actes manquants écrits: {export_path}")
    if output_path:
        print(f"Fichier de sortie: {output_path}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(
        prog="concordactes",
        description="Rapprochement des actes médicaux d'un CSV avec la base NGAP/CCAM",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Commandes")

    # check-csv
    p_check = subparsers.add_parser("check-csv", help="Valider un fichier CSV sans interroger la base")
    p_check.add_argument("file", help="Fichier CSV")

    # run
    p_run = subparsers.add_parser("run", help="Exécuter le rapprochement")
    p_run.add_argument("file", help="Fichier CSV des actes")
    p_run.add_argument("--config", "-c", required=True, help="Fichier config JSON")
    p_run.add_argument("--output", "-o", help="Fichier xlsx de sortie (manquants + rapport)")
    p_run.add_argument("--export-csv", "-e", help="CSV des actes manquants (fichier ou dossier)")
    p_run.add_argument("--json", action="store_true", help="Afficher la réponse JSON")
    p_run.add_argument("--tolerance", "-t", type=int, help="Tolérance de date en minutes")

    args = parser.parse_args()

    if args.command == "check-csv":
        return cmd_check_csv(args.file)

    if args.command == "run":
        return cmd_run(
            args.file,
            args.config,
            output_path=args.output,
            export_csv=args.export_csv,
            as_json=args.json,
            tolerance=args.tolerance,
        )

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
