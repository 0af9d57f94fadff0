"""Configuration et chargement du fichier config JSON."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

DEFAULT_CHUNK_SIZE = 800
DEFAULT_MAX_IDS = 20000
DEFAULT_UPLOAD_MAX_SIZE = 10 * 1024 * 1024
VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class ConcordActesError(Exception):
    """Exception de base pour ConcordActes."""


class ConfigError(ConcordActesError, ValueError):
    """Erreur de validation de la configuration."""


class ConfigFileError(ConcordActesError):
    """Erreur de chargement du fichier de configuration (fichier absent, JSON invalide)."""


def _as_int(d: dict[str, Any], key: str, default: int) -> int:
    raw = d.get(key, default)
    if isinstance(raw, bool):
        raise ConfigError(f"{key} doit être un entier (got {raw!r})")
    try:
        return int(raw)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} doit être un entier (got {raw!r})") from e


@dataclass
class Config:
    """Configuration principale de ConcordActes."""

    database_url: str = ""
    date_tolerance_minutes: int = 0
    chunk_size: int = DEFAULT_CHUNK_SIZE
    max_ids: int = DEFAULT_MAX_IDS
    upload_max_size: int = DEFAULT_UPLOAD_MAX_SIZE
    special_status_code: str = "C9"
    log_level: str = "INFO"
    log_file: str | None = None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Config:
        date_tolerance_minutes = _as_int(d, "date_tolerance_minutes", 0)
        chunk_size = _as_int(d, "chunk_size", DEFAULT_CHUNK_SIZE)
        max_ids = _as_int(d, "max_ids", DEFAULT_MAX_IDS)
        upload_max_size = _as_int(d, "upload_max_size", DEFAULT_UPLOAD_MAX_SIZE)
        special_status_code = str(d.get("special_status_code", "C9")).strip()
        log_level = str(d.get("log_level", "INFO")).upper()

        if date_tolerance_minutes < 0:
            raise ConfigError(f"date_tolerance_minutes doit être >= 0 (got {date_tolerance_minutes})")
        if chunk_size < 1:
            raise ConfigError(f"chunk_size doit être >= 1 (got {chunk_size})")
        if max_ids < 1:
            raise ConfigError(f"max_ids doit être >= 1 (got {max_ids})")
        if upload_max_size <= 0:
            raise ConfigError(f"upload_max_size doit être > 0 (got {upload_max_size})")
        if not special_status_code:
            raise ConfigError("special_status_code ne peut pas être vide")
        if log_level not in VALID_LOG_LEVELS:
            raise ConfigError(f"log_level invalide: {log_level!r}. Valides: {sorted(VALID_LOG_LEVELS)}")

        return cls(
            database_url=d.get("database_url", ""),
            date_tolerance_minutes=date_tolerance_minutes,
            chunk_size=chunk_size,
            max_ids=max_ids,
            upload_max_size=upload_max_size,
            special_status_code=special_status_code,
            log_level=log_level,
            log_file=d.get("log_file"),
        )

    @classmethod
    def load(cls, path: str | Path) -> Config:
        """
        Charge la configuration depuis un fichier JSON.

        Raises:
            ConfigFileError: Si le fichier est absent ou le JSON invalide.
            ConfigError: Si la configuration est invalide.
        """
        path = Path(path).resolve()
        if not path.exists():
            raise ConfigFileError(f"Fichier de configuration introuvable: {path}")

        try:
            with open(path, encoding="utf-8") as f:
                d = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigFileError(f"JSON invalide dans {path}: {e}") from e
        except OSError as e:
            raise ConfigFileError(f"Impossible de lire {path}: {e}") from e

        if not isinstance(d, dict):
            raise ConfigFileError(f"Fichier de configuration invalide: {path} doit contenir un objet JSON")

        config = cls.from_dict(d)
        config.resolve_paths(path.parent)
        return config

    def resolve_paths(self, base_dir: Path) -> None:
        """
        Résout les chemins relatifs par rapport au répertoire de base (ex. dossier du fichier config).

        Modifie log_file en place. Une URL SQLite relative (sqlite:///base.db) est aussi résolue.
        """
        base = Path(base_dir)
        if self.log_file and not Path(self.log_file).is_absolute():
            self.log_file = str((base / self.log_file).resolve())
        prefix = "sqlite:///"
        if self.database_url.startswith(prefix):
            db_path = self.database_url[len(prefix):]
            if db_path and db_path != ":memory:" and not Path(db_path).is_absolute():
                self.database_url = prefix + (base / db_path).resolve().as_posix()

    @property
    def numeric_log_level(self) -> int:
        return getattr(logging, self.log_level, logging.INFO)
