"""Connexion à la base des actes (SQLAlchemy)."""

from __future__ import annotations

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from concordactes.config import ConcordActesError, Config, ConfigError

logger = logging.getLogger(__name__)


class DatabaseError(ConcordActesError):
    """Base indisponible ou requête en échec."""


def build_engine(config: Config) -> Engine:
    """
    Crée le moteur SQLAlchemy depuis database_url.

    Le moteur est créé par l'appelant et injecté dans le dépôt ; aucune connexion globale.

    Raises:
        ConfigError: Si database_url est vide.
        DatabaseError: Si l'URL est invalide ou le pilote absent.
    """
    if not config.database_url:
        raise ConfigError("database_url requis")
    try:
        return create_engine(config.database_url, pool_pre_ping=True)
    except (SQLAlchemyError, ImportError) as e:
        logger.error("Création du moteur impossible: %s", e)
        raise DatabaseError(f"Impossible de créer la connexion: {e}") from e
