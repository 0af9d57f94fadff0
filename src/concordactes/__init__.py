"""ConcordActes - Rapprochement des actes médicaux déclarés avec la base NGAP/CCAM."""

__version__ = "0.1.0"

from concordactes.config import ConcordActesError, ConfigError, ConfigFileError  # noqa: E402
from concordactes.database import DatabaseError  # noqa: E402
from concordactes.io_csv import CsvFileError, CsvFormatError  # noqa: E402

__all__ = [
    "__version__",
    "ConcordActesError",
    "ConfigError",
    "ConfigFileError",
    "CsvFileError",
    "CsvFormatError",
    "DatabaseError",
]
