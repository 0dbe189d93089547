"""
Exceptions raised by the catalog generator.

Every failure that aborts a run derives from CatalogGenError so the CLI can
report it as a single top-level error.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class CatalogGenError(Exception):
    """Base class for all generator failures."""


class ConfigError(CatalogGenError):
    """Invalid configuration or rule data."""


class ConnectionFailedError(CatalogGenError):
    """The database connection could not be established."""


class ExtensionInstallError(CatalogGenError):
    """CREATE EXTENSION failed for an extension."""

    def __init__(self, extension: str, cause: Exception):
        super().__init__(f"error creating extension {extension}: {cause}")
        self.extension = extension
        self.cause = cause


class IntrospectionError(CatalogGenError):
    """A metadata query failed."""

    def __init__(self, target: str, cause: Exception):
        super().__init__(f"error introspecting {target}: {cause}")
        self.target = target
        self.cause = cause


class FormatError(CatalogGenError):
    """Rendered source could not be formatted (template or data defect)."""

    def __init__(self, destination: Optional[Path], cause: Exception):
        where = f" for {destination}" if destination else ""
        super().__init__(f"generated source is invalid{where}: {cause}")
        self.destination = destination
        self.cause = cause


class WriteError(CatalogGenError):
    """Writing a generated file failed."""

    def __init__(self, destination: Path, cause: Exception):
        super().__init__(f"error writing {destination}: {cause}")
        self.destination = destination
        self.cause = cause
