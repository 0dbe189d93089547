"""
Generator configuration.

Settings come from the packaged defaults.yaml, optionally merged with a
user-provided YAML file. Connection settings come from the environment.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import quote

import yaml

from pgcatgen.errors import ConfigError
from pgcatgen.models import ExtensionSpec, SchemaTarget
from pgcatgen.ordering import RuleSet

logger = logging.getLogger(__name__)

DEFAULTS_FILE = Path(__file__).parent / "defaults.yaml"

DEFAULT_OUTPUT_DIR = Path("engine") / "postgresql"

INSTALL_ERROR_POLICIES = ("abort", "skip")

# Environment variable -> default used when it is unset or empty
CONNECTION_DEFAULTS = {
    "PG_USER": "postgres",
    "PG_PASSWORD": "mysecretpassword",
    "PG_HOST": "127.0.0.1",
    "PG_PORT": "5432",
    "PG_DATABASE": "dinotest",
}


def database_url(environ: Optional[Mapping[str, str]] = None) -> str:
    """
    Connection URL for the introspected database.

    DATABASE_URL wins when set. Otherwise the URL is composed from PG_USER,
    PG_PASSWORD, PG_HOST, PG_PORT and PG_DATABASE with TLS disabled.
    """
    env = os.environ if environ is None else environ

    url = env.get("DATABASE_URL")
    if url:
        return url

    values = {key: env.get(key) or default for key, default in CONNECTION_DEFAULTS.items()}
    return "postgres://{user}:{password}@{host}:{port}/{database}?sslmode=disable".format(
        user=quote(values["PG_USER"], safe=""),
        password=quote(values["PG_PASSWORD"], safe=""),
        host=values["PG_HOST"],
        port=values["PG_PORT"],
        database=values["PG_DATABASE"],
    )


@dataclass
class GeneratorConfig:
    """Configuration for a generator run."""
    output_dir: Path = field(default_factory=lambda: DEFAULT_OUTPUT_DIR)
    schemas: List[SchemaTarget] = field(default_factory=list)
    extensions: List[ExtensionSpec] = field(default_factory=list)
    rules: RuleSet = field(default_factory=RuleSet)
    contrib_dir: str = "contrib"
    loader_file: str = "extension.py"
    catalog_module: str = "pgcatgen.catalog"
    on_install_error: str = "abort"

    def __post_init__(self):
        if isinstance(self.output_dir, str):
            self.output_dir = Path(self.output_dir)
        if self.on_install_error not in INSTALL_ERROR_POLICIES:
            raise ConfigError(
                f"on_install_error must be one of {', '.join(INSTALL_ERROR_POLICIES)}, "
                f"got {self.on_install_error!r}"
            )

    @property
    def contrib_path(self) -> Path:
        return self.output_dir / self.contrib_dir

    @property
    def loader_path(self) -> Path:
        return self.output_dir / self.loader_file

    @classmethod
    def from_dict(cls, data: Dict[str, Any], output_dir: Optional[Path] = None) -> GeneratorConfig:
        """Create from a (merged) configuration mapping."""
        try:
            schemas = [SchemaTarget.from_dict(s) for s in data.get("schemas") or []]
            extensions = [ExtensionSpec.from_value(e) for e in data.get("extensions") or []]
        except (KeyError, TypeError) as e:
            raise ConfigError(f"invalid schema or extension entry: {e}") from e

        names = [ext.name for ext in extensions]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ConfigError(f"duplicate extensions: {', '.join(duplicates)}")

        return cls(
            output_dir=output_dir or DEFAULT_OUTPUT_DIR,
            schemas=schemas,
            extensions=extensions,
            rules=RuleSet.from_dict(data),
            contrib_dir=data.get("contrib_dir", "contrib"),
            loader_file=data.get("loader_file", "extension.py"),
            catalog_module=data.get("catalog_module", "pgcatgen.catalog"),
            on_install_error=data.get("on_install_error", "abort"),
        )

    @classmethod
    def load(
        cls,
        path: Optional[Path] = None,
        output_dir: Optional[Path] = None,
    ) -> GeneratorConfig:
        """
        Load the packaged defaults, merged with ``path`` if given.

        Args:
            path: Optional user YAML file
            output_dir: Directory generated files are written to

        Returns:
            GeneratorConfig
        """
        data = _read_yaml(DEFAULTS_FILE)
        if path is not None:
            data = merge_config(data, _read_yaml(Path(path)))
            logger.info(f"Loaded configuration overrides from {path}")
        return cls.from_dict(data, output_dir=output_dir)


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"could not read configuration {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"configuration {path} must be a mapping")
    return data


def merge_config(base: Dict[str, Any], extra: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ``extra`` over ``base``: rule lists are appended, everything else replaced."""
    merged = dict(base)
    for key, value in extra.items():
        if key in ("overrides", "exclusions"):
            merged[key] = list(base.get(key) or []) + list(value or [])
        else:
            merged[key] = value
    return merged
