"""
pgcatgen - PostgreSQL catalog generator

Introspects a live PostgreSQL database once and emits Python modules that
describe its built-in and extension functions and tables, so that SQL
analysis can resolve signatures without a database connection.

Features:
- Function signatures from pg_catalog, information_schema and contrib extensions
- Deterministic output with a declarative override/exclusion rule table
- Generated modules formatted with black and written atomically
- Extension dispatch module mapping extension names to constructors
"""

__version__ = "0.1.0"

from pgcatgen.models import (
    Column,
    ExtensionEntry,
    ExtensionSpec,
    GenerationReport,
    ParamMode,
    Proc,
    Relation,
    SchemaTarget,
)
from pgcatgen.config import GeneratorConfig, database_url
from pgcatgen.ordering import OrderReconciler, RuleSet
from pgcatgen.output import CatalogWriter
from pgcatgen.generator import CatalogGenerator

__all__ = [
    # Core models
    "Column",
    "ExtensionEntry",
    "ExtensionSpec",
    "GenerationReport",
    "ParamMode",
    "Proc",
    "Relation",
    "SchemaTarget",
    # Configuration
    "GeneratorConfig",
    "database_url",
    # Pipeline
    "OrderReconciler",
    "RuleSet",
    "CatalogWriter",
    "CatalogGenerator",
]
