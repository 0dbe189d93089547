"""
Generator component that drives introspection, ordering and emission.

Handles:
- Built-in schemas (pg_catalog, information_schema)
- Contrib extensions: install, introspect, reconcile, emit
- The extension dispatch module
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, List, Optional

from pgcatgen.config import GeneratorConfig
from pgcatgen.errors import ExtensionInstallError
from pgcatgen.metadata.normalize import procs_from_rows
from pgcatgen.models import (
    ExtensionEntry,
    ExtensionSpec,
    GenerationReport,
    SchemaTarget,
)
from pgcatgen.ordering import OrderReconciler
from pgcatgen.output import (
    CatalogModuleContext,
    CatalogWriter,
    render_catalog_module,
    render_loader_module,
    render_package_init,
)

logger = logging.getLogger(__name__)

# Generated extension modules describe functions living in pg_catalog
EXTENSION_SCHEMA_NAME = "pg_catalog"


class CatalogGenerator:
    """
    Generates catalog modules from a live database.

    The generator:
    1. Emits one module per built-in schema
    2. Installs and introspects every enabled extension
    3. Emits one module per extension that reports functions
    4. Emits the dispatch module for the extensions that produced output

    Any fatal error propagates to the caller; files written before the
    failure stay on disk.
    """

    def __init__(
        self,
        introspector: Any,
        config: GeneratorConfig,
        writer: Optional[CatalogWriter] = None,
        reconciler: Optional[OrderReconciler] = None,
        on_progress: Optional[Callable[[str], None]] = None,
    ):
        """
        Initialize generator.

        Args:
            introspector: Object providing read_procs, read_relations,
                ensure_extension and read_extension_procs
            config: Generator configuration
            writer: Writer used for every generated file
            reconciler: Order reconciler; built from config.rules by default
            on_progress: Called with a short description before each step
        """
        self.introspector = introspector
        self.config = config
        self.writer = writer or CatalogWriter()
        self.reconciler = reconciler or OrderReconciler(config.rules)
        self._on_progress = on_progress
        self.report = GenerationReport()

    def _progress(self, message: str) -> None:
        logger.debug(message)
        if self._on_progress:
            self._on_progress(message)

    def _write(self, destination: Path, source: str) -> None:
        self.writer.write(destination, source)
        self.report.written.append(destination)

    def run(self) -> GenerationReport:
        """Generate every configured schema and extension plus the loader."""
        self.generate_schemas()
        entries = self.generate_extensions()
        self.generate_loader(entries)
        return self.report

    def generate_schemas(self) -> None:
        for target in self.config.schemas:
            self.generate_schema(target)

    def generate_schema(self, target: SchemaTarget) -> Path:
        """Introspect one built-in schema and write its module."""
        self._progress(f"Reading {target.name}")
        procs = procs_from_rows(self.introspector.read_procs(target.name))
        procs = self.reconciler.reconcile(target.name, procs)
        relations = self.introspector.read_relations(target.name)

        destination = self.config.output_dir / target.file_name
        self._write(destination, render_catalog_module(CatalogModuleContext(
            schema_name=target.name,
            func_name=target.func_name,
            procs=procs,
            relations=relations,
            catalog_module=self.config.catalog_module,
        )))
        self.report.schemas.append(target.name)
        logger.info(
            f"Generated {target.name}: {len(procs)} functions, {len(relations)} relations"
        )
        return destination

    def generate_extensions(self) -> List[ExtensionEntry]:
        """
        Generate a module for every enabled extension that has functions.

        Returns:
            Entries for the extensions that produced a module, in config order
        """
        entries = []
        for extension in self.config.extensions:
            if not extension.enabled:
                logger.debug(f"Extension {extension.name} is disabled, skipping")
                self.report.skipped_disabled.append(extension.name)
                continue

            entry = self.generate_extension(extension)
            if entry is not None:
                entries.append(entry)
        return entries

    def generate_extension(self, extension: ExtensionSpec) -> Optional[ExtensionEntry]:
        """Install, introspect and emit one extension; None if it was skipped."""
        self._progress(f"Installing {extension.name}")
        try:
            self.introspector.ensure_extension(extension.name)
        except ExtensionInstallError as e:
            if self.config.on_install_error != "skip":
                raise
            logger.error(f"{e}; skipping")
            self.report.failed_install.append(extension.name)
            return None

        self._progress(f"Reading {extension.name}")
        procs = procs_from_rows(self.introspector.read_extension_procs(extension.name))
        if not procs:
            logger.info(f"No functions in {extension.name}, skipping")
            self.report.skipped_empty.append(extension.name)
            return None

        procs = self.reconciler.reconcile(extension.name, procs)

        destination = self.config.contrib_path / f"{extension.module_name}.py"
        self._write(destination, render_catalog_module(CatalogModuleContext(
            schema_name=EXTENSION_SCHEMA_NAME,
            func_name=extension.func_name,
            procs=procs,
            catalog_module=self.config.catalog_module,
        )))

        entry = ExtensionEntry(
            name=extension.name,
            func_name=extension.func_name,
            module_name=extension.module_name,
        )
        self.report.loaded.append(entry)
        logger.info(f"Generated extension {extension.name}: {len(procs)} functions")
        return entry

    def generate_loader(self, entries: List[ExtensionEntry]) -> Path:
        """Write the contrib package marker and the dispatch module."""
        self._write(self.config.contrib_path / "__init__.py", render_package_init())
        self._write(
            self.config.loader_path,
            render_loader_module(
                entries,
                catalog_module=self.config.catalog_module,
                contrib_package=f".{self.config.contrib_dir}",
            ),
        )
        return self.config.loader_path
