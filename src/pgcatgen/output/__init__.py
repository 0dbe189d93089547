"""
Output module for rendering and writing generated catalog modules.
"""

from pgcatgen.output.writer import CatalogWriter
from pgcatgen.output.templates import (
    GENERATED_HEADER,
    CatalogModuleContext,
    render_catalog_module,
    render_loader_module,
    render_package_init,
)

__all__ = [
    "CatalogWriter",
    "GENERATED_HEADER",
    "CatalogModuleContext",
    "render_catalog_module",
    "render_loader_module",
    "render_package_init",
]
