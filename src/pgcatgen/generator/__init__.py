"""
Generator module for producing catalog modules from a live database.
"""

from pgcatgen.generator.generator import CatalogGenerator

__all__ = ["CatalogGenerator"]
