"""
Metadata introspection module for PostgreSQL.

Reads function signatures and relations from a live database and
normalizes them into Proc and Relation records.
"""

from pgcatgen.metadata.postgres import PostgresIntrospector
from pgcatgen.metadata.normalize import clean_type, proc_from_row, procs_from_rows

__all__ = [
    "PostgresIntrospector",
    "clean_type",
    "proc_from_row",
    "procs_from_rows",
]
