"""
PostgreSQL metadata introspector using psycopg2.

Reads function signatures and relation definitions from the system
catalogs (pg_proc, pg_depend, pg_extension, pg_class, pg_attribute).
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import psycopg2
import psycopg2.extensions
import psycopg2.extras
from psycopg2 import sql

from pgcatgen.errors import (
    ConnectionFailedError,
    ExtensionInstallError,
    IntrospectionError,
)
from pgcatgen.models import Column, Relation

logger = logging.getLogger(__name__)


# Every proc query returns the same columns:
# name, return type, argument types, argument names, names of the
# trailing arguments that carry defaults, argument mode codes.
SCHEMA_PROCS_QUERY = """
SELECT p.proname AS name,
  format_type(p.prorettype, NULL),
  array(SELECT format_type(unnest(p.proargtypes), NULL)),
  p.proargnames,
  p.proargnames[p.pronargs - p.pronargdefaults + 1:p.pronargs],
  p.proargmodes::text[]
FROM pg_catalog.pg_proc p
JOIN pg_catalog.pg_namespace n ON n.oid = p.pronamespace
WHERE n.nspname = %s
  AND pg_function_is_visible(p.oid)
ORDER BY 1, 2, 3, 4, 5
"""

# A function belongs to an extension when pg_depend links it to the
# extension with deptype 'e'. Extension functions land in the public schema,
# so visibility is checked against the search path.
EXTENSION_PROCS_QUERY = """
WITH extension_funcs AS (
  SELECT p.oid
  FROM pg_catalog.pg_extension AS e
    JOIN pg_catalog.pg_depend AS d ON d.refobjid = e.oid
    JOIN pg_catalog.pg_proc AS p ON p.oid = d.objid
  WHERE d.deptype = 'e' AND e.extname = %s
)
SELECT p.proname AS name,
  format_type(p.prorettype, NULL),
  array(SELECT format_type(unnest(p.proargtypes), NULL)),
  p.proargnames,
  p.proargnames[p.pronargs - p.pronargdefaults + 1:p.pronargs],
  p.proargmodes::text[]
FROM pg_catalog.pg_proc p
JOIN extension_funcs ef ON ef.oid = p.oid
WHERE pg_function_is_visible(p.oid)
ORDER BY 1, 2, 3, 4, 5
"""

# Column types use format_type like the proc queries, so a column and a
# function argument of the same type carry the same name. Array columns
# report their element type.
RELATIONS_QUERY = """
SELECT
  c.relname,
  a.attname,
  CASE WHEN t.typcategory = 'A' THEN format_type(t.typelem, NULL)
       ELSE format_type(a.atttypid, NULL) END,
  t.typcategory = 'A',
  a.attnotnull,
  information_schema._pg_char_max_length(a.atttypid, a.atttypmod)
FROM pg_catalog.pg_class c
JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
JOIN pg_catalog.pg_attribute a ON a.attrelid = c.oid
JOIN pg_catalog.pg_type t ON t.oid = a.atttypid
WHERE n.nspname = %s
  AND c.relkind IN ('r', 'p', 'v')
  AND a.attnum > 0
  AND NOT a.attisdropped
ORDER BY c.relname, a.attnum
"""


class PostgresIntrospector:
    """
    Introspects a live PostgreSQL database over a single connection.

    The connection runs in autocommit mode so that a failed statement does
    not poison the session for the rest of the run, and psycopg2's
    ``wait_select`` callback is installed so that Ctrl-C cancels the query
    in flight instead of waiting for it to finish.
    """

    def __init__(self, dsn: str):
        """
        Initialize introspector.

        Args:
            dsn: libpq connection string or postgres:// URL
        """
        self.dsn = dsn
        self._conn = None

    def connect(self) -> None:
        """Establish database connection."""
        psycopg2.extensions.set_wait_callback(psycopg2.extras.wait_select)
        try:
            self._conn = psycopg2.connect(self.dsn)
        except psycopg2.Error as e:
            raise ConnectionFailedError(f"could not connect to database: {e}") from e
        self._conn.autocommit = True
        logger.info(
            f"Connected to PostgreSQL {self._conn.server_version} "
            f"database {self._conn.info.dbname}"
        )

    def disconnect(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()

    @property
    def connection(self):
        if self._conn is None:
            self.connect()
        return self._conn

    def _fetch_all(self, target: str, query, params: Optional[Sequence] = None) -> List[tuple]:
        try:
            with self.connection.cursor() as cursor:
                cursor.execute(query, params)
                return cursor.fetchall()
        except psycopg2.Error as e:
            raise IntrospectionError(target, e) from e

    def read_procs(self, schema: str) -> List[tuple]:
        """Raw proc rows for every visible function in a schema."""
        rows = self._fetch_all(f"schema {schema}", SCHEMA_PROCS_QUERY, (schema,))
        logger.info(f"Read {len(rows)} functions from {schema}")
        return rows

    def read_extension_procs(self, extension: str) -> List[tuple]:
        """Raw proc rows for every visible function owned by an extension."""
        rows = self._fetch_all(
            f"extension {extension}", EXTENSION_PROCS_QUERY, (extension,)
        )
        logger.debug(f"Read {len(rows)} functions from extension {extension}")
        return rows

    def ensure_extension(self, extension: str) -> None:
        """Install an extension unless it is already present."""
        statement = sql.SQL("CREATE EXTENSION IF NOT EXISTS {}").format(
            sql.Identifier(extension)
        )
        try:
            with self.connection.cursor() as cursor:
                cursor.execute(statement)
        except psycopg2.Error as e:
            raise ExtensionInstallError(extension, e) from e

    def read_relations(self, schema: str) -> List[Relation]:
        """
        Get every base table and view of a schema with its columns.

        Args:
            schema: Schema name

        Returns:
            Relations ordered by name, columns in ordinal order
        """
        rows = self._fetch_all(f"schema {schema}", RELATIONS_QUERY, (schema,))

        relations: List[Relation] = []
        for table_name, column_name, column_type, is_array, not_null, length in rows:
            if not relations or relations[-1].name != table_name:
                relations.append(Relation(
                    catalog=schema,
                    schema_name=schema,
                    name=table_name,
                ))

            relations[-1].columns.append(Column(
                name=column_name,
                type=column_type,
                is_array=bool(is_array),
                is_not_null=bool(not_null),
                length=length,
            ))

        logger.info(f"Read {len(relations)} relations from {schema}")
        return relations
