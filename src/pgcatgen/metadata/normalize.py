"""
Normalization of raw pg_proc rows into Proc records.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

from pgcatgen.models import ParamMode, Proc

logger = logging.getLogger(__name__)


# format_type() quotes a few names that the analysis engine expects bare
QUOTED_TYPE_SPELLINGS = {
    '"any"': "any",
    '"char"': "char",
    '"timestamp"': "timestamp",
}


def clean_type(spelling: str) -> str:
    """Return the canonical spelling of a type name reported by format_type()."""
    spelling = spelling.strip()
    for quoted, bare in QUOTED_TYPE_SPELLINGS.items():
        spelling = spelling.replace(quoted, bare)
    return spelling


def proc_from_row(row: Sequence) -> Proc:
    """
    Build a Proc from one introspection row.

    The row layout is (name, return type, argument types, argument names,
    default argument names, argument mode codes). The last three may be
    NULL for functions without named arguments, defaults or explicit modes.
    """
    name, return_type, arg_types, arg_names, default_names, mode_codes = row

    arg_types = [clean_type(t) for t in (arg_types or [])]
    arg_names = [n or "" for n in (arg_names or [])]
    defaults = {n for n in (default_names or []) if n}
    modes = [ParamMode.from_code(c) for c in (mode_codes or [])]

    # truncate names to the type count before matching defaults
    proc = Proc(
        name=name.strip(),
        return_type_name=clean_type(return_type),
        arg_types=arg_types,
        arg_names=arg_names,
        arg_modes=modes,
    )
    proc.arg_has_default = [bool(n) and n in defaults for n in proc.arg_names]
    return proc


def procs_from_rows(rows: Iterable[Sequence]) -> List[Proc]:
    """Normalize every row of a proc query."""
    procs = [proc_from_row(row) for row in rows]
    logger.debug(f"Normalized {len(procs)} functions")
    return procs
