"""
Core data models for the pgcatgen package.

Defines the records that flow through the generator: normalized function
signatures, relations and their columns, and the bookkeeping objects used
by the extension driver.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple


class ParamMode(str, Enum):
    """Function parameter modes as understood by the analysis engine."""
    IN = "in"
    OUT = "out"
    INOUT = "inout"
    VARIADIC = "variadic"
    TABLE = "table"

    @classmethod
    def from_code(cls, code: Optional[str]) -> ParamMode:
        """Translate a pg_proc.proargmodes code into a ParamMode."""
        if code is None:
            return cls.IN
        return PROARGMODE_CODES.get(code, cls.IN)


PROARGMODE_CODES = {
    "i": ParamMode.IN,
    "o": ParamMode.OUT,
    "b": ParamMode.INOUT,
    "v": ParamMode.VARIADIC,
    "t": ParamMode.TABLE,
}


@dataclass(frozen=True)
class ProcArg:
    """A single argument of a normalized function."""
    name: str
    type_name: str
    has_default: bool = False
    mode: ParamMode = ParamMode.IN


@dataclass
class Proc:
    """
    Normalized function signature.

    arg_types and arg_names are position aligned. pg_proc.proargtypes only
    lists input arguments while proargnames covers every argument, so names
    are truncated (or padded with empty strings) to the number of types.
    """
    name: str
    return_type_name: str
    arg_types: List[str] = field(default_factory=list)
    arg_names: List[str] = field(default_factory=list)
    arg_has_default: List[bool] = field(default_factory=list)
    arg_modes: List[ParamMode] = field(default_factory=list)

    def __post_init__(self):
        count = len(self.arg_types)
        self.arg_names = _fit(self.arg_names, count, "")
        self.arg_has_default = _fit(self.arg_has_default, count, False)
        self.arg_modes = _fit(self.arg_modes, count, ParamMode.IN)

    @property
    def args(self) -> List[ProcArg]:
        """Arguments as ProcArg records, in declaration order."""
        return [
            ProcArg(
                name=name,
                type_name=type_name,
                has_default=has_default,
                mode=mode,
            )
            for type_name, name, has_default, mode in zip(
                self.arg_types, self.arg_names, self.arg_has_default, self.arg_modes
            )
        ]

    @property
    def default_names(self) -> List[str]:
        """Names of the arguments that carry a default value."""
        return [
            name for name, has_default in zip(self.arg_names, self.arg_has_default)
            if has_default and name
        ]

    @property
    def sort_key(self) -> Tuple[str, str, str, str, str]:
        """Composite key used for the reproducible base order."""
        return (
            self.name,
            self.return_type_name,
            ",".join(self.arg_types),
            ",".join(self.arg_names),
            ",".join(self.default_names),
        )

    @property
    def signature(self) -> str:
        """Human readable signature, e.g. ``digest(text, text)``."""
        return f"{self.name}({', '.join(self.arg_types)})"


@dataclass(frozen=True)
class Column:
    """Column of a catalog relation."""
    name: str
    type: str
    is_array: bool = False
    is_not_null: bool = False
    length: Optional[int] = None


@dataclass
class Relation:
    """A base table or view of an introspected schema."""
    catalog: str
    schema_name: str
    name: str
    columns: List[Column] = field(default_factory=list)


@dataclass(frozen=True)
class SchemaTarget:
    """A built-in schema to generate a catalog module for."""
    name: str
    func_name: str
    file_name: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SchemaTarget:
        """Create from dictionary."""
        name = data["name"]
        return cls(
            name=name,
            func_name=data.get("func_name", f"gen_{name}"),
            file_name=data.get("file_name", f"{name}.py"),
        )


_SEGMENT_SEPARATORS = re.compile(r"[-_]")


@dataclass(frozen=True)
class ExtensionSpec:
    """An extension the driver may install and introspect."""
    name: str
    enabled: bool = True

    @property
    def module_name(self) -> str:
        """Python module stem for the generated file (``uuid-ossp`` -> ``uuid_ossp``)."""
        return self.name.replace("-", "_")

    @property
    def func_name(self) -> str:
        """Generated constructor name (``uuid-ossp`` -> ``UuidOssp``)."""
        return "".join(
            part[:1].upper() + part[1:]
            for part in _SEGMENT_SEPARATORS.split(self.name)
        )

    @classmethod
    def from_value(cls, value: Any) -> ExtensionSpec:
        """Accept either a bare name or a ``{name, enabled}`` mapping."""
        if isinstance(value, str):
            return cls(name=value)
        return cls(name=value["name"], enabled=bool(value.get("enabled", True)))


@dataclass(frozen=True)
class ExtensionEntry:
    """An extension that produced a generated module."""
    name: str
    func_name: str
    module_name: str


@dataclass
class GenerationReport:
    """Outcome of a generator run."""
    schemas: List[str] = field(default_factory=list)
    loaded: List[ExtensionEntry] = field(default_factory=list)
    skipped_disabled: List[str] = field(default_factory=list)
    skipped_empty: List[str] = field(default_factory=list)
    failed_install: List[str] = field(default_factory=list)
    written: List[Path] = field(default_factory=list)

    @property
    def loaded_names(self) -> List[str]:
        """Names of the extensions that produced a module."""
        return [entry.name for entry in self.loaded]
