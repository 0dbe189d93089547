"""
Catalog data model consumed by the SQL analysis engine.

Generated modules build their schemas out of these classes, so the
attribute names here are part of the generated code's contract.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class FuncParamMode(str, Enum):
    IN = "in"
    OUT = "out"
    INOUT = "inout"
    VARIADIC = "variadic"
    TABLE = "table"


@dataclass(frozen=True)
class TypeName:
    name: str
    schema: str = ""


@dataclass
class Argument:
    type: TypeName
    name: str = ""
    has_default: bool = False
    mode: FuncParamMode = FuncParamMode.IN


@dataclass
class Function:
    name: str
    return_type: TypeName
    args: List[Argument] = field(default_factory=list)


@dataclass(frozen=True)
class TableName:
    name: str
    schema: str = ""
    catalog: str = ""


@dataclass
class Column:
    name: str
    type: TypeName
    is_not_null: bool = False
    is_array: bool = False
    length: Optional[int] = None


@dataclass
class Table:
    rel: TableName
    columns: List[Column] = field(default_factory=list)


@dataclass
class Schema:
    name: str
    funcs: List[Function] = field(default_factory=list)
    tables: List[Table] = field(default_factory=list)

    def get_funcs(self, name: str) -> List[Function]:
        """All overloads of ``name`` in catalog order."""
        return [f for f in self.funcs if f.name == name]

    def get_table(self, name: str) -> Optional[Table]:
        for table in self.tables:
            if table.rel.name == name:
                return table
        return None
