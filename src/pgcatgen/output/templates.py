"""
Source templates for generated catalog modules.

Rendering produces syntactically valid but unformatted Python; the writer
runs it through black before it reaches disk. String values are always
emitted with repr() so names containing quotes or backslashes stay intact.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence

from pgcatgen.models import ExtensionEntry, ParamMode, Proc, Relation

GENERATED_HEADER = "# Code generated by pgcatgen. DO NOT EDIT."

DEFAULT_CATALOG_MODULE = "pgcatgen.catalog"


@dataclass
class CatalogModuleContext:
    """Everything a catalog module template needs."""
    schema_name: str
    func_name: str
    procs: List[Proc] = field(default_factory=list)
    relations: List[Relation] = field(default_factory=list)
    catalog_module: str = DEFAULT_CATALOG_MODULE


def _render_proc(proc: Proc) -> List[str]:
    lines = [
        "    Function(",
        f"        name={proc.name!r},",
        "        args=[",
    ]
    for arg in proc.args:
        parts = []
        if arg.name:
            parts.append(f"name={arg.name!r}")
        if arg.has_default:
            parts.append("has_default=True")
        parts.append(f"type=TypeName(name={arg.type_name!r})")
        if arg.mode is not ParamMode.IN:
            parts.append(f"mode=FuncParamMode.{arg.mode.name}")
        lines.append(f"            Argument({', '.join(parts)}),")
    lines.append("        ],")
    lines.append(f"        return_type=TypeName(name={proc.return_type_name!r}),")
    lines.append("    ),")
    return lines


def _render_relation(relation: Relation) -> List[str]:
    lines = [
        "        Table(",
        "            rel=TableName(",
        f"                catalog={relation.catalog!r},",
        f"                schema={relation.schema_name!r},",
        f"                name={relation.name!r},",
        "            ),",
        "            columns=[",
    ]
    for column in relation.columns:
        parts = [
            f"name={column.name!r}",
            f"type=TypeName(name={column.type!r})",
        ]
        if column.is_not_null:
            parts.append("is_not_null=True")
        if column.is_array:
            parts.append("is_array=True")
        if column.length:
            parts.append(f"length={int(column.length)}")
        lines.append(f"                Column({', '.join(parts)}),")
    lines.append("            ],")
    lines.append("        ),")
    return lines


def render_catalog_module(ctx: CatalogModuleContext) -> str:
    """
    Render a module holding one schema's functions and tables.

    The module defines ``FUNCS_<FUNC_NAME>`` and a constructor named
    ``ctx.func_name`` that returns a fresh ``Schema``.
    """
    names = {"Argument", "Function", "Schema", "TypeName"}
    if any(m is not ParamMode.IN for p in ctx.procs for m in p.arg_modes):
        names.add("FuncParamMode")
    if ctx.relations:
        names.update({"Column", "Table", "TableName"})

    funcs_var = f"FUNCS_{ctx.func_name.upper()}"
    out = [
        GENERATED_HEADER,
        "",
        f"from {ctx.catalog_module} import {', '.join(sorted(names))}",
        "",
        f"{funcs_var} = [",
    ]
    for proc in ctx.procs:
        out.extend(_render_proc(proc))
    out.append("]")
    out.append("")
    out.append("")
    out.append(f"def {ctx.func_name}() -> Schema:")
    out.append(f"    s = Schema(name={ctx.schema_name!r})")
    out.append(f"    s.funcs = list({funcs_var})")
    if ctx.relations:
        out.append("    s.tables = [")
        for relation in ctx.relations:
            out.extend(_render_relation(relation))
        out.append("    ]")
    out.append("    return s")
    out.append("")
    return "\n".join(out)


def render_loader_module(
    entries: Sequence[ExtensionEntry],
    catalog_module: str = DEFAULT_CATALOG_MODULE,
    contrib_package: str = ".contrib",
) -> str:
    """
    Render the extension dispatch module.

    ``load_extension(name)`` looks the exact extension name up in a dict of
    constructors and returns None for anything it does not know.
    """
    out = [
        GENERATED_HEADER,
        "",
        "from typing import Callable, Dict, Optional",
        "",
        f"from {catalog_module} import Schema",
    ]
    modules = sorted({entry.module_name for entry in entries})
    if modules:
        out.append(f"from {contrib_package} import {', '.join(modules)}")
    out.append("")
    out.append("_LOADERS: Dict[str, Callable[[], Schema]] = {")
    for entry in entries:
        out.append(f"    {entry.name!r}: {entry.module_name}.{entry.func_name},")
    out.append("}")
    out.append("")
    out.append("")
    out.append("def load_extension(name: str) -> Optional[Schema]:")
    out.append("    loader = _LOADERS.get(name)")
    out.append("    if loader is None:")
    out.append("        return None")
    out.append("    return loader()")
    out.append("")
    return "\n".join(out)


def render_package_init() -> str:
    """Render the ``__init__.py`` of the generated contrib package."""
    return GENERATED_HEADER + "\n"
