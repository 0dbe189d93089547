"""
Tests for the output module.

Tests template rendering, black formatting and atomic writes. Rendered
modules are executed against pgcatgen.catalog to check what they build.
"""

import os
from pathlib import Path

import pytest

from pgcatgen.catalog import FuncParamMode, Schema
from pgcatgen.errors import FormatError, WriteError
from pgcatgen.models import Column, ExtensionEntry, ParamMode, Proc, Relation
from pgcatgen.output import (
    GENERATED_HEADER,
    CatalogModuleContext,
    CatalogWriter,
    render_catalog_module,
    render_loader_module,
    render_package_init,
)


def run_module(source):
    """Execute generated source and return its namespace."""
    namespace = {}
    exec(compile(source, "<generated>", "exec"), namespace)
    return namespace


@pytest.fixture
def sample_procs():
    return [
        Proc(
            name="digest",
            return_type_name="bytea",
            arg_types=["text", "text"],
        ),
        Proc(
            name="dblink_connect",
            return_type_name="text",
            arg_types=["text", "text"],
            arg_names=["connname", "connstr"],
            arg_has_default=[False, True],
        ),
        Proc(
            name="concat_ws",
            return_type_name="text",
            arg_types=["text", "any"],
            arg_modes=[ParamMode.IN, ParamMode.VARIADIC],
        ),
        Proc(name="uuid_nil", return_type_name="uuid"),
    ]


@pytest.fixture
def sample_relations():
    return [
        Relation(
            catalog="information_schema",
            schema_name="information_schema",
            name="columns",
            columns=[
                Column(name="table_name", type="name", is_not_null=True),
                Column(name="udt_name", type="character varying", length=64),
                Column(name="dims", type="integer", is_array=True),
            ],
        ),
    ]


class TestCatalogTemplate:
    """Tests for render_catalog_module."""

    def test_functions(self, sample_procs):
        source = render_catalog_module(CatalogModuleContext(
            schema_name="pg_catalog",
            func_name="Pgcrypto",
            procs=sample_procs,
        ))
        assert source.startswith(GENERATED_HEADER)
        assert "FUNCS_PGCRYPTO = [" in source

        namespace = run_module(source)
        assert len(namespace["FUNCS_PGCRYPTO"]) == len(sample_procs)
        schema = namespace["Pgcrypto"]()
        assert isinstance(schema, Schema)
        assert schema.name == "pg_catalog"
        assert schema.tables == []
        assert [f.name for f in schema.funcs] == [
            "digest", "dblink_connect", "concat_ws", "uuid_nil",
        ]

        digest = schema.funcs[0]
        assert [a.type.name for a in digest.args] == ["text", "text"]
        assert [a.name for a in digest.args] == ["", ""]
        assert digest.return_type.name == "bytea"

        dblink = schema.funcs[1]
        assert [a.name for a in dblink.args] == ["connname", "connstr"]
        assert [a.has_default for a in dblink.args] == [False, True]

        concat_ws = schema.funcs[2]
        assert [a.mode for a in concat_ws.args] == [FuncParamMode.IN, FuncParamMode.VARIADIC]

        assert schema.funcs[3].args == []

    def test_in_mode_and_empty_names_omitted(self, sample_procs):
        source = render_catalog_module(CatalogModuleContext(
            schema_name="pg_catalog",
            func_name="Pgcrypto",
            procs=sample_procs[:1],
        ))
        assert "mode=" not in source
        assert "name=''" not in source
        assert "has_default" not in source
        assert "FuncParamMode" not in source

    def test_relations(self, sample_procs, sample_relations):
        source = render_catalog_module(CatalogModuleContext(
            schema_name="information_schema",
            func_name="gen_information_schema",
            procs=sample_procs[:1],
            relations=sample_relations,
        ))
        schema = run_module(source)["gen_information_schema"]()

        table = schema.get_table("columns")
        assert table.rel.schema == "information_schema"
        assert table.rel.catalog == "information_schema"
        assert [c.name for c in table.columns] == ["table_name", "udt_name", "dims"]
        assert table.columns[0].is_not_null is True
        assert table.columns[1].length == 64
        assert table.columns[1].type.name == "character varying"
        assert table.columns[2].is_array is True

    def test_quotes_in_names_survive(self):
        procs = [Proc(name="we'ird\"name", return_type_name="text", arg_types=["text"], arg_names=["a\\b"])]
        source = render_catalog_module(CatalogModuleContext(
            schema_name="pg_catalog", func_name="gen", procs=procs,
        ))
        func = run_module(source)["gen"]().funcs[0]
        assert func.name == "we'ird\"name"
        assert func.args[0].name == "a\\b"

    def test_custom_catalog_module(self):
        source = render_catalog_module(CatalogModuleContext(
            schema_name="pg_catalog",
            func_name="gen",
            catalog_module="myengine.catalog",
        ))
        assert "from myengine.catalog import" in source

    def test_calls_return_fresh_schemas(self, sample_procs):
        source = render_catalog_module(CatalogModuleContext(
            schema_name="pg_catalog", func_name="gen", procs=sample_procs,
        ))
        gen = run_module(source)["gen"]
        first = gen()
        first.funcs.clear()
        assert len(gen().funcs) == len(sample_procs)


class TestLoaderTemplate:
    """Tests for render_loader_module."""

    def test_imports_and_mapping(self):
        source = render_loader_module([
            ExtensionEntry(name="pgcrypto", func_name="Pgcrypto", module_name="pgcrypto"),
            ExtensionEntry(name="uuid-ossp", func_name="UuidOssp", module_name="uuid_ossp"),
        ])
        assert source.startswith(GENERATED_HEADER)
        assert "from .contrib import pgcrypto, uuid_ossp" in source
        assert "'uuid-ossp': uuid_ossp.UuidOssp," in source

    def test_no_extensions(self):
        source = render_loader_module([])
        namespace = run_module(source)
        assert namespace["load_extension"]("pgcrypto") is None

    def test_package_init(self):
        assert render_package_init().strip() == GENERATED_HEADER


class TestCatalogWriter:
    """Tests for CatalogWriter."""

    def test_format_source(self):
        writer = CatalogWriter()
        assert writer.format_source("x = {'a':1}\n") == 'x = {"a": 1}\n'

    def test_format_error(self):
        with pytest.raises(FormatError):
            CatalogWriter().format_source("def broken(:\n")

    def test_write_creates_parents(self, tmp_path):
        destination = tmp_path / "engine" / "postgresql" / "contrib" / "lo.py"
        CatalogWriter().write(destination, "x = 1\n")
        assert destination.read_text() == "x = 1\n"

    def test_write_replaces_existing(self, tmp_path):
        destination = tmp_path / "pg_catalog.py"
        destination.write_text("old = True\n")
        CatalogWriter().write(destination, "new = True\n")
        assert destination.read_text() == "new = True\n"
        assert os.listdir(tmp_path) == ["pg_catalog.py"]

    def test_format_error_leaves_file_untouched(self, tmp_path):
        destination = tmp_path / "pg_catalog.py"
        destination.write_text("old = True\n")
        with pytest.raises(FormatError):
            CatalogWriter().write(destination, "def broken(:\n")
        assert destination.read_text() == "old = True\n"

    def test_write_error(self, tmp_path):
        # a regular file where a directory is needed
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        destination = blocker / "pg_catalog.py"

        with pytest.raises(WriteError) as excinfo:
            CatalogWriter().write(destination, "x = 1\n")
        assert excinfo.value.destination == destination
        assert str(destination) in str(excinfo.value)
