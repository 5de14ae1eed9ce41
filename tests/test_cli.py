"""Tests for the group and infer CLI subcommands."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from click.testing import CliRunner

from groupset.cli import main
from groupset.cli.group_cmd import group_cmd, parse_condition, select
from groupset.cli.infer_cmd import infer_cmd
from groupset.model.collection import Collection
from groupset.model.errors import UnknownColumnError
from groupset.model.record import Record
from groupset.model.schema import Schema, Unique
from groupset.model.types import Attr, Ordering

DATA = "id,t,v\n0,1.1,10\n0,2.9,20\n0,3.0,30\n0,3.9,40\n0,7.9,50\n"

SCHEMA = {
    "version": 1,
    "columns": {
        "id": {"type": "int", "group": "unique"},
        "t": {"type": "float", "group": {"interval": {"start": 1, "step": 3}}},
        "v": {"type": "int"},
    },
}


@pytest.fixture
def data_file(tmp_path: Path) -> Path:
    path = tmp_path / "data.csv"
    path.write_text(DATA)
    return path


@pytest.fixture
def schema_file(tmp_path: Path) -> Path:
    path = tmp_path / "schema.json"
    path.write_text(json.dumps(SCHEMA))
    return path


@pytest.fixture
def latin1_file(tmp_path: Path) -> Path:
    path = tmp_path / "latin1.csv"
    path.write_bytes(b"id\n\xff\n")
    return path


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    logger = logging.getLogger("groupset")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


class TestParseCondition:
    def _schema(self) -> Schema:
        schema = Schema()
        schema.register("v", Attr.of_int())
        schema.register("name", Attr.of_text())
        return schema

    def test_operators(self) -> None:
        """<, = and > map to their orderings."""
        schema = self._schema()
        assert parse_condition(schema, "v<3").ordering is Ordering.LESS
        assert parse_condition(schema, "v = 3").ordering is Ordering.EQUAL
        assert parse_condition(schema, "v>3").value == Attr.of_int(3)

    def test_value_uses_declared_type(self) -> None:
        """The value is parsed with the column's type."""
        cond = parse_condition(self._schema(), "name=42")
        assert cond.value == Attr.of_text("42")

    def test_unknown_attribute(self) -> None:
        """Conditions on undeclared columns are rejected."""
        with pytest.raises(UnknownColumnError):
            parse_condition(self._schema(), "nope=1")


class TestSelect:
    def test_combines_with_set_algebra(self) -> None:
        """where, any and exclude combine by intersect, unite and subtract."""
        schema = Schema()
        schema.register("k", Attr.of_int(), Unique())
        schema.register("v", Attr.of_int())
        records = [Record.build(schema, [("k", str(i % 2)), ("v", str(i))]) for i in range(10)]
        c = Collection.build(records)
        result = select(
            c,
            where=[parse_condition(schema, "v>1")],
            any_of=[parse_condition(schema, "v<4"), parse_condition(schema, "v>7")],
            exclude=[parse_condition(schema, "v=9")],
        )
        assert sorted(r["v"].value for r in result.records()) == [2, 3, 8]

    def test_no_conditions(self) -> None:
        """Without conditions the collection is returned unchanged."""
        schema = Schema()
        schema.register("k", Attr.of_int(), Unique())
        c = Collection.build([Record.build(schema, [("k", "1")])])
        assert select(c, [], [], []) == c


class TestGroupCmd:
    def test_groups_by_interval(self, data_file: Path) -> None:
        """--group splits the rows into interval buckets."""
        runner = CliRunner()
        result = runner.invoke(group_cmd, [str(data_file), "--group", "id", "--group", "t:1:3"])
        assert result.exit_code == 0, result.output
        assert "id=0, t=[1, 4)" in result.output
        assert "id=0, t=[7, 10)" in result.output
        assert "| 4 " in result.output
        assert "| 1 " in result.output

    def test_fold_sum(self, data_file: Path, schema_file: Path) -> None:
        """--fold sum:v prints one sum per group."""
        runner = CliRunner()
        result = runner.invoke(
            group_cmd, [str(data_file), "--schema", str(schema_file), "--fold", "sum:v"]
        )
        assert result.exit_code == 0, result.output
        assert "sum:v" in result.output
        assert "| 100 " in result.output
        assert "| 50 " in result.output

    def test_where_and_count(self, data_file: Path, schema_file: Path) -> None:
        """--where filters before the fold."""
        runner = CliRunner()
        result = runner.invoke(
            group_cmd,
            [str(data_file), "--schema", str(schema_file), "--where", "v>15", "--fold", "count"],
        )
        assert result.exit_code == 0, result.output
        assert "| 3 " in result.output
        assert "| 1 " in result.output

    def test_exclude_drops_group(self, data_file: Path, schema_file: Path) -> None:
        """--exclude removes matching records and empty groups."""
        runner = CliRunner()
        result = runner.invoke(
            group_cmd, [str(data_file), "--schema", str(schema_file), "--exclude", "v=50"]
        )
        assert result.exit_code == 0, result.output
        assert "t=[7, 10)" not in result.output

    def test_empty_result(self, data_file: Path, schema_file: Path) -> None:
        """An empty selection is reported as such."""
        runner = CliRunner()
        result = runner.invoke(
            group_cmd, [str(data_file), "--schema", str(schema_file), "--where", "v>1000"]
        )
        assert result.exit_code == 0
        assert "(empty collection)" in result.output

    def test_members(self, data_file: Path, schema_file: Path) -> None:
        """--members prints the selected records."""
        runner = CliRunner()
        result = runner.invoke(
            group_cmd,
            [str(data_file), "--schema", str(schema_file), "--where", "v=20", "--members"],
        )
        assert result.exit_code == 0, result.output
        assert "| 2.9 " in result.output

    def test_invalid_rows_skipped(self, tmp_path: Path, schema_file: Path) -> None:
        """Invalid rows are skipped and counted."""
        data = tmp_path / "bad.csv"
        data.write_text(DATA + "zz,1.0,5\n")
        runner = CliRunner()
        result = runner.invoke(group_cmd, [str(data), "--schema", str(schema_file)])
        assert result.exit_code == 0, result.output
        assert "Skipped 1 invalid row(s)" in result.output

    def test_strict_fails(self, tmp_path: Path, schema_file: Path) -> None:
        """--strict turns an invalid row into an error."""
        data = tmp_path / "bad.csv"
        data.write_text(DATA + "zz,1.0,5\n")
        runner = CliRunner()
        result = runner.invoke(group_cmd, [str(data), "--schema", str(schema_file), "--strict"])
        assert result.exit_code == 1
        assert "Expected int" in result.output

    def test_unknown_condition_column(self, data_file: Path) -> None:
        """A condition on an unknown column is an error."""
        runner = CliRunner()
        result = runner.invoke(group_cmd, [str(data_file), "--where", "nope=1"])
        assert result.exit_code == 1
        assert "Unknown column" in result.output

    def test_bad_fold(self, data_file: Path) -> None:
        """An unknown fold is a usage error."""
        runner = CliRunner()
        result = runner.invoke(group_cmd, [str(data_file), "--fold", "max:v"])
        assert result.exit_code == 2

    def test_interval_on_text_column(self, tmp_path: Path) -> None:
        """Interval grouping on a text column is an error."""
        data = tmp_path / "names.csv"
        data.write_text("name\nAlice\n")
        runner = CliRunner()
        result = runner.invoke(group_cmd, [str(data), "--group", "name:0:5"])
        assert result.exit_code == 1
        assert "requires int or float" in result.output

    def test_invalid_utf8_data(self, latin1_file: Path) -> None:
        """A data file that is not UTF-8 is reported, not raised."""
        runner = CliRunner()
        result = runner.invoke(group_cmd, [str(latin1_file)])
        assert result.exit_code == 1
        assert "Cannot read" in result.output
        assert not isinstance(result.exception, UnicodeDecodeError)

    def test_invalid_utf8_schema(self, data_file: Path, tmp_path: Path) -> None:
        """A schema file that is not UTF-8 is reported, not raised."""
        schema = tmp_path / "schema.json"
        schema.write_bytes(b"{\"columns\": {\"\xff\": {\"type\": \"int\"}}}")
        runner = CliRunner()
        result = runner.invoke(group_cmd, [str(data_file), "--schema", str(schema)])
        assert result.exit_code == 1
        assert "Invalid schema file" in result.output

    def test_via_main_with_logging(self, data_file: Path) -> None:
        """The command runs through the main group with debug logging."""
        runner = CliRunner()
        result = runner.invoke(
            main, ["--log-level", "debug", "group", str(data_file), "--group", "id"]
        )
        assert result.exit_code == 0, result.output


class TestInferCmd:
    def test_prints_schema(self, data_file: Path) -> None:
        """The inferred schema is printed as JSON."""
        runner = CliRunner()
        result = runner.invoke(infer_cmd, [str(data_file), "--group", "id", "--group", "t:1:3"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == SCHEMA

    def test_output_file(self, data_file: Path, tmp_path: Path) -> None:
        """-o writes the schema to a file."""
        out = tmp_path / "out.json"
        runner = CliRunner()
        result = runner.invoke(infer_cmd, [str(data_file), "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert json.loads(out.read_text())["columns"]["t"] == {"type": "float"}

    def test_bad_group_spec(self, data_file: Path) -> None:
        """A malformed --group is an error."""
        runner = CliRunner()
        result = runner.invoke(infer_cmd, [str(data_file), "--group", "t:1"])
        assert result.exit_code == 1
        assert "Invalid group spec" in result.output

    def test_invalid_utf8_data(self, latin1_file: Path) -> None:
        """A data file that is not UTF-8 is reported, not raised."""
        runner = CliRunner()
        result = runner.invoke(infer_cmd, [str(latin1_file)])
        assert result.exit_code == 1
        assert "Cannot read" in result.output
