"""Schema configuration files: JSON documents describing columns and grouping."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from groupset.model.errors import GroupsetError
from groupset.model.schema import ComponentRule, Interval, Schema, Unique
from groupset.model.types import Attr, AttrKind

# Schema file format version.
CONFIG_VERSION = 1

_KINDS_BY_NAME = {kind.value: kind for kind in AttrKind}


class ConfigError(GroupsetError):
    """Raised when a schema configuration document is malformed."""


def load_schema(path: Path) -> Schema:
    """Read a JSON schema file and build the Schema it describes."""
    try:
        doc = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"Invalid schema file {path}: {e}") from e
    return schema_from_config(doc, source=str(path))


def save_schema(schema: Schema, path: Path) -> None:
    """Write *schema* as a JSON schema file."""
    path.write_text(json.dumps(schema_to_config(schema), indent=2) + "\n", encoding="utf-8")


def schema_from_config(doc: Any, *, source: str = "<config>") -> Schema:
    """Build a Schema from a parsed configuration document.

    Columns are registered in document order.
    """
    if not isinstance(doc, dict):
        raise ConfigError(f"Invalid schema config: {source}")
    if doc.get("version", CONFIG_VERSION) != CONFIG_VERSION:
        raise ConfigError(
            f"Unsupported schema config version {doc.get('version')} in {source}"
        )
    columns = doc.get("columns")
    if not isinstance(columns, dict):
        raise ConfigError(f"Invalid schema config (missing columns): {source}")

    schema = Schema()
    for name, spec in columns.items():
        if not isinstance(spec, dict):
            raise ConfigError(f"Column {name!r} must be an object in {source}")
        type_name = spec.get("type")
        kind = _KINDS_BY_NAME.get(type_name) if isinstance(type_name, str) else None
        if kind is None:
            raise ConfigError(
                f"Column {name!r} has unknown type {spec.get('type')!r} in {source}"
            )
        rule = _parse_rule(name, spec.get("group"), source)
        schema.register(name, Attr.sample(kind), rule)
    return schema


def schema_to_config(schema: Schema) -> dict[str, Any]:
    """Serialize *schema* to a JSON-compatible configuration document."""
    columns: dict[str, Any] = {}
    for name, sample in schema.declared_types.items():
        entry: dict[str, Any] = {"type": sample.kind.value}
        rule = schema.rule(name)
        if isinstance(rule, Unique):
            entry["group"] = "unique"
        elif isinstance(rule, Interval):
            entry["group"] = {"interval": {"start": rule.start, "step": rule.step}}
        columns[name] = entry
    return {"version": CONFIG_VERSION, "columns": columns}


def parse_group_spec(text: str) -> tuple[str, ComponentRule]:
    """Parse a command-line grouping spec.

    ``name`` groups by the exact value; ``name:start:step`` groups by
    interval buckets.
    """
    parts = [p.strip() for p in text.split(":")]
    if len(parts) == 1 and parts[0]:
        return parts[0], Unique()
    if len(parts) == 3 and parts[0]:
        try:
            start, step = int(parts[1]), int(parts[2])
        except ValueError:
            raise ConfigError(f"Invalid interval in group spec: {text!r}")
        return parts[0], Interval(start, step)
    raise ConfigError(
        f"Invalid group spec: {text!r} (expected name or name:start:step)"
    )


def _parse_rule(name: str, spec: Any, source: str) -> ComponentRule | None:
    """Parse the optional ``group`` entry of a column."""
    if spec is None:
        return None
    if spec == "unique":
        return Unique()
    if isinstance(spec, dict) and isinstance(spec.get("interval"), dict):
        interval = spec["interval"]
        if "start" not in interval or "step" not in interval:
            raise ConfigError(
                f"Interval rule for {name!r} needs start and step in {source}"
            )
        return Interval(interval["start"], interval["step"])
    raise ConfigError(f"Invalid group rule for column {name!r} in {source}")
