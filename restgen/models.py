# File: restgen/models.py
"""
restgen - Core Data Models
==========================
Pydantic V2 models describing the introspected database schema, the routes
derived from it, and the generator's run configuration.  These models are
the single source of truth for the pipeline:

    Schema Reader → Route Planner → Template Generation → Export

Every model here is transient: built once per invocation and never
persisted beyond the files the generator writes.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Set

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    model_validator,
)

from restgen.utils import class_to_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("restgen.models")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Fixed CRUD sub-routes: URL segment → controller action.
CRUD_ACTIONS: Dict[str, str] = {
    "new": "create",
    "list": "read",
    "edit": "update",
    "delete": "delete",
}

# ---------------------------------------------------------------------------
# Mixin: shared model configuration
# ---------------------------------------------------------------------------

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    frozen=False,
    extra="forbid",
)


# ---------------------------------------------------------------------------
# Schema primitives
# ---------------------------------------------------------------------------


class ColumnSpec(BaseModel):
    """
    One database column as reported by the schema reader.

    ``type_name`` is the generic SQLAlchemy type name (``Integer``,
    ``String`` ...) and only matters for the rendered ORM model files.
    """

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1, description="Column name.")
    is_nullable: bool = Field(default=True, description="Column allows NULL.")
    is_auto_increment: bool = Field(
        default=False, description="Value is assigned by the database."
    )
    type_name: str = Field(
        default="String", min_length=1, description="Generic SQLAlchemy type name."
    )

    @computed_field  # type: ignore[misc]
    @property
    def is_required(self) -> bool:
        """True when a caller must supply this column on create."""
        return not (self.is_nullable or self.is_auto_increment)

    def __repr__(self) -> str:
        null_flag: str = " NULL" if self.is_nullable else " NOT NULL"
        auto_flag: str = " AUTO" if self.is_auto_increment else ""
        return f"<Column {self.name} {self.type_name}{null_flag}{auto_flag}>"


class TableSchema(BaseModel):
    """
    A single table: its columns and its primary-key column set.

    Invariants: column names are unique and ``primary_key`` only names
    existing columns.  An empty primary key is allowed; update and delete
    are then unreachable for the table.
    """

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1, description="Table name.")
    columns: List[ColumnSpec] = Field(
        default_factory=list, description="Columns in database order."
    )
    primary_key: List[str] = Field(
        default_factory=list, description="Primary-key column names."
    )

    @model_validator(mode="after")
    def _validate_unique_columns(self) -> "TableSchema":
        names: List[str] = [c.name for c in self.columns]
        if len(names) != len(set(names)):
            dupes: List[str] = sorted({n for n in names if names.count(n) > 1})
            raise ValueError(
                f"Table '{self.name}' has duplicate column names: {dupes}"
            )
        return self

    @model_validator(mode="after")
    def _validate_primary_key_columns(self) -> "TableSchema":
        names: Set[str] = {c.name for c in self.columns}
        missing: List[str] = [k for k in self.primary_key if k not in names]
        if missing:
            raise ValueError(
                f"Primary key of table '{self.name}' references "
                f"non-existent columns: {missing}"
            )
        return self

    @computed_field  # type: ignore[misc]
    @property
    def column_names(self) -> List[str]:
        return sorted(c.name for c in self.columns)

    @computed_field  # type: ignore[misc]
    @property
    def required_columns(self) -> List[str]:
        return sorted(c.name for c in self.columns if c.is_required)

    @computed_field  # type: ignore[misc]
    @property
    def key_columns(self) -> List[str]:
        return list(self.primary_key)

    def get_column(self, name: str) -> Optional[ColumnSpec]:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def __repr__(self) -> str:
        return (
            f"<Table {self.name} ({len(self.columns)} cols, "
            f"key={self.primary_key})>"
        )


class SchemaSnapshot(BaseModel):
    """
    Every table of the introspected database, keyed by table name.

    Built once per run from the schema reader and frozen afterwards.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    tables: Dict[str, TableSchema] = Field(default_factory=dict)

    @classmethod
    def from_tables(cls, tables: List[TableSchema]) -> "SchemaSnapshot":
        mapping: Dict[str, TableSchema] = {}
        for table in tables:
            if table.name in mapping:
                raise ValueError(f"Duplicate table name: '{table.name}'")
            mapping[table.name] = table
        return cls(tables=mapping)

    @model_validator(mode="after")
    def _validate_keys_match_names(self) -> "SchemaSnapshot":
        for key, table in self.tables.items():
            if key != table.name:
                raise ValueError(
                    f"Snapshot key '{key}' does not match table name '{table.name}'."
                )
        return self

    @computed_field  # type: ignore[misc]
    @property
    def table_names(self) -> List[str]:
        """Table names in lexicographic order."""
        return sorted(self.tables)

    @computed_field  # type: ignore[misc]
    @property
    def table_count(self) -> int:
        return len(self.tables)

    def get_table(self, name: str) -> Optional[TableSchema]:
        return self.tables.get(name)

    def __repr__(self) -> str:
        return f"<SchemaSnapshot {self.table_count} tables>"


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


class RouteSpec(BaseModel):
    """
    One controller and the URL segment it serves.

    Table routes carry the four fixed CRUD actions; the aggregate root
    route carries no actions and lists every table segment in ``bridges``.
    """

    model_config = _SHARED_CONFIG

    controller: str = Field(..., min_length=1, description="Controller class name.")
    controller_path: str = Field(..., min_length=1, description="Path below lib/.")
    module: str = Field(..., min_length=1, description="Dotted import path.")
    segment: str = Field(default="", description="URL segment ('' for the root).")
    table: Optional[str] = Field(default=None, description="Source table name.")
    moniker: str = Field(default="", description="Class-like table name.")
    actions: Dict[str, str] = Field(default_factory=dict)
    bridges: List[str] = Field(default_factory=list)

    @computed_field  # type: ignore[misc]
    @property
    def is_root(self) -> bool:
        return self.table is None


class RoutePlan(BaseModel):
    """Planner output: one route per table plus the aggregate root."""

    model_config = _SHARED_CONFIG

    tables: List[RouteSpec] = Field(default_factory=list)
    root: RouteSpec


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


class GeneratedFile(BaseModel):
    """A single file produced by the generator."""

    model_config = _SHARED_CONFIG

    relative_path: str = Field(..., min_length=1, description="Path below the app root.")
    content: str = Field(default="", description="Full file content.")
    executable: bool = Field(default=False, description="Set the executable bit.")

    @computed_field  # type: ignore[misc]
    @property
    def line_count(self) -> int:
        if not self.content:
            return 0
        return self.content.count("\n") + (0 if self.content.endswith("\n") else 1)

    @computed_field  # type: ignore[misc]
    @property
    def size_bytes(self) -> int:
        return len(self.content.encode("utf-8"))


# ---------------------------------------------------------------------------
# Run configuration
# ---------------------------------------------------------------------------


class GeneratorConfig(BaseModel):
    """
    Everything one generator run needs, as collected from the command line.

    Presence and grammar checks on ``class_name`` and ``dsn`` live in
    ``restgen.validators`` so that a missing or bad value is reported as a
    validation error rather than a pydantic crash.
    """

    model_config = _SHARED_CONFIG

    class_name: str = Field(default="", description="Application class name.")
    dsn: str = Field(default="", description="SQLAlchemy connection URL.")
    user: Optional[str] = Field(default=None, description="Database user.")
    password: Optional[str] = Field(default=None, description="Database password.")
    output_dir: str = Field(default=".", description="Directory receiving <app_name>/.")
    host: str = Field(default="127.0.0.1", description="Launcher bind host.")
    port: int = Field(default=8000, ge=1, le=65535, description="Launcher bind port.")

    @computed_field  # type: ignore[misc]
    @property
    def app_name(self) -> str:
        return class_to_file(self.class_name)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "CRUD_ACTIONS",
    "ColumnSpec",
    "TableSchema",
    "SchemaSnapshot",
    "RouteSpec",
    "RoutePlan",
    "GeneratedFile",
    "GeneratorConfig",
]

logger.debug("restgen.models loaded — %d public symbols.", len(__all__))
