# File: restgen/reader.py
"""
restgen - Schema Reader
=======================
Connects to a database and returns, for every table, its columns (name,
nullability, auto-increment flag, generic type) and its primary key.

The rest of the generator only sees the narrow ``SchemaReader`` interface::

    reader.list_tables() -> List[TableSchema]

``SQLAlchemySchemaReader`` implements it with SQLAlchemy's runtime
inspection API; ``StaticSchemaReader`` serves an in-memory table list.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, FrozenSet, List, Optional, Sequence

import sqlalchemy
from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError, NoSuchModuleError, SQLAlchemyError

from restgen.models import ColumnSpec, TableSchema

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("restgen.reader")

# Generic SQLAlchemy types that can be instantiated without arguments.
# Anything else is rendered as String in the generated models.
_RENDERABLE_TYPES: FrozenSet[str] = frozenset({
    "BigInteger", "Boolean", "Date", "DateTime", "Double", "Float",
    "Integer", "Interval", "JSON", "LargeBinary", "Numeric",
    "SmallInteger", "String", "Text", "Time", "Unicode", "UnicodeText",
    "Uuid",
})


class SchemaReadError(RuntimeError):
    """Raised when the data source cannot be reached or inspected."""


# ---------------------------------------------------------------------------
# Interface
# ---------------------------------------------------------------------------


class SchemaReader:
    """Base class for schema readers."""

    def list_tables(self) -> List[TableSchema]:
        raise NotImplementedError


class StaticSchemaReader(SchemaReader):
    """Serve a fixed list of tables (tests, offline snapshots)."""

    def __init__(self, tables: Sequence[TableSchema]) -> None:
        self._tables: List[TableSchema] = list(tables)

    def list_tables(self) -> List[TableSchema]:
        return list(self._tables)


# ---------------------------------------------------------------------------
# SQLAlchemy implementation
# ---------------------------------------------------------------------------


def build_url(dsn: str, user: Optional[str] = None, password: Optional[str] = None) -> URL:
    """
    Parse *dsn* and apply optional credentials.

    Raises:
        SchemaReadError: If *dsn* is not a valid SQLAlchemy URL.
    """
    try:
        url: URL = make_url(dsn)
    except ArgumentError as exc:
        raise SchemaReadError(f"Invalid connection string '{dsn}': {exc}") from exc
    if user:
        url = url.set(username=user)
    if password:
        url = url.set(password=password)
    return url


def reflected_type_name(type_: Any) -> str:
    """Generic SQLAlchemy type name for a reflected column type."""
    try:
        generic = type_.as_generic()
    except NotImplementedError:
        return "String"
    name: str = type(generic).__name__
    if name in _RENDERABLE_TYPES and hasattr(sqlalchemy.types, name):
        return name
    return "String"


def is_auto_increment(column: Dict[str, Any], primary_key: Sequence[str]) -> bool:
    """
    Decide whether the database assigns this column's value.

    Explicit ``autoincrement``/``identity`` information from the dialect
    wins; otherwise SQLAlchemy's own "auto" rule applies: a single-column
    integer primary key auto-increments.
    """
    autoincrement: Any = column.get("autoincrement", "auto")
    if autoincrement is True or column.get("identity"):
        return True
    if autoincrement is False:
        return False
    return (
        len(primary_key) == 1
        and primary_key[0] == column["name"]
        and isinstance(column.get("type"), sqlalchemy.types.Integer)
    )


class SQLAlchemySchemaReader(SchemaReader):
    """
    Introspect a live database through ``sqlalchemy.inspect``.

    One connection round-trip per run; the engine is disposed before
    ``list_tables`` returns.
    """

    def __init__(
        self,
        dsn: str,
        user: Optional[str] = None,
        password: Optional[str] = None,
        *,
        schema: Optional[str] = None,
    ) -> None:
        self._url: URL = build_url(dsn, user, password)
        self._schema: Optional[str] = schema

    @property
    def url(self) -> URL:
        return self._url

    def list_tables(self) -> List[TableSchema]:
        try:
            engine = create_engine(self._url)
        except (ArgumentError, NoSuchModuleError, ImportError) as exc:
            raise SchemaReadError(
                f"Cannot create engine for {self._url.render_as_string(hide_password=True)}: {exc}"
            ) from exc

        try:
            inspector = inspect(engine)
            tables: List[TableSchema] = [
                self._read_table(inspector, name)
                for name in sorted(inspector.get_table_names(schema=self._schema))
            ]
        except SQLAlchemyError as exc:
            raise SchemaReadError(f"Schema introspection failed: {exc}") from exc
        finally:
            engine.dispose()

        logger.info(
            "Introspected %d table(s) from %s.",
            len(tables),
            self._url.render_as_string(hide_password=True),
        )
        return tables

    def _read_table(self, inspector: Any, name: str) -> TableSchema:
        pk: Dict[str, Any] = inspector.get_pk_constraint(name, schema=self._schema) or {}
        primary_key: List[str] = list(pk.get("constrained_columns") or [])

        columns: List[ColumnSpec] = []
        for column in inspector.get_columns(name, schema=self._schema):
            columns.append(ColumnSpec(
                name=column["name"],
                is_nullable=bool(column.get("nullable", True)),
                is_auto_increment=is_auto_increment(column, primary_key),
                type_name=reflected_type_name(column.get("type")),
            ))

        logger.debug(
            "Table '%s': %d column(s), primary key %s.",
            name,
            len(columns),
            primary_key,
        )
        return TableSchema(name=name, columns=columns, primary_key=primary_key)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "SchemaReadError",
    "SchemaReader",
    "StaticSchemaReader",
    "SQLAlchemySchemaReader",
    "build_url",
    "reflected_type_name",
    "is_auto_increment",
]

logger.debug("restgen.reader loaded.")
