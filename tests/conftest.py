"""
tests/conftest.py
Shared fixtures for the restgen test suite.

No external mocking libraries are used; real file I/O and real SQLite
databases are created inside temporary directories managed by pytest's
tmp_path fixture.
"""

from __future__ import annotations

import pathlib
from typing import Callable, List

import pytest
from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine

from restgen.models import ColumnSpec, GeneratorConfig, SchemaSnapshot, TableSchema
from restgen.reader import SchemaReader, StaticSchemaReader


# ---------------------------------------------------------------------------
# Table fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def users_table() -> TableSchema:
    """Auto-increment integer key, one required and one optional column."""
    return TableSchema(
        name="users",
        columns=[
            ColumnSpec(name="id", is_nullable=False, is_auto_increment=True, type_name="Integer"),
            ColumnSpec(name="name", is_nullable=False, type_name="String"),
            ColumnSpec(name="email", is_nullable=True, type_name="String"),
        ],
        primary_key=["id"],
    )


@pytest.fixture()
def order_items_table() -> TableSchema:
    """Composite primary key supplied by the caller."""
    return TableSchema(
        name="order_items",
        columns=[
            ColumnSpec(name="order_id", is_nullable=False, type_name="Integer"),
            ColumnSpec(name="product_id", is_nullable=False, type_name="Integer"),
            ColumnSpec(name="quantity", is_nullable=True, type_name="Integer"),
        ],
        primary_key=["order_id", "product_id"],
    )


@pytest.fixture()
def audit_log_table() -> TableSchema:
    """A table without any primary key."""
    return TableSchema(
        name="audit_log",
        columns=[
            ColumnSpec(name="message", is_nullable=True, type_name="Text"),
            ColumnSpec(name="level", is_nullable=True, type_name="String"),
        ],
    )


@pytest.fixture()
def tables(
    users_table: TableSchema,
    order_items_table: TableSchema,
    audit_log_table: TableSchema,
) -> List[TableSchema]:
    return [users_table, order_items_table, audit_log_table]


@pytest.fixture()
def snapshot(tables: List[TableSchema]) -> SchemaSnapshot:
    return SchemaSnapshot.from_tables(tables)


# ---------------------------------------------------------------------------
# Generator fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def output_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    path = tmp_path / "out"
    path.mkdir()
    return path


@pytest.fixture()
def config(output_dir: pathlib.Path) -> GeneratorConfig:
    return GeneratorConfig(
        class_name="MyApp",
        dsn="sqlite:///app.db",
        output_dir=str(output_dir),
    )


@pytest.fixture()
def static_reader_factory(
    tables: List[TableSchema],
) -> Callable[[GeneratorConfig], SchemaReader]:
    """Reader factory serving the three fixture tables."""

    def factory(_config: GeneratorConfig) -> SchemaReader:
        return StaticSchemaReader(tables)

    return factory


# ---------------------------------------------------------------------------
# SQLite database fixture
# ---------------------------------------------------------------------------


@pytest.fixture()
def sqlite_dsn(tmp_path: pathlib.Path) -> str:
    """
    Create a SQLite database with ``audit_log`` (no primary key), ``notes``,
    ``order_items``, ``session`` and ``users`` and return its absolute
    connection URL.
    """
    path = tmp_path / "app.db"
    dsn = f"sqlite:///{path}"

    metadata = MetaData()
    Table(
        "users",
        metadata,
        Column("id", Integer, primary_key=True),
        Column("name", String(50), nullable=False),
        Column("email", String(100), nullable=True),
    )
    Table(
        "order_items",
        metadata,
        Column("order_id", Integer, primary_key=True, autoincrement=False),
        Column("product_id", Integer, primary_key=True, autoincrement=False),
        Column("quantity", Integer, nullable=True),
        Column("note", Text, nullable=True),
    )
    Table(
        "notes",
        metadata,
        Column("id", Integer, primary_key=True),
        Column("body", Text, nullable=True),
    )
    Table(
        "audit_log",
        metadata,
        Column("message", Text, nullable=True),
        Column("level", String(20), nullable=True),
    )
    Table(
        "session",
        metadata,
        Column("id", Integer, primary_key=True),
        Column("token", String(64), nullable=False),
    )

    engine = create_engine(dsn)
    try:
        metadata.create_all(engine)
    finally:
        engine.dispose()
    return dsn
