"""
tests/test_templates.py
Unit tests for restgen.templates (TemplateGenerator).

Tests cover:
- ORM schema root and per-table model classes
- CRUD controllers (column constants, key handling)
- Root controller bridges
- Application module wiring
- Launcher script, generated tests and static page
- Code correctness (valid Python syntax via ast.parse)
"""

from __future__ import annotations

import ast
from typing import Dict

import pytest
from pydantic import ValidationError

from restgen.models import RoutePlan, SchemaSnapshot, TableSchema
from restgen.planner import RoutePlanner
from restgen.templates import (
    MSG_INFO_MISSING,
    MSG_INPUT_MISSING,
    WELCOME_MESSAGE,
    AppContext,
    TableContext,
    TemplateGenerator,
)


# ===========================================================================
# Helpers
# ===========================================================================


def _is_valid_python(code: str, filename: str = "<generated>") -> bool:
    """Check if a string of Python code is syntactically valid."""
    try:
        ast.parse(code, filename=filename)
        return True
    except SyntaxError:
        return False


def _app(snapshot: SchemaSnapshot, class_name: str = "MyApp", **kwargs) -> AppContext:
    plan: RoutePlan = RoutePlanner(class_name).plan(snapshot)
    return AppContext(class_name=class_name, dsn="sqlite:///app.db", plan=plan, **kwargs)


def _table_contexts(app: AppContext, snapshot: SchemaSnapshot) -> Dict[str, TableContext]:
    return {
        route.table: TableContext(app=app, route=route, table=snapshot.tables[route.table])
        for route in app.plan.tables
    }


@pytest.fixture()
def tpl() -> TemplateGenerator:
    return TemplateGenerator()


@pytest.fixture()
def app(snapshot: SchemaSnapshot) -> AppContext:
    return _app(snapshot)


@pytest.fixture()
def contexts(app: AppContext, snapshot: SchemaSnapshot) -> Dict[str, TableContext]:
    return _table_contexts(app, snapshot)


# ===========================================================================
# Contexts
# ===========================================================================


class TestContexts:
    def test_app_context_names(self, app: AppContext) -> None:
        assert app.app_name == "myapp"
        assert app.module == "MyApp"
        assert app.model_class == "MyApp::Model"
        assert app.model_module == "MyApp.Model"
        assert app.depth == 2

    def test_nested_depth(self, snapshot: SchemaSnapshot) -> None:
        assert _app(snapshot, "My::App").depth == 3

    def test_attributes_sorted_by_column(self, contexts: Dict[str, TableContext]) -> None:
        assert list(contexts["users"].attributes) == ["email", "id", "name"]

    def test_app_context_is_frozen(self, app: AppContext) -> None:
        with pytest.raises(ValidationError):
            app.port = 1


# ===========================================================================
# ORM schema
# ===========================================================================


class TestModelGeneration:
    def test_model_root(self, tpl: TemplateGenerator, app: AppContext) -> None:
        code = tpl.render_model_root(app)
        assert _is_valid_python(code)
        assert "class Base(orm.DeclarativeBase):" in code
        assert "sources: Tuple[str, ...] = ('AuditLog', 'OrderItems', 'Users')" in code
        assert "def connect(" in code
        assert "orm.Session(self.engine, expire_on_commit=False)" in code
        # submodule imports rebind package attributes; no bare SQLAlchemy class names
        assert "from sqlalchemy.orm import" not in code
        assert "from sqlalchemy.engine import" not in code

    def test_keyed_table_model(self, tpl: TemplateGenerator, contexts) -> None:
        code = tpl.render_table_model(contexts["users"])
        assert _is_valid_python(code)
        assert "from MyApp.Model import Base" in code
        assert "class Users(Base):" in code
        assert "__tablename__ = 'users'" in code
        assert "id = mapped_column('id', types.Integer(), primary_key=True, autoincrement=True)" in code
        assert "name = mapped_column('name', types.String(), nullable=False)" in code
        assert "email = mapped_column('email', types.String(), nullable=True)" in code

    def test_composite_key_model(self, tpl: TemplateGenerator, contexts) -> None:
        code = tpl.render_table_model(contexts["order_items"])
        assert code.count("primary_key=True, autoincrement=False") == 2
        assert "quantity = mapped_column('quantity', types.Integer(), nullable=True)" in code

    def test_keyless_table_maps_every_column_as_key(self, tpl: TemplateGenerator, contexts) -> None:
        code = tpl.render_table_model(contexts["audit_log"])
        assert _is_valid_python(code)
        assert "class AuditLog(Base):" in code
        assert code.count("primary_key=True, autoincrement=False, nullable=True") == 2

    def test_column_names_become_safe_attributes(self, tpl: TemplateGenerator) -> None:
        table = TableSchema.model_validate({
            "name": "events",
            "columns": [
                {"name": "id", "is_nullable": False, "is_auto_increment": True, "type_name": "Integer"},
                {"name": "class", "type_name": "String"},
                {"name": "start date", "type_name": "Date"},
            ],
            "primary_key": ["id"],
        })
        snapshot = SchemaSnapshot.from_tables([table])
        app = _app(snapshot)
        ctx = _table_contexts(app, snapshot)["events"]

        code = tpl.render_table_model(ctx)
        assert _is_valid_python(code)
        assert "class_ = mapped_column('class', types.String(), nullable=True)" in code
        assert "start_date = mapped_column('start date', types.Date(), nullable=True)" in code

        controller = tpl.render_controller(ctx)
        assert "'class': 'class_'," in controller
        assert "'start date': 'start_date'," in controller


# ===========================================================================
# Controllers
# ===========================================================================


class TestControllerGeneration:
    def test_users_constants(self, tpl: TemplateGenerator, contexts) -> None:
        code = tpl.render_controller(contexts["users"])
        assert _is_valid_python(code)
        assert "SOURCE = 'Users'" in code
        assert "TABLE = 'users'" in code
        assert "COLUMNS = ('email', 'id', 'name')" in code
        assert "REQUIRED = ('name',)" in code
        assert "KEYS = ('id',)" in code
        assert "PAGE_SIZE = 1000" in code
        assert "from MyApp import failure, model, success" in code

    def test_actions_defined(self, tpl: TemplateGenerator, contexts) -> None:
        tree = ast.parse(tpl.render_controller(contexts["users"]))
        functions = {node.name for node in tree.body if isinstance(node, ast.FunctionDef)}
        assert {"create", "read", "update", "delete"} <= functions

    def test_messages(self, tpl: TemplateGenerator, contexts) -> None:
        code = tpl.render_controller(contexts["users"])
        assert repr(MSG_INPUT_MISSING) in code
        assert repr(MSG_INFO_MISSING) in code
        assert "'search was unsuccessful'" in code
        assert "'operation failed, no record found'" in code

    def test_refresh_only_for_keyed_tables(self, tpl: TemplateGenerator, contexts) -> None:
        keyed = tpl.render_controller(contexts["users"])
        keyless = tpl.render_controller(contexts["audit_log"])
        # create and update both refresh when there is a key
        assert keyed.count("session.refresh(record)") == 2
        assert keyless.count("session.refresh(record)") == 1
        assert "KEYS = ()" in keyless
        assert "REQUIRED = ()" in keyless

    def test_keyless_table_goes_through_core(self, tpl: TemplateGenerator, contexts) -> None:
        keyed = tpl.render_controller(contexts["users"])
        keyless = tpl.render_controller(contexts["audit_log"])

        assert "from sqlalchemy import insert, select" in keyless
        assert "statement = insert(model(SOURCE).__table__)" in keyless
        assert "session.add(record)" not in keyless
        assert "from sqlalchemy import select\n" in keyed
        assert "session.add(record)" in keyed
        for code in (keyed, keyless):
            assert _is_valid_python(code)
            assert "session.execute(statement.limit(PAGE_SIZE)).mappings()" in code

    def test_colliding_columns_get_distinct_attributes(self, tpl: TemplateGenerator) -> None:
        table = TableSchema(
            name="contacts",
            columns=[{"name": "id", "is_nullable": False}, {"name": "e-mail"}, {"name": "e_mail"}],
            primary_key=["id"],
        )
        snapshot = SchemaSnapshot.from_tables([table])
        ctx = _table_contexts(_app(snapshot), snapshot)["contacts"]

        assert ctx.attributes == {"e-mail": "e_mail_2", "e_mail": "e_mail", "id": "id"}
        model = tpl.render_table_model(ctx)
        assert "e_mail_2 = mapped_column('e-mail', types.String(), nullable=True)" in model
        assert "e_mail = mapped_column('e_mail', types.String(), nullable=True)" in model

    def test_composite_key_constants(self, tpl: TemplateGenerator, contexts) -> None:
        code = tpl.render_controller(contexts["order_items"])
        assert "KEYS = ('order_id', 'product_id')" in code
        assert "REQUIRED = ('order_id', 'product_id')" in code


# ===========================================================================
# Root controller & application module
# ===========================================================================


class TestRootController:
    def test_index_and_bridges(self, tpl: TemplateGenerator, app: AppContext) -> None:
        code = tpl.render_root_controller(app)
        assert _is_valid_python(code)
        assert "import MyApp as _app" in code
        assert f"return _app.success({WELCOME_MESSAGE!r})" in code
        for bridge in ("auditlog", "orderitems", "users"):
            assert f"def {bridge}(params: Mapping[str, Any]) -> bool:" in code

    def test_bridge_named_index(self, tpl: TemplateGenerator) -> None:
        table = TableSchema(name="index", columns=[{"name": "id", "is_nullable": False}], primary_key=["id"])
        app = _app(SchemaSnapshot.from_tables([table]))
        code = tpl.render_root_controller(app)
        assert "def index(params" in code
        assert "def index_(params" in code
        assert "('index', 'MyApp.Controller.Index', 'index_')," in tpl.render_app_module(app)


class TestAppModule:
    def test_wiring(self, tpl: TemplateGenerator, app: AppContext) -> None:
        code = tpl.render_app_module(app)
        assert _is_valid_python(code)
        assert "from MyApp.Model import Model" in code
        assert "HOME = Path(__file__).resolve().parents[2]" in code
        assert "NAME = 'myapp'" in code
        assert "DSN = 'sqlite:///app.db'" in code
        assert "USER = None" in code
        assert "('users', 'MyApp.Controller.Users', 'users')," in code
        assert 'router.add_api_route("/new", _action(controller.create), methods=["GET", "POST"])' in code
        assert 'router.add_api_route("/list", _action(controller.read), methods=["GET"])' in code
        assert "status_code=403" in code
        assert "app = create_app()" in code

    def test_credentials(self, tpl: TemplateGenerator, snapshot: SchemaSnapshot) -> None:
        code = tpl.render_app_module(_app(snapshot, user="alice", password="s3cret"))
        assert "USER = 'alice'" in code
        assert "PASSWORD = 's3cret'" in code

    def test_empty_routes(self, tpl: TemplateGenerator) -> None:
        code = tpl.render_app_module(_app(SchemaSnapshot()))
        assert _is_valid_python(code)
        assert "ROUTES = ()" in code


# ===========================================================================
# Launcher, tests, static page
# ===========================================================================


class TestSupportFiles:
    def test_launcher(self, tpl: TemplateGenerator, snapshot: SchemaSnapshot) -> None:
        code = tpl.render_launcher(_app(snapshot, host="0.0.0.0", port=3000))
        assert code.startswith("#!/usr/bin/env python3\n")
        assert _is_valid_python(code)
        assert "from MyApp import app" in code
        assert "uvicorn.run(app, host='0.0.0.0', port=3000)" in code
        assert "don't have FastAPI and uvicorn installed" in code

    def test_basic_test(self, tpl: TemplateGenerator, app: AppContext) -> None:
        code = tpl.render_basic_test(app)
        assert _is_valid_python(code)
        assert "def test_index():" in code
        assert repr(WELCOME_MESSAGE) in code

    def test_table_test_with_required_columns(self, tpl: TemplateGenerator, contexts) -> None:
        code = tpl.render_table_test(contexts["users"])
        assert _is_valid_python(code)
        assert 'client.get("/users/new")' in code
        assert "def test_edit_requires_keys():" in code
        assert "def test_delete_requires_keys():" in code
        assert "def test_list():" in code

    def test_table_test_without_required_columns(self, tpl: TemplateGenerator, contexts) -> None:
        code = tpl.render_table_test(contexts["audit_log"])
        assert _is_valid_python(code)
        assert "test_new_requires_input" not in code

    def test_static_page(self, tpl: TemplateGenerator) -> None:
        page = tpl.render_static_page()
        assert page.startswith("<!doctype html>")
        assert f"<h2>{WELCOME_MESSAGE}</h2>" in page


class TestDeterminism:
    def test_same_context_same_output(self, tpl: TemplateGenerator, app: AppContext, contexts) -> None:
        assert tpl.render_app_module(app) == tpl.render_app_module(app)
        for ctx in contexts.values():
            assert tpl.render_controller(ctx) == TemplateGenerator().render_controller(ctx)
