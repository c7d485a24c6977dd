# File: restgen/templates.py
"""
restgen - Code Template Engine
==============================
Turns the planned routes and the introspected tables into the source of
the generated FastAPI + SQLAlchemy application:

    1. ORM schema root (``Base``, ``Model``) and one ORM class per table
    2. One CRUD controller per table
    3. The aggregate root controller (index action + route bridges)
    4. The application module (helpers, routing, ``create_app``)
    5. The launcher script
    6. pytest smoke test and per-table route tests
    7. The static welcome page

Every template takes a typed context (``AppContext`` or ``TableContext``)
instead of positional arguments, so a shape mismatch fails when the
context is built, not halfway through rendering.

**Performance contract:**
    - All string assembly uses ``List[str]`` + ``"\\n".join()``.
    - Template methods are stateless and deterministic: the same contexts
      always render byte-identical output.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from restgen.models import RoutePlan, RouteSpec, TableSchema
from restgen.utils import (
    assign_attributes,
    class_to_file,
    class_to_module,
    format_tuple_literal,
    join_class,
    py_literal,
    segment_to_bridge,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("restgen.templates")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_INDENT: str = "    "

WELCOME_MESSAGE: str = "Welcome to the REST server!"
PAGE_SIZE: int = 1000

# Envelope messages shared by the controllers and the generated tests
MSG_SUCCESS: str = "operation was successful"
MSG_FAILED: str = "operation failed"
MSG_INPUT_MISSING: str = "operation failed, required input missing"
MSG_INFO_MISSING: str = "operation failed, required information missing"
MSG_NOT_FOUND: str = "operation failed, no record found"
MSG_SEARCH_OK: str = "search was successful"
MSG_SEARCH_EMPTY: str = "search was unsuccessful"

_LOG_FORMAT: str = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"


# ---------------------------------------------------------------------------
# Template contexts
# ---------------------------------------------------------------------------


class AppContext(BaseModel):
    """Application-wide template parameters."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    class_name: str = Field(..., min_length=1)
    dsn: str = Field(..., min_length=1)
    user: Optional[str] = None
    password: Optional[str] = None
    host: str = "127.0.0.1"
    port: int = 8000
    plan: RoutePlan

    @property
    def app_name(self) -> str:
        return class_to_file(self.class_name)

    @property
    def module(self) -> str:
        return class_to_module(self.class_name)

    @property
    def model_class(self) -> str:
        return join_class(self.class_name, "Model")

    @property
    def model_module(self) -> str:
        return class_to_module(self.model_class)

    @property
    def depth(self) -> int:
        """Directory levels from the application module up to the app root."""
        return len(self.class_name.split("::")) + 1


class TableContext(BaseModel):
    """Parameters for the per-table templates."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    app: AppContext
    route: RouteSpec
    table: TableSchema

    @property
    def attributes(self) -> Dict[str, str]:
        """Column name → ORM attribute name, sorted by column name."""
        assigned: Dict[str, str] = assign_attributes(self.table.column_names)
        return {name: assigned[name] for name in self.table.column_names}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _docstring(*lines: str) -> List[str]:
    return ['"""', *lines, '"""']


def _dict_literal(mapping: Dict[str, str], indent: str = "") -> List[str]:
    if not mapping:
        return [f"{indent}{{}}"]
    out: List[str] = ["{"]
    for key, value in mapping.items():
        out.append(f"{indent}{_INDENT}{key!r}: {value!r},")
    out.append(f"{indent}}}")
    return out


def _mapped_column_args(column_name: str, type_name: str, *, is_key: bool,
                        is_auto_increment: bool, is_nullable: bool) -> str:
    parts: List[str] = [repr(column_name), f"types.{type_name}()"]
    if is_key:
        parts.append("primary_key=True")
        parts.append(f"autoincrement={is_auto_increment}")
        if is_nullable:
            parts.append("nullable=True")
    else:
        parts.append(f"nullable={is_nullable}")
    return ", ".join(parts)


# ---------------------------------------------------------------------------
# TemplateGenerator class
# ---------------------------------------------------------------------------


class TemplateGenerator:
    """
    Stateless code-generation engine.

    Each ``render_*`` method returns one complete file as a string.
    """

    # ===================================================================
    # 1. ORM schema
    # ===================================================================

    def render_model_root(self, app: AppContext) -> str:
        """``lib/<App>/Model/__init__.py``: declarative base and connector."""
        sources: List[str] = [route.moniker for route in app.plan.tables]
        lines: List[str] = _docstring(
            f"{app.model_class} - ORM schema root.",
            "",
            "``Base`` is the declarative base of every table class below this",
            "package; ``Model`` connects to the database and resolves table",
            "classes by name.",
        )
        lines += [
            "",
            "import importlib",
            "from typing import Optional, Tuple",
            "",
            "import sqlalchemy",
            "from sqlalchemy import orm",
            "",
            "# Table modules are attributes of this package once imported, so the",
            "# capitalised names used at call time are limited to Base and Model.",
            "",
            "",
            "class Base(orm.DeclarativeBase):",
            f"{_INDENT}pass",
            "",
            "",
            "class Model:",
            f'{_INDENT}"""A connected schema: one engine plus the table classes."""',
            "",
            f"{_INDENT}sources: Tuple[str, ...] = {format_tuple_literal(sources)}",
            "",
            f"{_INDENT}def __init__(self, engine: sqlalchemy.Engine) -> None:",
            f"{_INDENT * 2}self.engine = engine",
            "",
            f"{_INDENT}@classmethod",
            f"{_INDENT}def connect(",
            f"{_INDENT * 2}cls, dsn: str, user: Optional[str] = None, password: Optional[str] = None",
            f'{_INDENT}) -> "Model":',
            f"{_INDENT * 2}url = sqlalchemy.make_url(dsn)",
            f"{_INDENT * 2}if user:",
            f"{_INDENT * 3}url = url.set(username=user)",
            f"{_INDENT * 2}if password:",
            f"{_INDENT * 3}url = url.set(password=password)",
            f"{_INDENT * 2}return cls(sqlalchemy.create_engine(url))",
            "",
            f"{_INDENT}@classmethod",
            f"{_INDENT}def source(cls, name: str) -> type:",
            f'{_INDENT * 2}"""Return the ORM class for table moniker *name*."""',
            f"{_INDENT * 2}if name not in cls.sources:",
            f'{_INDENT * 3}raise KeyError(f"Unknown source: {{name}}")',
            f'{_INDENT * 2}module = importlib.import_module(f"{{__name__}}.{{name}}")',
            f"{_INDENT * 2}return getattr(module, name)",
            "",
            f"{_INDENT}def session(self) -> orm.Session:",
            f"{_INDENT * 2}return orm.Session(self.engine, expire_on_commit=False)",
            "",
        ]
        return "\n".join(lines)

    def render_table_model(self, ctx: TableContext) -> str:
        """``lib/<App>/Model/<Moniker>.py``: the ORM class of one table."""
        table: TableSchema = ctx.table
        moniker: str = ctx.route.moniker

        lines: List[str] = _docstring(
            f"{join_class(ctx.app.model_class, moniker)} - table ``{table.name}``.",
        )
        lines += [
            "",
            "from sqlalchemy import types",
            "from sqlalchemy.orm import mapped_column",
            "",
            f"from {ctx.app.model_module} import Base",
            "",
            "",
            f"class {moniker}(Base):",
            f"{_INDENT}__tablename__ = {table.name!r}",
            "",
        ]

        # No key in the database: the mapper identifies rows by all columns,
        # the controller reaches such tables through Core only.
        keys: List[str] = table.key_columns or [c.name for c in table.columns]
        attributes: Dict[str, str] = ctx.attributes
        for column in table.columns:
            args: str = _mapped_column_args(
                column.name,
                column.type_name,
                is_key=column.name in keys,
                is_auto_increment=column.is_auto_increment,
                is_nullable=column.is_nullable,
            )
            lines.append(f"{_INDENT}{attributes[column.name]} = mapped_column({args})")

        lines.append("")
        return "\n".join(lines)

    # ===================================================================
    # 2. Table controller
    # ===================================================================

    def render_controller(self, ctx: TableContext) -> str:
        """
        ``lib/<App>/Controller/<Moniker>.py``: create/read/update/delete.

        The column lists are emitted as module constants and the four
        actions are driven by them.
        """
        table: TableSchema = ctx.table
        has_keys: bool = bool(table.key_columns)

        lines: List[str] = _docstring(
            f"{ctx.route.controller} - CRUD actions for table ``{table.name}``.",
            "",
            "Each action takes the merged query-string and form parameters and",
            'returns the ``{"status", "message", "data"}`` envelope. A parameter',
            "is present when it is supplied and not the empty string.",
        )
        lines += [
            "",
            "import logging",
            "from typing import Any, Dict, Iterable, Mapping",
            "",
            "from sqlalchemy import select" if has_keys else "from sqlalchemy import insert, select",
            "from sqlalchemy.exc import SQLAlchemyError",
            "",
            f"from {ctx.app.module} import failure, model, success",
            "",
            "logger = logging.getLogger(__name__)",
            "",
            f"SOURCE = {ctx.route.moniker!r}",
            f"TABLE = {table.name!r}",
            f"COLUMNS = {format_tuple_literal(table.column_names)}",
            f"REQUIRED = {format_tuple_literal(table.required_columns)}",
            f"KEYS = {format_tuple_literal(table.key_columns)}",
        ]
        attr_lines: List[str] = _dict_literal(ctx.attributes)
        lines.append(f"ATTRIBUTES = {attr_lines[0]}")
        lines += attr_lines[1:]
        lines += [
            f"PAGE_SIZE = {PAGE_SIZE}",
            "",
            "",
            "def _present(params: Mapping[str, Any], column: str) -> bool:",
            f"{_INDENT}value = params.get(column)",
            f'{_INDENT}return value is not None and value != ""',
            "",
            "",
            "def _columns(record: Any) -> Dict[str, Any]:",
            f"{_INDENT}return {{column: getattr(record, ATTRIBUTES[column]) for column in COLUMNS}}",
            "",
            "",
            "def _values(params: Mapping[str, Any], skip: Iterable[str] = ()) -> Dict[str, Any]:",
            f"{_INDENT}# required columns are always set, optional ones only when present",
            f"{_INDENT}values: Dict[str, Any] = {{}}",
            f"{_INDENT}for column in COLUMNS:",
            f"{_INDENT * 2}if column in skip:",
            f"{_INDENT * 3}continue",
            f"{_INDENT * 2}if column in REQUIRED:",
            f"{_INDENT * 3}values[column] = params.get(column)",
            f"{_INDENT * 2}elif _present(params, column):",
            f"{_INDENT * 3}values[column] = params[column]",
            f"{_INDENT}return values",
            "",
            "",
            "def _assign(record: Any, params: Mapping[str, Any], skip: Iterable[str] = ()) -> None:",
            f"{_INDENT}for column, value in _values(params, skip).items():",
            f"{_INDENT * 2}setattr(record, ATTRIBUTES[column], value)",
            "",
            "",
            "def _table_columns() -> Dict[str, Any]:",
            f"{_INDENT}return {{column.name: column for column in model(SOURCE).__table__.columns}}",
            "",
            "",
            "def _lookup(session: Any, params: Mapping[str, Any]) -> Any:",
            f"{_INDENT}criteria = {{ATTRIBUTES[key]: params[key] for key in KEYS}}",
            f"{_INDENT}return session.scalars(select(model(SOURCE)).filter_by(**criteria)).first()",
            "",
            "",
        ]
        lines += self._create_action(has_keys)
        lines += ["", ""]
        lines += self._read_action()
        lines += ["", ""]
        lines += self._update_action()
        lines += ["", ""]
        lines += self._delete_action()
        lines.append("")
        return "\n".join(lines)

    @staticmethod
    def _create_action(has_keys: bool) -> List[str]:
        i: str = _INDENT
        lines: List[str] = [
            "def create(params: Mapping[str, Any]) -> Dict[str, Any]:",
            f'{i}"""Insert one record; every required column must be present."""',
            f"{i}if not all(_present(params, column) for column in REQUIRED):",
            f"{i * 2}return failure({MSG_INPUT_MISSING!r})",
            "",
        ]
        if has_keys:
            lines += [
                f"{i}record = model(SOURCE)()",
                f"{i}_assign(record, params)",
                f"{i}with model().session() as session:",
                f"{i * 2}try:",
                f"{i * 3}session.add(record)",
                f"{i * 3}session.commit()",
                f"{i * 3}session.refresh(record)",
            ]
        else:
            # Rows of a keyless table have no identity; insert through Core.
            lines += [
                f"{i}values = _values(params)",
                f"{i}columns = _table_columns()",
                f"{i}statement = insert(model(SOURCE).__table__)",
                f"{i}with model().session() as session:",
                f"{i * 2}try:",
                f"{i * 3}session.execute(statement, {{columns[c].key: v for c, v in values.items()}})",
                f"{i * 3}session.commit()",
            ]
        lines += [
            f"{i * 2}except SQLAlchemyError:",
            f"{i * 3}session.rollback()",
            f'{i * 3}logger.exception("create on %s failed", TABLE)',
            f"{i * 3}return failure({MSG_FAILED!r})",
        ]
        if has_keys:
            lines.append(f"{i * 2}return success({MSG_SUCCESS!r}, [_columns(record)])")
        else:
            lines.append(
                f"{i * 2}return success({MSG_SUCCESS!r}, [{{c: values.get(c) for c in COLUMNS}}])"
            )
        return lines

    @staticmethod
    def _read_action() -> List[str]:
        i: str = _INDENT
        return [
            "def read(params: Mapping[str, Any]) -> Dict[str, Any]:",
            f'{i}"""Exact-match search on every present column, first page only."""',
            f"{i}columns = _table_columns()",
            f"{i}statement = select(*(columns[c] for c in COLUMNS))",
            f"{i}for column in COLUMNS:",
            f"{i * 2}if _present(params, column):",
            f"{i * 3}statement = statement.where(columns[column] == params[column])",
            f"{i}try:",
            f"{i * 2}with model().session() as session:",
            f"{i * 3}rows = session.execute(statement.limit(PAGE_SIZE)).mappings()",
            f"{i * 3}data = [{{c: row[columns[c]] for c in COLUMNS}} for row in rows]",
            f"{i}except SQLAlchemyError:",
            f'{i * 2}logger.exception("read on %s failed", TABLE)',
            f"{i * 2}return failure({MSG_FAILED!r})",
            "",
            f"{i}if data:",
            f"{i * 2}return success({MSG_SEARCH_OK!r}, data)",
            f"{i}return failure({MSG_SEARCH_EMPTY!r}, data)",
        ]

    @staticmethod
    def _update_action() -> List[str]:
        i: str = _INDENT
        return [
            "def update(params: Mapping[str, Any]) -> Dict[str, Any]:",
            f'{i}"""Update the record identified by the key columns."""',
            f"{i}if not KEYS or not all(_present(params, key) for key in KEYS):",
            f"{i * 2}return failure({MSG_INFO_MISSING!r})",
            "",
            f"{i}with model().session() as session:",
            f"{i * 2}try:",
            f"{i * 3}record = _lookup(session, params)",
            f"{i * 3}if record is None:",
            f"{i * 4}return failure({MSG_NOT_FOUND!r})",
            f"{i * 3}_assign(record, params, skip=KEYS)",
            f"{i * 3}session.commit()",
            f"{i * 3}session.refresh(record)",
            f"{i * 2}except SQLAlchemyError:",
            f"{i * 3}session.rollback()",
            f'{i * 3}logger.exception("update on %s failed", TABLE)',
            f"{i * 3}return failure({MSG_FAILED!r})",
            f"{i * 2}return success({MSG_SUCCESS!r}, [_columns(record)])",
        ]

    @staticmethod
    def _delete_action() -> List[str]:
        i: str = _INDENT
        return [
            "def delete(params: Mapping[str, Any]) -> Dict[str, Any]:",
            f'{i}"""Delete the record identified by the key columns."""',
            f"{i}if not KEYS or not all(_present(params, key) for key in KEYS):",
            f"{i * 2}return failure({MSG_INFO_MISSING!r})",
            "",
            f"{i}with model().session() as session:",
            f"{i * 2}try:",
            f"{i * 3}record = _lookup(session, params)",
            f"{i * 3}if record is None:",
            f"{i * 4}return failure({MSG_NOT_FOUND!r})",
            f"{i * 3}snapshot = _columns(record)",
            f"{i * 3}session.delete(record)",
            f"{i * 3}session.commit()",
            f"{i * 2}except SQLAlchemyError:",
            f"{i * 3}session.rollback()",
            f'{i * 3}logger.exception("delete on %s failed", TABLE)',
            f"{i * 3}return failure({MSG_FAILED!r})",
            f"{i * 2}return success({MSG_SUCCESS!r}, [snapshot])",
        ]

    # ===================================================================
    # 3. Root controller
    # ===================================================================

    def render_root_controller(self, app: AppContext) -> str:
        """``lib/<App>/Controller/__init__.py``: index action and bridges."""
        root: RouteSpec = app.plan.root
        lines: List[str] = _docstring(
            f"{root.controller} - root controller.",
            "",
            "``index`` answers ``GET /``. Every table route runs its bridge",
            "first; a falsy return value answers 403 Forbidden.",
        )
        lines += [
            "",
            "from typing import Any, Dict, Mapping",
            "",
            f"import {app.module} as _app",
            "",
            "",
            "def index(params: Mapping[str, Any]) -> Dict[str, Any]:",
            f"{_INDENT}return _app.success({WELCOME_MESSAGE!r})",
        ]
        for segment in root.bridges:
            lines += [
                "",
                "",
                f"def {segment_to_bridge(segment)}(params: Mapping[str, Any]) -> bool:",
                f"{_INDENT}# bridge for /{segment}",
                f"{_INDENT}return True",
            ]
        lines.append("")
        return "\n".join(lines)

    # ===================================================================
    # 4. Application module
    # ===================================================================

    def render_app_module(self, app: AppContext) -> str:
        """``lib/<App>/__init__.py``: helpers, routing and ``create_app``."""
        i: str = _INDENT
        lines: List[str] = _docstring(
            f"{app.class_name} - REST application.",
            "",
            "Exposes the response helpers used by the controllers (``view``,",
            "``success``, ``failure``), the ``model`` accessor, and",
            "``create_app`` which wires every table route to its controller.",
        )
        lines += [
            "",
            "import functools",
            "import importlib",
            "import logging",
            "from pathlib import Path",
            "from typing import Any, Callable, Dict, List, Optional",
            "",
            "from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request",
            "from fastapi.staticfiles import StaticFiles",
            "from starlette.concurrency import run_in_threadpool",
            "",
            f"from {app.model_module} import Model",
            "",
            f"HOME = Path(__file__).resolve().parents[{app.depth}]",
            f"NAME = {app.app_name!r}",
            "",
            f"DSN = {app.dsn!r}",
            f"USER = {py_literal(app.user)}",
            f"PASSWORD = {py_literal(app.password)}",
            "",
            "# (segment, controller module, bridge function)",
        ]
        if app.plan.tables:
            lines.append("ROUTES = (")
            for route in app.plan.tables:
                lines.append(
                    f"{i}({route.segment!r}, {route.module!r}, "
                    f"{segment_to_bridge(route.segment)!r}),"
                )
            lines.append(")")
        else:
            lines.append("ROUTES = ()")
        lines += [
            "",
            f"logger = logging.getLogger({app.module!r})",
            "",
            "",
            "# ---------------------------------------------------------------------------",
            "# Response helpers",
            "# ---------------------------------------------------------------------------",
            "",
            "",
            "def view(status: Any, message: str, data: Optional[List[Any]] = None) -> Dict[str, Any]:",
            f'{i}return {{"status": bool(status), "message": message, "data": data or []}}',
            "",
            "",
            "def success(message: Optional[str] = None, data: Optional[List[Any]] = None) -> Dict[str, Any]:",
            f'{i}return view(True, message or "Operation succeeded", data)',
            "",
            "",
            "def failure(message: Optional[str] = None, data: Optional[List[Any]] = None) -> Dict[str, Any]:",
            f'{i}return view(False, message or "Operation failed", data)',
            "",
            "",
            "# ---------------------------------------------------------------------------",
            "# Model access",
            "# ---------------------------------------------------------------------------",
            "",
            "",
            "@functools.lru_cache(maxsize=None)",
            "def _connect() -> Model:",
            f"{i}return Model.connect(DSN, USER, PASSWORD)",
            "",
            "",
            "def model(name: Optional[str] = None) -> Any:",
            f'{i}"""The connected schema, or the ORM class of table moniker *name*."""',
            f"{i}schema = _connect()",
            f"{i}return schema.source(name) if name else schema",
            "",
            "",
            "# ---------------------------------------------------------------------------",
            "# Routing",
            "# ---------------------------------------------------------------------------",
            "",
            "",
            "async def _params(request: Request) -> Dict[str, Any]:",
            f"{i}params: Dict[str, Any] = dict(request.query_params)",
            f'{i}if request.method == "POST":',
            f"{i * 2}form = await request.form()",
            f"{i * 2}params.update((key, value) for key, value in form.items() if isinstance(value, str))",
            f"{i}return params",
            "",
            "",
            "def _action(function: Callable[[Dict[str, Any]], Dict[str, Any]]) -> Callable:",
            f"{i}async def endpoint(params: Dict[str, Any] = Depends(_params)):",
            f"{i * 2}return await run_in_threadpool(function, params)",
            "",
            f"{i}endpoint.__name__ = function.__name__",
            f"{i}return endpoint",
            "",
            "",
            "def _table_router(segment: str, module: str, bridge: Callable) -> APIRouter:",
            f"{i}controller = importlib.import_module(module)",
            "",
            f"{i}async def guard(params: Dict[str, Any] = Depends(_params)):",
            f"{i * 2}if not await run_in_threadpool(bridge, params):",
            f'{i * 3}raise HTTPException(status_code=403, detail="Forbidden")',
            "",
            f'{i}router = APIRouter(prefix=f"/{{segment}}", dependencies=[Depends(guard)])',
            f'{i}router.add_api_route("/new", _action(controller.create), methods=["GET", "POST"])',
            f'{i}router.add_api_route("/list", _action(controller.read), methods=["GET"])',
            f'{i}router.add_api_route("/edit", _action(controller.update), methods=["GET", "POST"])',
            f'{i}router.add_api_route("/delete", _action(controller.delete), methods=["GET", "POST"])',
            f"{i}return router",
            "",
            "",
            "def _setup_logging() -> None:",
            f'{i}log_dir = HOME / "log"',
            f"{i}if not log_dir.is_dir() or logger.handlers:",
            f"{i * 2}return",
            f'{i}handler = logging.FileHandler(log_dir / f"{{NAME}}.log", encoding="utf-8")',
            f"{i}handler.setFormatter(logging.Formatter({_LOG_FORMAT!r}))",
            f"{i}logger.addHandler(handler)",
            f"{i}logger.setLevel(logging.INFO)",
            "",
            "",
            "def create_app() -> FastAPI:",
            f"{i}_setup_logging()",
            f"{i}application = FastAPI(title={app.class_name!r})",
            f'{i}root = importlib.import_module(f"{{__name__}}.Controller")',
            "",
            f'{i}application.add_api_route("/", _action(root.index), methods=["GET"])',
            f"{i}for segment, module, bridge in ROUTES:",
            f"{i * 2}application.include_router(_table_router(segment, module, getattr(root, bridge)))",
            "",
            f'{i}public = HOME / "public"',
            f"{i}if public.is_dir():",
            f'{i * 2}application.mount("/", StaticFiles(directory=public, html=True), name="public")',
            "",
            f'{i}logger.info("%s ready with %d table route(s).", {app.class_name!r}, len(ROUTES))',
            f"{i}return application",
            "",
            "",
            "app = create_app()",
            "",
        ]
        return "\n".join(lines)

    # ===================================================================
    # 5. Launcher
    # ===================================================================

    def render_launcher(self, app: AppContext) -> str:
        """``script/<app_name>``: runs the application under uvicorn."""
        i: str = _INDENT
        lines: List[str] = ["#!/usr/bin/env python3"]
        lines += _docstring(f"Start the {app.class_name} REST server.")
        lines += [
            "",
            "import os",
            "import sys",
            "",
            "HOME = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))",
            'sys.path.insert(0, os.path.join(HOME, "lib"))',
            "",
            "try:",
            f"{i}import fastapi  # noqa: F401",
            f"{i}import uvicorn",
            "except ImportError:",
            f"{i}sys.exit(",
            f'{i * 2}"It looks like you don\'t have FastAPI and uvicorn installed.\\n"',
            f'{i * 2}"Please run: pip install fastapi uvicorn sqlalchemy python-multipart\\n"',
            f"{i})",
            "",
            f"from {app.module} import app  # noqa: E402",
            "",
            'if __name__ == "__main__":',
            f"{i}uvicorn.run(app, host={app.host!r}, port={app.port})",
            "",
        ]
        return "\n".join(lines)

    # ===================================================================
    # 6. Tests
    # ===================================================================

    @staticmethod
    def _test_preamble(app: AppContext, title: str) -> List[str]:
        lines: List[str] = _docstring(title)
        lines += [
            "",
            "import os",
            "import sys",
            "",
            "sys.path.insert(",
            f'{_INDENT}0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "lib")',
            ")",
            "",
            "from fastapi.testclient import TestClient  # noqa: E402",
            "",
            f"from {app.module} import app  # noqa: E402",
            "",
            "client = TestClient(app)",
        ]
        return lines

    def render_basic_test(self, app: AppContext) -> str:
        """``t/test_basic.py``: the application answers on ``/``."""
        lines: List[str] = self._test_preamble(app, f"Smoke test for {app.class_name}.")
        lines += [
            "",
            "",
            "def test_index():",
            f'{_INDENT}response = client.get("/")',
            f"{_INDENT}assert response.status_code == 200",
            f"{_INDENT}assert response.json() == {{",
            f'{_INDENT * 2}"status": True,',
            f'{_INDENT * 2}"message": {WELCOME_MESSAGE!r},',
            f'{_INDENT * 2}"data": [],',
            f"{_INDENT}}}",
            "",
        ]
        return "\n".join(lines)

    def render_table_test(self, ctx: TableContext) -> str:
        """``t/test_table_<segment>.py``: precondition failures of one table route."""
        i: str = _INDENT
        segment: str = ctx.route.segment
        lines: List[str] = self._test_preamble(
            ctx.app, f"Route tests for /{segment} (table ``{ctx.table.name}``)."
        )
        lines += [
            "",
            "",
            "def _envelope(status, message):",
            f'{i}return {{"status": status, "message": message, "data": []}}',
        ]
        if ctx.table.required_columns:
            lines += [
                "",
                "",
                "def test_new_requires_input():",
                f'{i}response = client.get("/{segment}/new")',
                f"{i}assert response.status_code == 200",
                f"{i}assert response.json() == _envelope(False, {MSG_INPUT_MISSING!r})",
            ]
        lines += [
            "",
            "",
            "def test_edit_requires_keys():",
            f'{i}response = client.get("/{segment}/edit")',
            f"{i}assert response.status_code == 200",
            f"{i}assert response.json() == _envelope(False, {MSG_INFO_MISSING!r})",
            "",
            "",
            "def test_delete_requires_keys():",
            f'{i}response = client.get("/{segment}/delete")',
            f"{i}assert response.status_code == 200",
            f"{i}assert response.json() == _envelope(False, {MSG_INFO_MISSING!r})",
            "",
            "",
            "def test_list():",
            f'{i}response = client.get("/{segment}/list")',
            f"{i}assert response.status_code == 200",
            f"{i}body = response.json()",
            f"{i}if body[\"data\"]:",
            f"{i * 2}assert body[\"message\"] == {MSG_SEARCH_OK!r}",
            f"{i}else:",
            f"{i * 2}assert body == _envelope(False, {MSG_SEARCH_EMPTY!r})",
            "",
        ]
        return "\n".join(lines)

    # ===================================================================
    # 7. Static page
    # ===================================================================

    def render_static_page(self) -> str:
        """``public/index.html``."""
        lines: List[str] = [
            "<!doctype html><html>",
            f"  <head><title>{WELCOME_MESSAGE}</title></head>",
            "  <body>",
            f"    <h2>{WELCOME_MESSAGE}</h2>",
            "    I am the REST API. I am okay with you",
            "    manipulating me but I will not stand for abuse.",
            "  </body>",
            "</html>",
            "",
        ]
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "AppContext",
    "TableContext",
    "TemplateGenerator",
    "WELCOME_MESSAGE",
    "PAGE_SIZE",
    "MSG_SUCCESS",
    "MSG_FAILED",
    "MSG_INPUT_MISSING",
    "MSG_INFO_MISSING",
    "MSG_NOT_FOUND",
    "MSG_SEARCH_OK",
    "MSG_SEARCH_EMPTY",
]

logger.debug("restgen.templates loaded — %d public symbols.", len(__all__))
