# File: restgen/__init__.py
"""
restgen — REST Application Scaffolding
======================================

Introspects a live database and writes a complete CRUD REST application
(FastAPI + SQLAlchemy 2.0): one controller and one ORM class per table, an
application module wiring routes to controllers, pytest stubs, a launcher
script, a static welcome page and an empty log directory.

Architecture overview::

    ┌──────────────┐     ┌──────────────────┐     ┌──────────────────┐
    │  CLI / Entry │────▶│ RestAppGenerator │────▶│ TemplateGenerator│
    │   (cli.py)   │     │  (generator.py)  │     │  (templates.py)  │
    └──────────────┘     └────────┬─────────┘     └──────────────────┘
                                  │
          ┌───────────┬───────────┼───────────┬───────────┐
          ▼           ▼           ▼           ▼           ▼
     ┌─────────┐ ┌──────────┐ ┌────────┐ ┌─────────┐ ┌───────────┐
     │ reader  │ │validators│ │ models │ │ planner │ │ exporters │
     └─────────┘ └──────────┘ └────────┘ └─────────┘ └───────────┘

Usage::

    # As a library
    from restgen import GeneratorConfig, RestAppGenerator
    report = RestAppGenerator().generate(
        GeneratorConfig(class_name="MyApp", dsn="sqlite:///app.db")
    )

    # From the command line
    restgen rest_app MyApp sqlite:///app.db -v
"""

from __future__ import annotations

__version__: str = "0.1.0"
__license__: str = "MIT"

from restgen.models import (
    ColumnSpec,
    GeneratedFile,
    GeneratorConfig,
    RoutePlan,
    RouteSpec,
    SchemaSnapshot,
    TableSchema,
)
from restgen.reader import (
    SchemaReadError,
    SchemaReader,
    SQLAlchemySchemaReader,
    StaticSchemaReader,
)
from restgen.validators import ValidationResult, validate_invocation, validate_schema
from restgen.planner import RoutePlanner
from restgen.templates import AppContext, TableContext, TemplateGenerator
from restgen.exporters import ExportResult, ProjectExporter
from restgen.generator import GenerationReport, RestAppGenerator
from restgen.utils import Timer, class_to_file, class_to_path

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    # Version info
    "__version__",
    "__license__",
    # Core orchestrator
    "RestAppGenerator",
    "GenerationReport",
    # Models
    "ColumnSpec",
    "GeneratedFile",
    "GeneratorConfig",
    "RoutePlan",
    "RouteSpec",
    "SchemaSnapshot",
    "TableSchema",
    # Schema reading
    "SchemaReadError",
    "SchemaReader",
    "SQLAlchemySchemaReader",
    "StaticSchemaReader",
    # Validation
    "ValidationResult",
    "validate_invocation",
    "validate_schema",
    # Planning & templates
    "RoutePlanner",
    "AppContext",
    "TableContext",
    "TemplateGenerator",
    # Export
    "ExportResult",
    "ProjectExporter",
    # Utilities
    "Timer",
    "class_to_file",
    "class_to_path",
]
