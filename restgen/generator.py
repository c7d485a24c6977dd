# File: restgen/generator.py
"""
restgen - Generation Pipeline (Orchestrator)
============================================

Connects every phase together:

    Invocation check → Introspection → Schema check → Planning
        → Rendering → Export

Workflow::

    1. Check that a class name and connection string were supplied and
       that the class name is well formed (validators.py).
    2. Introspect the database once through a ``SchemaReader`` (reader.py).
    3. Run the schema checks (validators.py).
    4. Plan one route per table plus the root route (planner.py).
    5. Render every file in emission order (templates.py).
    6. Hand the files to ``ProjectExporter`` (exporters.py).
    7. Return a ``GenerationReport`` with metrics and status.

Error handling strategy:
    - Every failure before step 6 aborts the run with nothing written.
    - A failed write stops the export; the report names the file.
    - The final report gives a clear pass/fail verdict.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from restgen.exporters import ExportResult, ProjectExporter
from restgen.models import (
    GeneratedFile,
    GeneratorConfig,
    RoutePlan,
    RouteSpec,
    SchemaSnapshot,
)
from restgen.planner import RoutePlanner
from restgen.reader import SchemaReadError, SchemaReader, SQLAlchemySchemaReader
from restgen.templates import AppContext, TableContext, TemplateGenerator
from restgen.utils import Timer, class_to_package_path, class_to_path, join_class
from restgen.validators import ValidationResult, validate_invocation, validate_schema

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("restgen.generator")

ReaderFactory = Callable[[GeneratorConfig], SchemaReader]


def default_reader_factory(config: GeneratorConfig) -> SchemaReader:
    """Build the SQLAlchemy-backed reader for *config*."""
    return SQLAlchemySchemaReader(config.dsn, config.user, config.password)


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationStepMetric:
    """Timing and outcome for a single pipeline step."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """
    Report produced by ``RestAppGenerator.generate()``.

    Contains timing information, file counts, validation results,
    and any errors/warnings encountered.
    """

    success: bool = False
    class_name: str = ""
    app_name: str = ""
    output_directory: str = ""

    # Metrics
    total_files: int = 0
    total_bytes: int = 0
    total_lines: int = 0
    total_tables_processed: int = 0
    total_elapsed_seconds: float = 0.0

    # Sub-reports
    files: List[str] = field(default_factory=list)
    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    error_codes: List[str] = field(default_factory=list)
    validation_errors: List[str] = field(default_factory=list)
    validation_warnings: List[str] = field(default_factory=list)
    generation_errors: List[str] = field(default_factory=list)
    export_errors: List[str] = field(default_factory=list)

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "✅ SUCCESS" if self.success else "❌ FAILED"
        lines.append(f"{'='*60}")
        lines.append("  restgen — Generation Report")
        lines.append(f"{'='*60}")
        lines.append(f"  Status:           {status}")
        lines.append(f"  Application:      {self.class_name}")
        lines.append(f"  Output:           {self.output_directory}")
        lines.append(f"  Tables processed: {self.total_tables_processed}")
        lines.append(f"  Files generated:  {self.total_files}")
        lines.append(f"  Total lines:      {self.total_lines:,}")
        lines.append(f"  Total bytes:      {self.total_bytes:,}")
        lines.append(f"  Total time:       {self.total_elapsed_seconds:.3f}s")
        lines.append(f"{'─'*60}")

        if self.step_metrics:
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                icon: str = "✓" if step.success else "✗"
                lines.append(
                    f"    {icon} {step.step_name:<28s} "
                    f"{step.elapsed_seconds:>7.3f}s  "
                    f"{step.detail}"
                )

        sections = (
            ("Validation Errors", self.validation_errors, "✗"),
            ("Validation Warnings", self.validation_warnings, "⚠"),
            ("Generation Errors", self.generation_errors, "✗"),
            ("Export Errors", self.export_errors, "✗"),
        )
        for title, items, icon in sections:
            if items:
                lines.append(f"{'─'*60}")
                lines.append(f"  {title} ({len(items)}):")
                for item in items:
                    lines.append(f"    {icon} {item}")

        lines.append(f"{'='*60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# RestAppGenerator — orchestrator
# ---------------------------------------------------------------------------


class RestAppGenerator:
    """
    Pipeline orchestrator.

    Usage::

        generator = RestAppGenerator()
        report = generator.generate(
            GeneratorConfig(class_name="MyApp", dsn="sqlite:///app.db")
        )
        print(report.summary())

    ``reader_factory`` builds the ``SchemaReader`` for a run; tests pass
    one returning a ``StaticSchemaReader``.
    """

    def __init__(
        self,
        reader_factory: Optional[ReaderFactory] = None,
        *,
        atomic_writes: bool = True,
    ) -> None:
        self._reader_factory: ReaderFactory = reader_factory or default_reader_factory
        self._atomic_writes: bool = atomic_writes
        self._templates: TemplateGenerator = TemplateGenerator()

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def generate(self, config: GeneratorConfig) -> GenerationReport:
        """Run the whole pipeline for *config*."""
        report: GenerationReport = GenerationReport(
            class_name=config.class_name,
            app_name=config.app_name,
            output_directory=str(Path(config.output_dir).resolve() / config.app_name),
        )
        pipeline_start: float = time.perf_counter()

        if not self._step_validate_invocation(config, report):
            return self._finalise_report(report, pipeline_start)

        snapshot: Optional[SchemaSnapshot] = self._step_introspect(config, report)
        if snapshot is None:
            return self._finalise_report(report, pipeline_start)

        if not self._step_validate_schema(snapshot, report):
            return self._finalise_report(report, pipeline_start)

        plan: RoutePlan = self._step_plan(config, snapshot, report)

        files: Optional[List[GeneratedFile]] = self._step_render(
            config, snapshot, plan, report
        )
        if files is None:
            return self._finalise_report(report, pipeline_start)

        self._step_export(config, files, report)
        return self._finalise_report(report, pipeline_start)

    def render(
        self,
        config: GeneratorConfig,
        snapshot: SchemaSnapshot,
        plan: RoutePlan,
    ) -> List[GeneratedFile]:
        """
        Render every file of the application, in emission order:

        model root and table models, then per table its controller and
        test, then the root controller, launcher, application module,
        smoke test and static page.
        """
        app: AppContext = AppContext(
            class_name=config.class_name,
            dsn=config.dsn,
            user=config.user,
            password=config.password,
            host=config.host,
            port=config.port,
            plan=plan,
        )
        contexts: List[TableContext] = [
            TableContext(app=app, route=route, table=snapshot.tables[route.table])
            for route in plan.tables
            if route.table is not None
        ]
        tpl: TemplateGenerator = self._templates
        files: List[GeneratedFile] = []

        files.append(GeneratedFile(
            relative_path=_lib(class_to_package_path(app.model_class)),
            content=tpl.render_model_root(app),
        ))
        for ctx in contexts:
            files.append(GeneratedFile(
                relative_path=_lib(class_to_path(join_class(app.model_class, ctx.route.moniker))),
                content=tpl.render_table_model(ctx),
            ))

        for ctx in contexts:
            files.append(GeneratedFile(
                relative_path=_lib(ctx.route.controller_path),
                content=tpl.render_controller(ctx),
            ))
            files.append(GeneratedFile(
                relative_path=f"t/test_table_{ctx.route.segment}.py",
                content=tpl.render_table_test(ctx),
            ))

        root: RouteSpec = plan.root
        files.append(GeneratedFile(
            relative_path=_lib(root.controller_path),
            content=tpl.render_root_controller(app),
        ))
        files.append(GeneratedFile(
            relative_path=f"script/{app.app_name}",
            content=tpl.render_launcher(app),
            executable=True,
        ))
        files.append(GeneratedFile(
            relative_path=_lib(class_to_package_path(config.class_name)),
            content=tpl.render_app_module(app),
        ))
        files.append(GeneratedFile(
            relative_path="t/test_basic.py",
            content=tpl.render_basic_test(app),
        ))
        files.append(GeneratedFile(
            relative_path="public/index.html",
            content=tpl.render_static_page(),
        ))
        return files

    # -----------------------------------------------------------------
    # Pipeline steps
    # -----------------------------------------------------------------

    def _step_validate_invocation(
        self, config: GeneratorConfig, report: GenerationReport
    ) -> bool:
        with Timer("validate_invocation") as t:
            result: ValidationResult = validate_invocation(config.class_name, config.dsn)

        self._record_validation(result, report)
        report.step_metrics.append(GenerationStepMetric(
            step_name="Validate Invocation",
            success=result.is_valid,
            elapsed_seconds=t.elapsed,
            detail="ok" if result.is_valid else f"{result.error_count} error(s)",
        ))
        if not result.is_valid:
            for err in result.errors:
                logger.error("%s", err.message)
        return result.is_valid

    def _step_introspect(
        self, config: GeneratorConfig, report: GenerationReport
    ) -> Optional[SchemaSnapshot]:
        with Timer("introspect") as t:
            try:
                reader: SchemaReader = self._reader_factory(config)
                snapshot: Optional[SchemaSnapshot] = SchemaSnapshot.from_tables(
                    reader.list_tables()
                )
                error: str = ""
            except (SchemaReadError, ValueError) as exc:
                snapshot = None
                error = f"Schema introspection failed: {exc}"

        if snapshot is None:
            report.generation_errors.append(error)
            logger.error(error)
            report.step_metrics.append(GenerationStepMetric(
                step_name="Introspect Schema",
                success=False,
                elapsed_seconds=t.elapsed,
                detail=error,
            ))
            return None

        report.total_tables_processed = snapshot.table_count
        report.step_metrics.append(GenerationStepMetric(
            step_name="Introspect Schema",
            success=True,
            elapsed_seconds=t.elapsed,
            detail=f"{snapshot.table_count} table(s)",
        ))
        logger.info(
            "Introspection found %d table(s) in %.3fs.",
            snapshot.table_count,
            t.elapsed,
        )
        return snapshot

    def _step_validate_schema(
        self, snapshot: SchemaSnapshot, report: GenerationReport
    ) -> bool:
        with Timer("validate_schema") as t:
            result: ValidationResult = validate_schema(snapshot)

        self._record_validation(result, report)

        if result.has_errors:
            detail: str = f"{result.error_count} error(s)"
        elif result.has_warnings:
            detail = f"{result.warning_count} warning(s)"
        else:
            detail = "all checks passed"

        report.step_metrics.append(GenerationStepMetric(
            step_name="Validate Schema",
            success=result.is_valid,
            elapsed_seconds=t.elapsed,
            detail=detail,
        ))

        for err in result.errors:
            logger.error("  ✗ %s", err)
        for warn in result.warnings:
            logger.warning("  ⚠ %s", warn)
        return result.is_valid

    def _step_plan(
        self,
        config: GeneratorConfig,
        snapshot: SchemaSnapshot,
        report: GenerationReport,
    ) -> RoutePlan:
        with Timer("plan") as t:
            plan: RoutePlan = RoutePlanner(config.class_name).plan(snapshot)

        report.step_metrics.append(GenerationStepMetric(
            step_name="Plan Routes",
            success=True,
            elapsed_seconds=t.elapsed,
            detail=f"{len(plan.tables)} table route(s), {len(plan.root.bridges)} bridge(s)",
        ))
        return plan

    def _step_render(
        self,
        config: GeneratorConfig,
        snapshot: SchemaSnapshot,
        plan: RoutePlan,
        report: GenerationReport,
    ) -> Optional[List[GeneratedFile]]:
        with Timer("render") as t:
            try:
                files: Optional[List[GeneratedFile]] = self.render(config, snapshot, plan)
                error: str = ""
            except (KeyError, ValueError) as exc:
                files = None
                error = f"Rendering failed: {type(exc).__name__}: {exc}"

        if files is None:
            report.generation_errors.append(error)
            logger.error(error, exc_info=True)
            report.step_metrics.append(GenerationStepMetric(
                step_name="Render Templates",
                success=False,
                elapsed_seconds=t.elapsed,
                detail=error,
            ))
            return None

        report.step_metrics.append(GenerationStepMetric(
            step_name="Render Templates",
            success=True,
            elapsed_seconds=t.elapsed,
            detail=f"{len(files)} file(s), ~{sum(f.line_count for f in files):,} lines",
        ))
        return files

    def _step_export(
        self,
        config: GeneratorConfig,
        files: List[GeneratedFile],
        report: GenerationReport,
    ) -> None:
        exporter: ProjectExporter = ProjectExporter(
            Path(config.output_dir),
            config.app_name,
            atomic_writes=self._atomic_writes,
        )
        result: ExportResult = exporter.export(files)

        report.files = [record.relative_path for record in result.files]
        report.total_files = result.total_files
        report.total_bytes = result.total_bytes
        report.total_lines = result.total_lines
        report.export_errors.extend(result.errors)

        report.step_metrics.append(GenerationStepMetric(
            step_name="Export to Filesystem",
            success=result.success,
            elapsed_seconds=result.elapsed_seconds,
            detail=f"{result.total_files} files, {result.total_bytes:,} bytes",
        ))

    # -----------------------------------------------------------------
    # Internal
    # -----------------------------------------------------------------

    @staticmethod
    def _record_validation(result: ValidationResult, report: GenerationReport) -> None:
        report.error_codes.extend(e.code for e in result.errors)
        report.validation_errors.extend(e.message for e in result.errors)
        report.validation_warnings.extend(w.message for w in result.warnings)

    @staticmethod
    def _finalise_report(report: GenerationReport, pipeline_start: float) -> GenerationReport:
        report.total_elapsed_seconds = time.perf_counter() - pipeline_start
        report.success = not (
            report.validation_errors
            or report.generation_errors
            or report.export_errors
        )
        return report


def _lib(path: str) -> str:
    return f"lib/{path}"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "RestAppGenerator",
    "GenerationReport",
    "GenerationStepMetric",
    "ReaderFactory",
    "default_reader_factory",
]

logger.debug("restgen.generator loaded.")
