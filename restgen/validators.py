# File: restgen/validators.py
"""
restgen - Invocation & Schema Validators
========================================
Pure-function checks that run before any file is written.

Two layers:

* ``validate_invocation`` — the command-line boundary: class name and
  connection string present, class name well formed.
* ``validate_schema`` — the introspected snapshot: every table must be
  mappable.  Names that had to be suffixed to stay distinct are reported
  as warnings; the run goes on with the suffixed names.

Each check returns a ``ValidationResult``; callers merge them and abort on
errors.  Warnings are logged and carried into the generation report.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from restgen.models import SchemaSnapshot
from restgen.utils import (
    assign_attributes,
    assign_monikers,
    column_to_attribute,
    is_valid_module_name,
    table_to_moniker,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("restgen.validators")

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------

MISSING_ARGUMENTS: str = "MISSING_ARGUMENTS"
INVALID_CLASS_NAME: str = "INVALID_CLASS_NAME"

# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ValidationError:
    """One finding of a check; ``level`` is ``"error"`` or ``"warning"``."""

    level: str
    code: str
    message: str
    context: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __str__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"


class ValidationResult:
    """Accumulates ``ValidationError`` instances produced by the checks."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[ValidationError] = []

    def add_error(self, code: str, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self._items.append(ValidationError("error", code, message, context or {}))

    def add_warning(self, code: str, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self._items.append(ValidationError("warning", code, message, context or {}))

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    @property
    def errors(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_error]

    @property
    def warnings(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_warning]

    @property
    def has_errors(self) -> bool:
        return any(e.is_error for e in self._items)

    @property
    def has_warnings(self) -> bool:
        return any(e.is_warning for e in self._items)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    def has_code(self, code: str) -> bool:
        return any(e.code == code for e in self._items)

    def summary(self) -> str:
        return f"Validation: {self.error_count} error(s), {self.warning_count} warning(s)."

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are no errors."""
        return self.is_valid


# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------

# Camel-case module name, segments joined by "::" (e.g. "MyApp", "My::App")
CLASS_NAME_RE: re.Pattern[str] = re.compile(r"^[A-Z](?:\w|::)+$", re.ASCII)


# ---------------------------------------------------------------------------
# Invocation
# ---------------------------------------------------------------------------


def validate_invocation(class_name: Optional[str], dsn: Optional[str]) -> ValidationResult:
    """
    Check the two mandatory command-line arguments.

    A missing argument is reported as ``MISSING_ARGUMENTS`` and stops
    further checks; a malformed class name as ``INVALID_CLASS_NAME``.
    """
    result: ValidationResult = ValidationResult()

    if not class_name or not dsn:
        result.add_error(
            MISSING_ARGUMENTS,
            "Please issue a valid application class and database connection string.",
            {"class_name": class_name or "", "dsn": "<set>" if dsn else ""},
        )
        return result

    if not CLASS_NAME_RE.match(class_name):
        result.add_error(
            INVALID_CLASS_NAME,
            "Your application name has to be a well formed (camel case) "
            'module name like "MyApp".',
            {"class_name": class_name},
        )
        return result

    for segment in class_name.split("::"):
        if not is_valid_module_name(segment):
            result.add_error(
                INVALID_CLASS_NAME,
                f"Segment '{segment}' of application name '{class_name}' "
                f"cannot be imported as a Python module.",
                {"class_name": class_name, "segment": segment},
            )

    return result


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------


def validate_table_monikers(snapshot: SchemaSnapshot) -> ValidationResult:
    """
    Warn about tables whose controller name had to be suffixed.

    Happens when two tables collapse onto the same name (``user_roles``
    and ``UserRoles``), or when the name is a keyword or one the model
    package defines itself (``Model``).
    """
    result: ValidationResult = ValidationResult()
    for name, moniker in assign_monikers(snapshot.table_names).items():
        natural: str = table_to_moniker(name)
        if moniker != natural:
            result.add_warning(
                "RENAMED_MONIKER",
                f"Table '{name}' maps to controller '{moniker}' because "
                f"'{natural}' is taken or reserved.",
                {"table": name, "moniker": moniker},
            )
    return result


def validate_primary_keys(snapshot: SchemaSnapshot) -> ValidationResult:
    """Tables without a primary key cannot be updated or deleted."""
    result: ValidationResult = ValidationResult()
    for name in snapshot.table_names:
        table = snapshot.tables[name]
        if not table.primary_key:
            result.add_warning(
                "NO_PRIMARY_KEY",
                f"Table '{name}' has no primary key; its edit and delete "
                f"routes will always report missing information.",
                {"table": name},
            )
    return result


def validate_columns(snapshot: SchemaSnapshot) -> ValidationResult:
    """
    Every table needs at least one column.  Columns whose attribute name
    had to be suffixed are reported as warnings.
    """
    result: ValidationResult = ValidationResult()
    for name in snapshot.table_names:
        table = snapshot.tables[name]
        if not table.columns:
            result.add_error(
                "NO_COLUMNS",
                f"Table '{name}' has no columns and cannot be mapped.",
                {"table": name},
            )
            continue

        for column, attribute in assign_attributes(table.column_names).items():
            if attribute != column_to_attribute(column):
                result.add_warning(
                    "RENAMED_ATTRIBUTE",
                    f"Column '{column}' of table '{name}' maps to attribute "
                    f"'{attribute}' because '{column_to_attribute(column)}' is taken.",
                    {"table": name, "attribute": attribute},
                )
    return result


def validate_schema(snapshot: SchemaSnapshot) -> ValidationResult:
    """
    Run all schema-level validators.  Returns a merged ``ValidationResult``.

    An empty schema is allowed; it produces an application with only the
    root route.
    """
    result: ValidationResult = ValidationResult()

    if not snapshot.tables:
        result.add_warning("EMPTY_SCHEMA", "The database contains no tables.")

    validators: List[Callable[[SchemaSnapshot], ValidationResult]] = [
        validate_table_monikers,
        validate_primary_keys,
        validate_columns,
    ]

    for validator_fn in validators:
        logger.debug("Running validator: %s", validator_fn.__name__)
        result.merge(validator_fn(snapshot))

    if result.has_errors:
        logger.error(
            "Schema validation FAILED with %d error(s). %s",
            result.error_count,
            result.summary(),
        )
    else:
        logger.info("Schema validation PASSED. %s", result.summary())

    return result


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "MISSING_ARGUMENTS",
    "INVALID_CLASS_NAME",
    "CLASS_NAME_RE",
    "ValidationError",
    "ValidationResult",
    "validate_invocation",
    "validate_table_monikers",
    "validate_primary_keys",
    "validate_columns",
    "validate_schema",
]

logger.debug("restgen.validators loaded — %d public symbols.", len(__all__))
