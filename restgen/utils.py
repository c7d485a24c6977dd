# File: restgen/utils.py
"""
restgen - Naming Convention & Helpers
=====================================
Deterministic mappings between class-like names (``MyApp::Controller::Users``),
filesystem paths, import paths, and URL segments, plus small file and
timing helpers used throughout the generation pipeline.

Every naming function is pure and wrapped in ``functools.lru_cache``: the
generator asks for the same names many times while rendering templates.
"""

from __future__ import annotations

import functools
import keyword
import logging
import re
import time
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("restgen.utils")

# ---------------------------------------------------------------------------
# Constants & pre-compiled patterns
# ---------------------------------------------------------------------------

NAMESPACE_SEPARATOR: str = "::"
MODULE_SUFFIX: str = ".py"

_NON_ALPHANUM_RE: re.Pattern[str] = re.compile(r"[^a-zA-Z0-9]")
_NON_WORD_RE: re.Pattern[str] = re.compile(r"\W")
_SPLIT_WORDS_RE: re.Pattern[str] = re.compile(
    r"[A-Z]?[a-z]+|[A-Z]+(?=[A-Z][a-z]|\d|\b)|[A-Z]|\d+"
)

# Attribute names SQLAlchemy's declarative base keeps for itself
_RESERVED_ATTRIBUTES: FrozenSet[str] = frozenset({"metadata", "registry"})

# Lower-cased names the generated model package binds next to its tables
_RESERVED_MONIKERS: FrozenSet[str] = frozenset({"base", "model"})


# ---------------------------------------------------------------------------
# Class name ↔ path conversions
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def class_to_path(name: str) -> str:
    """
    Convert a class name to a module path relative to ``lib/``.

    Examples:
        >>> class_to_path("MyApp::Controller::Users")
        'MyApp/Controller/Users.py'
        >>> class_to_path("MyApp")
        'MyApp.py'
    """
    return "/".join(name.split(NAMESPACE_SEPARATOR)) + MODULE_SUFFIX


@functools.lru_cache(maxsize=None)
def class_to_package_path(name: str) -> str:
    """
    Package form of :func:`class_to_path` for classes that own sub-modules.

    A Python module cannot be both ``X.py`` and a package ``X/``, so the
    application module, the model root and the root controller live in
    ``X/__init__.py``.

        >>> class_to_package_path("MyApp::Controller")
        'MyApp/Controller/__init__.py'
    """
    return "/".join(name.split(NAMESPACE_SEPARATOR)) + "/__init__" + MODULE_SUFFIX


@functools.lru_cache(maxsize=None)
def class_to_file(name: str) -> str:
    """
    Convert a class name to a lower-case, filesystem-safe file name.

    Used for the application directory, the launcher script, URL segments
    and test file names.

        >>> class_to_file("MyApp")
        'myapp'
        >>> class_to_file("My::App")
        'my_app'
    """
    return "_".join(name.split(NAMESPACE_SEPARATOR)).lower()


@functools.lru_cache(maxsize=None)
def class_to_module(name: str) -> str:
    """``MyApp::Controller::Users`` → ``MyApp.Controller.Users``."""
    return ".".join(name.split(NAMESPACE_SEPARATOR))


def join_class(*parts: str) -> str:
    """Join class name segments with the namespace separator."""
    return NAMESPACE_SEPARATOR.join(p for p in parts if p)


# ---------------------------------------------------------------------------
# Table and column names
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def _extract_words(name: str) -> Tuple[str, ...]:
    """
    Extract individual words from any casing style.

    Returns a tuple (hashable for LRU cache) of lowercase word strings.
    """
    cleaned: str = _NON_ALPHANUM_RE.sub(" ", name)
    words: List[str] = _SPLIT_WORDS_RE.findall(cleaned)
    return tuple(w.lower() for w in words if w)


@functools.lru_cache(maxsize=None)
def to_pascal_case(name: str) -> str:
    """
    Convert any string to PascalCase.

        >>> to_pascal_case("user_profiles")
        'UserProfiles'
        >>> to_pascal_case("Users")
        'Users'
    """
    if not name:
        return ""
    return "".join(word.capitalize() for word in _extract_words(name))


@functools.lru_cache(maxsize=None)
def table_to_moniker(table_name: str) -> str:
    """
    Class-like name for a table, used as the last controller segment and
    as the ORM class name.

        >>> table_to_moniker("order_items")
        'OrderItems'
        >>> table_to_moniker("2021_sales")
        'T2021Sales'
    """
    moniker: str = to_pascal_case(table_name)
    if not moniker:
        return "Table"
    if moniker[0].isdigit():
        return f"T{moniker}"
    return moniker


def assign_monikers(table_names: Iterable[str]) -> Dict[str, str]:
    """
    Map every table to a moniker of its own, in lexicographic table order.

    A moniker that is not importable, that the model package binds itself,
    or whose lower-case form is already taken gets the smallest free
    numeric suffix, so the controller modules, model modules and URL
    segments of distinct tables never coincide.

        >>> assign_monikers(["user_roles", "userroles", "model"])
        {'model': 'Model2', 'user_roles': 'UserRoles', 'userroles': 'Userroles2'}
    """
    taken: Set[str] = set(_RESERVED_MONIKERS)
    result: Dict[str, str] = {}
    for name in sorted(table_names):
        base: str = table_to_moniker(name)
        moniker: str = base
        suffix: int = 1
        while moniker.lower() in taken or not is_valid_module_name(moniker):
            suffix += 1
            moniker = f"{base}{suffix}"
        taken.add(moniker.lower())
        result[name] = moniker
    return result


@functools.lru_cache(maxsize=None)
def column_to_attribute(column_name: str) -> str:
    """
    Safe Python attribute name for a column on a generated ORM class.

    Names that already are plain identifiers pass through unchanged so
    that attribute and column line up in the common case.
    """
    result: str = _NON_WORD_RE.sub("_", column_name)
    if not result or result[0].isdigit():
        result = f"c_{result}"
    if keyword.iskeyword(result) or result in _RESERVED_ATTRIBUTES:
        result = f"{result}_"
    return result


def assign_attributes(column_names: Iterable[str]) -> Dict[str, str]:
    """
    Map the columns of one table to distinct attribute names.

    Columns whose names already are safe attributes keep them; the others
    are assigned in lexicographic order and take a numeric suffix when
    their safe form is taken.

        >>> assign_attributes(["e-mail", "e_mail"])
        {'e_mail': 'e_mail', 'e-mail': 'e_mail_2'}
    """
    names: List[str] = sorted(column_names)
    result: Dict[str, str] = {n: n for n in names if column_to_attribute(n) == n}
    taken: Set[str] = set(result.values())
    for name in names:
        if name in result:
            continue
        base: str = column_to_attribute(name)
        attribute: str = base
        suffix: int = 1
        while attribute in taken:
            suffix += 1
            attribute = f"{base}_{suffix}"
        taken.add(attribute)
        result[name] = attribute
    return result


@functools.lru_cache(maxsize=None)
def segment_to_bridge(segment: str) -> str:
    """
    Function name of the bridge guarding route segment *segment* in the
    root controller.  ``index`` belongs to the welcome action.
    """
    name: str = column_to_attribute(segment)
    if name == "index":
        name = f"{name}_"
    return name


def is_valid_module_name(name: str) -> bool:
    """True when *name* can be imported as a Python module."""
    return name.isidentifier() and not keyword.iskeyword(name)


# ---------------------------------------------------------------------------
# Code formatting helpers
# ---------------------------------------------------------------------------


def py_literal(value: Optional[str]) -> str:
    """Render an optional string as a Python literal."""
    if value is None:
        return "None"
    return repr(value)


def format_tuple_literal(items: List[str]) -> str:
    """
    Format a tuple literal of strings.

        >>> format_tuple_literal(["a"])
        "('a',)"
        >>> format_tuple_literal([])
        '()'
    """
    if not items:
        return "()"
    if len(items) == 1:
        return f"({items[0]!r},)"
    return "(" + ", ".join(repr(i) for i in items) + ")"


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Simple context-manager timer for profiling generation steps.

    Usage:
        with Timer("introspect") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.debug("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "NAMESPACE_SEPARATOR",
    "class_to_path",
    "class_to_package_path",
    "class_to_file",
    "class_to_module",
    "join_class",
    "to_pascal_case",
    "table_to_moniker",
    "assign_monikers",
    "column_to_attribute",
    "assign_attributes",
    "segment_to_bridge",
    "is_valid_module_name",
    "py_literal",
    "format_tuple_literal",
    "Timer",
]

logger.debug("restgen.utils loaded — %d public symbols.", len(__all__))
