# File: restgen/exporters.py
"""
restgen - Project Exporter (File-System Manager)
================================================

Responsible for:
    1. Creating the application directory tree on demand.
    2. Writing generated files atomically (write-to-temp then rename), in
       the order they are handed over.
    3. Marking the launcher script executable (``0744``).
    4. Creating the empty ``log/`` directory.

Existing files at the same relative paths are overwritten without
prompting.  The first failed write stops the export; files written
before it stay on disk.
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence, Tuple

from restgen.models import GeneratedFile
from restgen.utils import Timer

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("restgen.exporters")

# ---------------------------------------------------------------------------
# File modes
# ---------------------------------------------------------------------------

EXECUTABLE_MODE: int = 0o744
REGULAR_MODE: int = 0o644

# Directories created empty under the application root
EMPTY_DIRECTORIES: Tuple[str, ...] = ("log",)


# ---------------------------------------------------------------------------
# Data classes for export results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Immutable record of a single exported file."""

    relative_path: str
    absolute_path: str
    size_bytes: int
    line_count: int
    mode: int


@dataclass(frozen=False, slots=True)
class ExportResult:
    """Outcome of ``ProjectExporter.export()``."""

    success: bool = True
    root: str = ""
    files: List[FileRecord] = field(default_factory=list)
    directories: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def total_files(self) -> int:
        return len(self.files)

    @property
    def total_bytes(self) -> int:
        return sum(f.size_bytes for f in self.files)

    @property
    def total_lines(self) -> int:
        return sum(f.line_count for f in self.files)


# ---------------------------------------------------------------------------
# ProjectExporter class
# ---------------------------------------------------------------------------


class ProjectExporter:
    """
    Writes generated files below ``<output_dir>/<app_name>/``.

    Usage::

        exporter = ProjectExporter(Path("."), "myapp")
        result = exporter.export(files)

    Not thread-safe.  Use one exporter per application directory.
    """

    def __init__(self, output_dir: Path, app_name: str, *, atomic_writes: bool = True) -> None:
        self._output_dir: Path = Path(output_dir).resolve()
        self._app_name: str = app_name
        self._atomic_writes: bool = atomic_writes
        logger.debug(
            "ProjectExporter initialised: root=%s, atomic=%s.",
            self.root,
            atomic_writes,
        )

    @property
    def root(self) -> Path:
        return self._output_dir / self._app_name

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def export(self, files: Sequence[GeneratedFile]) -> ExportResult:
        """Write *files* in order, then create the empty directories."""
        result: ExportResult = ExportResult(root=str(self.root))

        with Timer("export") as timer:
            try:
                for generated in files:
                    result.files.append(self.write_file(generated))
                for rel_dir in EMPTY_DIRECTORIES:
                    result.directories.append(str(self.create_directory(rel_dir)))
            except OSError as exc:
                error_msg: str = f"Export failed: {type(exc).__name__}: {exc}"
                result.errors.append(error_msg)
                result.success = False
                logger.error(error_msg)

        result.elapsed_seconds = timer.elapsed

        if result.success:
            logger.info(
                "Export completed: %d files, %d bytes under %s in %.3fs.",
                result.total_files,
                result.total_bytes,
                self.root,
                timer.elapsed,
            )
        return result

    def write_file(self, generated: GeneratedFile) -> FileRecord:
        """
        Write one file below the application root and return its record.

        Raises:
            OSError: If the directory or the file cannot be written.
        """
        full_path: Path = self.root / generated.relative_path
        full_path.parent.mkdir(parents=True, exist_ok=True)

        data: bytes = generated.content.encode("utf-8")
        if self._atomic_writes:
            self._atomic_write(full_path, data)
        else:
            full_path.write_bytes(data)

        mode: int = EXECUTABLE_MODE if generated.executable else REGULAR_MODE
        os.chmod(full_path, mode)

        logger.info("  [write] %s", generated.relative_path)
        logger.debug(
            "Wrote file: %s (%d bytes, %d lines, mode %o).",
            generated.relative_path,
            len(data),
            generated.line_count,
            mode,
        )

        return FileRecord(
            relative_path=generated.relative_path,
            absolute_path=str(full_path),
            size_bytes=len(data),
            line_count=generated.line_count,
            mode=mode,
        )

    def create_directory(self, relative_path: str) -> Path:
        path: Path = self.root / relative_path
        path.mkdir(parents=True, exist_ok=True)
        logger.info("  [mkdir] %s", relative_path)
        return path

    # -----------------------------------------------------------------
    # Internal
    # -----------------------------------------------------------------

    @staticmethod
    def _atomic_write(target_path: Path, data: bytes) -> None:
        """
        Write data to target_path atomically using a temporary file in the
        same directory.  The temporary file is removed if anything fails.
        """
        fd, tmp_path = tempfile.mkstemp(
            dir=str(target_path.parent),
            prefix=f".{target_path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, str(target_path))
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "EXECUTABLE_MODE",
    "REGULAR_MODE",
    "FileRecord",
    "ExportResult",
    "ProjectExporter",
]

logger.debug("restgen.exporters loaded.")
