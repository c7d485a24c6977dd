"""
tests/test_cli.py
Tests for the restgen command-line interface (exit codes and output).
"""

from __future__ import annotations

import logging
import pathlib
from typing import List

import pytest

from restgen import __version__
from restgen.cli import (
    EXIT_EXPORT_ERROR,
    EXIT_GENERATION_ERROR,
    EXIT_INPUT_ERROR,
    EXIT_SUCCESS,
    EXIT_VALIDATION_ERROR,
    cli_main,
)


def _run(argv: List[str]) -> int:
    with pytest.raises(SystemExit) as excinfo:
        cli_main(argv)
    return excinfo.value.code


@pytest.fixture(autouse=True)
def _reset_restgen_logger():
    yield
    restgen_logger = logging.getLogger("restgen")
    restgen_logger.handlers.clear()
    restgen_logger.setLevel(logging.NOTSET)
    restgen_logger.propagate = True


class TestExitCodes:
    def test_success(self, output_dir: pathlib.Path, sqlite_dsn: str) -> None:
        code = _run(["rest_app", "MyApp", sqlite_dsn, "-o", str(output_dir), "-q"])

        assert code == EXIT_SUCCESS
        assert (output_dir / "myapp" / "lib" / "MyApp" / "Controller" / "Users.py").is_file()

    def test_no_arguments(self, output_dir: pathlib.Path) -> None:
        assert _run(["rest_app", "-o", str(output_dir), "-q"]) == EXIT_INPUT_ERROR
        assert list(output_dir.iterdir()) == []

    def test_missing_dsn(self, output_dir: pathlib.Path) -> None:
        assert _run(["rest_app", "MyApp", "-o", str(output_dir), "-q"]) == EXIT_INPUT_ERROR

    def test_malformed_class_name(self, output_dir: pathlib.Path, sqlite_dsn: str) -> None:
        code = _run(["rest_app", "myapp", sqlite_dsn, "-o", str(output_dir), "-q"])

        assert code == EXIT_VALIDATION_ERROR
        assert list(output_dir.iterdir()) == []

    def test_unknown_dialect(self, output_dir: pathlib.Path) -> None:
        code = _run(["rest_app", "MyApp", "nosuchdialect://x/y", "-o", str(output_dir), "-q"])
        assert code == EXIT_GENERATION_ERROR

    def test_unwritable_output(self, tmp_path: pathlib.Path, sqlite_dsn: str) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        code = _run(["rest_app", "MyApp", sqlite_dsn, "-o", str(blocker), "-q"])
        assert code == EXIT_EXPORT_ERROR

    def test_invalid_port(self, output_dir: pathlib.Path, sqlite_dsn: str) -> None:
        code = _run(["rest_app", "MyApp", sqlite_dsn, "-o", str(output_dir), "--port", "0", "-q"])
        assert code == EXIT_INPUT_ERROR


class TestOutput:
    def test_summary_printed(
        self, output_dir: pathlib.Path, sqlite_dsn: str, capsys: pytest.CaptureFixture
    ) -> None:
        assert _run(["rest_app", "MyApp", sqlite_dsn, "-o", str(output_dir)]) == EXIT_SUCCESS
        out = capsys.readouterr().out
        assert "SUCCESS" in out
        assert "Files generated:  21" in out

    def test_quiet_prints_nothing(
        self, output_dir: pathlib.Path, sqlite_dsn: str, capsys: pytest.CaptureFixture
    ) -> None:
        _run(["rest_app", "MyApp", sqlite_dsn, "-o", str(output_dir), "-q"])
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == ""

    def test_launcher_options(self, output_dir: pathlib.Path, sqlite_dsn: str) -> None:
        _run([
            "rest_app", "MyApp", sqlite_dsn,
            "-o", str(output_dir), "--host", "0.0.0.0", "--port", "3000", "-q",
        ])
        launcher = (output_dir / "myapp" / "script" / "myapp").read_text(encoding="utf-8")
        assert "uvicorn.run(app, host='0.0.0.0', port=3000)" in launcher

    def test_version(self, capsys: pytest.CaptureFixture) -> None:
        assert _run(["--version"]) == 0
        assert __version__ in capsys.readouterr().out

    def test_command_required(self) -> None:
        assert _run([]) == 2
