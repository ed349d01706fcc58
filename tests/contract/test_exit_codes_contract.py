from __future__ import annotations

from pathlib import Path

from sheet_docstore.cli.__main__ import (
    EXIT_FATAL,
    EXIT_NOT_FOUND,
    EXIT_PARTIAL_FAILURE,
    EXIT_SUCCESS,
)
from sheet_docstore.cli.__main__ import main as cli_main
from sheet_docstore.logging.init import reset_logging

"""Exit code contract tests."""


def test_exit_code_values():
    assert (EXIT_SUCCESS, EXIT_FATAL, EXIT_PARTIAL_FAILURE, EXIT_NOT_FOUND) == (0, 1, 2, 3)


def test_exit_code_fatal_missing_config(temp_workdir: Path, capsys):
    reset_logging()
    code = cli_main(["get-docs"])
    assert code == EXIT_FATAL
    assert "ERROR config:" in capsys.readouterr().err


def test_exit_code_fatal_missing_workbook(write_config, capsys):
    reset_logging()
    assert cli_main(["get-docs"]) == EXIT_FATAL
    assert cli_main(["get-doc", "1"]) == EXIT_FATAL
    assert cli_main(["update-doc", "1", "--data", "{}"]) == EXIT_FATAL
    assert capsys.readouterr().out.count("access_error") == 1


def test_exit_code_success_and_not_found(write_config, people_workbook, capsys):
    reset_logging()
    assert cli_main(["get-doc", "1"]) == EXIT_SUCCESS
    assert cli_main(["get-doc", "404"]) == EXIT_NOT_FOUND
