from __future__ import annotations

import importlib.util
from pathlib import Path

import pytest

from conftest import FakeChecker, FakeRevisionSource
from prober import cli

SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "workflows" / "find-lbt-images.py"


@pytest.fixture
def script():
    spec = importlib.util.spec_from_file_location("find_lbt_images", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def checker(monkeypatch, tmp_path) -> FakeChecker:
    monkeypatch.chdir(tmp_path)
    fake = FakeChecker()
    monkeypatch.setattr(cli, "build_revision_source",
                        lambda config, log=None: FakeRevisionSource(["abcdef1234" + "0" * 30]))
    monkeypatch.setattr(cli, "build_checker", lambda config: fake)
    return fake


def test_exports_tag_to_github_output(script, checker, monkeypatch, tmp_path, capsys) -> None:
    checker.images = {"A": {"land_abcdef12"}}
    output = tmp_path / "github_output"
    monkeypatch.setenv("GITHUB_OUTPUT", str(output))

    rc = script.main(["--repository", "A", "--max-offset", "0"])

    assert rc == 0
    assert output.read_text() == "image_tag=land_abcdef12\n"
    assert capsys.readouterr().out.strip() == "land_abcdef12"


def test_failure_writes_nothing(script, checker, monkeypatch, tmp_path) -> None:
    output = tmp_path / "github_output"
    monkeypatch.setenv("GITHUB_OUTPUT", str(output))

    rc = script.main(["--repository", "A", "--max-offset", "0"])

    assert rc == 1
    assert not output.exists()


@pytest.mark.parametrize("flag", ["--output-format", "--output"])
def test_json_output_flag_still_exports_plain_tag(
    script, checker, monkeypatch, tmp_path, capsys, flag
) -> None:
    checker.images = {"A": {"land_abcdef12"}}
    output = tmp_path / "github_output"
    monkeypatch.setenv("GITHUB_OUTPUT", str(output))

    rc = script.main(["--repository", "A", "--max-offset", "0", flag, "json"])

    assert rc == 0
    assert output.read_text() == "image_tag=land_abcdef12\n"
    assert capsys.readouterr().out.strip() == "land_abcdef12"


def test_check_tag_is_exported(script, checker, monkeypatch, tmp_path) -> None:
    checker.images = {"A": {"land_12345678"}}
    output = tmp_path / "github_output"
    monkeypatch.setenv("GITHUB_OUTPUT", str(output))

    assert script.main(["--repository", "A", "--check-tag", "land_12345678"]) == 0
    assert output.read_text() == "image_tag=land_12345678\n"


def test_help_is_printed(script, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        script.main(["--help"])

    assert excinfo.value.code == 0
    assert "--max-offset" in capsys.readouterr().out
