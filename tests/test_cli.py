# tests/test_cli.py
"""
Tests for the locator-core command-line interface.
"""

import json
import logging

import pytest

from conftest import REFERENCE_HTML
from locator_core.cli import main
from locator_core import logconfig
from locator_core.logconfig import LocatorLogFormatter, get_logger, setup_logging


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by main() so later tests start clean."""
    yield
    root = logging.getLogger(logconfig.ROOT_LOGGER)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.NOTSET)
    logconfig._initialized = False


@pytest.fixture
def html_file(tmp_path):
    path = tmp_path / "page.html"
    path.write_text(REFERENCE_HTML, encoding="utf-8")
    return str(path)


@pytest.fixture
def record_file(tmp_path, html_file):
    out = tmp_path / "records" / "submit.json"
    rc = main(["record", "--html", html_file, "--select", "//button[@data-testid='submit-btn']", "--out", str(out)])
    assert rc == 0
    return str(out)


class TestXPathCommand:
    """Tests for the xpath subcommand."""

    def test_prints_path(self, html_file, capsys):
        rc = main(["xpath", "--html", html_file, "--select", "//h1"])
        assert rc == 0
        assert capsys.readouterr().out.strip() == "//h1[@id='title']"

    def test_no_path(self, html_file, capsys):
        rc = main(["xpath", "--html", html_file, "--select", "//body"])
        assert rc == 2
        assert "No stable path" in capsys.readouterr().err

    def test_selector_without_match(self, html_file, capsys):
        rc = main(["xpath", "--html", html_file, "--select", "//video"])
        assert rc == 1
        assert "Error:" in capsys.readouterr().err

    def test_missing_html(self, tmp_path, capsys):
        rc = main(["xpath", "--html", str(tmp_path / "nope.html"), "--select", "//h1"])
        assert rc == 1
        assert "Error:" in capsys.readouterr().err


class TestRecordCommand:
    """Tests for the record subcommand."""

    def test_prints_json(self, html_file, capsys):
        rc = main(["record", "--html", html_file, "--select", "//button[@data-testid='submit-btn']"])
        assert rc == 0
        data = json.loads(capsys.readouterr().out)
        assert data["tag"] == "button"
        assert data["stabilityLevel"] == "A"

    def test_writes_file(self, record_file):
        with open(record_file, "r", encoding="utf-8") as f:
            data = json.load(f)
        assert data["attributes"]["data-testid"] == "submit-btn"
        assert data["version"] == 1


class TestLocateCommand:
    """Tests for the locate subcommand."""

    def test_locates(self, html_file, record_file, capsys):
        capsys.readouterr()
        rc = main(["locate", "--html", html_file, "--record", record_file])
        out = capsys.readouterr().out
        assert rc == 0
        assert out.startswith("Located: tag=button")
        assert "strategy: strong_attribute" in out

    def test_ranked(self, html_file, record_file, capsys):
        capsys.readouterr()
        rc = main(["locate", "--html", html_file, "--record", record_file, "--all", "--limit", "2"])
        lines = capsys.readouterr().out.splitlines()
        assert rc == 0
        assert lines[0].startswith("1. score=")
        assert 'data-testid="submit-btn"' in lines[0]
        assert lines[2].startswith("2. score=")
        assert len([l for l in lines if l[0].isdigit()]) == 2

    def test_not_found(self, tmp_path, record_file, capsys):
        other = tmp_path / "other.html"
        other.write_text("<html><body><p>Nothing here</p></body></html>", encoding="utf-8")
        rc = main(["locate", "--html", str(other), "--record", record_file])
        assert rc == 2
        assert "node not found" in capsys.readouterr().err

    def test_invalid_record(self, tmp_path, html_file, capsys):
        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps({"tag": "button", "version": 3}), encoding="utf-8")
        rc = main(["locate", "--html", html_file, "--record", str(bad)])
        assert rc == 1
        assert "unsupported record version" in capsys.readouterr().err


class TestGlobalOptions:
    """Tests for --config and the signals subcommand."""

    def test_config_applies(self, tmp_path, html_file, capsys):
        cfg = tmp_path / "locator.yaml"
        cfg.write_text("infer_implicit_roles: true\n", encoding="utf-8")
        rc = main(["--config", str(cfg), "signals", "--html", html_file, "--select", "//button[@id='delete-btn']"])
        assert rc == 0
        data = json.loads(capsys.readouterr().out)
        assert data["role"] == "button"
        assert data["index_among_same_tag"] == 2

    def test_bad_config(self, tmp_path, html_file, capsys):
        cfg = tmp_path / "locator.yaml"
        cfg.write_text("unknown_key: 1\n", encoding="utf-8")
        rc = main(["--config", str(cfg), "xpath", "--html", html_file, "--select", "//h1"])
        assert rc == 1
        assert "unknown config keys" in capsys.readouterr().err

    def test_log_file(self, tmp_path, html_file):
        log_path = tmp_path / "logs" / "locator.log"
        rc = main(["--log-file", str(log_path), "xpath", "--html", html_file, "--select", "//h1"])
        assert rc == 0
        assert "Command started: xpath" in log_path.read_text(encoding="utf-8")


class TestLogging:
    """Tests for logging setup."""

    def test_formatter(self):
        record = logging.LogRecord("locator_core.xpath", logging.WARNING, __file__, 1, "bad path", None, None)
        line = LocatorLogFormatter().format(record)
        assert line.endswith("[WARNING ] locator_core.xpath: bad path")
        assert line.startswith("[")

    def test_setup_is_idempotent(self):
        root = setup_logging(logging.WARNING)
        count = len(root.handlers)
        setup_logging(logging.DEBUG)
        assert len(root.handlers) == count

    def test_get_logger_namespaced(self):
        assert get_logger("cli").name == "locator_core.cli"
        assert get_logger("locator_core.xpath").name == "locator_core.xpath"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
