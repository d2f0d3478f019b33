"""Smoke tests for the search_catalog command-line script."""

import importlib.util
from pathlib import Path

import pytest

from content_services.aggregation import AggregationService
from content_services.shared.config import AggregatorSettings

SCRIPT_PATH = Path(__file__).parent.parent.parent / "scripts" / "search_catalog.py"


@pytest.fixture
def search_catalog(monkeypatch):
    """The script module wired to a service with no credentials (sample data only)."""
    spec = importlib.util.spec_from_file_location("search_catalog", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    monkeypatch.setattr(module, "configure_logging", lambda level: None)
    service = AggregationService.from_env(AggregatorSettings())
    monkeypatch.setattr(module.AggregationService, "from_env", lambda: service)
    return module


def run(module, monkeypatch, *args):
    monkeypatch.setattr("sys.argv", ["search_catalog.py", *args])
    module.main()


class TestSearchCatalogScript:
    def test_status_lists_providers_and_cache(self, search_catalog, monkeypatch, capsys):
        run(search_catalog, monkeypatch, "status")
        out = capsys.readouterr().out

        assert "coursera" in out
        assert "sample data" in out
        assert "adzuna" in out
        assert "cache: 0 entries, ttl 3600s (in-process)" in out

    def test_courses_prints_sample_records(self, search_catalog, monkeypatch, capsys):
        run(search_catalog, monkeypatch, "courses", "python", "--limit", "3")
        out = capsys.readouterr().out

        assert "  1. [" in out
        assert "  4. [" not in out
        assert "Showing sample data" in out

    def test_invalid_query_exits_with_status_2(self, search_catalog, monkeypatch):
        with pytest.raises(SystemExit) as exc_info:
            run(search_catalog, monkeypatch, "courses", "python", "--limit", "0")
        assert exc_info.value.code == 2
