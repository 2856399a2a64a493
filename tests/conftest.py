"""
Global test configuration and fixtures
"""

import time
from pathlib import Path

import pytest

from svelte_unsafe_html.config import get_settings
from svelte_unsafe_html.template.svelte_parser import SvelteTemplateParser

SLOW_TEST_THRESHOLD = 2.0

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def track_test_duration(request):
    """Warn about slow tests"""
    start_time = time.time()

    yield

    duration = time.time() - start_time
    if duration > SLOW_TEST_THRESHOLD:
        print(f"\n⚠️  SLOW TEST ({duration:.2f}s): {request.node.nodeid}")


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Isolate tests from SVELTE_UNSAFE_HTML_* variables and the settings cache"""
    for name in ("SANITIZERS", "MODERN", "EXTENSIONS", "LOG_LEVEL", "LOG_FORMAT"):
        monkeypatch.delenv(f"SVELTE_UNSAFE_HTML_{name}", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def parser():
    """Svelte template parser"""
    return SvelteTemplateParser()


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


# Pytest hooks
def pytest_configure(config):
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests (parser + rule + I/O)")
    config.addinivalue_line("markers", "security: Security rule behaviour")


def pytest_collection_modifyitems(config, items):
    """Add markers based on test location"""
    for item in items:
        path = str(item.fspath)
        if "unit" in path:
            item.add_marker(pytest.mark.unit)
        elif "integration" in path:
            item.add_marker(pytest.mark.integration)
        if "unsafe_html" in path:
            item.add_marker(pytest.mark.security)


def pytest_report_header(config):
    return [
        "Test Structure: unit (nodes, parser, rule) > integration (analyze, fixtures, CLI)",
        f"Slow test threshold: {SLOW_TEST_THRESHOLD}s",
    ]
