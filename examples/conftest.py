"""Fixtures for the runnable examples.

Every example directory holds an ``app.py`` that builds a module-level
``app``. The examples keep their state (user tables, counters) in module
globals, so each test loads its own copy of the module.
"""

import importlib.util
from pathlib import Path

import pytest

from trellis.app import App


def _load_app(app_path: Path) -> App:
    spec = importlib.util.spec_from_file_location(f"example_{app_path.parent.name}", app_path)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module.app


@pytest.fixture
def example_app(request: pytest.FixtureRequest) -> App:
    """The ``app`` built by the ``app.py`` next to the requesting test."""
    return _load_app(Path(request.path).parent / "app.py")
