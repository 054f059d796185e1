"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import os
import sys
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local pymove package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of pymove modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("pymove"):
        del sys.modules[module_name]

from pymove.config import loader  # noqa: E402
from pymove.parsing.treesitter import PythonParser  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_config(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Keep the user's global config and PYMOVE__ env vars out of tests."""
    monkeypatch.setattr(
        loader, "GLOBAL_CONFIG_PATH", tmp_path_factory.mktemp("global") / "config.yaml"
    )
    for key in list(os.environ):
        if key.upper().startswith("PYMOVE__"):
            monkeypatch.delenv(key)


@pytest.fixture
def parser() -> PythonParser:
    """Shared Python parser."""
    return PythonParser()
