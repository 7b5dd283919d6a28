"""
Pytest configuration for project root.

Ensures project modules can be imported in tests.
Isolates every test from the user's real config file.
"""

import sys
import pytest
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))


@pytest.fixture(autouse=True)
def isolated_config_root(tmp_path, monkeypatch):
    """Point MODELCALL_HOME at a temp dir and drop the cached config."""
    from modelcall.config import runtime

    config_root = tmp_path / "modelcall-home"
    monkeypatch.setenv("MODELCALL_HOME", str(config_root))
    runtime.get_config.cache_clear()
    yield config_root
    runtime.get_config.cache_clear()
