# tests/conftest.py
import sys, os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dataclasses import replace
from pathlib import Path

import pytest
from config import TEST
from environment import load_context
from state import InstallerOptions

ROOT = Path(__file__).resolve().parent.parent


def make_context(config=None, **runtime_overrides):
    """Context loaded from the bundled testdir, optionally tweaked."""
    config = replace(config or TEST, base_path=str(ROOT / "testdir"))
    context = load_context(config)
    if runtime_overrides:
        context = replace(
            context, runtime_info=replace(context.runtime_info, **runtime_overrides)
        )
    return context

@pytest.fixture
def context():
    return make_context()

@pytest.fixture
def options(context):
    return InstallerOptions.defaults(context)
