import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'asyncstate' and tests/ importable for helpers.
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))


from asyncstate.core.audit import reset_stdlib_logging_for_tests
from asyncstate.core.state import action_registry, guard_registry, resolver_registry


@pytest.fixture(autouse=True)
def _reset_global_state() -> None:
    """Ensure global handler registries and log handlers are fresh for each test."""
    for registry in (guard_registry, resolver_registry, action_registry):
        registry.reset()
    yield
    for registry in (guard_registry, resolver_registry, action_registry):
        registry.reset()
    reset_stdlib_logging_for_tests()
