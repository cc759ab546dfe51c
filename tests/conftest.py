# tests/conftest.py
import os, sys, pathlib

import pytest

# Keep developer .env / MDC_* overrides out of the test run
for _k in [k for k in os.environ if k.startswith("MDC_")]:
    os.environ.pop(_k)


# Add <repo>/src to sys.path so `import async_mdc...` works under pytest
ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from async_mdc import MDC  # noqa: E402


@pytest.fixture
def mdc():
    return MDC()
