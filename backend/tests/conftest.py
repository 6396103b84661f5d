import asyncio
import inspect
import pathlib
import sys
from datetime import datetime, timezone

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from networth.config import AppSettings  # noqa: E402
from networth.services import InMemoryPortfolioSource  # noqa: E402

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers used in the suite."""

    config.addinivalue_line("markers", "asyncio: mark test as running in an asyncio event loop")


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Execute async test functions without requiring pytest-asyncio."""

    test_function = pyfuncitem.obj
    if inspect.iscoroutinefunction(test_function):
        loop = asyncio.new_event_loop()
        try:
            asyncio.set_event_loop(loop)
            funcargs = {name: pyfuncitem.funcargs[name] for name in pyfuncitem._fixtureinfo.argnames}
            loop.run_until_complete(test_function(**funcargs))
        finally:
            asyncio.set_event_loop(None)
            loop.close()
        return True
    return None


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        display_currency="AUD",
        supported_currencies=["AUD", "NZD", "USD"],
        gateway_timeout_seconds=1.0,
        telemetry_enabled=False,
        _env_file=None,
    )


@pytest.fixture
def source() -> InMemoryPortfolioSource:
    return InMemoryPortfolioSource()
