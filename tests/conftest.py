import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def _wifictl_logging_enabled():  # type: ignore[no-untyped-def]
    yield
    # `serve --no-logs` disables the package logger process-wide.
    logger.enable("wifictl")
