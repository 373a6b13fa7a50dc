"""Root test configuration."""

import logging

import pytest
import structlog
from fake_gateway import FakeGateway
from qcloud_apigateway import APIGateway, Settings


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


@pytest.fixture
def settings():
    """Settings isolated from QCLOUD_* variables and .env files."""
    return Settings(_env_file=None, secret_id=None, secret_key=None, region="gz")


@pytest.fixture
def fake():
    return FakeGateway()


@pytest.fixture
def gateway(fake, settings):
    return APIGateway("x", "x", settings=settings, transport_factory=fake.factory)
