"""
Environment settings tests
"""

import logging

import pytest

from x402_sbc.exceptions import ConfigurationError
from x402_sbc.facilitator import FacilitatorClient
from x402_sbc.settings import X402Settings


def test_defaults_with_empty_environment():
    settings = X402Settings.from_env(env_file=None, environ={})

    assert settings.network is None
    assert settings.timeout_seconds == 30.0
    assert settings.skip_balance_check is False
    assert settings.log_level_value == logging.INFO


def test_env_file_is_loaded_and_environment_wins(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "X402_NETWORK=base\n"
        "X402_FACILITATOR_URL=http://localhost:4020\n"
        "X402_API_KEY=file-key\n"
        "X402_SKIP_BALANCE_CHECK=true\n"
    )

    settings = X402Settings.from_env(
        env_file=str(env_file), environ={"X402_API_KEY": "env-key", "X402_TIMEOUT_SECONDS": "5"}
    )

    assert settings.network == "base"
    assert settings.facilitator_url == "http://localhost:4020"
    assert settings.api_key == "env-key"
    assert settings.timeout_seconds == 5.0
    assert settings.skip_balance_check is True


def test_missing_env_file_is_ignored(tmp_path):
    settings = X402Settings.from_env(env_file=str(tmp_path / "missing.env"), environ={})
    assert settings.facilitator_url is None


@pytest.mark.parametrize(
    "environ",
    [
        {"X402_NETWORK": "ethereum"},
        {"X402_TIMEOUT_SECONDS": "soon"},
        {"X402_TIMEOUT_SECONDS": "0"},
        {"X402_SKIP_BALANCE_CHECK": "maybe"},
        {"X402_LOG_LEVEL": "LOUD"},
    ],
)
def test_invalid_values_raise(environ):
    with pytest.raises(ConfigurationError):
        X402Settings.from_env(env_file=None, environ=environ)


def test_facilitator_client_from_settings():
    settings = X402Settings(facilitator_url="http://localhost:4020", api_key="k")
    client = settings.facilitator_client()

    assert isinstance(client, FacilitatorClient)
    assert client.get_facilitator_url("base") == "http://127.0.0.1:4020"


@pytest.fixture
def package_logger():
    logger = logging.getLogger("x402_sbc")
    saved = (logger.level, list(logger.handlers), logger.propagate)
    yield logger
    logger.setLevel(saved[0])
    logger.handlers[:] = saved[1]
    logger.propagate = saved[2]


@pytest.mark.parametrize(
    ("raw", "expected"), [("debug", logging.DEBUG), ("WARNING", logging.WARNING)]
)
def test_log_level_is_applied(package_logger, raw, expected):
    settings = X402Settings.from_env(env_file=None, environ={"X402_LOG_LEVEL": raw})
    settings.configure_logging()

    assert package_logger.level == expected
    assert len(package_logger.handlers) == 1
    assert logging.getLogger("x402_sbc.clients.x402_client").getEffectiveLevel() == expected


def test_configure_logging_twice_keeps_one_handler(package_logger):
    settings = X402Settings(log_level="ERROR")
    settings.configure_logging()
    settings.configure_logging()

    assert len(package_logger.handlers) == 1
    assert package_logger.level == logging.ERROR
