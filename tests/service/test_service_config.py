import pytest

from gk_quantiles.exceptions import ConfigurationError
from gk_quantiles.service.config import get_service_config
from gk_quantiles.service.constants import DEFAULT_EPSILON, DEFAULT_HTTP_PORT, DEFAULT_METRICS_QUANTILES


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for variable in ["GK_DEFAULT_EPSILON", "GK_METRICS_QUANTILES", "HTTP_PORT"]:
        monkeypatch.delenv(variable, raising=False)


def test_defaults():
    config = get_service_config()

    assert config == {
        "default_epsilon": DEFAULT_EPSILON,
        "metrics_quantiles": DEFAULT_METRICS_QUANTILES,
        "http_port": DEFAULT_HTTP_PORT,
    }


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("GK_DEFAULT_EPSILON", "0.05")
    monkeypatch.setenv("GK_METRICS_QUANTILES", "0.25, 0.75,")
    monkeypatch.setenv("HTTP_PORT", "9090")

    config = get_service_config()

    assert config["default_epsilon"] == 0.05
    assert config["metrics_quantiles"] == (0.25, 0.75)
    assert config["http_port"] == 9090


@pytest.mark.parametrize("raw", ["0", "1", "-0.5", "2"])
def test_epsilon_out_of_range(monkeypatch, raw):
    monkeypatch.setenv("GK_DEFAULT_EPSILON", raw)

    with pytest.raises(ConfigurationError, match="GK_DEFAULT_EPSILON must be in the range"):
        get_service_config()


def test_epsilon_not_a_number(monkeypatch):
    monkeypatch.setenv("GK_DEFAULT_EPSILON", "small")

    with pytest.raises(ConfigurationError, match="GK_DEFAULT_EPSILON must be a float"):
        get_service_config()


def test_quantiles_not_numbers(monkeypatch):
    monkeypatch.setenv("GK_METRICS_QUANTILES", "0.5,p99")

    with pytest.raises(ConfigurationError, match="comma separated list of floats"):
        get_service_config()


def test_quantiles_out_of_range(monkeypatch):
    monkeypatch.setenv("GK_METRICS_QUANTILES", "0.5,99")

    with pytest.raises(ConfigurationError, match=r"values must be in \[0, 1\]"):
        get_service_config()


def test_configuration_error_reports_epsilon():
    error = ConfigurationError("epsilon must be in the range (0, 1)", epsilon=2.0)

    assert str(error) == "epsilon must be in the range (0, 1) (epsilon: 2.0)"
    assert error.epsilon == 2.0


def test_http_port_not_an_integer(monkeypatch):
    monkeypatch.setenv("HTTP_PORT", "http")

    with pytest.raises(ConfigurationError, match="HTTP_PORT must be an integer: http"):
        get_service_config()
