import pytest

from coc_keygen.config import API_BASE_URL, DEFAULT_KEY_NAME, DEFAULT_TIMEOUT, settings_from_env
from coc_keygen.errors import ConfigurationError

ENV_VARS = ["COC_EMAIL", "COC_PASSWORD", "COC_KEY_NAME", "COC_DEV_SITE_URL", "COC_API_URL", "COC_HTTP_TIMEOUT"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = settings_from_env()
    assert settings.email == ""
    assert settings.key_name == DEFAULT_KEY_NAME
    assert settings.api_url == API_BASE_URL
    assert settings.timeout == DEFAULT_TIMEOUT


def test_from_environment(monkeypatch):
    monkeypatch.setenv("COC_EMAIL", "a@b.c")
    monkeypatch.setenv("COC_PASSWORD", "pw")
    monkeypatch.setenv("COC_KEY_NAME", "my-bot")
    monkeypatch.setenv("COC_DEV_SITE_URL", "https://portal.test/api/")
    monkeypatch.setenv("COC_HTTP_TIMEOUT", "2.5")

    settings = settings_from_env()

    assert (settings.email, settings.password, settings.key_name) == ("a@b.c", "pw", "my-bot")
    assert settings.dev_site_url == "https://portal.test/api"
    assert settings.timeout == 2.5


@pytest.mark.parametrize("raw", ["soon", "0", "-1"])
def test_invalid_timeout(monkeypatch, raw):
    monkeypatch.setenv("COC_HTTP_TIMEOUT", raw)
    with pytest.raises(ConfigurationError):
        settings_from_env()
