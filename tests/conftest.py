import pytest

from imagekit_web.config import ENV_VARS, CONFIG_PATH_ENV, reset_settings

ENDPOINT = "https://ik.example.com/acct"


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    for var in list(ENV_VARS) + [CONFIG_PATH_ENV]:
        monkeypatch.delenv(var, raising=False)
    reset_settings()
    yield
    reset_settings()
