import pytest

from admintools.config import get_settings


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Every test starts from an empty ADMIN_* environment and a fresh settings cache."""
    for name in (
        "ADMIN_TARGETS",
        "ADMIN_PING_TIMEOUT",
        "ADMIN_QUERY_TIMEOUT",
        "ADMIN_SKIP_PROBE",
        "ADMIN_PASSWORD_LENGTH",
        "ADMIN_MAX_ATTEMPTS",
        "ADMIN_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
