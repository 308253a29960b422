from thumbshot.versioning import get_engine_version


def test_engine_version_default(monkeypatch):
    monkeypatch.delenv("THUMBSHOT_VERSION", raising=False)
    assert get_engine_version() == "thumbshot:2025-11-04.1"


def test_engine_version_env_override(monkeypatch):
    monkeypatch.setenv("THUMBSHOT_VERSION", "thumbshot:dev")
    assert get_engine_version() == "thumbshot:dev"
