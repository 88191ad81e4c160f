import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from gridduel.config import DEFAULT_MODEL, Settings, _as_bool, load_settings

ENV_KEYS = (
    "OPENAI_API_KEY", "GRIDDUEL_MODEL", "SUPABASE_URL", "SUPABASE_KEY",
    "GRIDDUEL_LOG_LEVEL", "GRIDDUEL_STRICT_ENERGY",
)


def clear_env(monkeypatch):
    # setenv first so monkeypatch removes the variable again afterwards
    for key in ENV_KEYS:
        monkeypatch.setenv(key, "placeholder")
        monkeypatch.delenv(key)


def test_defaults(monkeypatch, tmp_path):
    clear_env(monkeypatch)
    settings = load_settings(str(tmp_path / "missing.env"))
    assert settings == Settings()
    assert settings.openai_model == DEFAULT_MODEL
    assert settings.strict_energy is True
    assert not settings.narration_enabled
    assert not settings.persistence_enabled


def test_environment_overrides(monkeypatch, tmp_path):
    clear_env(monkeypatch)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("GRIDDUEL_MODEL", "gpt-4o-mini")
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
    monkeypatch.setenv("SUPABASE_KEY", "anon")
    monkeypatch.setenv("GRIDDUEL_LOG_LEVEL", "debug")
    monkeypatch.setenv("GRIDDUEL_STRICT_ENERGY", "no")

    settings = load_settings(str(tmp_path / "missing.env"))
    assert settings.narration_enabled
    assert settings.persistence_enabled
    assert settings.openai_model == "gpt-4o-mini"
    assert settings.log_level == "DEBUG"
    assert settings.strict_energy is False


def test_dotenv_file_is_loaded(monkeypatch, tmp_path):
    clear_env(monkeypatch)
    env_file = tmp_path / ".env"
    env_file.write_text("OPENAI_API_KEY=sk-from-file\nGRIDDUEL_STRICT_ENERGY=0\n")

    settings = load_settings(str(env_file))
    assert settings.openai_api_key == "sk-from-file"
    assert settings.strict_energy is False


def test_as_bool():
    for raw in ("1", "true", "YES", " on "):
        assert _as_bool(raw)
    for raw in ("0", "false", "off", ""):
        assert not _as_bool(raw)
