from reconnect.config import Settings
from reconnect.features.checkins import build_checkin_engine
from reconnect.features.checkins.birthdays import NullBirthdayProvider
from reconnect.features.checkins.domain import ResolvedContact


def test_identity_cache_config_defaults():
    config = Settings(environment="production").get_identity_cache_config()

    assert config == {"ttl_seconds": 1800.0, "negative_ttl_seconds": None, "capacity": 1000}


def test_debug_development_shortens_ttl():
    config = Settings(environment="development", debug=True).get_identity_cache_config()

    assert config["ttl_seconds"] == 300.0


def test_commands_are_split_into_argv():
    settings = Settings(CONTACT_LOOKUP_COMMAND="swift '/opt/my tools/ContactLookup.swift'")

    assert settings.lookup_command() == ["swift", "/opt/my tools/ContactLookup.swift"]


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("IDENTITY_CACHE_CAPACITY", "25")
    monkeypatch.setenv("MESSAGE_DB_PATH", "~/chat.db")

    settings = Settings()

    assert settings.IDENTITY_CACHE_CAPACITY == 25
    assert not settings.message_db_path().startswith("~")


def test_build_engine_wires_settings(tmp_path):
    settings = Settings(
        environment="production",
        MESSAGE_DB_PATH=str(tmp_path / "chat.db"),
        IDENTITY_CACHE_CAPACITY=10,
        IDENTITY_CACHE_NEGATIVE_TTL_SECONDS=60,
    )

    engine = build_checkin_engine(settings, birthdays=NullBirthdayProvider())

    assert engine.cache.capacity == 10
    assert engine.cache.negative_ttl == 60
    assert engine.ranker.history.repository.db_path == str(tmp_path / "chat.db")
    assert isinstance(engine.ranker.birthdays, NullBirthdayProvider)


def test_engine_cache_operations(tmp_path):
    engine = build_checkin_engine(Settings(MESSAGE_DB_PATH=str(tmp_path / "chat.db")))
    engine.cache.set("+15551234567", ResolvedContact("Jennifer Wilson", True))

    assert engine.cache_stats().resolved == 1
    engine.clear_cache()
    assert engine.cache_stats().total_entries == 0
