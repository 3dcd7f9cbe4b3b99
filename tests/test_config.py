from parasocial.config import Settings


def test_rate_limit_storage_in_memory_for_development() -> None:
    settings = Settings(env_name="development", rate_limit_storage_uri=None)
    assert settings.rate_limit_storage == "memory://"


def test_rate_limit_storage_uses_redis_elsewhere() -> None:
    settings = Settings(
        env_name="production",
        redis_url="redis://cache:6379/2",
        rate_limit_storage_uri=None,
    )
    assert settings.rate_limit_storage == "redis://cache:6379/2"


def test_explicit_rate_limit_storage_wins() -> None:
    settings = Settings(env_name="production", rate_limit_storage_uri="memory://")
    assert settings.rate_limit_storage == "memory://"


def test_cors_origins_list() -> None:
    settings = Settings(cors_origins="http://a.test, http://b.test,")
    assert settings.cors_origins_list == ["http://a.test", "http://b.test"]
