from reelify.config import TMDB_BASE_URL, Settings
from reelify.errors import NotFoundError, UpstreamError


def test_defaults_from_empty_environment():
	settings = Settings.from_env(env={})
	assert settings.tmdb_api_key is None
	assert settings.port == 5000
	assert settings.is_production is False
	assert settings.upstream_base_url == TMDB_BASE_URL
	assert settings.upstream_timeout == 10.0


def test_values_from_environment():
	settings = Settings.from_env(env={
		"TMDB_API_KEY": " abc ",
		"PORT": "8080",
		"APP_ENV": "Production",
		"UPSTREAM_TIMEOUT": "2.5",
		"GATEWAY_URL": "http://gw:9000/",
		"LOG_LEVEL": "debug",
	})
	assert settings.tmdb_api_key == "abc"
	assert settings.port == 8080
	assert settings.is_production is True
	assert settings.upstream_timeout == 2.5
	assert settings.gateway_url == "http://gw:9000"
	assert settings.log_level == "DEBUG"


def test_blank_key_counts_as_missing():
	assert Settings.from_env(env={"TMDB_API_KEY": "   "}).tmdb_api_key is None


def test_dotenv_file_is_read(tmp_path, monkeypatch):
	monkeypatch.delenv("TMDB_API_KEY", raising=False)
	env_file = tmp_path / ".env"
	env_file.write_text("TMDB_API_KEY=from-dotenv\n", encoding="utf-8")

	settings = Settings.from_env(dotenv_path=str(env_file))

	assert settings.tmdb_api_key == "from-dotenv"
	monkeypatch.delenv("TMDB_API_KEY", raising=False)


def test_error_payloads():
	err = UpstreamError("Error fetching genres", detail="timeout")
	assert err.to_payload() == {"message": "Error fetching genres"}
	assert err.to_payload(include_detail=True) == {"message": "Error fetching genres", "error": "timeout"}
	assert NotFoundError("No trailer found").status_code == 404
