"""
Runtime configuration for the gateway and the UI.
Values come from the process environment, optionally seeded from a .env file.
"""

import os  # environment access
import sys  # stderr sink for loguru
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv  # read .env files into os.environ
from loguru import logger  # console logger


TMDB_BASE_URL = "https://api.themoviedb.org/3"  # upstream catalog API root


@dataclass
class Settings:
	tmdb_api_key: Optional[str] = None  # upstream credential, never sent to browsers
	port: int = 5000  # gateway listening port
	environment: str = "development"  # "production" hides error detail and serves static assets
	static_dir: str = "client/build"  # built frontend served in production
	upstream_base_url: str = TMDB_BASE_URL
	upstream_timeout: float = 10.0  # seconds per upstream call
	gateway_url: str = "http://localhost:5000"  # where the UI reaches the gateway
	log_level: str = "INFO"

	@property
	def is_production(self) -> bool:
		return self.environment.lower() == "production"

	@classmethod
	def from_env(cls, env: Optional[Mapping[str, str]] = None, dotenv_path: Optional[str] = None) -> "Settings":
		"""
		Build settings from `env` (defaults to os.environ after loading .env).
		Missing or empty values fall back to the dataclass defaults.
		"""
		if env is None:
			load_dotenv(dotenv_path)  # no-op when there is no .env file
			env = os.environ

		def get(name: str, default: str) -> str:
			value = env.get(name)
			return value.strip() if value and value.strip() else default

		return cls(
			tmdb_api_key=get("TMDB_API_KEY", "") or None,
			port=int(get("PORT", "5000")),
			environment=get("APP_ENV", "development"),
			static_dir=get("STATIC_DIR", "client/build"),
			upstream_base_url=get("TMDB_BASE_URL", TMDB_BASE_URL).rstrip("/"),
			upstream_timeout=float(get("UPSTREAM_TIMEOUT", "10")),
			gateway_url=get("GATEWAY_URL", "http://localhost:5000").rstrip("/"),
			log_level=get("LOG_LEVEL", "INFO").upper(),
		)


def configure_logging(level: str = "INFO") -> None:
	"""Replace loguru's default handler with a single stderr sink at `level`."""
	logger.remove()
	logger.add(sys.stderr, level=level)
