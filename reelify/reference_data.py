"""
Reference data loaded once at startup: genre lists, streaming providers,
countries and release years. Read-only afterwards.
"""

from datetime import date
from typing import Any, Callable, List, Optional

from loguru import logger  # console logger

from .errors import CatalogError
from .models import Country, Genre, Provider, ReferenceData


ANIMATION_GENRE_NAMES = ("Animation", "Family", "Fantasy")  # genres offered in the animation section

# Major film-producing countries offered as region filters
COUNTRIES = [
	Country("US", "United States"),
	Country("GB", "United Kingdom"),
	Country("FR", "France"),
	Country("JP", "Japan"),
	Country("KR", "South Korea"),
	Country("IN", "India"),
	Country("IT", "Italy"),
	Country("DE", "Germany"),
	Country("ES", "Spain"),
	Country("CN", "China"),
]


def year_options(current_year: Optional[int] = None, earliest: int = 1900) -> List[int]:
	"""Years from `current_year` down to `earliest`, newest first."""
	current_year = current_year or date.today().year
	return list(range(current_year, earliest - 1, -1))


class ReferenceCatalog:
	"""
	Fetches reference lists through the gateway client the first time they are
	needed and serves the cached copy afterwards.
	A list that fails to load degrades to empty rather than breaking the UI.
	"""

	def __init__(self, client, provider_region: str = "US"):
		self.client = client  # anything with get_json(path, params)
		self.provider_region = provider_region
		self._data: Optional[ReferenceData] = None

	@property
	def loaded(self) -> bool:
		return self._data is not None

	def load(self) -> ReferenceData:
		if self._data is not None:
			return self._data

		genres = self._fetch_list("/api/genres", "genres", self._to_genre)
		tv_genres = self._fetch_list("/api/tv/genres", "TV genres", self._to_genre)
		providers = self._fetch_list(
			"/api/providers", "providers", self._to_provider, params={"region": self.provider_region}
		)
		self._data = ReferenceData(
			genres=genres,
			tv_genres=tv_genres,
			animation_genres=[g for g in genres if g.name in ANIMATION_GENRE_NAMES],
			providers=providers,
			countries=list(COUNTRIES),
			years=year_options(),
		)
		logger.info(
			f"[Reference] Loaded {len(genres)} genres, {len(tv_genres)} TV genres, {len(providers)} providers"
		)
		return self._data

	def _fetch_list(self, path: str, label: str, convert: Callable[[Any], Any], params=None) -> list:
		try:
			data = self.client.get_json(path, params)
		except CatalogError as e:
			logger.error(f"[Reference] Error fetching {label}: {e.message}")
			return []
		if not isinstance(data, list):
			logger.error(f"[Reference] {label} data is not a list: {type(data).__name__}")
			return []
		items = []
		for entry in data:
			try:
				items.append(convert(entry))
			except (KeyError, TypeError, ValueError) as e:
				logger.warning(f"[Reference] Skipping malformed {label} entry {entry!r}: {e}")
		return items

	@staticmethod
	def _to_genre(entry) -> Genre:
		return Genre(id=int(entry["id"]), name=str(entry["name"]))

	@staticmethod
	def _to_provider(entry) -> Provider:
		return Provider(
			id=int(entry["provider_id"]),
			name=str(entry["provider_name"]),
			logo_path=entry.get("logo_path"),
		)
