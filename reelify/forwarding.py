"""
Gateway forwarding rules.
Maps whitelisted inbound query parameters onto upstream parameter names and
post-processes the few responses the gateway does not relay verbatim.
"""

from typing import Any, Dict, Iterable, List, Optional

from .errors import UpstreamError, ValidationError


VALID_TIME_WINDOWS = ("day", "week")
DEFAULT_WATCH_REGION = "US"  # upstream requires a region when filtering by provider

# Upstream name of the year filter differs between movies and TV
YEAR_PARAM = {
	"movie": "primary_release_year",
	"tv": "first_air_date_year",
}


def _present(value: Any) -> bool:
	return value is not None and str(value).strip() != ""  # None and blanks are absent


def list_params(
	media: str,
	page: int = 1,
	year: Optional[str] = None,
	region: Optional[str] = None,
	sort_by: Optional[str] = None,
	with_genres: Optional[str] = None,
) -> Dict[str, Any]:
	"""Upstream query for list/discover resources; empty values are dropped."""
	params: Dict[str, Any] = {"page": page}  # always sent
	if _present(year):
		params[YEAR_PARAM[media]] = str(year).strip()  # renamed per media type
	if _present(region):
		params["region"] = str(region).strip()
	if _present(sort_by):
		params["sort_by"] = str(sort_by).strip()
	if _present(with_genres):
		params["with_genres"] = str(with_genres).strip()
	return params


def provider_params(
	media: str,
	provider_id: int,
	page: int = 1,
	year: Optional[str] = None,
	region: Optional[str] = None,
	sort_by: Optional[str] = None,
	with_genres: Optional[str] = None,
) -> Dict[str, Any]:
	"""Discover-by-provider query; `region` doubles as the watch region."""
	params = list_params(media, page=page, year=year, sort_by=sort_by, with_genres=with_genres)  # no plain region
	params["with_watch_providers"] = provider_id
	params["watch_region"] = str(region).strip() if _present(region) else DEFAULT_WATCH_REGION  # mandatory upstream
	return params


def search_params(
	media: str,
	q: Optional[str],
	page: int = 1,
	year: Optional[str] = None,
	region: Optional[str] = None,
) -> Dict[str, Any]:
	if not _present(q):
		raise ValidationError("Search query 'q' is required")  # 400, upstream never called
	params: Dict[str, Any] = {"query": q.strip(), "page": page}  # upstream calls it "query"
	if _present(year):
		# search/movie uses primary_release_year, search/tv uses first_air_date_year
		params[YEAR_PARAM[media]] = str(year).strip()
	if _present(region):
		params["region"] = str(region).strip()
	return params


def check_time_window(time_window: str) -> str:
	if time_window not in VALID_TIME_WINDOWS:
		raise ValidationError("Time window must be 'day' or 'week'")
	return time_window


def parse_genre_ids(with_genres: Optional[str]) -> List[int]:
	"""Parse a comma-separated genre id list."""
	if not _present(with_genres):
		return []  # no narrowing requested
	try:
		return [int(part) for part in str(with_genres).split(",") if part.strip()]  # skip empty parts
	except ValueError:
		raise ValidationError("with_genres must be a comma-separated list of genre ids") from None


def narrow_by_genres(payload: Any, genre_ids: Iterable[int]) -> Any:
	"""
	Keep only results tagged with every id in `genre_ids`.
	Used for resources that have no genre filter upstream (trending and the fixed
	lists). Only the current page is narrowed; total_pages is left as reported.
	"""
	wanted = set(genre_ids)
	if not wanted or not isinstance(payload, dict):
		return payload  # nothing to narrow, or nothing we understand
	results = payload.get("results") or []
	narrowed = dict(payload)  # shallow copy; the upstream dict is not mutated
	narrowed["results"] = [r for r in results if wanted.issubset(set(r.get("genre_ids") or []))]
	return narrowed


def select_trailer(videos: Iterable[Dict[str, Any]], site: Optional[str] = "YouTube") -> Optional[str]:
	"""
	Return the key of the first video typed "Trailer", preferring `site`.
	Falls back to the first trailer hosted anywhere; None when there is none.
	"""
	trailers = [v for v in videos if v.get("type") == "Trailer" and v.get("key")]  # teasers and clips excluded
	if site:
		for video in trailers:
			if video.get("site") == site:
				return video["key"]  # preferred host
	return trailers[0]["key"] if trailers else None  # any host, else nothing


def extract_genres(payload: Any) -> List[Dict[str, Any]]:
	"""Unwrap the upstream genre list ({genres: [...]}) into the bare array."""
	if isinstance(payload, dict) and isinstance(payload.get("genres"), list):
		return payload["genres"]
	raise UpstreamError("Unexpected genres data format", detail=f"Got {type(payload).__name__} without a genres array")
