"""
Resource resolver.
Turns a BrowsingContext into the single gateway request that should be issued for it.
One table serves every content kind; animation reuses the movie resources narrowed
to the Animation genre.
"""

from dataclasses import dataclass, field  # immutable request value
from typing import Dict, Optional
from urllib.parse import urlencode  # query-string rendering for logs and links

from .models import BrowsingContext, ContentKind, ViewMode


ANIMATION_GENRE_ID = 16  # upstream genre id for "Animation"

# Fixed list resources per content kind
_LIST_PATHS: Dict[ContentKind, Dict[ViewMode, str]] = {
	ContentKind.MOVIE: {
		ViewMode.NOW_PLAYING: "/api/now_playing",
		ViewMode.POPULAR: "/api/movies",
		ViewMode.TOP_RATED: "/api/top_rated",
		ViewMode.UPCOMING: "/api/upcoming",
	},
	ContentKind.TV: {
		ViewMode.NOW_PLAYING: "/api/tv/on_the_air",  # TV has no theatrical run
		ViewMode.AIRING_TODAY: "/api/tv/airing_today",
		ViewMode.POPULAR: "/api/tv/popular",
		ViewMode.TOP_RATED: "/api/tv/top_rated",
	},
}
_LIST_PATHS[ContentKind.ANIMATION] = _LIST_PATHS[ContentKind.MOVIE]  # same resources, genre-narrowed

# Prefixes for the parameterized resources (trending, search, genre, provider)
_PREFIX = {
	ContentKind.MOVIE: "/api",
	ContentKind.TV: "/api/tv",
	ContentKind.ANIMATION: "/api",
}
_ITEM_PREFIX = {
	ContentKind.MOVIE: "/api/movies",
	ContentKind.TV: "/api/tv",
	ContentKind.ANIMATION: "/api/movies",
}


@dataclass(frozen=True)
class ResolvedRequest:
	"""
	A gateway request: path plus query parameters (only non-empty values).
	`required_genre_id` asks the caller to narrow results locally when the
	resource cannot filter by genre upstream.
	"""
	path: str
	params: Dict[str, str] = field(default_factory=dict)
	required_genre_id: Optional[int] = None

	def url(self, base_url: str = "") -> str:
		query = urlencode(self.params)  # stable order: insertion order of params
		return f"{base_url.rstrip('/')}{self.path}" + (f"?{query}" if query else "")


def supported_view_modes(kind: ContentKind):
	"""View modes the given content kind can display, in menu order."""
	listed = _LIST_PATHS[kind]  # fixed lists differ per kind
	modes = [ViewMode.TRENDING] + [m for m in ViewMode if m in listed]  # enum order
	return modes + [ViewMode.BY_GENRE, ViewMode.BY_PROVIDER, ViewMode.SEARCH]  # always available


def item_path(kind: ContentKind, item_id: int, suffix: str = "") -> str:
	"""Path of a single-item resource, e.g. item_path(TV, 5, "trailer") -> /api/tv/5/trailer."""
	path = f"{_ITEM_PREFIX[kind]}/{item_id}"
	return f"{path}/{suffix}" if suffix else path


def _base_path(context: BrowsingContext) -> str:
	kind, mode = context.content_kind, context.view_mode
	if mode == ViewMode.TRENDING:
		return f"{_PREFIX[kind]}/trending/{context.time_window.value}"  # day | week
	if mode == ViewMode.SEARCH:
		return f"{_PREFIX[kind]}/search"
	if mode == ViewMode.BY_GENRE:
		if context.selected_genre_id is None:
			raise ValueError("byGenre requires a selected genre")
		return f"{_ITEM_PREFIX[kind]}/genre/{context.selected_genre_id}"
	if mode == ViewMode.BY_PROVIDER:
		if context.selected_provider_id is None:
			raise ValueError("byProvider requires a selected provider")
		return f"{_ITEM_PREFIX[kind]}/provider/{context.selected_provider_id}"
	try:
		return _LIST_PATHS[kind][mode]  # fixed list resource
	except KeyError:
		raise ValueError(f"View mode {mode.value} is not available for {kind.value}") from None


def resolve_request(context: BrowsingContext) -> Optional[ResolvedRequest]:
	"""
	Derive the one request for `context`.
	Returns None for a search with blank text (nothing should be sent).
	Raises ValueError for a mode the content kind does not support.
	"""
	params: Dict[str, str] = {}  # only non-empty values end up here
	if context.view_mode == ViewMode.SEARCH:
		text = context.search_text.strip()  # surrounding whitespace is never sent
		if not text:
			return None  # blank search: no request at all
		params["q"] = text

	path = _base_path(context)  # raises for unsupported (kind, mode) pairs
	params["page"] = str(context.page)  # always present, 1-based

	# Append whichever filters are set; the gateway ignores those a resource cannot use
	filters = context.filters
	if filters.year:
		params["year"] = str(filters.year)  # gateway renames per media type
	if filters.country_code:
		params["region"] = filters.country_code  # ISO 3166-1 code
	if filters.sort_key:
		params["sort_by"] = filters.sort_key  # e.g. popularity.desc

	required_genre_id = None  # no local narrowing outside the animation section
	if context.content_kind == ContentKind.ANIMATION:
		params["with_genres"] = str(ANIMATION_GENRE_ID)  # honored by discover and trending
		# Fixed lists, search and genre discovery ignore with_genres upstream, so every
		# animation page is narrowed locally as well
		required_genre_id = ANIMATION_GENRE_ID

	return ResolvedRequest(path=path, params=params, required_genre_id=required_genre_id)
