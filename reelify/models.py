"""
Data models for Reelify.
Defines the browsing context and the catalog records shared by the gateway,
the view-state controller and the UI.
"""

# Import dataclass helpers to define simple "record-like" classes without boilerplate
from dataclasses import dataclass, field, asdict  # auto-generates __init__, __repr__, etc.
from enum import Enum  # closed sets of values (content kinds, view modes)
# Import typing helpers for precise and self-documenting types
from typing import Any, Dict, List, Optional, Tuple


DEFAULT_SORT_KEY = "popularity.desc"  # upstream default ordering for list views


class ContentKind(str, Enum):
	"""Which catalog section the user is browsing."""
	MOVIE = "movie"
	TV = "tv"
	ANIMATION = "animation"


class ViewMode(str, Enum):
	"""Selects which upstream resource is currently displayed."""
	TRENDING = "trending"
	NOW_PLAYING = "nowPlaying"
	AIRING_TODAY = "airingToday"  # TV only
	POPULAR = "popular"
	TOP_RATED = "topRated"
	UPCOMING = "upcoming"
	BY_GENRE = "byGenre"
	BY_PROVIDER = "byProvider"
	SEARCH = "search"


class TimeWindow(str, Enum):
	DAY = "day"
	WEEK = "week"


@dataclass(frozen=True)
class Filters:
	"""
	User-selected list filters.
	Empty strings and None both mean "not set" and are never sent upstream.
	"""
	year: Optional[int] = None  # release / first-air year
	country_code: str = ""  # ISO 3166-1 code forwarded as `region`
	sort_key: str = DEFAULT_SORT_KEY  # e.g. "vote_average.desc"


@dataclass(frozen=True)
class BrowsingContext:
	"""
	The complete client-side state that determines the next request.
	Instances are immutable; the controller replaces them on every transition.
	"""
	content_kind: ContentKind = ContentKind.MOVIE
	view_mode: ViewMode = ViewMode.TRENDING
	time_window: TimeWindow = TimeWindow.DAY
	page: int = 1  # 1-based pagination cursor
	total_pages: int = 1  # last page reported by upstream
	filters: Filters = field(default_factory=Filters)
	selected_genre_id: Optional[int] = None  # set while in BY_GENRE
	selected_provider_id: Optional[int] = None  # set while in BY_PROVIDER
	search_text: str = ""  # last submitted (non-blank) query

	def to_dict(self) -> Dict[str, Any]:
		"""Plain-dict form with enum values, suitable for JSON or session storage."""
		data = asdict(self)
		data["content_kind"] = self.content_kind.value
		data["view_mode"] = self.view_mode.value
		data["time_window"] = self.time_window.value
		return data


@dataclass(frozen=True)
class CatalogItem:
	"""
	A single movie or TV show as returned by the upstream catalog.
	TV payloads carry `name`/`first_air_date`; they are mapped onto title/release_date.
	"""
	id: int
	title: str
	overview: str = ""
	poster_path: Optional[str] = None
	backdrop_path: Optional[str] = None
	vote_average: float = 0.0  # 0.0 - 10.0
	release_date: Optional[str] = None  # YYYY-MM-DD when known
	genre_ids: Tuple[int, ...] = ()

	@classmethod
	def from_payload(cls, data: Dict[str, Any]) -> "CatalogItem":
		return cls(
			id=int(data.get("id", 0)),
			title=data.get("title") or data.get("name") or "",
			overview=data.get("overview") or "",
			poster_path=data.get("poster_path"),
			backdrop_path=data.get("backdrop_path"),
			vote_average=float(data.get("vote_average") or 0.0),
			release_date=data.get("release_date") or data.get("first_air_date") or None,
			genre_ids=tuple(data.get("genre_ids") or ()),
		)

	@property
	def year(self) -> Optional[str]:
		return self.release_date[:4] if self.release_date else None


@dataclass
class SelectedItem:
	"""The item open in the detail view and its lazily-resolved trailer key."""
	item: CatalogItem
	trailer_key: Optional[str] = None


@dataclass(frozen=True)
class Genre:
	id: int
	name: str


@dataclass(frozen=True)
class Provider:
	id: int
	name: str
	logo_path: Optional[str] = None


@dataclass(frozen=True)
class Country:
	code: str
	name: str


@dataclass(frozen=True)
class TrailerResult:
	"""
	Outcome of an on-demand trailer lookup.
	`unavailable` means the item has no trailer; `failed` means the lookup itself broke.
	"""
	status: str  # "available" | "unavailable" | "failed"
	key: Optional[str] = None
	message: Optional[str] = None

	AVAILABLE = "available"
	UNAVAILABLE = "unavailable"
	FAILED = "failed"

	@property
	def available(self) -> bool:
		return self.status == self.AVAILABLE


@dataclass
class ReferenceData:
	"""Static or slowly-changing lists loaded once at startup."""
	genres: List[Genre] = field(default_factory=list)
	tv_genres: List[Genre] = field(default_factory=list)
	animation_genres: List[Genre] = field(default_factory=list)
	providers: List[Provider] = field(default_factory=list)
	countries: List[Country] = field(default_factory=list)
	years: List[int] = field(default_factory=list)
