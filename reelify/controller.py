"""
View-state controller.
Owns the BrowsingContext, derives exactly one gateway request per context change,
and applies results in last-context-wins order: every fetch is tagged with the
context version that produced it and a response whose tag is no longer current
is discarded.
"""

import threading  # guards version check + apply when fetches run on an executor
from concurrent.futures import Executor, Future, wait
from dataclasses import dataclass, replace
from typing import Any, List, Optional

from loguru import logger  # console logger

from .errors import CatalogError, NotFoundError
from .models import (
	BrowsingContext,
	CatalogItem,
	ContentKind,
	Filters,
	ReferenceData,
	SelectedItem,
	TimeWindow,
	TrailerResult,
	ViewMode,
)
from .reference_data import ReferenceCatalog
from .resolver import ResolvedRequest, item_path, resolve_request, supported_view_modes


# Heading templates per content kind; {name}, {when} and {query} are filled in by view_title()
_TITLES = {
	ContentKind.MOVIE: {
		ViewMode.TRENDING: "Trending {when}",
		ViewMode.NOW_PLAYING: "Now Playing",
		ViewMode.POPULAR: "Popular Movies",
		ViewMode.TOP_RATED: "Top Rated",
		ViewMode.UPCOMING: "Coming Soon",
		ViewMode.BY_GENRE: "{name} Movies",
		ViewMode.BY_PROVIDER: "{name} Movies",
		ViewMode.SEARCH: 'Search Results: "{query}"',
	},
	ContentKind.TV: {
		ViewMode.TRENDING: "Trending TV Shows {when}",
		ViewMode.NOW_PLAYING: "Currently On Air",
		ViewMode.AIRING_TODAY: "Airing Today",
		ViewMode.POPULAR: "Popular TV Shows",
		ViewMode.TOP_RATED: "Top Rated TV Shows",
		ViewMode.BY_GENRE: "{name} TV Shows",
		ViewMode.BY_PROVIDER: "{name} TV Shows",
		ViewMode.SEARCH: 'TV Search Results: "{query}"',
	},
	ContentKind.ANIMATION: {
		ViewMode.TRENDING: "Trending Animation {when}",
		ViewMode.NOW_PLAYING: "Animations In Theaters",
		ViewMode.POPULAR: "Popular Animations",
		ViewMode.TOP_RATED: "Top Rated Animations",
		ViewMode.UPCOMING: "Upcoming Animations",
		ViewMode.BY_GENRE: "{name} Animations",
		ViewMode.BY_PROVIDER: "{name} Animations",
		ViewMode.SEARCH: 'Animation Search Results: "{query}"',
	},
}

# Used when the selected genre/provider is not in the reference data
_UNNAMED = {
	ContentKind.MOVIE: {ViewMode.BY_GENRE: "Category", ViewMode.BY_PROVIDER: "Streaming Movies"},
	ContentKind.TV: {ViewMode.BY_GENRE: "TV Category", ViewMode.BY_PROVIDER: "Streaming TV Shows"},
	ContentKind.ANIMATION: {ViewMode.BY_GENRE: "Animation Category", ViewMode.BY_PROVIDER: "Streaming Animations"},
}

_FILTER_FIELDS = ("year", "country_code", "sort_key")


@dataclass(frozen=True)
class FetchTicket:
	"""An issued fetch: the request and the context version that produced it."""
	version: int
	request: ResolvedRequest


class ViewStateController:
	"""
	Single owner of the browsing state. Every user action goes through a named
	transition that builds a new BrowsingContext and triggers one derived fetch.
	Fetch failures never propagate: the collection is emptied and an inline
	message is set instead.
	"""

	def __init__(
		self,
		client,
		reference: Optional[ReferenceCatalog] = None,
		executor: Optional[Executor] = None,
		context: Optional[BrowsingContext] = None,
	):
		self.client = client  # anything with get_json(path, params)
		self.reference_catalog = reference or ReferenceCatalog(client)  # loaded lazily, once
		self.executor = executor  # None: fetch inline on the caller's thread
		self._lock = threading.RLock()  # re-entrant: a completion may issue a follow-up fetch
		self._context = context or BrowsingContext()  # trending movies of the day
		self._version = 0  # bumped on every context change
		self._pending: List[Future] = []  # background fetches not yet waited on

		# Displayed state, read by the presentation layer
		self.items: List[CatalogItem] = []
		self.is_loading = False
		self.error_message: Optional[str] = None
		self.selected: Optional[SelectedItem] = None
		self.last_request: Optional[ResolvedRequest] = None  # most recent request issued

	# ------------------------------------------------------------------
	# Read-only views
	# ------------------------------------------------------------------

	@property
	def context(self) -> BrowsingContext:
		return self._context

	@property
	def version(self) -> int:
		return self._version

	@property
	def reference(self) -> ReferenceData:
		return self.reference_catalog.load()  # cached after the first call

	@property
	def can_go_next(self) -> bool:
		return self._context.page < self._context.total_pages

	@property
	def can_go_prev(self) -> bool:
		return self._context.page > 1

	def available_view_modes(self) -> List[ViewMode]:
		return supported_view_modes(self._context.content_kind)

	# ------------------------------------------------------------------
	# Startup
	# ------------------------------------------------------------------

	def start(self) -> bool:
		"""Load reference data once and fetch the initial list."""
		self.reference_catalog.load()  # genres and providers before the first list
		return self.refresh() is not None

	# ------------------------------------------------------------------
	# Transitions
	# ------------------------------------------------------------------

	def set_content_kind(self, kind: ContentKind) -> bool:
		"""Switch section; starts again from today's trending list."""
		kind = ContentKind(kind)  # accept enum or raw value
		self.selected = None  # close any open detail view
		return self._transition(
			content_kind=kind,
			view_mode=ViewMode.TRENDING,
			time_window=TimeWindow.DAY,
			selected_genre_id=None,
			selected_provider_id=None,
			search_text="",
		)

	def set_view_mode(self, mode: ViewMode) -> bool:
		"""
		Switch to a list mode. Genre/provider modes need a prior selection,
		search needs submitted text; otherwise use select_genre/select_provider/submit_search.
		"""
		mode = ViewMode(mode)
		ctx = self._context
		if mode not in supported_view_modes(ctx.content_kind):
			raise ValueError(f"View mode {mode.value} is not available for {ctx.content_kind.value}")
		if mode == ViewMode.BY_GENRE and ctx.selected_genre_id is None:
			raise ValueError("Select a genre before switching to byGenre")
		if mode == ViewMode.BY_PROVIDER and ctx.selected_provider_id is None:
			raise ValueError("Select a provider before switching to byProvider")
		if mode == ViewMode.SEARCH and not ctx.search_text.strip():
			logger.debug("[Controller] Refusing search mode without search text")
			return False  # nothing to search for
		return self._transition(view_mode=mode)

	def select_genre(self, genre_id: int) -> bool:
		return self._transition(view_mode=ViewMode.BY_GENRE, selected_genre_id=int(genre_id))

	def select_provider(self, provider_id: int) -> bool:
		return self._transition(view_mode=ViewMode.BY_PROVIDER, selected_provider_id=int(provider_id))

	def submit_search(self, text: str) -> bool:
		"""Enter search mode; blank text is refused and nothing is fetched."""
		text = (text or "").strip()  # normalize
		if not text:
			logger.debug("[Controller] Ignoring blank search")
			return False
		return self._transition(view_mode=ViewMode.SEARCH, search_text=text)

	def set_time_window(self, window: TimeWindow) -> bool:
		window = TimeWindow(window)
		if window == self._context.time_window:
			return False  # same window: keep page and results
		return self._transition(time_window=window)

	def update_filters(self, **changes: Any) -> bool:
		"""Change any of year, country_code, sort_key. Unchanged filters do not refetch."""
		unknown = set(changes) - set(_FILTER_FIELDS)  # typo guard
		if unknown:
			raise TypeError(f"Unknown filter(s): {', '.join(sorted(unknown))}")
		if "year" in changes:
			changes["year"] = self._normalize_year(changes["year"])  # "" / None -> any year
		if "country_code" in changes:
			changes["country_code"] = (changes["country_code"] or "").strip().upper()  # ISO code
		if "sort_key" in changes:
			changes["sort_key"] = (changes["sort_key"] or "").strip()

		filters = replace(self._context.filters, **changes)  # new immutable filters
		if filters == self._context.filters:
			return False  # nothing changed
		return self._transition(filters=filters)

	def reset_filters(self) -> bool:
		"""Restore default filters and drop the provider selection."""
		changes = {"filters": Filters(), "selected_provider_id": None}
		if self._context.view_mode == ViewMode.BY_PROVIDER:
			changes["view_mode"] = ViewMode.TRENDING  # provider mode needs a provider
		return self._transition(**changes)

	def next_page(self) -> bool:
		if not self.can_go_next:
			return False  # already on the last known page
		return self._transition(page=self._context.page + 1, reset_page=False)

	def prev_page(self) -> bool:
		if not self.can_go_prev:
			return False  # already on page 1
		return self._transition(page=self._context.page - 1, reset_page=False)

	# ------------------------------------------------------------------
	# Detail view and trailers
	# ------------------------------------------------------------------

	def open_item(self, item: CatalogItem) -> None:
		self.selected = SelectedItem(item=item)

	def close_item(self) -> None:
		self.selected = None

	def request_trailer(self, item: Optional[CatalogItem] = None) -> TrailerResult:
		"""
		Look up a playable trailer key for `item` (defaults to the open item).
		Independent of the list fetch; never raises.
		"""
		if item is None:
			if self.selected is None:
				raise ValueError("No item given and none selected")
			item = self.selected.item

		path = item_path(self._context.content_kind, item.id, "trailer")  # movie or TV resource
		try:
			data = self.client.get_json(path)
		except NotFoundError:
			logger.info(f"[Controller] No trailer for item {item.id}")
			return TrailerResult(TrailerResult.UNAVAILABLE, message="No trailer available")
		except CatalogError as e:
			logger.error(f"[Controller] Trailer lookup for item {item.id} failed: {e.message}")
			return TrailerResult(TrailerResult.FAILED, message=e.message)

		key = data.get("key") if isinstance(data, dict) else None  # tolerate odd bodies
		if not key:
			return TrailerResult(TrailerResult.UNAVAILABLE, message="No trailer available")
		if self.selected is not None and self.selected.item.id == item.id:
			self.selected.trailer_key = key  # remember for the open detail view
		return TrailerResult(TrailerResult.AVAILABLE, key=key)

	# ------------------------------------------------------------------
	# Fetch lifecycle
	# ------------------------------------------------------------------

	def refresh(self) -> Optional[FetchTicket]:
		"""Issue the fetch for the current context (inline or on the executor)."""
		ticket = self.begin_fetch()
		if ticket is None:
			return None  # nothing to fetch (blank search)
		if self.executor is None:
			self._run(ticket)  # synchronous
		else:
			self._pending.append(self.executor.submit(self._run, ticket))  # background
		return ticket

	def begin_fetch(self) -> Optional[FetchTicket]:
		"""Resolve the current context into a tagged request and mark loading."""
		with self._lock:
			request = resolve_request(self._context)
			if request is None:
				return None
			self.is_loading = True
			self.error_message = None  # a new fetch clears the previous failure
			self.last_request = request
			ticket = FetchTicket(version=self._version, request=request)  # tag with current version
		logger.debug(f"[Controller] v{ticket.version} GET {request.url()}")
		return ticket

	def complete_fetch(self, ticket: FetchTicket, payload: Any) -> bool:
		"""
		Apply a response if its ticket is still current. Returns True when applied.
		When the list has shrunk below the requested page, the response is not shown;
		the controller moves to the last page that exists and fetches that instead.
		"""
		with self._lock:
			if ticket.version != self._version:
				logger.debug(f"[Controller] Discarding stale response v{ticket.version} (current v{self._version})")
				return False
			try:
				items, total_pages = self._parse_list(payload, ticket.request.required_genre_id)
			except (AttributeError, TypeError, ValueError) as e:
				return self._apply_failure(f"Unexpected response: {e}")

			if self._context.page > total_pages:
				logger.warning(
					f"[Controller] Page {self._context.page} is past the last page ({total_pages}); moving back"
				)
				self._transition(page=total_pages, total_pages=total_pages, reset_page=False)  # refetch
				return False

			self.items = items
			self.is_loading = False
			self.error_message = None
			self._context = replace(self._context, total_pages=total_pages)  # bound for next_page
			logger.info(
				f"[Controller] v{ticket.version} applied {len(items)} items "
				f"(page {self._context.page}/{self._context.total_pages})"
			)
			return True

	def fail_fetch(self, ticket: FetchTicket, error: CatalogError) -> bool:
		"""Record a failed fetch if its ticket is still current."""
		with self._lock:
			if ticket.version != self._version:
				logger.debug(f"[Controller] Ignoring stale failure v{ticket.version}")
				return False
			logger.error(f"[Controller] v{ticket.version} fetch of {ticket.request.path} failed: {error.message}")
			return self._apply_failure(error.message)

	def wait(self, timeout: Optional[float] = None) -> None:
		"""Block until background fetches issued so far have finished."""
		pending, self._pending = self._pending, []  # swap so new submissions are kept
		wait(pending, timeout=timeout)

	def view_title(self) -> str:
		ctx = self._context
		template = _TITLES[ctx.content_kind].get(ctx.view_mode, "Movies")  # fallback heading
		name = self._selection_name()  # genre/provider name, if known
		if name is None and ctx.view_mode in (ViewMode.BY_GENRE, ViewMode.BY_PROVIDER):
			return _UNNAMED[ctx.content_kind][ctx.view_mode]
		when = "Today" if ctx.time_window == TimeWindow.DAY else "This Week"
		return template.format(name=name, when=when, query=ctx.search_text)

	# ------------------------------------------------------------------
	# Internals
	# ------------------------------------------------------------------

	def _transition(self, reset_page: bool = True, **changes: Any) -> bool:
		"""
		Install a new context and fetch for it. Non-paging transitions go back to
		page 1 of a list whose length is unknown until its first response arrives.
		"""
		with self._lock:
			if reset_page:
				changes.setdefault("page", 1)
				changes.setdefault("total_pages", 1)  # next_page stays disabled until the response
			self._context = replace(self._context, **changes)  # new immutable context
			self._version += 1  # responses for older contexts become stale
		return self.refresh() is not None

	def _run(self, ticket: FetchTicket) -> None:
		try:
			payload = self.client.get_json(ticket.request.path, ticket.request.params)
		except CatalogError as e:
			self.fail_fetch(ticket, e)
			return
		self.complete_fetch(ticket, payload)

	def _apply_failure(self, message: str) -> bool:
		self.items = []  # never show the previous list under a new heading
		self.is_loading = False
		self.error_message = message
		return True

	@staticmethod
	def _parse_list(payload: Any, required_genre_id: Optional[int]):
		if not isinstance(payload, dict):
			raise TypeError(f"expected an object, got {type(payload).__name__}")
		items = [CatalogItem.from_payload(r) for r in payload.get("results") or []]  # missing -> empty
		if required_genre_id is not None:
			items = [i for i in items if required_genre_id in i.genre_ids]  # upstream ignored the genre
		total_pages = max(1, int(payload.get("total_pages") or 1))  # at least one page
		return items, total_pages

	@staticmethod
	def _normalize_year(value: Any) -> Optional[int]:
		if value is None or str(value).strip() == "":
			return None  # any year
		return int(value)

	def _selection_name(self) -> Optional[str]:
		ctx = self._context
		if not self.reference_catalog.loaded:
			return None  # do not trigger a fetch just for a heading
		ref = self.reference_catalog.load()
		if ctx.view_mode == ViewMode.BY_GENRE:
			genres = ref.tv_genres if ctx.content_kind == ContentKind.TV else ref.genres
			return next((g.name for g in genres if g.id == ctx.selected_genre_id), None)
		if ctx.view_mode == ViewMode.BY_PROVIDER:
			return next((p.name for p in ref.providers if p.id == ctx.selected_provider_id), None)
		return None
