"""
Streamlit UI for Reelify.
Renders the view-state controller and wires every widget to one of its named
transitions. All catalog traffic goes through the gateway (api.py).

Run API:  python api.py
Run UI:   streamlit run streamlit_app.py
"""

# Streamlit framework to build a simple interactive UI
import streamlit as st

from reelify.config import Settings
from reelify.controller import ViewStateController
from reelify.gateway_client import GatewayClient
from reelify.models import DEFAULT_SORT_KEY, ContentKind, TimeWindow, ViewMode

IMAGE_BASE = "https://image.tmdb.org/t/p/w342"  # poster CDN
SORT_OPTIONS = {
	"popularity.desc": "Most popular",
	"vote_average.desc": "Highest rated",
	"primary_release_date.desc": "Newest",
	"revenue.desc": "Highest grossing",
}
MODE_LABELS = {
	ViewMode.TRENDING: "Trending",
	ViewMode.NOW_PLAYING: "Now Playing",
	ViewMode.AIRING_TODAY: "Airing Today",
	ViewMode.POPULAR: "Popular",
	ViewMode.TOP_RATED: "Top Rated",
	ViewMode.UPCOMING: "Upcoming",
}
KIND_LABELS = {ContentKind.MOVIE: "Movies", ContentKind.TV: "TV Shows", ContentKind.ANIMATION: "Animation"}

# Configure Streamlit page (title and layout width)
st.set_page_config(page_title="Reelify", layout="wide")
st.title("🎬 Reelify")


def get_controller() -> ViewStateController:
	"""One controller per browser session; reference data and the first list load once."""
	if "controller" not in st.session_state:
		settings = Settings.from_env()
		client = GatewayClient(settings.gateway_url)
		controller = ViewStateController(client)
		controller.start()
		st.session_state.controller = controller
		st.session_state.gateway_up = client.health()
	return st.session_state.controller


controller = get_controller()
ctx = controller.context
ref = controller.reference

# ---------------------------------------------------------------------------
# Sidebar: section, filters and discovery
# ---------------------------------------------------------------------------
def on_genre_change() -> None:
	if st.session_state.genre_choice is not None:
		controller.select_genre(st.session_state.genre_choice)


def on_provider_change() -> None:
	if st.session_state.provider_choice is not None:
		controller.select_provider(st.session_state.provider_choice)


# Keyed widgets keep their own value across reruns, so they are reset alongside the controller
def on_kind_change() -> None:
	controller.set_content_kind(st.session_state.kind_choice)
	st.session_state.genre_choice = None  # genre list differs per section
	st.session_state.provider_choice = None  # selection cleared by the controller


def on_reset_filters() -> None:
	controller.reset_filters()
	st.session_state.year_choice = None  # any year
	st.session_state.country_choice = ""  # any country
	st.session_state.sort_choice = DEFAULT_SORT_KEY
	st.session_state.provider_choice = None  # reset also drops the provider


# Seed widget values from the controller once; callbacks keep them in step afterwards
st.session_state.setdefault("genre_choice", ctx.selected_genre_id)
st.session_state.setdefault("provider_choice", ctx.selected_provider_id)
st.session_state.setdefault("year_choice", ctx.filters.year)
st.session_state.setdefault("country_choice", ctx.filters.country_code)
st.session_state.setdefault("sort_choice", ctx.filters.sort_key or DEFAULT_SORT_KEY)


with st.sidebar:
	st.header("Browse")
	kinds = list(ContentKind)
	st.radio(
		"Section",
		kinds,
		index=kinds.index(ctx.content_kind),
		format_func=KIND_LABELS.get,
		key="kind_choice",
		on_change=on_kind_change,
	)

	genres = ref.tv_genres if ctx.content_kind == ContentKind.TV else (
		ref.animation_genres if ctx.content_kind == ContentKind.ANIMATION else ref.genres
	)
	genre_ids = [None] + [g.id for g in genres]
	genre_names = {g.id: g.name for g in genres}
	st.selectbox(
		"Genre",
		genre_ids,
		format_func=lambda gid: "Filter by Genre" if gid is None else genre_names[gid],
		key="genre_choice",
		on_change=on_genre_change,
	)

	provider_ids = [None] + [p.id for p in ref.providers]
	provider_names = {p.id: p.name for p in ref.providers}
	st.selectbox(
		"Streaming service",
		provider_ids,
		format_func=lambda pid: "Any" if pid is None else provider_names[pid],
		key="provider_choice",
		on_change=on_provider_change,
	)

	st.subheader("Filters")
	years = [None] + ref.years
	st.selectbox(
		"Year",
		years,
		format_func=lambda y: "Any year" if y is None else str(y),
		key="year_choice",
		on_change=lambda: controller.update_filters(year=st.session_state.year_choice),
	)
	codes = [""] + [c.code for c in ref.countries]
	country_names = {c.code: c.name for c in ref.countries}
	st.selectbox(
		"Country",
		codes,
		format_func=lambda code: "Any country" if not code else country_names[code],
		key="country_choice",
		on_change=lambda: controller.update_filters(country_code=st.session_state.country_choice),
	)
	sort_keys = list(SORT_OPTIONS)
	st.selectbox(
		"Sort by",
		sort_keys,
		format_func=SORT_OPTIONS.get,
		key="sort_choice",
		on_change=lambda: controller.update_filters(sort_key=st.session_state.sort_choice),
	)
	st.button("Reset filters", on_click=on_reset_filters)

	st.markdown("---")
	if not st.session_state.get("gateway_up"):
		st.caption("Gateway not reachable at startup; lists may be empty.")

# ---------------------------------------------------------------------------
# Search and view-mode bar
# ---------------------------------------------------------------------------
with st.form("search_form", clear_on_submit=False):
	col1, col2 = st.columns([4, 1])
	with col1:
		query = st.text_input("Search", value=ctx.search_text, placeholder="Search titles...", label_visibility="collapsed")
	with col2:
		submitted = st.form_submit_button("Search", type="primary")
if submitted and not controller.submit_search(query):
	st.toast("Type something to search for.")

list_modes = [m for m in controller.available_view_modes() if m in MODE_LABELS]
mode_cols = st.columns(len(list_modes) + 2)
for col, mode in zip(mode_cols, list_modes):
	with col:
		st.button(
			MODE_LABELS[mode],
			key=f"mode_{mode.value}",
			type="primary" if ctx.view_mode == mode else "secondary",
			on_click=controller.set_view_mode,
			args=(mode,),
		)
if ctx.view_mode == ViewMode.TRENDING:
	with mode_cols[-2]:
		st.button("Today", on_click=controller.set_time_window, args=(TimeWindow.DAY,))
	with mode_cols[-1]:
		st.button("This Week", on_click=controller.set_time_window, args=(TimeWindow.WEEK,))

# ---------------------------------------------------------------------------
# Results grid
# ---------------------------------------------------------------------------
st.header(controller.view_title())

if controller.error_message:
	st.error(f"Could not load this list: {controller.error_message}")
elif not controller.items:
	st.info("No titles found.")


def show_trailer(item) -> None:
	controller.open_item(item)
	result = controller.request_trailer(item)
	st.session_state.trailer_result = result


grid = st.columns(4)
for i, item in enumerate(controller.items):
	with grid[i % 4]:
		if item.poster_path:
			st.image(f"{IMAGE_BASE}{item.poster_path}", width="stretch")
		st.markdown(f"**{item.title}** ({item.year or 'n/a'})")
		st.caption(f"★ {item.vote_average:.1f}")
		st.button("Trailer", key=f"trailer_{item.id}", on_click=show_trailer, args=(item,))

# Detail view with trailer, or an explicit "unavailable" notice
result = st.session_state.get("trailer_result")
if controller.selected is not None and result is not None:
	st.divider()
	st.subheader(controller.selected.item.title)
	st.write(controller.selected.item.overview)
	if result.available:
		st.video(f"https://www.youtube.com/watch?v={result.key}")
	elif result.status == result.UNAVAILABLE:
		st.warning("No trailer available for this title.")
	else:
		st.error(f"Trailer lookup failed: {result.message}")

	def close_detail() -> None:
		controller.close_item()
		st.session_state.pop("trailer_result", None)

	st.button("Close", on_click=close_detail)

# Pagination
if controller.items:
	c1, c2, c3 = st.columns([1, 2, 1])
	with c1:
		st.button("Previous", disabled=not controller.can_go_prev, on_click=controller.prev_page)
	with c2:
		st.caption(f"Page {controller.context.page} of {controller.context.total_pages}")
	with c3:
		st.button("Next", disabled=not controller.can_go_next, on_click=controller.next_page)
