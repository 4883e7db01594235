"""
FastAPI gateway in front of the TMDb catalog API.
Endpoints (movie and TV variants are symmetric):
- GET /health: basic health check
- GET /api/movies, /api/now_playing, /api/top_rated, /api/upcoming: list resources
- GET /api/trending/{day|week}, /api/search?q=...: trending and text search
- GET /api/movies/genre/{id}, /api/movies/provider/{id}: discovery
- GET /api/movies/{id}, /api/movies/{id}/trailer, /api/movies/{id}/recommendations
- GET /api/genres, /api/tv/genres, /api/countries, /api/providers: reference data
- GET /api/tv/...: the TV counterparts

The upstream credential is injected server-side and never reaches the caller.

Run:  python api.py   (or: uvicorn api:app --reload --port 5000)
"""

from pathlib import Path  # path-safe filesystem handling
from typing import Any, Dict, List, Optional

# FastAPI primitives for routing, dependency injection and error handling
from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from pydantic import BaseModel  # response schema definitions

# Import loguru for simple, structured console logging
from loguru import logger

from reelify.catalog_client import CatalogClient
from reelify.config import Settings, configure_logging
from reelify.errors import CatalogError, NotFoundError
from reelify import forwarding


router = APIRouter()


# Pydantic models for the fixed-shape responses; list resources are relayed untouched
class HealthOut(BaseModel):
	status: str  # constant "ok"


class TrailerOut(BaseModel):
	key: str  # video id on the hosting site


class GenreOut(BaseModel):
	id: int
	name: str


class ErrorOut(BaseModel):
	message: str  # safe, user-facing
	error: Optional[str] = None  # underlying detail, omitted in production


def get_client(request: Request) -> CatalogClient:
	"""Dependency: the upstream client held on the application state."""
	return request.app.state.catalog_client


def list_query(
	page: int = Query(1, ge=1, description="1-based result page"),
	year: Optional[str] = Query(None, description="Release / first-air year"),
	region: Optional[str] = Query(None, description="ISO 3166-1 country code"),
	sort_by: Optional[str] = Query(None, description="Upstream sort key, e.g. popularity.desc"),
	with_genres: Optional[str] = Query(None, description="Comma-separated genre ids"),
) -> Dict[str, Any]:
	"""Whitelisted query parameters shared by every list endpoint."""
	return {"page": page, "year": year, "region": region, "sort_by": sort_by, "with_genres": with_genres}


# ---------------------------------------------------------------------------
# Shared handlers (media is "movie" or "tv")
# ---------------------------------------------------------------------------

def _list(client: CatalogClient, media: str, resource: str, what: str, q: Dict[str, Any]) -> Any:
	genre_ids = forwarding.parse_genre_ids(q.get("with_genres"))  # 400 before any upstream call
	params = forwarding.list_params(media, **q)  # with_genres is still forwarded
	payload = client.get(f"/{media}/{resource}", params, what=what)
	# Fixed list resources ignore with_genres upstream, so the page is narrowed here like trending
	return forwarding.narrow_by_genres(payload, genre_ids)


def _trending(client: CatalogClient, media: str, time_window: str, page: int, with_genres: Optional[str]) -> Any:
	forwarding.check_time_window(time_window)  # 400 before any upstream call
	genre_ids = forwarding.parse_genre_ids(with_genres)
	label = "trending movies" if media == "movie" else "trending TV shows"
	payload = client.get(f"/trending/{media}/{time_window}", {"page": page}, what=label)
	return forwarding.narrow_by_genres(payload, genre_ids)


def _by_genre(client: CatalogClient, media: str, genre_id: int, q: Dict[str, Any]) -> Any:
	params = forwarding.list_params(media, **q)
	params["with_genres"] = genre_id  # the path segment is authoritative for this resource
	return client.get(f"/discover/{media}", params, what=f"{media} by genre")


def _by_provider(client: CatalogClient, media: str, provider_id: int, q: Dict[str, Any]) -> Any:
	params = forwarding.provider_params(media, provider_id, **q)
	return client.get(f"/discover/{media}", params, what=f"{media} by provider")


def _trailer(client: CatalogClient, media: str, item_id: int) -> Dict[str, str]:
	payload = client.get(f"/{media}/{item_id}/videos", what="trailer")
	videos = payload.get("results") if isinstance(payload, dict) else None
	key = forwarding.select_trailer(videos or [])
	if not key:
		raise NotFoundError("No trailer found")
	return {"key": key}


def _genres(client: CatalogClient, media: str) -> List[Dict[str, Any]]:
	payload = client.get(f"/genre/{media}/list", what="genres")
	return forwarding.extract_genres(payload)


def _providers(client: CatalogClient, media: str, region: Optional[str]) -> List[Dict[str, Any]]:
	params = {"watch_region": (region or forwarding.DEFAULT_WATCH_REGION).strip()}
	payload = client.get(f"/watch/providers/{media}", params, what="providers")
	return (payload.get("results") if isinstance(payload, dict) else None) or []


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

@router.get("/health", response_model=HealthOut)
def health():
	"""Return minimal health info for liveness/readiness probes."""
	return {"status": "ok"}


# ---------------------------------------------------------------------------
# Movies
# ---------------------------------------------------------------------------

@router.get("/api/movies")
def popular_movies(q: Dict[str, Any] = Depends(list_query), client: CatalogClient = Depends(get_client)):
	return _list(client, "movie", "popular", "popular movies", q)


@router.get("/api/now_playing")
def now_playing_movies(q: Dict[str, Any] = Depends(list_query), client: CatalogClient = Depends(get_client)):
	return _list(client, "movie", "now_playing", "now playing", q)


@router.get("/api/top_rated")
def top_rated_movies(q: Dict[str, Any] = Depends(list_query), client: CatalogClient = Depends(get_client)):
	return _list(client, "movie", "top_rated", "top rated movies", q)


@router.get("/api/upcoming")
def upcoming_movies(q: Dict[str, Any] = Depends(list_query), client: CatalogClient = Depends(get_client)):
	return _list(client, "movie", "upcoming", "upcoming movies", q)


@router.get("/api/trending/{time_window}")
def trending_movies(
	time_window: str,
	page: int = Query(1, ge=1),
	with_genres: Optional[str] = None,
	client: CatalogClient = Depends(get_client),
):
	return _trending(client, "movie", time_window, page, with_genres)


@router.get("/api/search")
def search_movies(
	q: Optional[str] = None,
	page: int = Query(1, ge=1),
	year: Optional[str] = None,
	region: Optional[str] = None,
	client: CatalogClient = Depends(get_client),
):
	params = forwarding.search_params("movie", q, page=page, year=year, region=region)
	return client.get("/search/movie", params, what="search results")


@router.get("/api/genres", response_model=List[GenreOut], responses={500: {"model": ErrorOut}})
def movie_genres(client: CatalogClient = Depends(get_client)):
	return _genres(client, "movie")


@router.get("/api/countries")
def countries(client: CatalogClient = Depends(get_client)):
	return client.get("/configuration/countries", what="countries")


@router.get("/api/providers")
def movie_providers(region: Optional[str] = None, client: CatalogClient = Depends(get_client)):
	return _providers(client, "movie", region)


@router.get("/api/movies/genre/{genre_id}")
def movies_by_genre(
	genre_id: int,
	page: int = Query(1, ge=1),
	year: Optional[str] = None,
	region: Optional[str] = None,
	sort_by: Optional[str] = None,
	client: CatalogClient = Depends(get_client),
):
	q = {"page": page, "year": year, "region": region, "sort_by": sort_by}
	return _by_genre(client, "movie", genre_id, q)


@router.get("/api/movies/provider/{provider_id}")
def movies_by_provider(provider_id: int, q: Dict[str, Any] = Depends(list_query), client: CatalogClient = Depends(get_client)):
	return _by_provider(client, "movie", provider_id, q)


@router.get("/api/movies/{movie_id}/trailer", response_model=TrailerOut, responses={404: {"model": ErrorOut}})
def movie_trailer(movie_id: int, client: CatalogClient = Depends(get_client)):
	return _trailer(client, "movie", movie_id)


@router.get("/api/movies/{movie_id}/recommendations")
def movie_recommendations(movie_id: int, page: int = Query(1, ge=1), client: CatalogClient = Depends(get_client)):
	return client.get(f"/movie/{movie_id}/recommendations", {"page": page}, what="recommended movies")


@router.get("/api/movies/{movie_id}")
def movie_details(movie_id: int, client: CatalogClient = Depends(get_client)):
	return client.get(f"/movie/{movie_id}", {"append_to_response": "credits,similar"}, what="movie details")


# ---------------------------------------------------------------------------
# TV shows (declared before /api/tv/{tv_id} so fixed segments win)
# ---------------------------------------------------------------------------

@router.get("/api/tv/popular")
def popular_tv(q: Dict[str, Any] = Depends(list_query), client: CatalogClient = Depends(get_client)):
	return _list(client, "tv", "popular", "popular TV shows", q)


@router.get("/api/tv/top_rated")
def top_rated_tv(q: Dict[str, Any] = Depends(list_query), client: CatalogClient = Depends(get_client)):
	return _list(client, "tv", "top_rated", "top rated TV shows", q)


@router.get("/api/tv/on_the_air")
def on_the_air_tv(q: Dict[str, Any] = Depends(list_query), client: CatalogClient = Depends(get_client)):
	return _list(client, "tv", "on_the_air", "on the air TV shows", q)


@router.get("/api/tv/airing_today")
def airing_today_tv(q: Dict[str, Any] = Depends(list_query), client: CatalogClient = Depends(get_client)):
	return _list(client, "tv", "airing_today", "airing today TV shows", q)


@router.get("/api/tv/trending/{time_window}")
def trending_tv(
	time_window: str,
	page: int = Query(1, ge=1),
	with_genres: Optional[str] = None,
	client: CatalogClient = Depends(get_client),
):
	return _trending(client, "tv", time_window, page, with_genres)


@router.get("/api/tv/search")
def search_tv(
	q: Optional[str] = None,
	page: int = Query(1, ge=1),
	year: Optional[str] = None,
	region: Optional[str] = None,
	client: CatalogClient = Depends(get_client),
):
	params = forwarding.search_params("tv", q, page=page, year=year, region=region)
	return client.get("/search/tv", params, what="TV search results")


@router.get("/api/tv/genres", response_model=List[GenreOut], responses={500: {"model": ErrorOut}})
def tv_genres(client: CatalogClient = Depends(get_client)):
	return _genres(client, "tv")


@router.get("/api/tv/providers")
def tv_providers(region: Optional[str] = None, client: CatalogClient = Depends(get_client)):
	return _providers(client, "tv", region)


@router.get("/api/tv/genre/{genre_id}")
def tv_by_genre(
	genre_id: int,
	page: int = Query(1, ge=1),
	year: Optional[str] = None,
	region: Optional[str] = None,
	sort_by: Optional[str] = None,
	client: CatalogClient = Depends(get_client),
):
	q = {"page": page, "year": year, "region": region, "sort_by": sort_by}
	return _by_genre(client, "tv", genre_id, q)


@router.get("/api/tv/provider/{provider_id}")
def tv_by_provider(provider_id: int, q: Dict[str, Any] = Depends(list_query), client: CatalogClient = Depends(get_client)):
	return _by_provider(client, "tv", provider_id, q)


@router.get("/api/tv/{tv_id}/trailer", response_model=TrailerOut, responses={404: {"model": ErrorOut}})
def tv_trailer(tv_id: int, client: CatalogClient = Depends(get_client)):
	return _trailer(client, "tv", tv_id)


@router.get("/api/tv/{tv_id}")
def tv_details(tv_id: int, client: CatalogClient = Depends(get_client)):
	return client.get(f"/tv/{tv_id}", {"append_to_response": "credits,similar"}, what="TV show details")


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------

def create_app(settings: Optional[Settings] = None, client: Optional[CatalogClient] = None) -> FastAPI:
	"""Build the gateway; tests pass their own settings and a fake upstream client."""
	settings = settings or Settings.from_env()

	# A missing key is loud but not fatal: upstream calls will answer 401 and surface as 500s
	if not settings.tmdb_api_key:
		logger.error("[Gateway] TMDB_API_KEY is not defined; upstream requests will fail")

	app = FastAPI(title="Reelify Gateway", version="1.0.0")
	app.state.settings = settings
	app.state.catalog_client = client or CatalogClient(
		settings.tmdb_api_key,
		base_url=settings.upstream_base_url,
		timeout=settings.upstream_timeout,
	)

	app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["GET"], allow_headers=["*"])

	@app.middleware("http")
	async def log_requests(request: Request, call_next):
		logger.info(f"[Gateway] Request received: {request.method} {request.url.path}")
		return await call_next(request)

	@app.exception_handler(CatalogError)
	async def catalog_error_handler(request: Request, exc: CatalogError):
		if exc.status_code >= 500:
			logger.error(f"[Gateway] {request.url.path} failed: {exc.message} ({exc.detail})")
		else:
			logger.info(f"[Gateway] {request.url.path} -> {exc.status_code}: {exc.message}")
		payload = exc.to_payload(include_detail=not settings.is_production)
		return JSONResponse(status_code=exc.status_code, content=payload)

	@app.exception_handler(RequestValidationError)
	async def request_validation_handler(request: Request, exc: RequestValidationError):
		payload: Dict[str, Any] = {"message": "Invalid request parameters"}
		if not settings.is_production:
			payload["error"] = "; ".join(
				f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
			)
		return JSONResponse(status_code=400, content=payload)

	@app.exception_handler(StarletteHTTPException)
	async def http_error_handler(request: Request, exc: StarletteHTTPException):
		message = "Route not found" if exc.status_code == 404 else str(exc.detail)
		return JSONResponse(status_code=exc.status_code, content={"message": message})

	@app.on_event("startup")
	async def startup_event():
		"""Log how the gateway was configured."""
		logger.info(
			f"[Gateway] Startup complete | env={settings.environment} | "
			f"api_key_defined={'yes' if settings.tmdb_api_key else 'no'} | timeout={settings.upstream_timeout}s"
		)

	app.include_router(router)

	# Serve the built frontend in production only; API routes above take precedence
	if settings.is_production:
		_serve_frontend(app, Path(settings.static_dir))

	return app


def _serve_frontend(app: FastAPI, static_dir: Path) -> None:
	"""
	Serve files from the built frontend, and index.html for every other
	non-API path so client-side routes survive a reload or a deep link.
	"""
	root = static_dir.resolve()  # absolute, for the traversal check
	index = root / "index.html"  # single-page app entry point
	if not index.is_file():
		logger.warning(f"[Gateway] {index} not found; skipping asset serving")
		return

	@app.get("/{full_path:path}", include_in_schema=False)
	def frontend(full_path: str):
		if full_path == "api" or full_path.startswith("api/"):
			raise StarletteHTTPException(status_code=404)  # unknown API routes stay JSON 404s
		candidate = (root / full_path).resolve()  # normalizes any ../ segments
		if full_path and candidate.is_file() and root in candidate.parents:
			return FileResponse(candidate)  # built asset (js, css, images)
		return FileResponse(index)  # client-side route

	logger.info(f"[Gateway] Serving static assets from {root}")


app = create_app()


if __name__ == "__main__":
	import uvicorn  # ASGI server

	configure_logging(app.state.settings.log_level)
	uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)
