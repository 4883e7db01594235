"""
Gateway endpoint tests using FastAPI's TestClient and a fake upstream client.
"""

import pytest
import requests
from fastapi.testclient import TestClient

from api import create_app
from reelify.catalog_client import CatalogClient
from reelify.config import Settings
from reelify.errors import UpstreamError


class FakeCatalogClient:
	"""Stands in for CatalogClient: records (path, params) and answers from a table."""

	def __init__(self, responses=None, error=None):
		self.calls = []
		self.responses = responses or {}
		self.error = error

	def get(self, path, params=None, what="catalog data"):
		self.calls.append((path, dict(params or {})))
		if self.error is not None:
			raise self.error
		return self.responses.get(path, {"page": 1, "results": [], "total_pages": 1})


def _client(upstream, environment="development", **settings):
	app = create_app(Settings(tmdb_api_key="secret-key", environment=environment, **settings), client=upstream)
	return TestClient(app)


def test_health():
	resp = _client(FakeCatalogClient()).get("/health")
	assert resp.status_code == 200
	assert resp.json() == {"status": "ok"}


def test_trending_day_forwards_without_extra_filters():
	payload = {"page": 1, "results": [{"id": 1, "title": "Dune"}], "total_pages": 5}
	upstream = FakeCatalogClient({"/trending/movie/day": payload})

	resp = _client(upstream).get("/api/trending/day")

	assert resp.status_code == 200
	assert resp.json() == payload
	assert upstream.calls == [("/trending/movie/day", {"page": 1})]


def test_invalid_time_window_is_rejected_before_upstream():
	upstream = FakeCatalogClient()
	resp = _client(upstream).get("/api/trending/tomorrow")
	assert resp.status_code == 400
	assert resp.json() == {"message": "Time window must be 'day' or 'week'"}
	assert upstream.calls == []


def test_trending_genre_filter_narrows_page():
	payload = {
		"results": [{"id": 1, "genre_ids": [16, 35]}, {"id": 2, "genre_ids": [28]}, {"id": 3}],
		"total_pages": 4,
	}
	upstream = FakeCatalogClient({"/trending/movie/week": payload})

	body = _client(upstream).get("/api/trending/week", params={"with_genres": "16", "page": 2}).json()

	assert [r["id"] for r in body["results"]] == [1]
	assert body["total_pages"] == 4
	assert upstream.calls == [("/trending/movie/week", {"page": 2})]


def test_trailer_missing_is_404():
	upstream = FakeCatalogClient({"/movie/42/videos": {"results": [{"type": "Teaser", "site": "YouTube", "key": "t1"}]}})
	resp = _client(upstream).get("/api/movies/42/trailer")
	assert resp.status_code == 404
	assert resp.json() == {"message": "No trailer found"}


def test_trailer_prefers_youtube():
	videos = {
		"results": [
			{"type": "Featurette", "site": "YouTube", "key": "f1"},
			{"type": "Trailer", "site": "Vimeo", "key": "v1"},
			{"type": "Trailer", "site": "YouTube", "key": "y1"},
		]
	}
	upstream = FakeCatalogClient({"/tv/7/videos": videos})
	resp = _client(upstream).get("/api/tv/7/trailer")
	assert resp.status_code == 200
	assert resp.json() == {"key": "y1"}


def test_search_requires_q():
	upstream = FakeCatalogClient()
	client = _client(upstream)
	for params in ({}, {"q": "   "}):
		resp = client.get("/api/search", params=params)
		assert resp.status_code == 400
		assert "q" in resp.json()["message"]
	assert upstream.calls == []


def test_search_forwards_query_and_filters():
	upstream = FakeCatalogClient()
	_client(upstream).get("/api/search", params={"q": "alien", "page": 3, "year": "1979", "region": "GB"})
	assert upstream.calls == [
		("/search/movie", {"query": "alien", "page": 3, "primary_release_year": "1979", "region": "GB"})
	]


def test_list_forwards_only_non_empty_params():
	upstream = FakeCatalogClient()
	client = _client(upstream)

	client.get("/api/movies", params={"year": "", "region": "FR", "sort_by": "vote_average.desc", "with_genres": "16"})
	client.get("/api/tv/popular", params={"year": "2010", "page": 2})

	assert upstream.calls == [
		("/movie/popular", {"page": 1, "region": "FR", "sort_by": "vote_average.desc", "with_genres": "16"}),
		("/tv/popular", {"page": 2, "first_air_date_year": "2010"}),
	]


def test_fixed_lists_narrow_by_genre_when_upstream_ignores_it():
	payload = {
		"page": 1,
		"results": [{"id": 1, "title": "Heat", "genre_ids": [28, 80]}, {"id": 2, "title": "Coco", "genre_ids": [16]}],
		"total_pages": 30,
	}
	upstream = FakeCatalogClient({"/movie/popular": payload})

	body = _client(upstream).get("/api/movies", params={"with_genres": "16"}).json()

	assert [r["title"] for r in body["results"]] == ["Coco"]
	assert body["total_pages"] == 30
	assert upstream.calls[0][1]["with_genres"] == "16"


@pytest.mark.parametrize(
	"path, upstream_path",
	[
		("/api/now_playing", "/movie/now_playing"),
		("/api/top_rated", "/movie/top_rated"),
		("/api/upcoming", "/movie/upcoming"),
		("/api/tv/top_rated", "/tv/top_rated"),
		("/api/tv/on_the_air", "/tv/on_the_air"),
		("/api/tv/airing_today", "/tv/airing_today"),
		("/api/tv/trending/week", "/trending/tv/week"),
	],
)
def test_list_routes_map_to_upstream(path, upstream_path):
	upstream = FakeCatalogClient()
	assert _client(upstream).get(path).status_code == 200
	assert upstream.calls[0][0] == upstream_path


def test_discover_by_genre_and_provider():
	upstream = FakeCatalogClient()
	client = _client(upstream)

	client.get("/api/movies/genre/28", params={"sort_by": "popularity.desc"})
	client.get("/api/movies/provider/8")
	client.get("/api/tv/provider/337", params={"region": "DE", "year": "2021"})

	assert upstream.calls == [
		("/discover/movie", {"page": 1, "sort_by": "popularity.desc", "with_genres": 28}),
		("/discover/movie", {"page": 1, "with_watch_providers": 8, "watch_region": "US"}),
		("/discover/tv", {"page": 1, "first_air_date_year": "2021", "with_watch_providers": 337, "watch_region": "DE"}),
	]


def test_details_and_recommendations():
	upstream = FakeCatalogClient({"/movie/42": {"id": 42, "title": "Answer"}})
	client = _client(upstream)

	assert client.get("/api/movies/42").json() == {"id": 42, "title": "Answer"}
	client.get("/api/movies/42/recommendations", params={"page": 2})
	client.get("/api/tv/5")

	assert upstream.calls == [
		("/movie/42", {"append_to_response": "credits,similar"}),
		("/movie/42/recommendations", {"page": 2}),
		("/tv/5", {"append_to_response": "credits,similar"}),
	]


def test_reference_endpoints():
	upstream = FakeCatalogClient({
		"/genre/movie/list": {"genres": [{"id": 28, "name": "Action"}]},
		"/genre/tv/list": {"genres": [{"id": 18, "name": "Drama"}]},
		"/watch/providers/movie": {"results": [{"provider_id": 8, "provider_name": "Netflix"}]},
		"/configuration/countries": [{"iso_3166_1": "US", "english_name": "United States"}],
	})
	client = _client(upstream)

	assert client.get("/api/genres").json() == [{"id": 28, "name": "Action"}]
	assert client.get("/api/tv/genres").json() == [{"id": 18, "name": "Drama"}]
	assert client.get("/api/providers", params={"region": "GB"}).json() == [{"provider_id": 8, "provider_name": "Netflix"}]
	assert client.get("/api/countries").json()[0]["iso_3166_1"] == "US"
	assert ("/watch/providers/movie", {"watch_region": "GB"}) in upstream.calls


def test_unexpected_genre_payload_is_server_error():
	upstream = FakeCatalogClient({"/genre/movie/list": {"oops": True}})
	resp = _client(upstream).get("/api/genres")
	assert resp.status_code == 500
	assert resp.json()["message"] == "Unexpected genres data format"


def test_upstream_failure_detail_only_outside_production():
	error = UpstreamError("Error fetching popular movies", detail="Upstream responded with status 503")

	dev = _client(FakeCatalogClient(error=error)).get("/api/movies")
	prod = _client(FakeCatalogClient(error=error), environment="production").get("/api/movies")

	assert dev.status_code == 500
	assert dev.json() == {"message": "Error fetching popular movies", "error": "Upstream responded with status 503"}
	assert prod.status_code == 500
	assert prod.json() == {"message": "Error fetching popular movies"}


def test_credential_never_leaks_to_caller():
	class ExplodingSession:
		def get(self, url, params=None, timeout=None):
			raise requests.ConnectionError(f"Max retries exceeded with url: /3/movie/popular?api_key={params['api_key']}")

	upstream = CatalogClient("secret-key", session=ExplodingSession())
	resp = _client(upstream).get("/api/movies")

	assert resp.status_code == 500
	assert "secret-key" not in resp.text
	assert resp.json()["message"] == "Error fetching popular movies"


def test_bad_query_values_are_client_errors():
	upstream = FakeCatalogClient()
	client = _client(upstream)
	assert client.get("/api/movies", params={"page": "abc"}).status_code == 400
	assert client.get("/api/movies", params={"page": 0}).status_code == 400
	assert client.get("/api/trending/day", params={"with_genres": "x"}).status_code == 400
	assert upstream.calls == []


def test_unknown_route_is_json_404():
	resp = _client(FakeCatalogClient()).get("/api/nothing/here")
	assert resp.status_code == 404
	assert resp.json() == {"message": "Route not found"}


def test_missing_key_does_not_crash_startup():
	app = create_app(Settings(tmdb_api_key=None), client=FakeCatalogClient())
	with TestClient(app) as client:
		assert client.get("/health").status_code == 200


def test_static_assets_served_in_production(tmp_path):
	(tmp_path / "index.html").write_text("<html>reelify</html>", encoding="utf-8")
	client = _client(FakeCatalogClient(), environment="production", static_dir=str(tmp_path))

	assert "reelify" in client.get("/").text
	assert client.get("/health").json() == {"status": "ok"}


def test_static_assets_not_served_in_development(tmp_path):
	(tmp_path / "index.html").write_text("<html>reelify</html>", encoding="utf-8")
	resp = _client(FakeCatalogClient(), static_dir=str(tmp_path)).get("/")
	assert resp.status_code == 404


def test_production_deep_links_fall_back_to_index(tmp_path):
	(tmp_path / "index.html").write_text("<html>reelify</html>", encoding="utf-8")
	(tmp_path / "static").mkdir()
	(tmp_path / "static" / "main.js").write_text("console.log('reelify')", encoding="utf-8")
	client = _client(FakeCatalogClient(), environment="production", static_dir=str(tmp_path))

	assert "console.log" in client.get("/static/main.js").text
	deep = client.get("/movies/42/details")
	assert deep.status_code == 200
	assert "reelify" in deep.text

	missing_api = client.get("/api/nothing/here")
	assert missing_api.status_code == 404
	assert missing_api.json() == {"message": "Route not found"}
