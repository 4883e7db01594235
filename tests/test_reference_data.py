from reelify.errors import UpstreamError
from reelify.reference_data import COUNTRIES, ReferenceCatalog, year_options


class CountingGateway:
	def __init__(self, responses):
		self.responses = responses
		self.calls = []

	def get_json(self, path, params=None):
		self.calls.append((path, params))
		value = self.responses.get(path, [])
		if isinstance(value, Exception):
			raise value
		return value


RESPONSES = {
	"/api/genres": [
		{"id": 28, "name": "Action"},
		{"id": 16, "name": "Animation"},
		{"id": 10751, "name": "Family"},
		{"id": 14, "name": "Fantasy"},
	],
	"/api/tv/genres": [{"id": 18, "name": "Drama"}],
	"/api/providers": [{"provider_id": 8, "provider_name": "Netflix", "logo_path": "/n.png"}],
}


def test_loads_once_and_caches():
	gateway = CountingGateway(RESPONSES)
	catalog = ReferenceCatalog(gateway, provider_region="GB")

	first = catalog.load()
	second = catalog.load()

	assert first is second
	assert len(gateway.calls) == 3
	assert ("/api/providers", {"region": "GB"}) in gateway.calls


def test_builds_typed_lists():
	data = ReferenceCatalog(CountingGateway(RESPONSES)).load()

	assert [g.name for g in data.animation_genres] == ["Animation", "Family", "Fantasy"]
	assert data.tv_genres[0].id == 18
	assert data.providers[0].name == "Netflix"
	assert data.providers[0].logo_path == "/n.png"
	assert data.countries == COUNTRIES
	assert data.years[-1] == 1900


def test_failed_or_malformed_lists_degrade_to_empty():
	gateway = CountingGateway({
		"/api/genres": UpstreamError("Error fetching genres"),
		"/api/tv/genres": {"genres": "not a list"},
		"/api/providers": [{"provider_id": 8, "provider_name": "Netflix"}, {"bogus": True}],
	})
	data = ReferenceCatalog(gateway).load()

	assert data.genres == []
	assert data.animation_genres == []
	assert data.tv_genres == []
	assert [p.id for p in data.providers] == [8]


def test_year_options_newest_first():
	years = year_options(current_year=2003, earliest=2000)
	assert years == [2003, 2002, 2001, 2000]
