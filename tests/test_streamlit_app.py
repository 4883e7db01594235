"""
UI wiring tests using Streamlit's AppTest harness with the gateway client patched out.
"""

import pytest
from streamlit.testing.v1 import AppTest

from reelify.gateway_client import GatewayClient
from reelify.models import ContentKind


RESPONSES = {
	"/api/genres": [{"id": 28, "name": "Action"}, {"id": 16, "name": "Animation"}],
	"/api/tv/genres": [{"id": 18, "name": "Drama"}],
	"/api/providers": [{"provider_id": 8, "provider_name": "Netflix"}],
}


@pytest.fixture
def app(monkeypatch):
	def get_json(self, path, params=None):
		return RESPONSES.get(path, {"page": 1, "results": [], "total_pages": 1})

	monkeypatch.setattr(GatewayClient, "get_json", get_json)
	monkeypatch.setattr(GatewayClient, "health", lambda self: True)
	return AppTest.from_file("../streamlit_app.py", default_timeout=30).run()


def _button(app, label):
	return next(b for b in app.button if b.label == label)


def test_reset_filters_clears_filter_widgets(app):
	app.selectbox(key="year_choice").set_value(1999).run()
	app.selectbox(key="country_choice").set_value("JP").run()
	controller = app.session_state["controller"]
	assert controller.context.filters.year == 1999
	assert controller.context.filters.country_code == "JP"

	_button(app, "Reset filters").click().run()

	assert controller.context.filters.year is None
	assert app.selectbox(key="year_choice").value is None
	assert app.selectbox(key="country_choice").value == ""
	assert app.selectbox(key="sort_choice").value == "popularity.desc"


def test_section_change_clears_genre_and_provider_widgets(app):
	app.selectbox(key="provider_choice").set_value(8).run()
	controller = app.session_state["controller"]
	assert controller.context.selected_provider_id == 8

	app.radio(key="kind_choice").set_value(ContentKind.TV).run()

	assert controller.context.content_kind == ContentKind.TV
	assert controller.context.selected_provider_id is None
	assert app.selectbox(key="provider_choice").value is None
	assert app.selectbox(key="genre_choice").value is None
