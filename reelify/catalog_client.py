"""
Upstream catalog client used by the gateway.
Injects the server-held credential into every call and normalizes failures
into UpstreamError. The credential never appears in logs or error messages.
"""

from typing import Any, Dict, Optional

import requests  # HTTP client for the upstream API
from loguru import logger  # console logger

from .config import TMDB_BASE_URL
from .errors import UpstreamError


class CatalogClient:
	"""
	Thin wrapper around a requests.Session bound to the upstream API.
	Stateless per call; safe to share across gateway requests.
	"""

	def __init__(
		self,
		api_key: Optional[str],
		base_url: str = TMDB_BASE_URL,
		timeout: float = 10.0,
		session: Optional[requests.Session] = None,
	):
		self._api_key = api_key or ""  # empty key still lets upstream answer 401
		self.base_url = base_url.rstrip("/")
		self.timeout = timeout
		self.session = session or requests.Session()

	def get(self, path: str, params: Optional[Dict[str, Any]] = None, what: str = "catalog data") -> Any:
		"""
		GET `path` from upstream with `params` plus the credential and return parsed JSON.
		`what` names the resource in the safe error message ("Error fetching <what>").
		"""
		query = dict(params or {})
		logger.debug(f"[Upstream] GET {path} params={query}")  # logged before the key is added
		query["api_key"] = self._api_key

		url = f"{self.base_url}{path}"
		try:
			resp = self.session.get(url, params=query, timeout=self.timeout)
		except requests.RequestException as e:
			logger.error(f"[Upstream] Network error fetching {what}: {type(e).__name__}")
			raise UpstreamError(f"Error fetching {what}", detail=self._scrub(str(e))) from e

		if not 200 <= resp.status_code < 300:
			body = self._safe_body(resp)
			logger.error(f"[Upstream] {path} answered {resp.status_code}: {body}")
			raise UpstreamError(
				f"Error fetching {what}",
				detail=f"Upstream responded with status {resp.status_code}: {body}",
			)

		try:
			return resp.json()
		except ValueError as e:
			logger.error(f"[Upstream] Non-JSON response from {path} (status={resp.status_code})")
			raise UpstreamError(f"Error fetching {what}", detail="Invalid JSON in upstream response") from e

	def _safe_body(self, resp: requests.Response) -> str:
		"""Short, credential-free rendering of an error body for logs and detail."""
		try:
			data = resp.json()
		except ValueError:
			return self._scrub(resp.text[:200])
		if isinstance(data, dict) and data.get("status_message"):
			return self._scrub(str(data["status_message"]))
		return self._scrub(str(data)[:200])

	def _scrub(self, text: str) -> str:
		# requests embeds the full URL (query string included) in many exception messages
		if self._api_key:
			text = text.replace(self._api_key, "***")
		return text
