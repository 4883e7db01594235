"""
HTTP client the UI-side controller uses to reach the gateway.
It only ever talks to the gateway, so it never handles the upstream credential.
"""

from typing import Any, Dict, Optional

import requests  # make web requests to the gateway
from loguru import logger  # console logger

from .errors import NotFoundError, UpstreamError, ValidationError


class GatewayClient:
	def __init__(self, base_url: str = "http://localhost:5000", timeout: float = 15.0, session: Optional[requests.Session] = None):
		self.base_url = base_url.rstrip("/")
		self.timeout = timeout
		self.session = session or requests.Session()

	def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
		"""
		GET a gateway path and return the decoded JSON body.
		Raises ValidationError (400), NotFoundError (404) or UpstreamError (anything else).
		"""
		url = f"{self.base_url}{path}"
		try:
			resp = self.session.get(url, params=params, timeout=self.timeout)
		except requests.RequestException as e:
			logger.warning(f"[GatewayClient] {path} unreachable: {e}")
			raise UpstreamError("Gateway unreachable", detail=str(e)) from e

		if resp.status_code >= 400:
			message, detail = self._error_fields(resp)
			if resp.status_code == 404:
				raise NotFoundError(message or "Not found", detail=detail)
			if resp.status_code == 400:
				raise ValidationError(message or "Bad request", detail=detail)
			raise UpstreamError(message or f"Gateway error {resp.status_code}", detail=detail)

		try:
			return resp.json()
		except ValueError as e:
			raise UpstreamError("Invalid response from gateway", detail=resp.text[:200]) from e

	def health(self) -> bool:
		"""True when the gateway answers its health probe."""
		try:
			return self.session.get(f"{self.base_url}/health", timeout=3).ok
		except requests.RequestException:
			return False

	@staticmethod
	def _error_fields(resp: requests.Response):
		try:
			body = resp.json()
		except ValueError:
			return None, resp.text[:200]
		if isinstance(body, dict):
			return body.get("message"), body.get("error")
		return None, str(body)[:200]
