"""
Error taxonomy shared by the gateway and the gateway client.
Each error knows the HTTP status it maps to.
"""

from typing import Any, Dict, Optional


class CatalogError(Exception):
	"""Base class: a safe user-facing message plus optional internal detail."""
	status_code = 500

	def __init__(self, message: str, detail: Optional[str] = None):
		super().__init__(message)
		self.message = message  # safe to show to callers
		self.detail = detail  # underlying failure; only exposed outside production

	def to_payload(self, include_detail: bool = False) -> Dict[str, Any]:
		payload: Dict[str, Any] = {"message": self.message}
		if include_detail and self.detail:
			payload["error"] = self.detail
		return payload


class ValidationError(CatalogError):
	"""Bad path or query value; no upstream call is made."""
	status_code = 400


class NotFoundError(CatalogError):
	"""The requested thing does not exist (e.g. an item without a trailer)."""
	status_code = 404


class UpstreamError(CatalogError):
	"""Network failure, timeout, non-2xx or malformed body from the remote service."""
	status_code = 500
