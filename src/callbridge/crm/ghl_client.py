"""GoHighLevel (LeadConnector) CRM client: contact lookup, creation and tagging."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from callbridge.core.config import get_settings
from callbridge.core.exceptions import (
    CrmCreateError,
    CrmNotConfiguredError,
    CrmSearchError,
    CrmTagError,
)
from callbridge.core.logging_config import get_logger, log_external_call
from callbridge.core.utils import monotonic_ms

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class CrmContact:
    """A CRM contact as far as this service cares about it."""

    id: str
    phone: Optional[str] = None
    tags: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "CrmContact":
        return cls(
            id=str(data["id"]),
            phone=data.get("phone"),
            tags=frozenset(data.get("tags") or ()),
        )


class GoHighLevelClient:
    """
    Client for the GoHighLevel contacts API.

    Tags are additive; there is no removal path.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        location_id: Optional[str] = None,
        base_url: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the CRM client.

        Args:
            api_key: GoHighLevel API key (uses env if not provided).
            location_id: Sub-account location new contacts belong to.
            base_url: API root (uses GHL_API_URL if not provided).
            http_client: Pre-built httpx client, mainly for tests.
        """
        settings = get_settings()
        self.api_key = api_key or settings.ghl_api_key
        self.location_id = location_id or settings.ghl_location_id
        self.base_url = (base_url or settings.ghl_api_url).rstrip("/")
        self.api_version = settings.ghl_api_version
        self.timeout = settings.http_timeout_seconds
        self._client: Optional[httpx.Client] = http_client

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout)
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def is_configured(self) -> bool:
        return bool(self.api_key and self.location_id)

    def _ensure_configured(self) -> None:
        if not self.is_configured():
            raise CrmNotConfiguredError(
                "GoHighLevel not configured. Set GHL_API_KEY and GHL_LOCATION_ID environment variables."
            )

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Version": self.api_version,
            "Accept": "application/json",
        }

    def _request(
        self,
        method: str,
        path: str,
        operation: str,
        error_cls: type,
        **kwargs: Any,
    ) -> Dict[str, Any]:
        """Send one request and translate failures into `error_cls`."""
        started = monotonic_ms()
        try:
            response = self._get_client().request(
                method, f"{self.base_url}{path}", headers=self._headers(), **kwargs
            )
        except httpx.HTTPError as e:
            log_external_call(LOGGER, "gohighlevel", operation, False, monotonic_ms() - started)
            raise error_cls(f"GoHighLevel {operation} failed: {e}", detail=str(e)) from e

        duration = monotonic_ms() - started
        log_external_call(
            LOGGER, "gohighlevel", operation, response.is_success, duration,
            status_code=response.status_code,
        )
        if not response.is_success:
            raise error_cls(
                f"GoHighLevel {operation} failed: {response.status_code} {response.text}",
                code=response.status_code,
                detail=response.text,
            )
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as e:
            raise error_cls(
                f"GoHighLevel {operation} returned a non-JSON response", detail=response.text
            ) from e
        if not isinstance(data, dict):
            raise error_cls(
                f"GoHighLevel {operation} response was not a JSON object", detail=response.text
            )
        return data

    def search_contacts(self, phone_number: str) -> list[CrmContact]:
        """Contacts matching `phone_number`."""
        self._ensure_configured()
        data = self._request(
            "GET",
            "/contacts/",
            "search_contacts",
            CrmSearchError,
            params={"locationId": self.location_id, "query": phone_number},
        )
        return [
            CrmContact.from_api(c)
            for c in data.get("contacts") or []
            if isinstance(c, dict) and c.get("id")
        ]

    def create_contact(self, phone_number: str, first_name: Optional[str] = None) -> CrmContact:
        """Create a contact in the configured location."""
        self._ensure_configured()
        payload: Dict[str, Any] = {"phone": phone_number, "locationId": self.location_id}
        if first_name:
            payload["firstName"] = first_name
        data = self._request("POST", "/contacts/", "create_contact", CrmCreateError, json=payload)
        contact = data.get("contact")
        if not contact or "id" not in contact:
            raise CrmCreateError("GoHighLevel create_contact returned no contact", detail=str(data))
        return CrmContact.from_api(contact)

    def find_or_create_contact(
        self, phone_number: str, first_name: Optional[str] = None
    ) -> CrmContact:
        """
        Look a contact up by phone, creating it when absent.

        Raises:
            CrmSearchError: Search request failed.
            CrmCreateError: Create request failed.
        """
        matches = self.search_contacts(phone_number)
        if matches:
            return matches[0]
        contact = self.create_contact(phone_number, first_name=first_name)
        LOGGER.info(f"Created CRM contact {contact.id} for {phone_number}")
        return contact

    def add_tag(self, contact_id: str, tag: str) -> None:
        """
        Add `tag` to a contact. Repeating a tag is accepted by the CRM.

        Raises:
            CrmTagError: Tag request failed.
        """
        self._ensure_configured()
        self._request(
            "POST",
            f"/contacts/{contact_id}/tags",
            "add_tag",
            CrmTagError,
            json={"tags": [tag]},
        )
        LOGGER.info(f"Tagged CRM contact {contact_id} with '{tag}'")


# Module-level singleton
_client: Optional[GoHighLevelClient] = None


def get_crm_client() -> GoHighLevelClient:
    """Get the global GoHighLevelClient instance."""
    global _client
    if _client is None:
        _client = GoHighLevelClient()
    return _client


def reset_crm_client() -> None:
    """Close and drop the global CRM client."""
    global _client
    if _client is not None:
        _client.close()
    _client = None


__all__ = ["CrmContact", "GoHighLevelClient", "get_crm_client", "reset_crm_client"]
