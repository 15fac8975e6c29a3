"""
HTTP client for the catalog item service.
"""

from collections.abc import Iterable, Sequence
from typing import Any

import httpx

from catalog_ingest.core.errors import ExternalServiceError
from catalog_ingest.core.models import ExistingItemRef, ItemUpdateRequest, ItemUpsertRequest
from catalog_ingest.observability.logger import get_logger

from .base import DEFAULT_MAX_BATCH_SIZE, check_batch_size

logger = get_logger(__name__)

SERVICE_NAME = "Item Service"


class HttpCatalogClient:
    """
    Catalog client over the item service's JSON API.

    Endpoints:
    - POST /items/lookup  {"federatedIds": [...]} -> {"items": [{"federatedId", "id"}]}
    - POST /items/batch   {"items": [...]}        -> {"ids": [...]}
    - PUT  /items/batch   {"items": [...+id]}     -> {"ids": [...]}

    The underlying httpx.Client is thread-safe and shared by all chunks.
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 30.0,
        max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
        client: httpx.Client | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.max_batch_size = max_batch_size
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.client = client or httpx.Client(
            base_url=self.base_url,
            headers=headers,
            timeout=httpx.Timeout(timeout),
        )

    def close(self) -> None:
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def _request(self, method: str, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            response = self.client.request(method, path, json=payload)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise ExternalServiceError(
                SERVICE_NAME,
                f"{method} {path} returned {e.response.status_code}",
                details={"status": e.response.status_code, "body": e.response.text[:500]},
            ) from e
        except httpx.HTTPError as e:
            raise ExternalServiceError(SERVICE_NAME, f"{method} {path} failed: {e}") from e
        except ValueError as e:
            raise ExternalServiceError(SERVICE_NAME, f"{method} {path} returned invalid JSON") from e

    def lookup_by_federated_ids(self, federated_ids: Iterable[str]) -> list[ExistingItemRef]:
        ids = list(federated_ids)
        if not ids:
            return []
        body = self._request("POST", "/items/lookup", {"federatedIds": ids})
        try:
            return [
                ExistingItemRef(federated_id=entry["federatedId"], internal_id=entry["id"])
                for entry in body.get("items", [])
            ]
        except (KeyError, TypeError) as e:
            raise ExternalServiceError(SERVICE_NAME, f"Malformed lookup response: {e}") from e

    def create_batch(self, items: Sequence[ItemUpsertRequest]) -> list[str]:
        check_batch_size(items, self.max_batch_size)
        body = self._request("POST", "/items/batch", {"items": [item.to_payload() for item in items]})
        logger.debug(f"Created {len(items)} items")
        return list(body.get("ids", []))

    def update_batch(self, items: Sequence[ItemUpdateRequest]) -> list[str]:
        check_batch_size(items, self.max_batch_size)
        body = self._request("PUT", "/items/batch", {"items": [item.to_payload() for item in items]})
        logger.debug(f"Updated {len(items)} items")
        return list(body.get("ids", []))
