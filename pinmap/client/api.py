# pinmap/client/api.py
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

import httpx

from pinmap.schemas.pin import PinOut, PinPage, Summary

logger = logging.getLogger(__name__)

API_BASE = "/api/pins"


class ApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(response: httpx.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        for key in ("error", "message"):
            if isinstance(body.get(key), str) and body[key]:
                return body[key]
    return fallback


class PinsApi:
    """One-to-one async wrappers over the pins HTTP API."""

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> "PinsApi":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, url: str, fallback: str, **kwargs) -> Any:
        try:
            r = await self._client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise ApiError(fallback) from e
        if not r.is_success:
            raise ApiError(_error_message(r, fallback), r.status_code)
        return r.json()

    async def fetch_pins(
        self,
        page: int = 1,
        limit: int = 100,
        main_category: Optional[str] = None,
        sub_type: Optional[str] = None,
    ) -> PinPage:
        params: Dict[str, Any] = {"page": page, "limit": limit}
        if main_category:
            params["mainCategory"] = main_category
        if sub_type:
            params["subType"] = sub_type
        data = await self._request("GET", API_BASE, "Failed to fetch pins", params=params)
        return PinPage.model_validate(data)

    async def fetch_nearby(self, lng: float, lat: float, max_distance: Optional[int] = None) -> List[PinOut]:
        params: Dict[str, Any] = {"lng": lng, "lat": lat}
        if max_distance is not None:
            params["maxDistance"] = max_distance
        data = await self._request("GET", f"{API_BASE}/near", "Failed proximity search", params=params)
        return [PinOut.model_validate(p) for p in data]

    async def create_pin(self, payload: Dict[str, Any]) -> PinOut:
        # payload["location"]["coordinates"] must be [lng, lat]
        data = await self._request("POST", API_BASE, "Failed to create pin", json=payload)
        return PinOut.model_validate(data)

    async def vote_pin(self, pin_id: str, vote: int) -> PinOut:
        data = await self._request("PATCH", f"{API_BASE}/{pin_id}/vote", "Failed to vote", json={"vote": vote})
        return PinOut.model_validate(data)

    async def delete_pin(self, pin_id: str) -> Dict[str, Any]:
        return await self._request("DELETE", f"{API_BASE}/{pin_id}", "Failed to delete")

    async def get_summary(self) -> Summary:
        data = await self._request("GET", "/api/summary", "Failed summary")
        return Summary.model_validate(data)
