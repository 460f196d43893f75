"""HTTP client for the Gemini route oracle with Google Maps grounding."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ...config import settings
from ...errors import MalformedResponse, OracleMisconfigured, OracleUnavailable
from ...models.domain import GroundingChunk, OracleReply, RouteRequest

logger = logging.getLogger(__name__)


class GeminiClient:
    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        self.model = model or settings.gemini_model
        self.base_url = (base_url or settings.gemini_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.oracle_timeout_seconds
        self._client = http_client
        self._owns_client = http_client is None

    def __enter__(self) -> "GeminiClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=httpx.Timeout(self.timeout, connect=10.0))
        return self._client

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def build_payload(self, request: RouteRequest) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": request.prompt}]}],
            "tools": [{"googleMaps": {}}],
        }
        if request.location is not None:
            payload["toolConfig"] = {
                "retrievalConfig": {
                    "latLng": {
                        "latitude": request.location.latitude,
                        "longitude": request.location.longitude,
                    }
                }
            }
        return payload

    def generate(self, request: RouteRequest) -> OracleReply:
        """Send ``request`` and return the raw reply text plus grounding citations.

        Raises:
            OracleMisconfigured: no API key; checked before any network access.
            OracleUnavailable: transport, auth or quota failure. Never retried here.
            MalformedResponse: the reply carries no candidate text.
        """
        if not self.api_key:
            raise OracleMisconfigured("Gemini API key is not configured (set DRP_GEMINI_API_KEY).")

        logger.info(f"Requesting route from {self.model} for {len(request.deliveries)} deliveries")
        client = self._get_client()
        try:
            response = client.post(
                self.endpoint,
                json=self.build_payload(request),
                headers={"x-goog-api-key": self.api_key},
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error(f"Gemini returned HTTP {exc.response.status_code}")
            raise OracleUnavailable(
                f"Route oracle request failed with HTTP {exc.response.status_code}: {exc.response.text[:200]}"
            ) from exc
        except httpx.TimeoutException as exc:
            raise OracleUnavailable(f"Route oracle request timed out after {self.timeout:.0f}s.") from exc
        except httpx.HTTPError as exc:
            raise OracleUnavailable(f"Failed to reach the route oracle at {self.base_url}: {exc}") from exc
        except ValueError as exc:
            raise MalformedResponse("Route oracle returned a non-JSON HTTP body.") from exc

        return parse_generate_content(data)


def parse_generate_content(data: Any) -> OracleReply:
    """Pull the first candidate's text and its maps grounding chunks out of a reply body."""
    candidates = data.get("candidates") if isinstance(data, dict) else None
    if not candidates:
        raise MalformedResponse("Route oracle returned no candidates.")

    candidate = candidates[0] if isinstance(candidates, list) else None
    if not isinstance(candidate, dict):
        raise MalformedResponse("Route oracle returned a malformed candidate.")
    content = candidate.get("content") or {}
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        raise MalformedResponse("Route oracle returned a candidate without content parts.")
    raw_text = "".join(
        part["text"] for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str)
    ).strip()
    if not raw_text:
        raise MalformedResponse("Route oracle returned an empty response.")

    metadata = candidate.get("groundingMetadata")
    raw_chunks = metadata.get("groundingChunks") if isinstance(metadata, dict) else None
    chunks = []
    for chunk in raw_chunks if isinstance(raw_chunks, list) else []:
        maps = chunk.get("maps") if isinstance(chunk, dict) else None
        if not isinstance(maps, dict):
            continue
        uri = maps.get("uri")
        chunks.append(GroundingChunk(title=str(maps.get("title") or ""), uri=uri if isinstance(uri, str) and uri else None))

    return OracleReply(raw_text=raw_text, grounding_chunks=tuple(chunks))


def is_configured() -> bool:
    return bool(settings.gemini_api_key)
