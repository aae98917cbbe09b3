"""
Read-only client for the GitHub Models catalog.

Usage:
    client = ModelCatalogClient(token)
    for model in client.get_models():
        print(model.name, model.context_length)
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

import httpx

from ..errors import ApiCallFailed
from ..utils.logging_config import get_logger

logger = get_logger(__name__)

CATALOG_URL = "https://api.github.com/models"


@dataclass(frozen=True)
class ModelMetadata:
    """Catalog entry for one model."""

    name: str
    description: str = ""
    owner: str = ""
    source: str = ""
    context_length: Optional[int] = None
    modalities: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ModelMetadata":
        """Build metadata from a catalog element, accepting the known key aliases."""
        name = _first_string(data, "name", "id")
        return cls(
            name=name or "<unknown>",
            description=_first_string(data, "description", "summary"),
            owner=_first_string(data, "owned_by", "publisher", "provider"),
            source=_first_string(data, "source", "url", "endpoint_url"),
            context_length=_first_int(data, "context_length", "context_window"),
            modalities=_modalities(data),
        )


def _first_string(data: Dict[str, Any], *names: str) -> str:
    for name in names:
        value = data.get(name)
        if isinstance(value, str):
            return value
    return ""


def _first_int(data: Dict[str, Any], *names: str) -> Optional[int]:
    for name in names:
        value = data.get(name)
        # bool is an int subclass
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def _modalities(data: Dict[str, Any]) -> str:
    values = data.get("modalities")
    if isinstance(values, list):
        return ", ".join(v.strip() for v in values if isinstance(v, str) and v.strip())
    return _first_string(data, "modality")


def parse_models(payload: Any) -> List[ModelMetadata]:
    """
    Parse a catalog payload.

    Args:
        payload: Decoded JSON; an array, or an object with a `models` or `data` array

    Returns:
        Parsed models; empty when the shape is not recognized
    """
    elements: Iterable[Any] = []
    if isinstance(payload, list):
        elements = payload
    elif isinstance(payload, dict) and isinstance(payload.get("models"), list):
        elements = payload["models"]
    elif isinstance(payload, dict) and isinstance(payload.get("data"), list):
        elements = payload["data"]
    else:
        logger.info("No recognizable model array shape found; returning empty set.")

    return [ModelMetadata.from_dict(e) for e in elements if isinstance(e, dict)]


class ModelCatalogClient:
    """Fetches model metadata with a bearer token."""

    def __init__(
        self,
        token: str,
        url: str = CATALOG_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        logger.info(f"Initializing ModelCatalogClient with masked token length: {len(token or '')}")
        self.url = url
        self.client = httpx.Client(
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
                "User-Agent": "ai-conversation/1.0",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            timeout=timeout,
            transport=transport,
        )

    def get_models(self) -> List[ModelMetadata]:
        """
        Retrieve the model catalog.

        Returns:
            List of ModelMetadata

        Raises:
            ApiCallFailed: On non-success status, transport failure or invalid JSON
        """
        logger.info(f"GET {self.url}")
        try:
            response = self.client.get(self.url)
        except httpx.TimeoutException as e:
            raise ApiCallFailed("timeout", str(e)) from e
        except httpx.HTTPError as e:
            raise ApiCallFailed("transport", str(e)) from e

        logger.info(f"Model API response status: {response.status_code} ({response.reason_phrase})")
        if response.status_code in (401, 403):
            raise ApiCallFailed("auth", f"HTTP {response.status_code}")
        if not response.is_success:
            raise ApiCallFailed("status", f"HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise ApiCallFailed("stream", f"Invalid JSON payload: {e}") from e

        models = parse_models(payload)
        logger.info(f"Parsed {len(models)} models from API response")
        return models

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "ModelCatalogClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
