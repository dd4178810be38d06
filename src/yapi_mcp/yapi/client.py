"""
YApi HTTP Client

Thin async transport to the YApi server. Every response is unwrapped through
check_api_response(); origin failures surface as OriginError, HTTP and
network failures as TransportError. No caching and no retries happen here.
"""

import logging
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from ..config import YapiConfig
from ..errors import OriginError, TransportError
from .models import CategoryItem, InterfaceDetail

logger = logging.getLogger(__name__)

LIST_MENU_PATH = "/api/interface/list_menu"
INTERFACE_PATH = "/api/interface/get"


def check_api_response(payload: Any) -> Any:
    """
    Unwrap a YApi envelope ``{"errcode", "errmsg", "data"}``.

    Returns:
        The ``data`` member when ``errcode`` is 0

    Raises:
        OriginError: When ``errcode`` is non-zero
        TransportError: When the payload is not a YApi envelope
    """
    if not isinstance(payload, dict) or "errcode" not in payload:
        raise TransportError("Unexpected response format from YApi", details={"payload_type": type(payload).__name__})

    errcode = payload.get("errcode")
    if errcode == 0:
        return payload.get("data")

    errmsg = str(payload.get("errmsg") or "unknown error")
    raise OriginError(int(errcode) if isinstance(errcode, int) else -1, errmsg)


class YapiClient:
    """
    Async client for the YApi interface API.

    Example:
        client = YapiClient(YapiConfig(base_url="https://yapi.example.com", cookie="_yapi_token=..."))
        categories = await client.get_interface_list(11)
        await client.close()
    """

    def __init__(self, config: YapiConfig, transport: httpx.AsyncBaseTransport | None = None) -> None:
        """
        Args:
            config: Connection settings
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.config = config
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            headers={
                "Accept": "application/json, text/plain, */*",
                "Cookie": config.cookie,
            },
            timeout=config.timeout,
            transport=transport,
        )

    async def _get(self, path: str, params: dict[str, Any]) -> Any:
        query = {**self.config.request_params, **params}
        try:
            response = await self._client.get(path, params=query)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"HTTP Error: {e.response.status_code} {e.response.reason_phrase}",
                extra={"path": path, "http_status": e.response.status_code, "body": e.response.text[:500]},
            )
            raise TransportError(
                f"YApi returned HTTP {e.response.status_code} for {path}",
                status=e.response.status_code,
                details={"path": path},
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Network Error: {e}", extra={"path": path, "error_type": type(e).__name__})
            raise TransportError(f"Failed to reach YApi at {path}: {e}", details={"path": path}) from e

        try:
            payload = response.json()
        except ValueError as e:
            raise TransportError(f"YApi returned a non-JSON body for {path}", details={"path": path}) from e

        return check_api_response(payload)

    async def get_interface_list(self, project_id: int) -> list[CategoryItem]:
        """
        Fetch every category of a project with its interface summaries.

        Raises:
            OriginError: YApi rejected the request (e.g. unknown project)
            TransportError: The request did not complete
        """
        logger.info(f"Fetching interface list: project_id={project_id}")
        data = await self._get(LIST_MENU_PATH, {"project_id": project_id})
        try:
            return [CategoryItem.model_validate(item) for item in data or []]
        except PydanticValidationError as e:
            raise TransportError(
                f"Malformed interface list for project {project_id}",
                details={"project_id": project_id, "errors": e.errors(include_url=False, include_context=False)},
            ) from e

    async def get_interface_detail(self, interface_id: int) -> InterfaceDetail:
        """Fetch the full definition of one interface."""
        logger.info(f"Fetching interface detail: id={interface_id}")
        data = await self._get(INTERFACE_PATH, {"id": interface_id})
        try:
            return InterfaceDetail.model_validate(data)
        except PydanticValidationError as e:
            raise TransportError(
                f"Malformed interface detail for id {interface_id}",
                details={"interface_id": interface_id, "errors": e.errors(include_url=False, include_context=False)},
            ) from e

    async def close(self) -> None:
        """Clean up client resources."""
        await self._client.aclose()
