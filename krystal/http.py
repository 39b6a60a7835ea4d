from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

import httpx

from krystal.errors import (
    ApiError,
    AuthError,
    InvalidParamsError,
    JsonError,
    PaymentRequiredError,
    RequestError,
    UrlError,
)

logger = logging.getLogger(__name__)

API_KEY_HEADER = "KC-APIKey"

QueryParams = Iterable[Tuple[str, str]]


class HttpClient:
    """Authenticated GET client for the Krystal Cloud API.

    Retries are not done here; wrap calls in ``krystal.utils.retry`` instead.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: float = 30.0,
        user_agent: str = "krystal-cli/0.1.0",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers={"User-Agent": user_agent},
            transport=transport,
        )

    def build_url(self, path: str, params: Optional[QueryParams] = None) -> httpx.URL:
        """Join ``path`` to the base URL and append ``params`` in order.

        Pairs are URL-encoded; repeated keys are kept as separate pairs.
        """
        pairs = list(params or [])
        try:
            url = httpx.URL(f"{self.base_url}/{path.lstrip('/')}", params=pairs or None)
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            raise UrlError(str(e)) from e
        if not url.scheme or not url.host:
            raise UrlError(f"relative URL without a base: {url}")
        return url

    def _auth_headers(self) -> Dict[str, str]:
        return {API_KEY_HEADER: self._api_key, "Content-Type": "application/json"}

    async def get_json(self, url: Union[httpx.URL, str]) -> Any:
        logger.debug(f"HTTP GET {url}")
        try:
            resp = await self._client.get(url, headers=self._auth_headers())
        except httpx.HTTPError as e:
            raise RequestError(e) from e
        return self.handle_response(resp)

    @staticmethod
    def handle_response(resp: httpx.Response) -> Any:
        status = resp.status_code
        if 200 <= status <= 299:
            try:
                return json.loads(resp.text)
            except json.JSONDecodeError as e:
                raise JsonError(str(e)) from e
        logger.debug(f"HTTP {status}: {resp.text[:200]}")
        if status == 400:
            raise InvalidParamsError(f"Bad request: {resp.text}")
        if status == 401:
            raise AuthError()
        if status == 402:
            raise PaymentRequiredError()
        raise ApiError(status, resp.text)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


def add_param(params: List[Tuple[str, str]], key: str, value: Any) -> None:
    """Append ``key=value`` unless value is None; bools are sent as true/false."""
    if value is None:
        return
    if isinstance(value, bool):
        params.append((key, "true" if value else "false"))
    else:
        params.append((key, str(int(value)) if isinstance(value, int) else str(value)))
