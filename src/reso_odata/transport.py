"""httpx-backed implementation of ``ITransport``."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import urljoin

import httpx

from .exceptions import RequestTimeoutError, TransportError
from .ports import ITransport, TransportResponse

if TYPE_CHECKING:
    from types import TracebackType

    from .config import ClientConfig

logger = logging.getLogger(__name__)

USER_AGENT = "reso-odata/0.1.0"


class HttpTransport(ITransport):
    """
    Bearer-authenticated async GET over a pooled ``httpx.AsyncClient``.

    The transport owns the client it creates and closes it in ``aclose()``.
    A client passed in by the caller is used as-is and left open.
    """

    def __init__(
        self,
        service_root: str,
        token: str,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
        user_agent: str = USER_AGENT,
    ) -> None:
        self._service_root = service_root.rstrip("/")
        self.timeout = timeout
        self._headers = {
            "Authorization": f"Bearer {token}",
            "User-Agent": user_agent,
        }
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        client: httpx.AsyncClient | None = None,
        **kwargs: Any,
    ) -> HttpTransport:
        return cls(
            config.service_root,
            config.token,
            timeout=config.timeout,
            client=client,
            **kwargs,
        )

    @property
    def service_root(self) -> str:
        return self._service_root

    def resolve(self, url: str) -> str:
        """Absolute URL for ``url``; relative paths hang off the service root."""
        return urljoin(f"{self._service_root}/", url)

    async def get(
        self,
        url: str,
        *,
        accept: str = "application/json",
    ) -> TransportResponse:
        target = self.resolve(url)
        headers = {**self._headers, "Accept": accept}
        logger.debug("GET %s", target)

        try:
            response = await self._client.get(target, headers=headers, timeout=self.timeout)
        except httpx.TimeoutException as e:
            logger.debug("GET %s timed out after %ss", target, self.timeout)
            raise RequestTimeoutError(target, self.timeout) from e
        except httpx.HTTPError as e:
            logger.debug("GET %s failed: %s", target, e)
            raise TransportError(f"Request to {target} failed: {e}", url=target) from e

        logger.debug("GET %s -> %s", target, response.status_code)
        return TransportResponse(
            url=target,
            status_code=response.status_code,
            text=response.text,
            headers=dict(response.headers),
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpTransport:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
