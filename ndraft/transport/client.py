"""HTTP client for the generation backend."""

from typing import AsyncIterator, Callable, Optional, Union

import httpx

from ndraft.config import Config
from ndraft.exceptions import TransportError
from ndraft.logger import Logger, session_logger

UrlResolver = Callable[[], str]


class GenerateClient:
    """Streams a generation response from the proxy.

    Sends ``{"sessionId", "prompt"}`` as JSON and yields the raw body bytes as
    they arrive. Every failure, including a malformed endpoint URL, timeouts
    and non-2xx answers, surfaces as ``TransportError``.
    """

    def __init__(
        self,
        url_resolver: Optional[Union[UrlResolver, str]] = None,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[Logger] = None,
    ):
        """
        Initialize the client.

        Args:
            url_resolver: Endpoint, or a callable returning it at request time
            timeout_seconds: Limit on each network operation (connect, and every
                read of the streamed body); ``None`` disables it
            transport: Optional httpx transport (tests pass ``httpx.MockTransport``)
            logger: Optional logger instance
        """
        if url_resolver is None:
            url_resolver = Config.get_proxy_url
        if isinstance(url_resolver, str):
            url = url_resolver
            url_resolver = lambda: url  # noqa: E731
        self.url_resolver = url_resolver
        self.timeout_seconds = timeout_seconds
        self.transport = transport
        self.logger = logger or session_logger

    async def stream(
        self, prompt: str, session_id: Optional[str] = None
    ) -> AsyncIterator[bytes]:
        url = self.url_resolver()
        payload = {"sessionId": session_id, "prompt": prompt}
        self.logger.info("Opening generation stream", url=url, prompt_chars=len(prompt))

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self.transport
            ) as client:
                async with client.stream("POST", url, json=payload) as response:
                    if not response.is_success:
                        raise TransportError(
                            f"Proxy Error: {response.status_code}",
                            status_code=response.status_code,
                        )
                    async for chunk in response.aiter_raw():
                        if chunk:
                            yield chunk

        except httpx.InvalidURL as exc:
            raise TransportError(f"Invalid proxy URL {url!r}: {str(exc)}") from exc

        except httpx.TimeoutException as exc:
            raise TransportError(
                f"Stream read timed out after {self.timeout_seconds} seconds"
            ) from exc

        except httpx.HTTPError as exc:
            raise TransportError(f"Error contacting generation proxy: {str(exc)}") from exc
