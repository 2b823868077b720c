"""
Async client for the Gaana stream-url endpoint and the HLS CDN.
"""

import asyncio
import json
import logging
import time
from typing import Any, Dict, Optional

import aiohttp
from pydantic import ValidationError

from gaana_stream.exceptions import FetchFailureError, UpstreamLookupError
from gaana_stream.models.config import Quality, StreamConfig
from gaana_stream.models.stream import StreamLookup
from gaana_stream.utils.circuit_breaker import CircuitBreaker, CircuitBreakerError

log = logging.getLogger(__name__)


class GaanaAPIClient:
    """
    Async client for the two network calls a resolution needs.

    Features:
    - Stream-url lookup with browser-like headers
    - Circuit breaker around the lookup endpoint
    - Plain-text playlist fetches with a shared connection pool

    Use as an async context manager, or call `close()` when done.
    """

    def __init__(
        self, config: StreamConfig, session: Optional[aiohttp.ClientSession] = None
    ):
        """
        Initializes the API client.

        Args:
            config: Validated application configuration.
            session: Optional externally managed session. The client will not
                close a session it did not create.
        """
        self.config = config
        self._session = session
        self._owns_session = session is None
        self._circuit_breaker = CircuitBreaker(
            name="stream-url",
            failure_threshold=config.failure_threshold,
            recovery_timeout=config.recovery_timeout,
        )

    @property
    def circuit_breaker(self) -> CircuitBreaker:
        return self._circuit_breaker

    async def __aenter__(self) -> "GaanaAPIClient":
        await self._initialize_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _initialize_session(self) -> aiohttp.ClientSession:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=20,
                ttl_dns_cache=300,
                enable_cleanup_closed=True,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                headers={"User-Agent": self.config.user_agent},
                timeout=aiohttp.ClientTimeout(total=self.config.request_timeout),
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Gracefully closes the aiohttp session if this client created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    def _lookup_headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/x-www-form-urlencoded",
            "User-Agent": self.config.user_agent,
            "Accept": "application/json, text/plain, */*",
            "Origin": "https://gaana.com",
            "Referer": "https://gaana.com/",
        }

    async def _post_lookup(self, form: Dict[str, str]) -> str:
        """Posts the lookup form through the circuit breaker and returns the raw body."""
        session = await self._initialize_session()
        try:
            async with self._circuit_breaker:
                start_time = time.monotonic()
                async with session.post(
                    self.config.lookup_url, data=form, headers=self._lookup_headers()
                ) as r:
                    duration_ms = (time.monotonic() - start_time) * 1000
                    log.debug(
                        f"stream-url lookup returned {r.status} in {duration_ms:.0f} ms"
                    )
                    r.raise_for_status()
                    return await r.text()
        except CircuitBreakerError as e:
            raise UpstreamLookupError(str(e)) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise UpstreamLookupError(f"Stream-url lookup failed: {e}") from e
        except UnicodeDecodeError as e:
            raise UpstreamLookupError(f"Stream-url response is not valid text: {e}") from e

    async def lookup_stream(
        self, track_id: str, quality: Quality | str = Quality.HIGH
    ) -> Optional[StreamLookup]:
        """
        Asks the stream-url endpoint for the encrypted stream path of a track.

        Returns:
            The lookup data, or None when the service reports no stream or
            answers with an unexpected shape.

        Raises:
            UpstreamLookupError: Network failure, HTTP error, undecodable body
                or open circuit.
        """
        form = {
            "quality": Quality(quality).value,
            "track_id": str(track_id),
            "stream_format": self.config.stream_format,
        }
        body = await self._post_lookup(form)
        return parse_lookup_response(body, track_id)

    async def fetch_text(self, url: str) -> str:
        """
        Fetches a playlist as text.

        Raises:
            FetchFailureError: Network error, timeout, non-2xx status or a body
                that is not valid UTF-8.
        """
        session = await self._initialize_session()
        try:
            async with session.get(url) as r:
                if not 200 <= r.status < 300:
                    raise FetchFailureError(
                        f"Failed to fetch playlist: {r.status}", url=url, status=r.status
                    )
                return await r.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise FetchFailureError(f"Failed to fetch playlist: {e}", url=url) from e
        except UnicodeDecodeError as e:
            raise FetchFailureError(f"Playlist is not valid text: {e}", url=url) from e


def parse_lookup_response(body: str, track_id: str = "") -> Optional[StreamLookup]:
    """
    Extracts the stream data from a stream-url response body.

    Anything other than `api_status == "success"` with a non-empty
    `data.stream_path` is reported as no result.
    """
    try:
        payload: Any = json.loads(body)
    except ValueError:
        log.warning(f"stream-url response for track {track_id} is not JSON")
        return None

    if not isinstance(payload, dict) or payload.get("api_status") != "success":
        status = payload.get("api_status") if isinstance(payload, dict) else None
        log.debug(f"stream-url lookup for track {track_id} returned status {status!r}")
        return None

    data = payload.get("data")
    if not isinstance(data, dict) or not data.get("stream_path"):
        log.debug(f"stream-url lookup for track {track_id} has no stream_path")
        return None

    try:
        return StreamLookup(
            stream_path=str(data["stream_path"]),
            bit_rate=str(data.get("bit_rate") or ""),
            track_format=str(data.get("track_format") or ""),
        )
    except ValidationError as e:
        log.warning(f"Unexpected stream-url data for track {track_id}: {e}")
        return None
