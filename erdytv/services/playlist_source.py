"""Fetching raw playlist text from a URL or a local file."""
import asyncio
import logging
from typing import Callable, Optional

import aiofiles
import httpx

logger = logging.getLogger(__name__)


class PlaylistError(Exception):
    """Base class for playlist acquisition failures."""


class FetchError(PlaylistError):
    """The playlist source could not be reached or read."""


class DecodeError(PlaylistError):
    """The playlist bytes are not valid UTF-8 text."""


class PlaylistSource:
    """Downloads playlists with retries, or reads them from disk."""

    # Extended timeout for large files
    TIMEOUT = 120.0
    CONNECT_TIMEOUT = 30.0
    MAX_RETRIES = 3
    RETRY_DELAY = 2.0
    CHUNK_SIZE = 65536  # 64KB chunks

    def __init__(
        self,
        timeout: Optional[float] = None,
        connect_timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout if timeout is not None else self.TIMEOUT
        self.connect_timeout = connect_timeout if connect_timeout is not None else self.CONNECT_TIMEOUT
        self.max_retries = max(1, max_retries if max_retries is not None else self.MAX_RETRIES)
        self.retry_delay = retry_delay if retry_delay is not None else self.RETRY_DELAY
        self._transport = transport

    async def fetch(
        self,
        location: str,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> str:
        """Return the playlist text at a URL or file path."""
        if location.lower().startswith(("http://", "https://")):
            data = await self._download(location, progress_callback)
        else:
            data = await self._read_file(location)
        return self._decode(data)

    async def _download(
        self,
        url: str,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> bytes:
        """Download a playlist with retry logic."""
        last_error = None

        for attempt in range(self.max_retries):
            try:
                timeout = httpx.Timeout(self.timeout, connect=min(self.connect_timeout, self.timeout))

                async with httpx.AsyncClient(
                    timeout=timeout,
                    follow_redirects=True,
                    transport=self._transport,
                ) as client:
                    # Stream the response for large files
                    async with client.stream("GET", url) as response:
                        response.raise_for_status()

                        total_size = int(response.headers.get("content-length", 0) or 0)
                        downloaded = 0
                        chunks = []

                        async for chunk in response.aiter_bytes(chunk_size=self.CHUNK_SIZE):
                            chunks.append(chunk)
                            downloaded += len(chunk)

                            if progress_callback and total_size > 0:
                                progress_callback(downloaded, total_size)

                        return b"".join(chunks)

            except httpx.TimeoutException:
                last_error = f"Timeout (attempt {attempt + 1}/{self.max_retries})"
            except httpx.HTTPStatusError as e:
                # Don't retry on HTTP errors
                raise FetchError(f"HTTP {e.response.status_code}") from e
            except (httpx.InvalidURL, httpx.UnsupportedProtocol, ValueError) as e:
                # A malformed URL fails the same way on every attempt
                raise FetchError(f"Invalid playlist URL: {e}") from e
            except httpx.HTTPError as e:
                last_error = str(e) or type(e).__name__

            logger.warning("Playlist download failed: %s", last_error)

            # Wait before retry
            if attempt < self.max_retries - 1:
                await asyncio.sleep(self.retry_delay)

        raise FetchError(f"Failed to download playlist: {last_error}")

    async def _read_file(self, file_path: str) -> bytes:
        """Read a playlist from a local file."""
        try:
            async with aiofiles.open(file_path, "rb") as f:
                return await f.read()
        except OSError as e:
            raise FetchError(f"Failed to read file: {e}") from e

    @staticmethod
    def _decode(data: bytes) -> str:
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError("Failed to read playlist data") from e
