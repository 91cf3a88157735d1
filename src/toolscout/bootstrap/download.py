"""HTTP download of runtime archives."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

import aiohttp

from ..errors import TransportError

logger = logging.getLogger(__name__)

ArchiveFetcher = Callable[..., Awaitable[bytes]]


async def fetch_archive(url: str, timeout: Optional[float] = None) -> bytes:
    """Download ``url`` and return the response body.

    Proxy variables (HTTPS_PROXY, ...) are honoured. Without ``timeout`` the
    transport's default applies.

    Raises:
        TransportError: On connection failure, timeout or a non-2xx status
    """
    client_timeout = aiohttp.ClientTimeout(total=timeout) if timeout else None
    session_kwargs = {"trust_env": True}
    if client_timeout is not None:
        session_kwargs["timeout"] = client_timeout

    logger.info("Downloading Node.js from: %s", url)
    try:
        async with aiohttp.ClientSession(**session_kwargs) as session:
            async with session.get(url) as resp:
                if not 200 <= resp.status < 300:
                    raise TransportError(
                        f"Failed to download Node.js: HTTP {resp.status}",
                        status=resp.status,
                    )
                content = await resp.read()
    except aiohttp.ClientError as e:
        raise TransportError(f"Failed to download Node.js: {e}") from e
    except asyncio.TimeoutError as e:
        raise TransportError("Failed to download Node.js: request timed out") from e

    logger.debug("Downloaded %d bytes from %s", len(content), url)
    return content
