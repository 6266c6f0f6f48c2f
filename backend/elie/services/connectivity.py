"""
Network reachability probe.
"""

import asyncio
import logging
from typing import Optional

import aiohttp

from ..config import settings


logger = logging.getLogger(__name__)


async def is_network_available(
    url: Optional[str] = None,
    timeout: Optional[float] = None
) -> bool:
    """Return True when the API host answers at all, whatever the status."""
    try:
        async with aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=timeout or settings.CONNECTIVITY_TIMEOUT)
        ) as session:
            async with session.head(url or settings.CONNECTIVITY_CHECK_URL) as response:
                logger.debug("Connectivity probe answered HTTP %s", response.status)
                return True
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.info("Connectivity probe failed: %r", e)
        return False
