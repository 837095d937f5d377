"""
Puppet service endpoint discovery.
"""

import asyncio
from typing import Optional

import aiohttp

from ...config import PuppetOptions
from ...constants import ENDPOINT_SERVICE_TIMEOUT, ENDPOINT_SERVICE_URL
from ...exceptions import InvalidTokenError, PuppetNetworkError
from ...utils import get_logger

logger = get_logger("endpoint")


def normalize_endpoint(endpoint: str) -> str:
    """Add the ws:// scheme to a bare ``host:port`` endpoint."""
    if "://" in endpoint:
        return endpoint
    return f"ws://{endpoint}"


async def discover(token: str, session: Optional[aiohttp.ClientSession] = None) -> str:
    """
    Ask the endpoint service where the puppet service of ``token`` runs.

    Args:
        token: Puppet service token
        session: Optional HTTP session to reuse

    Returns:
        str: WebSocket endpoint of the puppet service

    Raises:
        InvalidTokenError: If the service knows no puppet for the token
        PuppetNetworkError: If the endpoint service cannot be queried
    """
    url = ENDPOINT_SERVICE_URL.format(token=token)
    logger.debug(f"Discovering puppet service endpoint at {url}")

    owns_session = session is None
    if owns_session:
        session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=ENDPOINT_SERVICE_TIMEOUT))
    try:
        async with session.get(url) as response:
            response.raise_for_status()
            data = await response.json(content_type=None)
    except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
        logger.error(f"Endpoint service request failed: {e}")
        raise PuppetNetworkError("Endpoint service error") from e
    finally:
        if owns_session:
            await session.close()

    try:
        ip = data["ip"]
        port = int(data["port"])
    except (KeyError, TypeError, ValueError) as e:
        logger.error(f"Unexpected endpoint service response: {data}")
        raise PuppetNetworkError("Endpoint service error") from e
    if port == 0:
        raise InvalidTokenError()

    endpoint = f"ws://{ip}:{port}"
    logger.info(f"Discovered puppet service at {endpoint}")
    return endpoint


async def resolve_endpoint(options: PuppetOptions) -> str:
    """
    Endpoint given in the options, else the one discovered from the token.

    Raises:
        InvalidTokenError: If neither an endpoint nor a token is set
    """
    if options.endpoint:
        return normalize_endpoint(options.endpoint)
    if options.token:
        return await discover(options.token)
    raise InvalidTokenError()
