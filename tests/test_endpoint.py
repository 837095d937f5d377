"""
Tests for puppet service endpoint discovery.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from pywechaty.config import PuppetOptions
from pywechaty.exceptions import InvalidTokenError, PuppetNetworkError
from pywechaty.puppet.service.endpoint import discover, normalize_endpoint, resolve_endpoint


def make_session(data=None, error=None):
    """HTTP session whose GET answers with ``data`` or raises ``error``."""
    response = MagicMock()
    response.raise_for_status = MagicMock(side_effect=error)
    response.json = AsyncMock(return_value=data)
    session = MagicMock()
    session.get.return_value.__aenter__.return_value = response
    return session


class TestEndpoint:
    """Tests for endpoint resolution."""

    def test_normalize_endpoint(self):
        """Test bare addresses get the ws:// scheme."""
        assert normalize_endpoint("127.0.0.1:8788") == "ws://127.0.0.1:8788"
        assert normalize_endpoint("wss://puppet.example.com") == "wss://puppet.example.com"

    @pytest.mark.asyncio
    async def test_discover(self):
        """Test the endpoint is built from the service answer."""
        # Setup
        session = make_session({"ip": "10.0.0.2", "port": 8788})

        # Test
        endpoint = await discover("token", session)

        # Verify
        assert endpoint == "ws://10.0.0.2:8788"
        assert session.get.call_args[0][0] == "https://api.chatie.io/v0/hosties/token"

    @pytest.mark.asyncio
    async def test_discover_unknown_token(self):
        """Test port 0 means the token has no puppet service."""
        with pytest.raises(InvalidTokenError):
            await discover("token", make_session({"ip": "0.0.0.0", "port": 0}))

    @pytest.mark.asyncio
    async def test_discover_service_error(self):
        """Test HTTP failures become network errors."""
        # Setup
        session = make_session(error=aiohttp.ClientError("503"))

        # Test & verify
        with pytest.raises(PuppetNetworkError, match="Endpoint service error"):
            await discover("token", session)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("data", [
        {"ip": "1.2.3.4", "port": "abc"},
        {"ip": "1.2.3.4", "port": None},
        {"ip": "1.2.3.4"},
        ["1.2.3.4", 8788],
    ])
    async def test_discover_malformed_answer(self, data):
        """Test an answer without a usable ip and port is a service error."""
        with pytest.raises(PuppetNetworkError, match="Endpoint service error"):
            await discover("token", make_session(data))

    @pytest.mark.asyncio
    async def test_resolve_prefers_endpoint(self):
        """Test an explicit endpoint skips discovery."""
        # Test
        with patch('pywechaty.puppet.service.endpoint.discover', new_callable=AsyncMock) as mock_discover:
            endpoint = await resolve_endpoint(PuppetOptions(endpoint="127.0.0.1:8788", token="token"))

        # Verify
        assert endpoint == "ws://127.0.0.1:8788"
        assert not mock_discover.called

    @pytest.mark.asyncio
    async def test_resolve_without_token(self):
        """Test neither endpoint nor token is an invalid token."""
        with pytest.raises(InvalidTokenError):
            await resolve_endpoint(PuppetOptions())
