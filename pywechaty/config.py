"""
Puppet options and environment configuration.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .constants import DEFAULT_TIMEOUT, ENDPOINT_ENV_VAR, TIMEOUT_ENV_VAR, TOKEN_ENV_VAR
from .utils import get_logger

logger = get_logger("config")


@dataclass
class PuppetOptions:
    """
    Options used to create a puppet.

    Attributes:
        endpoint: Puppet service address (``host:port`` or a ws:// URL). When
            unset the endpoint is discovered from the token.
        token: Puppet service token
        timeout: Seconds to wait for each request
    """

    endpoint: Optional[str] = None
    token: Optional[str] = None
    timeout: Optional[float] = None

    @property
    def request_timeout(self) -> float:
        return self.timeout if self.timeout else DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'PuppetOptions':
        """
        Read options from WECHATY_ENDPOINT, WECHATY_TOKEN and WECHATY_TIMEOUT.

        Empty variables are treated as unset.
        """
        environ = os.environ if environ is None else environ
        timeout = None
        raw_timeout = environ.get(TIMEOUT_ENV_VAR)
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                logger.warning(f"Ignoring invalid {TIMEOUT_ENV_VAR} value: {raw_timeout}")
        return cls(
            endpoint=environ.get(ENDPOINT_ENV_VAR) or None,
            token=environ.get(TOKEN_ENV_VAR) or None,
            timeout=timeout,
        )
