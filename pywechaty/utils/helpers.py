"""
Helper functions for the pywechaty library.
"""

import asyncio
import json
import random
import string
import time
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, TypeVar

from .logger import get_logger

T = TypeVar("T")


def generate_request_id() -> str:
    """
    Generate a unique id for a request sent to the puppet service

    Returns:
        str: Request id
    """
    return str(time.time()).replace(".", "") + str(random.randint(10000, 99999))


def generate_random_id(length: int = 16) -> str:
    """
    Generate a random alphanumeric id

    Args:
        length: Length of the id

    Returns:
        str: Random id
    """
    return ''.join(random.choices(string.ascii_letters + string.digits, k=length))


def now_timestamp() -> int:
    """Current UNIX time in seconds"""
    return int(time.time())


def json_stringify(obj: Any) -> str:
    """
    Convert a Python object to a compact JSON string

    Args:
        obj: Object to convert

    Returns:
        str: JSON representation of the object
    """
    return json.dumps(obj, separators=(',', ':'), ensure_ascii=False)


def parse_json(text: str) -> Dict[str, Any]:
    """
    Parse a JSON object string

    Args:
        text: JSON string

    Returns:
        dict: Parsed object, empty if the text is not a JSON object
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return {}
    return data if isinstance(data, dict) else {}


async def gather_limited(
    func: Callable[[str], Awaitable[T]],
    ids: Iterable[str],
    limit: int,
) -> List[T]:
    """
    Run ``func`` for every id with at most ``limit`` calls in flight.

    Results keep the order of ``ids``; ids whose call raised are dropped.
    """
    semaphore = asyncio.Semaphore(limit)

    async def run(item_id: str) -> Optional[T]:
        async with semaphore:
            return await func(item_id)

    id_list = list(ids)
    results = await asyncio.gather(*(run(item_id) for item_id in id_list), return_exceptions=True)
    loaded = []
    for item_id, result in zip(id_list, results):
        if isinstance(result, BaseException):
            get_logger("helpers").debug(f"Batch load of {item_id} failed: {result}")
            continue
        loaded.append(result)
    return loaded


async def call_handler(handler: Callable, *args: Any) -> Any:
    """
    Call a handler that may be a coroutine function or a plain function.
    """
    result = handler(*args)
    if asyncio.iscoroutine(result):
        return await result
    return result


class ReconnectionManager:
    """
    Reconnection strategy with exponential backoff.
    """

    def __init__(self,
                 initial_delay_ms: int,
                 max_delay_ms: int,
                 max_attempts: int,
                 decay_factor: float = 1.5,
                 random_factor: float = 0.2):
        """
        Initialize the reconnection manager.

        Args:
            initial_delay_ms: Initial delay in milliseconds
            max_delay_ms: Maximum delay in milliseconds
            max_attempts: Maximum number of attempts
            decay_factor: Growth factor of the exponential backoff
            random_factor: Random variation applied to each delay (jitter)
        """
        self.initial_delay_ms = initial_delay_ms
        self.max_delay_ms = max_delay_ms
        self.max_attempts = max_attempts
        self.decay_factor = decay_factor
        self.random_factor = random_factor
        self.attempt_count = 0
        self.logger = get_logger("ReconnectionManager")

    def reset(self) -> None:
        """Reset the attempt counter."""
        self.attempt_count = 0

    def get_next_delay_seconds(self) -> float:
        """
        Compute the delay before the next attempt.

        Returns:
            float: Delay in seconds, or -1 once the attempts are exhausted
        """
        if self.attempt_count >= self.max_attempts:
            return -1

        self.attempt_count += 1

        base_delay_ms = min(
            self.initial_delay_ms * (self.decay_factor ** (self.attempt_count - 1)),
            self.max_delay_ms
        )

        jitter = 1.0 + random.uniform(-self.random_factor, self.random_factor)
        delay_sec = base_delay_ms * jitter / 1000.0

        self.logger.info(f"Reconnect delay: {delay_sec:.2f}s (attempt {self.attempt_count}/{self.max_attempts})")
        return delay_sec

    def can_retry(self) -> bool:
        """
        Check whether another reconnection attempt is allowed.

        Returns:
            bool: True if attempts remain
        """
        return self.attempt_count < self.max_attempts
