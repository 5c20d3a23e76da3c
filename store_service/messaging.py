# store_service/messaging.py

"""
Message queue on top of Redis lists.

Producers append JSON documents with RPUSH; the consumer pops them with
BLOCKING LPOP (BLPOP) across every subscribed channel and hands each one,
parsed into its channel's pydantic schema, to the registered handler.
"""
import asyncio
import hashlib
import logging
from typing import Awaitable, Callable, Dict, Optional, Tuple, Type

import redis
from pydantic import BaseModel, ValidationError

from .config import (
    QUEUE_MAX_RETRIES,
    QUEUE_POLL_TIMEOUT_SECONDS,
    QUEUE_RETRY_DELAY_SECONDS,
    REDIS_URL,
)

logger = logging.getLogger(__name__)

Handler = Callable[[BaseModel], Awaitable[None]]


class RedisQueue:
    """Publishing side, used from request handlers."""

    def __init__(self, client: "redis.Redis"):
        self.client = client

    @classmethod
    def from_url(cls, url: str = REDIS_URL) -> "RedisQueue":
        return cls(redis.Redis.from_url(url, decode_responses=True))

    def publish(self, channel: str, message: BaseModel) -> None:
        payload = message.model_dump_json(by_alias=True)
        self.client.rpush(channel, payload)
        logger.info(f"Published message to '{channel}'.")


_queue: Optional[RedisQueue] = None


def get_queue() -> RedisQueue:
    """
    Dependency returning the process-wide publisher.
    The Redis connection pool is created on first use.
    """
    global _queue
    if _queue is None:
        _queue = RedisQueue.from_url()
    return _queue


class Consumer:
    """
    Reads messages from one or more channels and dispatches them.

    A payload that does not match its channel's schema is logged and
    dropped. A handler failure puts the raw payload back at the tail of its
    channel after a growing delay. Failures are counted per payload in the
    `<channel>:attempts` hash; after `max_retries` failed attempts the
    payload is logged and dropped.

    BLPOP removes a payload before its handler runs, so a worker killed
    mid-handler loses that payload.
    """

    def __init__(
        self,
        client,
        poll_timeout: int = QUEUE_POLL_TIMEOUT_SECONDS,
        max_retries: int = QUEUE_MAX_RETRIES,
        retry_delay: float = QUEUE_RETRY_DELAY_SECONDS,
    ):
        self.client = client
        self.poll_timeout = poll_timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._subscriptions: Dict[str, Tuple[Type[BaseModel], Handler]] = {}
        self._stopped = asyncio.Event()

    def subscribe(self, channel: str, schema: Type[BaseModel], handler: Handler) -> None:
        if channel in self._subscriptions:
            raise ValueError(f"Channel '{channel}' already has a handler")
        self._subscriptions[channel] = (schema, handler)
        logger.info(f"Subscribed {getattr(handler, '__name__', handler)} to '{channel}'.")

    @property
    def channels(self):
        return list(self._subscriptions)

    def stop(self) -> None:
        self._stopped.set()

    async def run(self) -> None:
        if not self._subscriptions:
            raise RuntimeError("No channel subscriptions registered")
        logger.info(f"Consumer listening on {self.channels}")
        while not self._stopped.is_set():
            item = await self.client.blpop(self.channels, timeout=self.poll_timeout)
            if item is None:
                continue
            channel, raw = item
            await self.dispatch(channel, raw)
        logger.info("Consumer stopped.")

    async def dispatch(self, channel: str, raw: str) -> bool:
        """Handle one payload. Returns True when the handler completed."""
        subscription = self._subscriptions.get(channel)
        if subscription is None:
            logger.error(f"No handler for channel '{channel}', dropping message.")
            return False
        schema, handler = subscription
        try:
            message = schema.model_validate_json(raw)
        except ValidationError as e:
            logger.error(f"Malformed message on '{channel}' dropped: {e}")
            return False

        attempts_key = f"{channel}:attempts"
        digest = hashlib.sha256(raw.encode()).hexdigest()
        try:
            await handler(message)
        except Exception as e:
            attempts = await self.client.hincrby(attempts_key, digest, 1)
            if attempts >= self.max_retries:
                logger.error(
                    f"Handler for '{channel}' failed {attempts} times, dropping message: {e}",
                    exc_info=True,
                )
                await self.client.hdel(attempts_key, digest)
                return False
            logger.error(
                f"Handler for '{channel}' failed (attempt {attempts}/{self.max_retries}), "
                f"requeueing message: {e}",
                exc_info=True,
            )
            await asyncio.sleep(self.retry_delay * attempts)
            await self.client.rpush(channel, raw)
            return False
        await self.client.hdel(attempts_key, digest)
        return True
