# store_service/worker.py

"""
Email worker: consumes the auth and order queues and sends the emails.

Run with `python -m store_service.worker` or the `store-worker` script.
"""
import asyncio
import logging
import signal
import sys

import redis.asyncio as aioredis

from .config import REDIS_URL
from .db import SessionLocal
from .email_sender import EmailSender
from .messaging import Consumer
from .notifications import NotificationConsumer

logger = logging.getLogger(__name__)


async def serve() -> None:
    client = aioredis.from_url(REDIS_URL, decode_responses=True)
    consumer = Consumer(client)
    NotificationConsumer(EmailSender(), SessionLocal).register(consumer)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, consumer.stop)
        except NotImplementedError:
            # Not available on Windows event loops
            pass

    try:
        await consumer.run()
    finally:
        await client.aclose()


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logger.info("Starting email worker.")
    asyncio.run(serve())


if __name__ == "__main__":
    main()
