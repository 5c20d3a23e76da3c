# store_service/notifications.py

"""
Queue handlers that turn auth and order events into emails.

Each message is handled on its own; nothing is shared between messages
except the database.
"""
import asyncio
import logging
from typing import Optional

from . import config
from .messaging import Consumer
from .models import Order
from .repositories import OrderRepository
from .schemas import AuthEmailMessage, OrderEmailMessage

logger = logging.getLogger(__name__)


class NotificationConsumer:
    def __init__(self, email_sender, session_factory):
        self.email_sender = email_sender
        self.session_factory = session_factory

    def register(self, consumer: Consumer) -> None:
        consumer.subscribe(config.AUTH_EMAIL_QUEUE, AuthEmailMessage, self.handle_auth_email)
        consumer.subscribe(config.ORDER_EMAIL_QUEUE, OrderEmailMessage, self.handle_order_email)

    async def handle_auth_email(self, message: AuthEmailMessage) -> None:
        logger.info(f"Received auth email message for {message.to}")
        await self.email_sender.send_auth_email(message.to, message.subject, message.otp)
        logger.info("Auth email sent.")

    def _load_order(self, order_id: str) -> Optional[Order]:
        db = self.session_factory()
        try:
            # items are loaded eagerly, so the order stays usable after close
            return OrderRepository(db).find_by_id(order_id)
        finally:
            db.close()

    async def handle_order_email(self, message: OrderEmailMessage) -> None:
        logger.info(f"Received order email message for order {message.order_id}")
        order = await asyncio.to_thread(self._load_order, message.order_id)
        if order is None:
            # Logged and dropped, never requeued.
            logger.error(f"Order {message.order_id} not found, no email sent.")
            return
        logger.info(f"Sending order email to {message.to}")
        await self.email_sender.send_order_email(
            message.to, message.subject, order, message.confirm_link
        )
        logger.info("Order email sent.")
