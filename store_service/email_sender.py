# store_service/email_sender.py

"""
Outgoing mail over SMTP with aiosmtplib.
"""
import logging
from email.message import EmailMessage

import aiosmtplib

from . import config
from .models import Order

logger = logging.getLogger(__name__)


def build_auth_body(otp: str) -> str:
    return (
        "Xin chào,\n\n"
        f"Mã xác thực của bạn là: {otp}\n\n"
        "Vui lòng không chia sẻ mã này với bất kỳ ai.\n"
    )


def build_order_body(order: Order, confirm_link: str) -> str:
    lines = [
        f"Xin chào {order.full_name},",
        "",
        f"Cảm ơn bạn đã đặt hàng. Mã đơn hàng: {order.id}",
        "",
    ]
    for item in order.items:
        size = f" ({item.size})" if item.size else ""
        lines.append(f"- {item.product_title}{size} x {item.quantity}: {item.unit_price * item.quantity}")
    lines += [
        "",
        f"Tổng cộng: {order.total}",
        f"Giao đến: {order.address}",
        "",
        f"Xác nhận đơn hàng tại: {confirm_link}",
    ]
    return "\n".join(lines) + "\n"


class EmailSender:
    def __init__(
        self,
        host: str = config.SMTP_HOST,
        port: int = config.SMTP_PORT,
        username=config.SMTP_USERNAME,
        password=config.SMTP_PASSWORD,
        sender: str = config.SMTP_FROM,
        start_tls: bool = config.SMTP_START_TLS,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender
        self.start_tls = start_tls

    def _message(self, to: str, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)
        return message

    async def _send(self, message: EmailMessage) -> None:
        await aiosmtplib.send(
            message,
            hostname=self.host,
            port=self.port,
            username=self.username,
            password=self.password,
            start_tls=self.start_tls,
        )
        logger.info(f"Email '{message['Subject']}' sent to {message['To']}.")

    async def send_auth_email(self, to: str, subject: str, otp: str) -> None:
        await self._send(self._message(to, subject, build_auth_body(otp)))

    async def send_order_email(self, to: str, subject: str, order: Order, confirm_link: str) -> None:
        await self._send(self._message(to, subject, build_order_body(order, confirm_link)))
