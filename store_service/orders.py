# store_service/orders.py

"""Order placement. A confirmation email is queued once the order is stored."""
import logging
from datetime import date
from typing import Callable, Optional

from sqlalchemy.orm import Session

from . import config
from .db import transaction
from .exceptions import BadRequestError, NotFoundError
from .messaging import RedisQueue
from .models import Order, OrderItem, Product
from .repositories import OrderRepository, ProductRepository
from .schemas import OrderCreate, OrderEmailMessage

logger = logging.getLogger(__name__)

ORDER_NOT_FOUND = "Không tìm thấy đơn hàng"
INVALID_PRODUCT_IDS = "Có ID sản phẩm không hợp lệ"
ORDER_SUBJECT = "Xác nhận đơn hàng"


def current_price(product: Product, today: date):
    """Sale price while the sale window covers `today`, list price otherwise."""
    if (
        product.is_on_sale
        and product.sale_price is not None
        and product.start_sale is not None
        and product.end_sale is not None
        and product.start_sale <= today <= product.end_sale
    ):
        return product.sale_price
    return product.price


def confirm_link(order_id: str) -> str:
    return f"{config.FRONTEND_URL}/orders/{order_id}/confirm"


class OrderService:
    def __init__(self, db: Session, queue: Optional[RedisQueue], today: Callable[[], date] = date.today):
        self.db = db
        self.orders = OrderRepository(db)
        self.products = ProductRepository(db)
        self.queue = queue
        self.today = today

    def create_order(self, request: OrderCreate) -> Order:
        logger.info(f"Creating order for {request.email} with {len(request.items)} item(s)")
        with transaction(self.db):
            products = {
                p.id: p for p in self.products.find_all_by_ids(i.product_id for i in request.items)
            }
            if any(i.product_id not in products for i in request.items):
                raise BadRequestError(INVALID_PRODUCT_IDS)

            today = self.today()
            order = Order(
                full_name=request.full_name,
                email=request.email,
                phone=request.phone,
                address=request.address,
                items=[
                    OrderItem(
                        product_id=i.product_id,
                        product_title=products[i.product_id].title,
                        size=i.size,
                        quantity=i.quantity,
                        unit_price=current_price(products[i.product_id], today),
                    )
                    for i in request.items
                ],
            )
            self.orders.save(order)
            order_id = order.id

        self.queue.publish(
            config.ORDER_EMAIL_QUEUE,
            OrderEmailMessage(
                order_id=order_id,
                to=request.email,
                subject=ORDER_SUBJECT,
                confirm_link=confirm_link(order_id),
            ),
        )
        logger.info(f"Order {order_id} created and confirmation queued.")
        return order

    def get_order(self, order_id: str) -> Order:
        order = self.orders.find_by_id(order_id)
        if order is None:
            logger.warning(f"Order with ID: {order_id} not found.")
            raise NotFoundError(ORDER_NOT_FOUND)
        return order
