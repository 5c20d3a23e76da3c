# store_service/products.py

"""
Product business rules: slug uniqueness, category membership and the
sale window checks. Persistence goes through the repositories and every
write runs inside a single transaction.
"""
import logging
import math
from datetime import date
from decimal import Decimal
from typing import Callable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .db import transaction
from .exceptions import AlreadyExistsError, BadRequestError, NotFoundError
from .models import Product
from .repositories import CategoryRepository, ProductRepository
from .schemas import PagedResponse, ProductCreate, ProductResponse, ProductUpdate
from .slugs import to_slug

logger = logging.getLogger(__name__)

PRODUCT_EXISTS = "Sản phẩm đã tồn tại"
PRODUCT_NOT_FOUND = "Không tìm thấy sản phẩm"
INVALID_TITLE = "Tiêu đề không hợp lệ"
INVALID_CATEGORY_IDS = "Có ID danh mục không hợp lệ"
INVALID_PAGING = "Tham số phân trang không hợp lệ"

SALE_PRICE_REQUIRED = "Vui lòng nhập giá khuyến mãi"
SALE_PRICE_TOO_HIGH = "Giá khuyến mãi phải nhỏ hơn giá gốc"
SALE_DATES_REQUIRED = "Vui lòng nhập ngày bắt đầu và kết thúc khuyến mãi"
SALE_END_REQUIRED = "Vui lòng nhập ngày kết thúc khuyến mãi"
SALE_START_IN_PAST = "Thời gian bắt đầu sale không được nhỏ hơn hôm nay"
SALE_END_NOT_AFTER_TODAY = "Ngày kết thúc khuyến mãi phải lớn hơn hôm nay ít nhất 1 ngày"
SALE_START_NOT_BEFORE_END = "Ngày bắt đầu khuyến mãi phải trước ngày kết thúc"

NO_SALE_PRICE = "Không có khuyến mãi nên không thể nhập giá khuyến mãi"
NO_SALE_END = "Không có khuyến mãi nên không thể nhập ngày kết thúc khuyến mãi"
NO_SALE_START = "Không có khuyến mãi nên không thể nhập ngày bắt đầu khuyến mãi"
NO_SALE_FIELDS = "Không có khuyến mãi nên không thể nhập các thông tin sale"


def check_sale_window(
    sale_price: Optional[Decimal],
    start_sale: Optional[date],
    end_sale: Optional[date],
    base_price: Decimal,
    today: date,
) -> date:
    """
    Validate the fields of an active sale against `base_price`.

    Returns the effective start date, which is `today` when only the end
    date was supplied. Raises BadRequestError on the first broken rule.
    """
    if sale_price is None:
        raise BadRequestError(SALE_PRICE_REQUIRED)
    if sale_price > base_price:
        raise BadRequestError(SALE_PRICE_TOO_HIGH)
    if start_sale is None and end_sale is None:
        raise BadRequestError(SALE_DATES_REQUIRED)
    if end_sale is None:
        raise BadRequestError(SALE_END_REQUIRED)
    if start_sale is not None and start_sale < today:
        raise BadRequestError(SALE_START_IN_PAST)
    if end_sale <= today:
        raise BadRequestError(SALE_END_NOT_AFTER_TODAY)
    if start_sale is None:
        start_sale = today
    if start_sale >= end_sale:
        raise BadRequestError(SALE_START_NOT_BEFORE_END)
    return start_sale


def _is_slug_conflict(exc: IntegrityError) -> bool:
    return "slug" in str(exc.orig).lower()


class ProductService:
    def __init__(self, db: Session, today: Callable[[], date] = date.today):
        self.db = db
        self.products = ProductRepository(db)
        self.categories = CategoryRepository(db)
        self.today = today

    def list_products(self, page: int, size: int) -> PagedResponse[ProductResponse]:
        """Return one page of products ordered by creation time, newest first."""
        if page < 0 or size <= 0:
            raise BadRequestError(INVALID_PAGING)
        items, total = self.products.find_all_paged(page, size)
        total_pages = math.ceil(total / size)
        logger.info(f"Retrieved {len(items)} products (page={page}, size={size}, total={total}).")
        return PagedResponse[ProductResponse](
            content=[ProductResponse.model_validate(p) for p in items],
            page=page,
            size=size,
            total_elements=total,
            total_pages=total_pages,
            last=page + 1 >= total_pages,
        )

    def _resolve_categories(self, category_ids: List[str]):
        categories = self.categories.find_all_by_id_in(category_ids)
        if len(categories) != len(set(category_ids)):
            raise BadRequestError(INVALID_CATEGORY_IDS)
        return categories

    def create_product(self, request: ProductCreate) -> Product:
        slug = to_slug(request.title)
        if not slug:
            raise BadRequestError(INVALID_TITLE)
        logger.info(f"Creating product '{request.title}' (slug: {slug})")
        try:
            with transaction(self.db):
                if self.products.exists_by_slug(slug):
                    raise AlreadyExistsError(PRODUCT_EXISTS)

                categories = self._resolve_categories(request.category_ids)

                start_sale = request.start_sale
                if request.is_on_sale:
                    start_sale = check_sale_window(
                        request.sale_price,
                        request.start_sale,
                        request.end_sale,
                        request.price,
                        self.today(),
                    )
                else:
                    if request.sale_price is not None:
                        raise BadRequestError(NO_SALE_PRICE)
                    if request.end_sale is not None:
                        raise BadRequestError(NO_SALE_END)
                    if request.start_sale is not None:
                        raise BadRequestError(NO_SALE_START)

                product = Product(
                    title=request.title,
                    slug=slug,
                    description=request.description,
                    price=request.price,
                    is_on_sale=request.is_on_sale,
                    sale_price=request.sale_price,
                    start_sale=start_sale,
                    end_sale=request.end_sale,
                    categories=list(categories),
                )
                self.products.save(product)
        except IntegrityError as e:
            if _is_slug_conflict(e):
                logger.warning(f"Slug '{slug}' was taken by a concurrent create.")
                raise AlreadyExistsError(PRODUCT_EXISTS) from e
            raise
        logger.info(f"Product '{product.title}' (ID: {product.id}) created successfully.")
        return product

    def get_product_by_slug(self, slug: str) -> Product:
        product = self.products.find_by_slug(slug)
        if product is None:
            logger.warning(f"Product with slug '{slug}' not found.")
            raise NotFoundError(PRODUCT_NOT_FOUND)
        return product

    def update_product(self, product_id: str, request: ProductUpdate) -> Product:
        logger.info(
            f"Updating product {product_id} with fields: {sorted(request.model_fields_set)}"
        )
        try:
            with transaction(self.db):
                product = self.products.find_by_id(product_id)
                if product is None:
                    logger.warning(f"Product with ID: {product_id} not found for update.")
                    raise NotFoundError(PRODUCT_NOT_FOUND)

                if request.is_set("title") and request.title != product.title:
                    new_slug = to_slug(request.title)
                    if not new_slug:
                        raise BadRequestError(INVALID_TITLE)
                    if new_slug != product.slug and self.products.exists_by_slug(new_slug):
                        raise AlreadyExistsError(PRODUCT_EXISTS)
                    product.title = request.title
                    product.slug = new_slug

                # An empty list means "keep the current categories"
                if request.category_ids:
                    product.categories = list(self._resolve_categories(request.category_ids))

                if request.is_set("description"):
                    product.description = request.description
                if request.is_set("price"):
                    product.price = request.price

                self._apply_sale_update(product, request)
                self.products.save(product)
        except IntegrityError as e:
            if _is_slug_conflict(e):
                raise AlreadyExistsError(PRODUCT_EXISTS) from e
            raise
        logger.info(f"Product '{product.title}' (ID: {product_id}) updated successfully.")
        return product

    def _apply_sale_update(self, product: Product, request: ProductUpdate) -> None:
        sale_fields_sent = any(
            request.is_set(f) for f in ("sale_price", "start_sale", "end_sale")
        )
        if not request.is_set("is_on_sale") and not sale_fields_sent:
            # Sale untouched; a lowered price must still cover the sale price.
            if product.is_on_sale and product.sale_price is not None and product.sale_price > product.price:
                raise BadRequestError(SALE_PRICE_TOO_HIGH)
            return

        on_sale = request.is_on_sale if request.is_set("is_on_sale") else product.is_on_sale
        if on_sale:
            product.start_sale = check_sale_window(
                request.sale_price,
                request.start_sale,
                request.end_sale,
                product.price,
                self.today(),
            )
            product.is_on_sale = True
            product.sale_price = request.sale_price
            product.end_sale = request.end_sale
        else:
            if sale_fields_sent:
                raise BadRequestError(NO_SALE_FIELDS)
            product.is_on_sale = False
            product.sale_price = None
            product.start_sale = None
            product.end_sale = None

    def delete_product(self, product_id: str) -> None:
        logger.info(f"Attempting to delete product with ID: {product_id}")
        with transaction(self.db):
            if not self.products.exists_by_id(product_id):
                logger.warning(f"Product with ID: {product_id} not found for deletion.")
                raise NotFoundError(PRODUCT_NOT_FOUND)
            self.products.delete_by_id(product_id)
        logger.info(f"Product (ID: {product_id}) deleted successfully.")
