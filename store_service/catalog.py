# store_service/catalog.py

"""Categories and sizes. Products only reference categories, never create them."""
import logging
from typing import List

from sqlalchemy.orm import Session

from .db import transaction
from .exceptions import AlreadyExistsError
from .models import Category, Size
from .repositories import CategoryRepository, SizeRepository
from .schemas import CategoryCreate, SizeCreate

logger = logging.getLogger(__name__)

CATEGORY_EXISTS = "Danh mục đã tồn tại"
SIZE_EXISTS = "Kích thước đã tồn tại"


class CategoryService:
    def __init__(self, db: Session):
        self.db = db
        self.categories = CategoryRepository(db)

    def list_categories(self) -> List[Category]:
        return self.categories.find_all()

    def create_category(self, request: CategoryCreate) -> Category:
        name = request.name.strip()
        with transaction(self.db):
            if self.categories.exists_by_name(name):
                raise AlreadyExistsError(CATEGORY_EXISTS)
            category = self.categories.save(Category(name=name))
        logger.info(f"Category '{name}' (ID: {category.id}) created.")
        return category


class SizeService:
    def __init__(self, db: Session):
        self.db = db
        self.sizes = SizeRepository(db)

    def list_sizes(self) -> List[Size]:
        return self.sizes.find_all()

    def create_size(self, request: SizeCreate) -> Size:
        name = request.name.strip()
        with transaction(self.db):
            if self.sizes.exists_by_name(name):
                raise AlreadyExistsError(SIZE_EXISTS)
            size = self.sizes.save(Size(name=name))
        logger.info(f"Size '{name}' (ID: {size.id}) created.")
        return size
