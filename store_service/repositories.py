# store_service/repositories.py

"""
Data access for the store service.

Each repository wraps one SQLAlchemy session and exposes one method per
query the services need. Nothing here commits: writes are flushed and the
caller's transaction decides whether they stick.
"""
from typing import Iterable, List, Optional, Set, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .models import Category, ForgotPassword, Order, Product, Size, User


class ProductRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_all_paged(self, page: int, size: int) -> Tuple[List[Product], int]:
        """Return one page of products, newest first, plus the total count."""
        total = self.db.scalar(select(func.count()).select_from(Product))
        products = self.db.scalars(
            select(Product)
            .order_by(Product.created_at.desc(), Product.id)
            .offset(page * size)
            .limit(size)
        ).all()
        return list(products), total

    def exists_by_slug(self, slug: str) -> bool:
        return self.db.scalar(select(Product.id).where(Product.slug == slug).limit(1)) is not None

    def find_by_slug(self, slug: str) -> Optional[Product]:
        return self.db.scalar(select(Product).where(Product.slug == slug))

    def find_by_id(self, product_id: str) -> Optional[Product]:
        return self.db.get(Product, product_id)

    def find_all_by_ids(self, product_ids: Iterable[str]) -> List[Product]:
        ids = set(product_ids)
        if not ids:
            return []
        return list(self.db.scalars(select(Product).where(Product.id.in_(ids))).all())

    def exists_by_id(self, product_id: str) -> bool:
        return self.db.scalar(select(Product.id).where(Product.id == product_id)) is not None

    def save(self, product: Product) -> Product:
        self.db.add(product)
        self.db.flush()
        return product

    def delete_by_id(self, product_id: str) -> None:
        product = self.db.get(Product, product_id)
        if product is not None:
            # ORM delete so the category links go with it
            self.db.delete(product)
            self.db.flush()


class CategoryRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_all(self) -> List[Category]:
        return list(self.db.scalars(select(Category).order_by(Category.name)).all())

    def find_all_by_id_in(self, category_ids: Iterable[str]) -> Set[Category]:
        ids = set(category_ids)
        if not ids:
            return set()
        return set(self.db.scalars(select(Category).where(Category.id.in_(ids))).all())

    def exists_by_name(self, name: str) -> bool:
        return self.db.scalar(select(Category.id).where(Category.name == name)) is not None

    def save(self, category: Category) -> Category:
        self.db.add(category)
        self.db.flush()
        return category


class SizeRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_all(self) -> List[Size]:
        return list(self.db.scalars(select(Size).order_by(Size.name)).all())

    def exists_by_name(self, name: str) -> bool:
        return self.db.scalar(select(Size.id).where(Size.name == name)) is not None

    def save(self, size: Size) -> Size:
        self.db.add(size)
        self.db.flush()
        return size


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_by_username(self, username: str) -> Optional[User]:
        return self.db.scalar(select(User).where(User.username == username))

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.scalar(select(User).where(User.email == email))

    def exists_by_username(self, username: str) -> bool:
        return self.find_by_username(username) is not None

    def exists_by_email(self, email: str) -> bool:
        return self.find_by_email(email) is not None

    def save(self, user: User) -> User:
        self.db.add(user)
        self.db.flush()
        return user

    def find_forgot_password(self, email: str) -> Optional[ForgotPassword]:
        return self.db.get(ForgotPassword, email)

    def save_forgot_password(self, record: ForgotPassword) -> ForgotPassword:
        # merge() replaces any pending code for the same email
        record = self.db.merge(record)
        self.db.flush()
        return record

    def delete_forgot_password(self, record: ForgotPassword) -> None:
        self.db.delete(record)
        self.db.flush()


class OrderRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, order_id: str) -> Optional[Order]:
        return self.db.get(Order, order_id)

    def save(self, order: Order) -> Order:
        self.db.add(order)
        self.db.flush()
        return order
