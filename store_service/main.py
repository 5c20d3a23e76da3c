# store_service/main.py

"""
FastAPI Store Service API.
Exposes products, categories, sizes, users and orders. Business rules live
in the service classes; this module only wires requests to them and maps
their errors to HTTP responses.
"""
import logging
import sys
import time
from typing import List

from fastapi import Depends, FastAPI, Query, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from .catalog import CategoryService, SizeService
from .db import Base, engine, get_db
from .exceptions import StoreError
from .messaging import RedisQueue, get_queue
from .orders import OrderService
from .products import ProductService
from .schemas import (
    CategoryCreate,
    CategoryResponse,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    OrderCreate,
    OrderResponse,
    PagedResponse,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    ResetPasswordRequest,
    SignupRequest,
    SizeCreate,
    SizeResponse,
    UserResponse,
)
from .users import UserService

# -----------------------------
# Configure Logging
# -----------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

# Suppress noisy logs from third-party libraries for cleaner output
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
logging.getLogger("uvicorn.error").setLevel(logging.INFO)


# -----------------------------
# FastAPI App Initialization
# -----------------------------
app = FastAPI(
    title="Store Service API",
    description="Products, categories, sizes, users and orders for the store",
    version="1.0.0",
)

# Enable CORS (for frontend dev/testing)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Use specific origins in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# --- FastAPI Event Handlers ---
@app.on_event("startup")
async def startup_event():
    """
    Ensures database tables are created (if not exist).
    Includes a retry mechanism for database connection robustness.
    """
    max_retries = 10
    retry_delay_seconds = 5
    for i in range(max_retries):
        try:
            logger.info(
                f"Attempting to connect to the database and create tables (attempt {i+1}/{max_retries})..."
            )
            Base.metadata.create_all(bind=engine)
            logger.info("Successfully connected to the database and ensured tables exist.")
            break
        except OperationalError as e:
            logger.warning(f"Failed to connect to the database: {e}")
            if i < max_retries - 1:
                logger.info(f"Retrying in {retry_delay_seconds} seconds...")
                time.sleep(retry_delay_seconds)
            else:
                logger.critical(
                    f"Failed to connect to the database after {max_retries} attempts. Exiting application."
                )
                sys.exit(1)


# --- Root Endpoint ---
@app.get("/", status_code=status.HTTP_200_OK, summary="Root endpoint")
async def read_root():
    return {"message": "Welcome to the Store Service!"}


# --- Health Check Endpoint ---
@app.get("/health", status_code=status.HTTP_200_OK, summary="Health check endpoint")
async def health_check():
    return {"status": "ok", "service": "store-service"}


# -----------------------------
# Products
# -----------------------------


@app.get(
    "/products/",
    response_model=PagedResponse[ProductResponse],
    summary="List products, newest first",
)
def list_products(
    db: Session = Depends(get_db),
    page: int = Query(0, ge=0, description="Zero-based page number."),
    size: int = Query(10, ge=1, le=100, description="Number of products per page."),
):
    return ProductService(db).list_products(page, size)


@app.post(
    "/products/",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new product",
)
def create_product(product: ProductCreate, db: Session = Depends(get_db)):
    """
    Creates a new product.

    - The slug is derived from the title and must be unique (409 otherwise).
    - Every category id must exist and sale fields must form a valid sale (400 otherwise).
    """
    return ProductService(db).create_product(product)


@app.get(
    "/products/{slug}",
    response_model=ProductResponse,
    summary="Retrieve a product by slug",
)
def get_product(slug: str, db: Session = Depends(get_db)):
    return ProductService(db).get_product_by_slug(slug)


@app.put(
    "/products/{product_id}",
    response_model=ProductResponse,
    summary="Update an existing product",
)
def update_product(product_id: str, updated: ProductUpdate, db: Session = Depends(get_db)):
    """
    Applies only the fields present in the body.
    An empty `category_ids` list keeps the current categories.
    """
    return ProductService(db).update_product(product_id, updated)


@app.delete(
    "/products/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a product by ID",
)
def delete_product(product_id: str, db: Session = Depends(get_db)):
    ProductService(db).delete_product(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# -----------------------------
# Categories and sizes
# -----------------------------


@app.get("/categories/", response_model=List[CategoryResponse], summary="List categories")
def list_categories(db: Session = Depends(get_db)):
    return CategoryService(db).list_categories()


@app.post(
    "/categories/",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a category",
)
def create_category(category: CategoryCreate, db: Session = Depends(get_db)):
    return CategoryService(db).create_category(category)


@app.get("/sizes/", response_model=List[SizeResponse], summary="List sizes")
def list_sizes(db: Session = Depends(get_db)):
    return SizeService(db).list_sizes()


@app.post(
    "/sizes/",
    response_model=SizeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a size",
)
def create_size(size: SizeCreate, db: Session = Depends(get_db)):
    return SizeService(db).create_size(size)


# -----------------------------
# Users
# -----------------------------


@app.post(
    "/users/signup",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
def signup(request: SignupRequest, db: Session = Depends(get_db)):
    return UserService(db).signup(request)


@app.get("/users/{username}", response_model=UserResponse, summary="Retrieve a user by username")
def get_user(username: str, db: Session = Depends(get_db)):
    return UserService(db).get_user_by_username(username)


@app.put(
    "/users/{username}/password",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Change a user's password",
)
def change_password(username: str, request: ChangePasswordRequest, db: Session = Depends(get_db)):
    UserService(db).change_password(username, request)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.post(
    "/users/forgot-password",
    status_code=status.HTTP_202_ACCEPTED,
    summary="Email a password reset code",
)
def forgot_password(
    request: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    queue: RedisQueue = Depends(get_queue),
):
    UserService(db, queue).forgot_password(request.email)
    return {"message": "Mã OTP đã được gửi tới email của bạn"}


@app.post(
    "/users/reset-password",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Reset a password with the emailed code",
)
def reset_password(request: ResetPasswordRequest, db: Session = Depends(get_db)):
    UserService(db).reset_password(request)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# -----------------------------
# Orders
# -----------------------------


@app.post(
    "/orders/",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Place an order",
)
def create_order(
    order: OrderCreate,
    db: Session = Depends(get_db),
    queue: RedisQueue = Depends(get_queue),
):
    return OrderService(db, queue).create_order(order)


@app.get("/orders/{order_id}", response_model=OrderResponse, summary="Retrieve an order by ID")
def get_order(order_id: str, db: Session = Depends(get_db)):
    return OrderService(db, queue=None).get_order(order_id)
