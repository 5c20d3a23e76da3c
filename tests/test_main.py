# tests/test_main.py

"""
API tests for the Store Service.
These tests verify the endpoints by making HTTP requests to the FastAPI
application through TestClient, each against a fresh in-memory database.
"""

from datetime import date, timedelta

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from store_service.models import Category, Product


def _category(db: Session, name: str) -> str:
    category = Category(name=name)
    db.add(category)
    db.commit()
    return category.id


def test_read_root(client: TestClient):
    """Test the root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Welcome to the Store Service!"}


def test_health_check(client: TestClient):
    """Test the health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "store-service"}


def test_create_product_success(client: TestClient, db_session_for_test: Session):
    """
    Tests successful creation of a product via POST /products/.
    Verifies status code, response data, and database entry.
    """
    category_id = _category(db_session_for_test, "Giày")
    test_data = {
        "title": "Giày chạy bộ",
        "description": "Nhẹ và êm",
        "price": 1200000,
        "category_ids": [category_id],
    }
    response = client.post("/products/", json=test_data)

    assert response.status_code == 201
    response_data = response.json()
    assert response_data["title"] == test_data["title"]
    assert response_data["slug"] == "giay-chay-bo"
    assert float(response_data["price"]) == test_data["price"]
    assert response_data["is_on_sale"] is False
    assert response_data["categories"] == [{"id": category_id, "name": "Giày"}]
    assert "created_at" in response_data

    db_product = db_session_for_test.query(Product).filter(Product.id == response_data["id"]).first()
    assert db_product is not None
    assert db_product.slug == "giay-chay-bo"


def test_create_product_missing_required_field(client: TestClient):
    """Tests product creation without a title, expecting a 422."""
    response = client.post("/products/", json={"price": 10})
    assert response.status_code == 422
    assert any(err["loc"][-1] == "title" for err in response.json()["detail"])


def test_create_product_non_positive_price(client: TestClient):
    response = client.post("/products/", json={"title": "Free", "price": 0})
    assert response.status_code == 422


def test_create_duplicate_product_conflict(client: TestClient):
    client.post("/products/", json={"title": "Mũ lưỡi trai", "price": 90000})
    response = client.post("/products/", json={"title": "mũ LƯỠI trai", "price": 95000})
    assert response.status_code == 409
    assert response.json()["detail"] == "Sản phẩm đã tồn tại"


def test_create_product_title_without_slug(client: TestClient):
    response = client.post("/products/", json={"title": "!!!", "price": 10})
    assert response.status_code == 400
    assert response.json()["detail"] == "Tiêu đề không hợp lệ"
    assert client.get("/products/").json()["total_elements"] == 0


def test_create_product_sale_price_above_price(client: TestClient):
    response = client.post(
        "/products/",
        json={
            "title": "Túi xách",
            "price": 100,
            "is_on_sale": True,
            "sale_price": 150,
            "end_sale": (date.today() + timedelta(days=5)).isoformat(),
        },
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Giá khuyến mãi phải nhỏ hơn giá gốc"


def test_create_product_sale_start_defaults_to_today(client: TestClient):
    end = date.today() + timedelta(days=5)
    response = client.post(
        "/products/",
        json={
            "title": "Kính mát",
            "price": 100,
            "is_on_sale": True,
            "sale_price": 50,
            "start_sale": None,
            "end_sale": end.isoformat(),
        },
    )
    assert response.status_code == 201
    assert response.json()["start_sale"] == date.today().isoformat()
    assert response.json()["end_sale"] == end.isoformat()


def test_create_product_unknown_category(client: TestClient):
    response = client.post(
        "/products/", json={"title": "Ví da", "price": 10, "category_ids": ["nope"]}
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Có ID danh mục không hợp lệ"


def test_list_products_empty(client: TestClient):
    response = client.get("/products/")
    assert response.status_code == 200
    body = response.json()
    assert body["content"] == []
    assert body["total_elements"] == 0
    assert body["last"] is True


def test_list_products_pagination(client: TestClient):
    for i in range(5):
        client.post("/products/", json={"title": f"Paginated Product {i}", "price": 10 + i})

    response = client.get("/products/?page=1&size=2")
    assert response.status_code == 200
    body = response.json()
    assert [p["title"] for p in body["content"]] == ["Paginated Product 2", "Paginated Product 1"]
    assert body["page"] == 1
    assert body["size"] == 2
    assert body["total_elements"] == 5
    assert body["total_pages"] == 3
    assert body["last"] is False


def test_list_products_rejects_invalid_paging(client: TestClient):
    assert client.get("/products/?page=-1").status_code == 422
    assert client.get("/products/?size=0").status_code == 422


def test_get_product_by_slug(client: TestClient):
    client.post("/products/", json={"title": "Đồng hồ cơ", "price": 5000})
    response = client.get("/products/dong-ho-co")
    assert response.status_code == 200
    assert response.json()["title"] == "Đồng hồ cơ"


def test_get_product_not_found(client: TestClient):
    response = client.get("/products/khong-ton-tai")
    assert response.status_code == 404
    assert response.json()["detail"] == "Không tìm thấy sản phẩm"


def test_update_product_partial(client: TestClient):
    create_response = client.post(
        "/products/", json={"title": "Original Name", "description": "Original Desc", "price": 10}
    )
    product_id = create_response.json()["id"]

    response = client.put(f"/products/{product_id}", json={"title": "Partially Updated Name"})
    assert response.status_code == 200
    updated_product = response.json()
    assert updated_product["title"] == "Partially Updated Name"
    assert updated_product["slug"] == "partially-updated-name"
    # Other fields should retain their original values
    assert updated_product["description"] == "Original Desc"
    assert float(updated_product["price"]) == 10.00


def test_update_product_title_conflict(client: TestClient):
    client.post("/products/", json={"title": "Taken", "price": 10})
    product_id = client.post("/products/", json={"title": "Free", "price": 10}).json()["id"]

    response = client.put(f"/products/{product_id}", json={"title": "taken"})
    assert response.status_code == 409
    assert client.get("/products/free").status_code == 200


def test_update_product_turn_sale_off(client: TestClient):
    product_id = client.post(
        "/products/",
        json={
            "title": "Khăn choàng",
            "price": 100,
            "is_on_sale": True,
            "sale_price": 80,
            "end_sale": (date.today() + timedelta(days=3)).isoformat(),
        },
    ).json()["id"]

    response = client.put(f"/products/{product_id}", json={"is_on_sale": False})
    assert response.status_code == 200
    body = response.json()
    assert body["is_on_sale"] is False
    assert body["sale_price"] is None
    assert body["start_sale"] is None
    assert body["end_sale"] is None


def test_update_product_sale_fields_without_sale(client: TestClient):
    product_id = client.post("/products/", json={"title": "Thắt lưng", "price": 100}).json()["id"]
    response = client.put(
        f"/products/{product_id}", json={"is_on_sale": False, "sale_price": 10}
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Không có khuyến mãi nên không thể nhập các thông tin sale"


def test_update_product_not_found(client: TestClient):
    response = client.put("/products/999999", json={"title": "Non Existent Product"})
    assert response.status_code == 404
    assert response.json()["detail"] == "Không tìm thấy sản phẩm"


def test_delete_product_success(client: TestClient):
    create_resp = client.post("/products/", json={"title": "Product to Delete", "price": 10})
    product_id = create_resp.json()["id"]

    response = client.delete(f"/products/{product_id}")
    assert response.status_code == 204

    get_response = client.get("/products/product-to-delete")
    assert get_response.status_code == 404


def test_delete_product_not_found(client: TestClient):
    response = client.delete("/products/999999")
    assert response.status_code == 404
    assert response.json()["detail"] == "Không tìm thấy sản phẩm"


def test_categories_and_sizes(client: TestClient):
    assert client.post("/categories/", json={"name": "Phụ kiện"}).status_code == 201
    duplicate = client.post("/categories/", json={"name": "Phụ kiện"})
    assert duplicate.status_code == 409
    assert duplicate.json()["detail"] == "Danh mục đã tồn tại"
    assert [c["name"] for c in client.get("/categories/").json()] == ["Phụ kiện"]

    size = client.post("/sizes/", json={"name": "XL"})
    assert size.status_code == 201
    assert set(size.json()) == {"id", "name"}
    assert client.post("/sizes/", json={"name": "XL"}).status_code == 409
    assert [s["name"] for s in client.get("/sizes/").json()] == ["XL"]
