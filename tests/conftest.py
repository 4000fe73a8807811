"""
Shared fixtures: an in-memory mongomock database patched into `database`,
and TestClients with and without the admin session cookie.
"""

import mongomock
import pytest
from fastapi.testclient import TestClient

import database
from config import ADMIN_SESSION_COOKIE, ADMIN_SESSION_VALUE
from main import app


@pytest.fixture
def mongo(monkeypatch):
    mock_db = mongomock.MongoClient()["catalog_test"]
    monkeypatch.setattr(database, "db", mock_db)
    database.ensure_indexes()
    return mock_db


@pytest.fixture
def client(mongo):
    return TestClient(app)


@pytest.fixture
def admin_client(mongo):
    return TestClient(app, cookies={ADMIN_SESSION_COOKIE: ADMIN_SESSION_VALUE})


@pytest.fixture
def category(mongo):
    _id = mongo["category"].insert_one({"name": "Lighting", "slug": "lighting"}).inserted_id
    return _id


@pytest.fixture
def subcategory(mongo, category):
    _id = mongo["subcategory"].insert_one(
        {"name": "Panels", "slug": "panels", "categoryId": category}
    ).inserted_id
    return _id


@pytest.fixture
def make_product(admin_client):
    def _make(**overrides):
        payload = {
            "name": "LED Panel",
            "shortDescription": "Slim 60x60 panel",
            "cardImage": "/uploads/led-panel.jpg",
        }
        payload.update(overrides)
        res = admin_client.post("/api/admin/products", json=payload)
        assert res.status_code == 200, res.text
        return res.json()["product"]
    return _make