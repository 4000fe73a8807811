import pytest
from bson import ObjectId
from fastapi import HTTPException

from main import build_product_filter, ensure_object_id, serialize_product


def test_serialize_product_renames_id_and_stringifies_refs():
    _id, cat = ObjectId(), ObjectId()
    doc = {"_id": _id, "name": "Lamp", "categoryId": cat, "subcategoryId": None}

    out = serialize_product(doc)

    assert "_id" not in out
    assert out["id"] == str(_id)
    assert out["categoryId"] == str(cat)
    assert out["subcategoryId"] is None
    assert out["name"] == "Lamp"
    # source document untouched
    assert doc["_id"] is _id


def test_ensure_object_id_rejects_garbage():
    with pytest.raises(HTTPException) as exc:
        ensure_object_id("not-an-id", "categoryId")
    assert exc.value.status_code == 400
    assert exc.value.detail == "Invalid categoryId format"


def test_build_product_filter_converts_ids():
    cat, sub = ObjectId(), ObjectId()
    query = build_product_filter(str(cat), str(sub), None)
    assert query == {"categoryId": cat, "subcategoryId": sub}


def test_build_product_filter_ignores_empty_params():
    assert build_product_filter(None, "", None) == {}
    assert build_product_filter(None, None, False) == {"isActive": False}
