"""
MongoDB access helpers.

`db` is None when DATABASE_URL / DATABASE_NAME are not configured; every
helper then raises RuntimeError so route handlers can report the failure.
Helpers look `db` up at call time, which lets tests swap in another database.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel
from pymongo import ASCENDING, MongoClient, ReturnDocument
from pymongo.errors import OperationFailure

from config import DATABASE_NAME, DATABASE_URL
from logger import get_logger

logger = get_logger(__name__)

client: Optional[MongoClient] = None
db = None

if DATABASE_URL and DATABASE_NAME:
    client = MongoClient(DATABASE_URL)
    db = client[DATABASE_NAME]
    logger.info(f"MongoDB client created for database '{DATABASE_NAME}'")
else:
    logger.warning("DATABASE_URL or DATABASE_NAME not set; database unavailable")


def _collection(collection_name: str):
    if db is None:
        raise RuntimeError("Database not available. Check DATABASE_URL and DATABASE_NAME.")
    return db[collection_name]


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _as_dict(data: Union[BaseModel, dict]) -> dict:
    if isinstance(data, BaseModel):
        return data.model_dump(by_alias=True)
    return dict(data)


def create_document(collection_name: str, data: Union[BaseModel, dict]) -> str:
    """Insert a document stamped with createdAt/updatedAt and return its id."""
    doc = _as_dict(data)
    now = _now()
    doc["createdAt"] = now
    doc["updatedAt"] = now
    result = _collection(collection_name).insert_one(doc)
    return str(result.inserted_id)


def get_documents(
    collection_name: str,
    filter_dict: Optional[Dict[str, Any]] = None,
    limit: Optional[int] = None,
    sort: Optional[List[tuple]] = None,
    projection: Optional[Dict[str, Any]] = None,
) -> List[dict]:
    cursor = _collection(collection_name).find(filter_dict or {}, projection)
    if sort:
        cursor = cursor.sort(sort)
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def get_document(collection_name: str, filter_dict: Dict[str, Any]) -> Optional[dict]:
    return _collection(collection_name).find_one(filter_dict)


def update_document(
    collection_name: str, filter_dict: Dict[str, Any], data: Union[BaseModel, dict]
) -> Optional[dict]:
    """$set the given fields and return the updated document, or None if nothing matched."""
    changes = _as_dict(data)
    changes["updatedAt"] = _now()
    return _collection(collection_name).find_one_and_update(
        filter_dict,
        {"$set": changes},
        return_document=ReturnDocument.AFTER,
    )


def delete_document(collection_name: str, filter_dict: Dict[str, Any]) -> bool:
    result = _collection(collection_name).delete_one(filter_dict)
    return result.deleted_count > 0


def ensure_indexes() -> None:
    """Create the indexes the catalog relies on (idempotent)."""
    if db is None:
        logger.warning("Skipping index creation: database unavailable")
        return
    try:
        db["product"].create_index(
            [("slug", ASCENDING)],
            unique=True,
            name="slug_unique",
            partialFilterExpression={"slug": {"$type": "string"}},
        )
    except OperationFailure:
        # existing duplicates; slug uniqueness falls back to the scan in the routes
        logger.exception("Could not create unique slug index")
    db["product"].create_index([("categoryId", ASCENDING), ("subcategoryId", ASCENDING)])
    logger.info("Product indexes ensured")
