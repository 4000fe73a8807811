from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Cookie, Depends, FastAPI, HTTPException, Query, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import DuplicateKeyError
from starlette.exceptions import HTTPException as StarletteHTTPException

import database
from config import ADMIN_SESSION_COOKIE, ADMIN_SESSION_VALUE, CORS_ORIGINS, PORT
from database import (
    create_document,
    delete_document,
    ensure_indexes,
    get_document,
    get_documents,
    update_document,
)
from logger import get_logger
from schemas import Product, ProductCreate, ProductUpdate
from slug import generate_slug, generate_unique_slug

logger = get_logger(__name__)

PRODUCTS = "product"
SLUG_ATTEMPTS = 3

NO_STORE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


@asynccontextmanager
async def lifespan(_: FastAPI):
    ensure_indexes()
    yield


app = FastAPI(title="Product Catalog Admin API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(_, exc: StarletteHTTPException):
    headers = {**(exc.headers or {}), **NO_STORE_HEADERS}
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(_, exc: RequestValidationError):
    in_body = any((err.get("loc") or ("",))[0] == "body" for err in exc.errors())
    detail = "Invalid request body" if in_body else "Invalid query parameters"
    return JSONResponse(status_code=400, content={"detail": detail}, headers=NO_STORE_HEADERS)


# ----- Utilities -----

def serialize_product(doc: dict) -> dict:
    """Rename `_id` to `id` and render ObjectId values as strings."""
    d = dict(doc)
    d["id"] = str(d.pop("_id"))
    for k, v in list(d.items()):
        if isinstance(v, ObjectId):
            d[k] = str(v)
    return d


def ensure_object_id(id_str: str, label: str = "ID") -> ObjectId:
    try:
        return ObjectId(id_str)
    except (InvalidId, TypeError):
        raise HTTPException(status_code=400, detail=f"Invalid {label} format")


def no_store(response: Response) -> None:
    response.headers.update(NO_STORE_HEADERS)


def require_admin(session: Optional[str] = Cookie(None, alias=ADMIN_SESSION_COOKIE)) -> None:
    if session != ADMIN_SESSION_VALUE:
        logger.warning("Rejected write request without a valid admin session")
        raise HTTPException(status_code=401, detail="Unauthorized. Admin access required.")


def build_product_filter(
    category_id: Optional[str], subcategory_id: Optional[str], active: Optional[bool]
) -> Dict[str, Any]:
    query: Dict[str, Any] = {}
    if category_id:
        query["categoryId"] = ensure_object_id(category_id, "categoryId")
    if subcategory_id:
        query["subcategoryId"] = ensure_object_id(subcategory_id, "subcategoryId")
    if active is not None:
        query["isActive"] = active
    return query


def validate_category_refs(
    category_id: Optional[ObjectId], subcategory_id: Optional[ObjectId]
) -> None:
    """Reject ids that do not point at an existing category/subcategory pair."""
    if category_id is not None and get_document("category", {"_id": category_id}) is None:
        raise HTTPException(status_code=400, detail="Category not found")
    if subcategory_id is None:
        return
    sub = get_document("subcategory", {"_id": subcategory_id})
    if sub is None:
        raise HTTPException(status_code=400, detail="Subcategory not found")
    parent = sub.get("categoryId")
    if category_id is not None and parent is not None and str(parent) != str(category_id):
        raise HTTPException(
            status_code=400, detail="Subcategory does not belong to the selected category"
        )


def existing_slugs(exclude_id: Optional[ObjectId] = None) -> List[str]:
    docs = get_documents(PRODUCTS, projection={"slug": 1})
    return [d["slug"] for d in docs if d.get("slug") and d["_id"] != exclude_id]


def unique_slug_for(name: str, exclude_id: Optional[ObjectId] = None) -> str:
    slug = generate_unique_slug(generate_slug(name), existing_slugs(exclude_id))
    logger.info(f"Generated slug '{slug}' for '{name}'")
    return slug


# ----- Health -----
@app.get("/")
def read_root():
    return {"message": "Product Catalog Admin API running"}


@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "connection_status": "Not Connected",
        "collections": [],
    }
    db = database.db
    if db is None:
        response["database"] = "⚠️ Available but not initialized"
        return response
    try:
        response["collections"] = db.list_collection_names()[:10]
        response["database"] = "✅ Connected & Working"
        response["connection_status"] = "Connected"
    except Exception as e:
        response["database"] = f"❌ Error: {str(e)[:80]}"
    return response


# ----- Products -----
@app.get("/api/admin/products")
def list_products(
    response: Response,
    category_id: Optional[str] = Query(None, alias="categoryId"),
    subcategory_id: Optional[str] = Query(None, alias="subcategoryId"),
    active: Optional[bool] = Query(None),
):
    query = build_product_filter(category_id, subcategory_id, active)
    logger.info(
        f"Listing products with filters categoryId={category_id} "
        f"subcategoryId={subcategory_id} active={active}"
    )
    try:
        docs = get_documents(PRODUCTS, query, sort=[("createdAt", -1), ("_id", -1)])
    except Exception:
        logger.exception("Error fetching products")
        raise HTTPException(status_code=500, detail="Failed to fetch products")

    active_count = sum(1 for d in docs if d.get("isActive"))
    logger.info(f"{len(docs)} products found, {active_count} active")
    no_store(response)
    return {"products": [serialize_product(d) for d in docs]}


@app.get("/api/admin/products/{product_id}")
def get_product(product_id: str, response: Response):
    _id = ensure_object_id(product_id, "product ID")
    try:
        doc = get_document(PRODUCTS, {"_id": _id})
    except Exception:
        logger.exception(f"Error fetching product {product_id}")
        raise HTTPException(status_code=500, detail="Failed to fetch product")
    if not doc:
        raise HTTPException(status_code=404, detail="Product not found")
    no_store(response)
    return {"product": serialize_product(doc)}


@app.post("/api/admin/products", dependencies=[Depends(require_admin)])
def create_product(payload: ProductCreate, response: Response):
    if not payload.name or not payload.short_description or not payload.card_image:
        raise HTTPException(
            status_code=400,
            detail="Name, short description, and card image are required",
        )

    category_id = ensure_object_id(payload.category_id, "categoryId") if payload.category_id else None
    subcategory_id = (
        ensure_object_id(payload.subcategory_id, "subcategoryId") if payload.subcategory_id else None
    )
    logger.info(
        f"Creating product '{payload.name}' categoryId={category_id} subcategoryId={subcategory_id}"
    )

    try:
        validate_category_refs(category_id, subcategory_id)
        for attempt in range(1, SLUG_ATTEMPTS + 1):
            product = Product(
                name=payload.name,
                slug=unique_slug_for(payload.name),
                short_description=payload.short_description,
                long_description=payload.long_description,
                card_image=payload.card_image,
                detail_images=payload.detail_images or [],
                short_features=payload.short_features or [],
                specifications=payload.specifications,
                reviews_data=payload.reviews_data,
                catalog_file=payload.catalog_file,
                category_id=category_id,
                subcategory_id=subcategory_id,
                is_active=payload.is_active if payload.is_active is not None else True,
                view_count=0,
            )
            try:
                inserted_id = create_document(PRODUCTS, product)
                break
            except DuplicateKeyError:
                logger.warning(f"Slug '{product.slug}' taken concurrently (attempt {attempt})")
        else:
            raise RuntimeError(f"Could not allocate a unique slug for '{payload.name}'")

        doc = get_document(PRODUCTS, {"_id": ObjectId(inserted_id)})
    except HTTPException:
        raise
    except Exception:
        logger.exception("Error creating product")
        raise HTTPException(status_code=500, detail="Failed to create product")

    logger.info(f"Product created: {doc['name']} ({inserted_id})")
    no_store(response)
    return {"product": serialize_product(doc)}


@app.put("/api/admin/products", dependencies=[Depends(require_admin)])
def update_product(payload: ProductUpdate, response: Response):
    if not payload.id:
        raise HTTPException(status_code=400, detail="Product ID is required")
    _id = ensure_object_id(payload.id, "product ID")

    changes = payload.model_dump(exclude_unset=True, by_alias=True, exclude={"id"})
    # required fields cannot be blanked out
    for key in ("name", "shortDescription", "cardImage"):
        if not changes.get(key):
            changes.pop(key, None)
    for key in ("categoryId", "subcategoryId"):
        value = changes.pop(key, None)
        if value:
            changes[key] = ensure_object_id(value, key)
    for key in ("detailImages", "shortFeatures"):
        if key in changes and changes[key] is None:
            changes[key] = []
    if changes.get("isActive") is None:
        changes.pop("isActive", None)

    try:
        existing = get_document(PRODUCTS, {"_id": _id})
        if not existing:
            logger.info(f"Product not found for update: {payload.id}")
            raise HTTPException(status_code=404, detail="Product not found")

        if "categoryId" in changes or "subcategoryId" in changes:
            validate_category_refs(
                changes.get("categoryId", existing.get("categoryId")),
                changes.get("subcategoryId", existing.get("subcategoryId")),
            )

        rename = "name" in changes and changes["name"] != existing.get("name")
        for attempt in range(1, SLUG_ATTEMPTS + 1):
            if rename:
                changes["slug"] = unique_slug_for(changes["name"], exclude_id=_id)
            try:
                doc = update_document(PRODUCTS, {"_id": _id}, changes)
                break
            except DuplicateKeyError:
                logger.warning(f"Slug '{changes.get('slug')}' taken concurrently (attempt {attempt})")
        else:
            raise RuntimeError(f"Could not allocate a unique slug for '{changes.get('name')}'")
    except HTTPException:
        raise
    except Exception:
        logger.exception(f"Error updating product {payload.id}")
        raise HTTPException(status_code=500, detail="Failed to update product")

    if not doc:
        raise HTTPException(status_code=404, detail="Product not found")
    logger.info(f"Product updated: {payload.id} fields={sorted(changes)}")
    no_store(response)
    return {"product": serialize_product(doc)}


@app.delete("/api/admin/products", dependencies=[Depends(require_admin)])
def delete_product(response: Response, product_id: Optional[str] = Query(None, alias="id")):
    if not product_id:
        raise HTTPException(status_code=400, detail="Product ID is required")
    if not ObjectId.is_valid(product_id):
        logger.info(f"Invalid product ID format for deletion: {product_id}")
        raise HTTPException(status_code=400, detail="Invalid product ID format")

    try:
        deleted = delete_document(PRODUCTS, {"_id": ObjectId(product_id)})
    except Exception:
        logger.exception(f"Error deleting product {product_id}")
        raise HTTPException(status_code=500, detail="Failed to delete product")

    if not deleted:
        raise HTTPException(status_code=404, detail="Product not found")
    logger.info(f"Product deleted: {product_id}")
    no_store(response)
    return {"message": "Product deleted successfully"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=PORT)
