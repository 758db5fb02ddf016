"""
Saved items router.
"""

from datetime import timedelta
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel, Field

from config import settings
from routers.rate_limit import client_identifier, rate_limit
from services.saved_items import (
    InMemorySavedItemStore,
    SavedItemNotFoundError,
    SavedItemStore,
    SavedItemType,
    collection_name,
)

router = APIRouter()

save_rate_limit = rate_limit("save", settings.SAVE_RATE_LIMIT, settings.RATE_LIMIT_WINDOW_SECONDS)


def get_saved_item_store(request: Request) -> SavedItemStore:
    store = getattr(request.app.state, "saved_item_store", None)
    if store is None:
        store = InMemorySavedItemStore(
            ttl=timedelta(days=settings.SAVED_ITEM_TTL_DAYS),
            max_per_type=settings.SAVED_ITEMS_MAX_PER_TYPE,
        )
        request.app.state.saved_item_store = store
    return store


def get_user_id(request: Request) -> str:
    """No real auth here; the x-user-id header or the client address scopes the data."""
    user_id = (request.headers.get("x-user-id") or "").strip()
    return user_id or client_identifier(request)


class SaveItemRequest(BaseModel):
    type: SavedItemType
    data: Dict[str, Any] = Field(min_length=1)


class DeleteItemRequest(BaseModel):
    type: SavedItemType
    id: str = Field(min_length=1)


@router.get("/saved")
async def list_saved_items(
    type: Optional[SavedItemType] = Query(default=None),
    user_id: str = Depends(get_user_id),
    store: SavedItemStore = Depends(get_saved_item_store),
    _rate_limit: None = Depends(save_rate_limit),
):
    collections = store.list_items(user_id)
    if type is not None:
        items = collections[collection_name(type)]
        return {"success": True, "type": type, "data": items, "count": len(items)}
    return {
        "success": True,
        "data": collections,
        "counts": {name: len(items) for name, items in collections.items()},
    }


@router.post("/saved")
async def save_item(
    payload: SaveItemRequest,
    user_id: str = Depends(get_user_id),
    store: SavedItemStore = Depends(get_saved_item_store),
    _rate_limit: None = Depends(save_rate_limit),
):
    item, total = store.save(user_id, payload.type, payload.data)
    return {
        "success": True,
        "message": f"{payload.type} saved successfully",
        "item": item,
        "totalSaved": total,
    }


@router.delete("/saved")
async def delete_item(
    payload: DeleteItemRequest,
    user_id: str = Depends(get_user_id),
    store: SavedItemStore = Depends(get_saved_item_store),
    _rate_limit: None = Depends(save_rate_limit),
):
    try:
        remaining = store.delete(user_id, payload.type, payload.id)
    except SavedItemNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {
        "success": True,
        "message": f"{payload.type} deleted successfully",
        "remainingCount": remaining,
    }
