"""
Category catalogue API.

GET /v1/categories           - All enabled categories (display copy only)
GET /v1/categories/{key}     - One category
"""

from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ..core.exceptions import UnknownCategory
from ..services.catalogue import default_category, list_profiles, lookup
from ..services.session import is_category_enabled

categories_router = APIRouter(tags=["categories"])


class CategoryInfo(BaseModel):
    key: str
    group: str
    title: str
    description: str
    item_label: str


class CategoryListResponse(BaseModel):
    categories: list[CategoryInfo]
    default: Optional[str] = None


@categories_router.get("/categories", response_model=CategoryListResponse)
async def list_categories(group: Optional[str] = None):
    """List catalogue entries, optionally for one navigation group."""
    try:
        profiles = list_profiles(group)
        default = default_category(group).value if group else None
    except UnknownCategory as e:
        raise HTTPException(status_code=400, detail=str(e))

    enabled = [p for p in profiles if is_category_enabled(p.key)]
    if default and not any(p.key.value == default for p in enabled):
        default = None
    return CategoryListResponse(
        categories=[CategoryInfo(**p.describe()) for p in enabled],
        default=default,
    )


@categories_router.get("/categories/{key}", response_model=CategoryInfo)
async def get_category(key: str):
    try:
        profile = lookup(key)
    except UnknownCategory as e:
        raise HTTPException(status_code=404, detail=str(e))
    if not is_category_enabled(profile.key):
        raise HTTPException(status_code=404, detail=f"Category {key!r} is disabled")
    return CategoryInfo(**profile.describe())
