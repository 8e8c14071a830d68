from fastapi import APIRouter, Depends, Query, Body, status
from sqlalchemy.orm import Session
from typing import List
import logging

from ..core.database import get_db
from ..core.auth import require_roles
from ..core.responses import success_response, serialize
from ..user.models import User
from . import services
from .schemas import (
    CategoryCreate, SubcategoryCreate, CategoryUpdate, SortOrderUpdate,
    CategoryReorderItem, CategoryResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/categories", tags=["Categories"])


@router.get("")
async def get_categories(db: Session = Depends(get_db)):
    categories = services.get_all_categories(db)
    return success_response(serialize(CategoryResponse, categories), "Categories retrieved successfully")


@router.get("/parents")
async def get_parent_categories(db: Session = Depends(get_db)):
    categories = services.get_parent_categories(db)
    return success_response(serialize(CategoryResponse, categories), "Parent categories retrieved successfully")


@router.get("/hierarchy")
async def get_category_hierarchy(db: Session = Depends(get_db)):
    return success_response(services.get_category_hierarchy(db), "Category hierarchy retrieved successfully")


@router.get("/tree")
async def get_category_tree(db: Session = Depends(get_db)):
    return success_response(services.get_category_tree(db), "Category tree retrieved successfully")


@router.get("/with-places")
async def get_categories_with_place_count(db: Session = Depends(get_db)):
    return success_response(services.get_categories_with_place_count(db), "Categories retrieved successfully")


@router.get("/popular")
async def get_popular_categories(
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return success_response(services.get_popular_categories(db, limit), "Popular categories retrieved successfully")


@router.get("/search")
async def search_categories(
    q: str = Query(..., min_length=1, description="Text to look for in name or description"),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    categories = services.search_categories(db, q, limit)
    return success_response(serialize(CategoryResponse, categories), "Categories retrieved successfully")


@router.get("/stats")
async def get_all_category_stats(db: Session = Depends(get_db)):
    return success_response(services.get_all_category_stats(db), "Category statistics retrieved successfully")


@router.get("/{category_id}")
async def get_category(category_id: int, db: Session = Depends(get_db)):
    category = services.get_category(db, category_id)
    return success_response(serialize(CategoryResponse, category), "Category retrieved successfully")


@router.get("/{category_id}/with-subcategories")
async def get_category_with_subcategories(category_id: int, db: Session = Depends(get_db)):
    data = services.get_category_with_subcategories(db, category_id)
    return success_response(data, "Category retrieved successfully")


@router.get("/{category_id}/subcategories")
async def get_subcategories(category_id: int, db: Session = Depends(get_db)):
    categories = services.get_subcategories(db, category_id)
    return success_response(serialize(CategoryResponse, categories), "Subcategories retrieved successfully")


@router.get("/{category_id}/stats")
async def get_category_stats(category_id: int, db: Session = Depends(get_db)):
    return success_response(services.get_category_stats(db, category_id), "Category statistics retrieved successfully")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_category(
    category_in: CategoryCreate,
    current_user: User = Depends(require_roles("admin")),
    db: Session = Depends(get_db),
):
    category = services.create_category(db, category_in.model_dump())
    return success_response(
        serialize(CategoryResponse, category), "Category created successfully", status.HTTP_201_CREATED
    )


@router.post("/{parent_id}/subcategories", status_code=status.HTTP_201_CREATED)
async def create_subcategory(
    parent_id: int,
    category_in: SubcategoryCreate,
    current_user: User = Depends(require_roles("admin")),
    db: Session = Depends(get_db),
):
    category = services.create_subcategory(db, parent_id, category_in.model_dump())
    return success_response(
        serialize(CategoryResponse, category), "Subcategory created successfully", status.HTTP_201_CREATED
    )


@router.put("/reorder")
async def reorder_categories(
    updates: List[CategoryReorderItem] = Body(...),
    current_user: User = Depends(require_roles("admin")),
    db: Session = Depends(get_db),
):
    categories = services.reorder_categories(db, [item.model_dump() for item in updates])
    return success_response(serialize(CategoryResponse, categories), "Categories reordered successfully")


@router.put("/{category_id}")
async def update_category(
    category_id: int,
    category_in: CategoryUpdate,
    current_user: User = Depends(require_roles("admin")),
    db: Session = Depends(get_db),
):
    category = services.update_category(db, category_id, category_in.model_dump(exclude_unset=True))
    return success_response(serialize(CategoryResponse, category), "Category updated successfully")


@router.put("/{category_id}/sort-order")
async def update_sort_order(
    category_id: int,
    sort_in: SortOrderUpdate,
    current_user: User = Depends(require_roles("admin")),
    db: Session = Depends(get_db),
):
    category = services.update_sort_order(db, category_id, sort_in.sort_order)
    return success_response(serialize(CategoryResponse, category), "Sort order updated successfully")


@router.delete("/{category_id}")
async def delete_category(
    category_id: int,
    current_user: User = Depends(require_roles("admin")),
    db: Session = Depends(get_db),
):
    services.delete_category(db, category_id)
    return success_response({"id": category_id}, "Category deleted successfully")
