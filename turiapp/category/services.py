from typing import List, Dict, Any, Optional
import logging

from sqlalchemy.orm import Session

from ..core.database import transaction
from ..core.exceptions import ValidationError, NotFoundError, ConflictError
from ..core.repository import integrity_as_conflict
from ..core.responses import serialize
from . import crud
from .models import Category
from .schemas import CategoryResponse

logger = logging.getLogger(__name__)

NAME_TAKEN = "Category with this name already exists"
DELETE_BLOCKED = "Cannot delete category: it has associated places or subcategories"


def _dump(category: Category) -> Dict[str, Any]:
    return serialize(CategoryResponse, category).model_dump()


def _dump_with_count(row) -> Dict[str, Any]:
    category, place_count = row[0], row[1]
    data = _dump(category)
    data["place_count"] = place_count or 0
    return data


def get_all_categories(db: Session) -> List[Category]:
    return crud.get_active_categories(db)


def get_category(db: Session, category_id: int) -> Category:
    category = crud.get_category(db, category_id)
    if category is None:
        raise NotFoundError("Category not found")
    return category


def get_category_with_subcategories(db: Session, category_id: int) -> Dict[str, Any]:
    category = get_category(db, category_id)
    data = _dump(category)
    data["subcategories"] = [_dump(child) for child in crud.get_subcategories(db, category_id)]
    return data


def get_parent_categories(db: Session) -> List[Category]:
    return crud.get_parent_categories(db)


def get_subcategories(db: Session, parent_id: int) -> List[Category]:
    get_category(db, parent_id)
    return crud.get_subcategories(db, parent_id)


def get_categories_with_place_count(db: Session) -> List[Dict[str, Any]]:
    return [_dump_with_count(row) for row in crud.get_categories_with_place_count(db)]


def get_category_hierarchy(db: Session) -> List[Dict[str, Any]]:
    """Top level categories, each with its direct subcategories."""
    rows = get_categories_with_place_count(db)
    parents = [row for row in rows if row["parent_id"] is None]
    for parent in parents:
        parent["subcategories"] = [row for row in rows if row["parent_id"] == parent["id"]]
    return parents


def get_category_tree(db: Session) -> List[Dict[str, Any]]:
    """
    Build the parent -> children tree from one flat list.

    Every node is indexed by id first, then each node is attached to its
    parent's ``children`` in a single pass. Nodes whose parent is missing
    or inactive become roots.
    """
    nodes = get_categories_with_place_count(db)
    by_id = {}
    for node in nodes:
        node["children"] = []
        by_id[node["id"]] = node

    tree = []
    for node in nodes:
        parent = by_id.get(node["parent_id"])
        if parent is not None:
            parent["children"].append(node)
        else:
            tree.append(node)
    return tree


def get_popular_categories(db: Session, limit: int = 10) -> List[Dict[str, Any]]:
    result = []
    for row in crud.get_popular_categories(db, limit):
        data = _dump_with_count(row)
        data["avg_rating"] = round(float(row[2]), 2) if row[2] is not None else 0
        result.append(data)
    return result


def search_categories(db: Session, term: str, limit: int = 20) -> List[Category]:
    if not term or not term.strip():
        raise ValidationError("Search term is required")
    return crud.search_categories(db, term.strip(), limit)


def get_category_stats(db: Session, category_id: int) -> Dict[str, Any]:
    category = get_category(db, category_id)
    stats = crud.get_category_stats(db, category_id)
    stats.update({"id": category.id, "name": category.name, "description": category.description})
    return stats


def get_all_category_stats(db: Session) -> Dict[str, Any]:
    rows = get_categories_with_place_count(db)
    return {
        "total_categories": len(rows),
        "parent_categories": sum(1 for row in rows if row["parent_id"] is None),
        "subcategories": sum(1 for row in rows if row["parent_id"] is not None),
        "empty_categories": sum(1 for row in rows if row["place_count"] == 0),
    }


def _check_parent(db: Session, parent_id: Optional[int], category_id: Optional[int] = None) -> None:
    if parent_id is None:
        return
    if category_id is not None and parent_id == category_id:
        raise ValidationError("A category cannot be its own parent")
    parent = crud.get_category(db, parent_id)
    if parent is None or not parent.is_active:
        raise NotFoundError("Parent category not found")
    if category_id is None:
        return

    # Đi ngược lên tổ tiên của parent, gặp lại category_id nghĩa là tạo vòng
    seen = set()
    ancestor = parent
    while ancestor is not None and ancestor.id not in seen:
        if ancestor.id == category_id:
            raise ValidationError("A category cannot be a subcategory of its own descendant")
        seen.add(ancestor.id)
        ancestor = crud.get_category(db, ancestor.parent_id) if ancestor.parent_id else None


def create_category(db: Session, data: Dict[str, Any]) -> Category:
    name = (data.get("name") or "").strip()
    if not name:
        raise ValidationError("Category name is required")
    data["name"] = name
    if crud.get_category_by_name(db, name):
        raise ConflictError(NAME_TAKEN)
    _check_parent(db, data.get("parent_id"))

    with integrity_as_conflict(db, NAME_TAKEN):
        category = crud.create_category(db, data)
    logger.info(f"Category created: {category.id} ({category.name})")
    return category


def create_subcategory(db: Session, parent_id: int, data: Dict[str, Any]) -> Category:
    parent = crud.get_category(db, parent_id)
    if parent is None or not parent.is_active:
        raise NotFoundError("Parent category not found")
    return create_category(db, {**data, "parent_id": parent_id})


def update_category(db: Session, category_id: int, data: Dict[str, Any]) -> Category:
    category = get_category(db, category_id)

    if "name" in data:
        name = (data["name"] or "").strip()
        if not name:
            raise ValidationError("Category name is required")
        existing = crud.get_category_by_name(db, name)
        if existing is not None and existing.id != category_id:
            raise ConflictError(NAME_TAKEN)
        data["name"] = name
    if "parent_id" in data:
        _check_parent(db, data["parent_id"], category_id)

    with integrity_as_conflict(db, NAME_TAKEN):
        category = crud.update_category(db, category, data)
    logger.info(f"Category updated: {category_id}")
    return category


def can_delete_category(db: Session, category_id: int) -> bool:
    return crud.count_place_links(db, category_id) == 0 and crud.count_children(db, category_id) == 0


def delete_category(db: Session, category_id: int) -> Category:
    category = get_category(db, category_id)
    if not can_delete_category(db, category_id):
        logger.warning(f"Refusing to delete category {category_id}: still referenced")
        raise ValidationError(DELETE_BLOCKED)
    # Xóa mềm
    category = crud.update_category(db, category, {"is_active": False})
    logger.info(f"Category soft-deleted: {category_id}")
    return category


def update_sort_order(db: Session, category_id: int, sort_order: int) -> Category:
    category = get_category(db, category_id)
    return crud.update_category(db, category, {"sort_order": sort_order})


def reorder_categories(db: Session, updates: List[Dict[str, Any]]) -> List[Category]:
    """Apply every ``{categoryId, sortOrder}`` pair atomically."""
    if not updates:
        raise ValidationError("Category updates array is required")
    for item in updates:
        if item.get("categoryId") is None or item.get("sortOrder") is None:
            raise ValidationError("Each update must have categoryId and sortOrder")

    with transaction(db):
        for item in updates:
            category = crud.get_category(db, item["categoryId"])
            if category is None:
                raise NotFoundError(f"Category {item['categoryId']} not found")
            crud.update_category(db, category, {"sort_order": item["sortOrder"]}, commit=False)

    logger.info(f"Reordered {len(updates)} categories")
    return crud.get_active_categories(db)
