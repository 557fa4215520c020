from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from models.category import CategoryCreate, CategoryUpdate
from services import CategoryService
from utils.auth import get_current_user, get_current_user_optional, is_admin, require_admin
from utils.dependencies import get_category_service

router = APIRouter(prefix="/categories", tags=["Category"])


async def _can_read(category: dict, current_user: dict, categories: CategoryService) -> bool:
    owner = category.get("user_id")
    # Global categories have no owner
    if owner is None or owner == current_user["_id"] or is_admin(current_user):
        return True
    return owner in await categories.membership.get_shared_member_ids(current_user["_id"])


def _ensure_can_modify(category: dict, current_user: dict):
    if category.get("user_id") != current_user["_id"] and not is_admin(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have access to this category"
        )


@router.get("/")
async def get_my_categories(
    current_user: dict = Depends(get_current_user),
    categories: CategoryService = Depends(get_category_service),
):
    """Own categories plus the ones shared through groups"""
    return {"categories": await categories.get_all_user_categories(current_user["_id"])}


@router.get("/shared")
async def get_shared_categories(
    current_user: dict = Depends(get_current_user),
    categories: CategoryService = Depends(get_category_service),
):
    return {"categories": await categories.get_shared_categories(current_user["_id"])}


@router.get("/all")
async def get_all_categories(
    current_user: dict = Depends(require_admin),
    categories: CategoryService = Depends(get_category_service),
):
    return {"categories": await categories.get_all_categories()}


@router.get("/{category_id}")
async def get_specific_category(
    category_id: str,
    current_user: dict = Depends(get_current_user),
    categories: CategoryService = Depends(get_category_service),
):
    category = await categories.get(category_id)
    if not category:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Category not found"
        )
    if not await _can_read(category, current_user, categories):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have access to this category"
        )
    return category


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_category(
    category: CategoryCreate,
    current_user: Optional[dict] = Depends(get_current_user_optional),
    categories: CategoryService = Depends(get_category_service),
):
    user_id = current_user["_id"] if current_user else None
    return await categories.add_category(category.model_dump(), user_id)


@router.put("/{category_id}")
async def update_category(
    category_id: str,
    category_body: CategoryUpdate,
    current_user: dict = Depends(get_current_user),
    categories: CategoryService = Depends(get_category_service),
):
    existing = await categories.get(category_id)
    if not existing:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Category not found"
        )
    _ensure_can_modify(existing, current_user)

    return await categories.update(category_id, category_body.model_dump(exclude_unset=True))


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: str,
    current_user: dict = Depends(get_current_user),
    categories: CategoryService = Depends(get_category_service),
):
    existing = await categories.get(category_id)
    if not existing:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    _ensure_can_modify(existing, current_user)

    await categories.delete(category_id)
    return None
