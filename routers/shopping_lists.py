import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from models.shopping_list import ShoppingListCompletion, ShoppingListCreate, ShoppingListUpdate
from services import ShoppingListService, TransactionService
from utils.auth import get_current_user, is_admin
from utils.dates import now_iso
from utils.dependencies import get_shopping_list_service, get_transaction_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/shopping-lists", tags=["Shopping Lists"])


async def _get_accessible_or_404(list_id: str, current_user: dict, shopping_lists: ShoppingListService):
    shopping_list = await shopping_lists.get(list_id)
    if not shopping_list:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Shopping list not found"
        )

    user_id = current_user["_id"]
    if shopping_list.get("user_id") == user_id or is_admin(current_user):
        return shopping_list

    group_ids = await shopping_lists.membership.get_group_ids(user_id)
    if shopping_list.get("group_id") and shopping_list["group_id"] in group_ids:
        return shopping_list

    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="You don't have access to this shopping list"
    )


@router.get("/")
async def get_my_shopping_lists(
    current_user: dict = Depends(get_current_user),
    shopping_lists: ShoppingListService = Depends(get_shopping_list_service),
    list_status: Optional[Literal["active", "completed"]] = Query(None, alias="status"),
):
    user_id = current_user["_id"]
    if list_status == "active":
        lists = await shopping_lists.get_all_active_shopping_lists(user_id)
    elif list_status == "completed":
        lists = await shopping_lists.get_all_completed_shopping_lists(user_id)
    else:
        lists = await shopping_lists.get_all_user_shopping_lists(user_id)
    return {"shopping_lists": lists}


@router.get("/suggestions")
async def get_item_suggestions(
    current_user: dict = Depends(get_current_user),
    shopping_lists: ShoppingListService = Depends(get_shopping_list_service),
    q: Optional[str] = Query(None, description="Filter item names"),
    limit: int = Query(5, ge=1, le=50),
):
    return {"suggestions": await shopping_lists.get_item_suggestions(current_user["_id"], q, limit)}


@router.get("/{list_id}")
async def get_shopping_list(
    list_id: str,
    current_user: dict = Depends(get_current_user),
    shopping_lists: ShoppingListService = Depends(get_shopping_list_service),
):
    return await _get_accessible_or_404(list_id, current_user, shopping_lists)


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_shopping_list(
    shopping_list: ShoppingListCreate,
    current_user: dict = Depends(get_current_user),
    shopping_lists: ShoppingListService = Depends(get_shopping_list_service),
):
    data = shopping_list.model_dump(exclude_none=True, exclude={"group_id"})
    data["user_id"] = current_user["_id"]
    return await shopping_lists.create_with_group(data, shopping_list.group_id)


@router.put("/{list_id}")
async def update_shopping_list(
    list_id: str,
    shopping_list: ShoppingListUpdate,
    current_user: dict = Depends(get_current_user),
    shopping_lists: ShoppingListService = Depends(get_shopping_list_service),
):
    await _get_accessible_or_404(list_id, current_user, shopping_lists)
    updates = shopping_list.model_dump(exclude_unset=True)
    if "items" in updates and updates["items"] is not None:
        updates["items"] = [
            {k: v for k, v in item.items() if v is not None} for item in updates["items"]
        ]
    return await shopping_lists.update(list_id, updates)


@router.delete("/{list_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_shopping_list(
    list_id: str,
    current_user: dict = Depends(get_current_user),
    shopping_lists: ShoppingListService = Depends(get_shopping_list_service),
):
    shopping_list = await _get_accessible_or_404(list_id, current_user, shopping_lists)
    if shopping_list.get("user_id") != current_user["_id"] and not is_admin(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the owner can delete a shopping list"
        )
    await shopping_lists.delete(list_id)
    return None


@router.post("/{list_id}/duplicate", status_code=status.HTTP_201_CREATED)
async def duplicate_shopping_list(
    list_id: str,
    current_user: dict = Depends(get_current_user),
    shopping_lists: ShoppingListService = Depends(get_shopping_list_service),
):
    shopping_list = await _get_accessible_or_404(list_id, current_user, shopping_lists)
    return await shopping_lists.duplicate_shopping_list(shopping_list, current_user["_id"])


@router.post("/{list_id}/complete")
async def complete_shopping_list(
    list_id: str,
    completion: ShoppingListCompletion,
    current_user: dict = Depends(get_current_user),
    shopping_lists: ShoppingListService = Depends(get_shopping_list_service),
    transactions: TransactionService = Depends(get_transaction_service),
):
    """Record the purchase as an expense, then mark the list completed.

    The two writes are independent; if the second fails the transaction stays.
    """
    shopping_list = await _get_accessible_or_404(list_id, current_user, shopping_lists)
    if shopping_list.get("status") == "completed":
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Shopping list is already completed"
        )

    linked_transaction_id = completion.linked_transaction_id
    transaction = None
    if completion.create_transaction:
        transaction = await transactions.add_transaction({
            "amount": completion.total_amount,
            "description": f"Shopping list: {shopping_list['name']}",
            "date": now_iso(),
            "type": "expense",
            "category_id": completion.category_id,
            "shopping_list_id": list_id,
            "status": "paid",
            "is_recurring": False,
        }, current_user["_id"])
        linked_transaction_id = transaction["_id"]

    completed = await shopping_lists.complete_shopping_list(
        list_id, completion.total_amount, completion.category_id, linked_transaction_id
    )
    logger.info("Shopping list %s completed, linked transaction %s", list_id, linked_transaction_id)
    return {"shopping_list": completed, "transaction": transaction}
