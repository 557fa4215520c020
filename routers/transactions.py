from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from models.transaction import TransactionCreate, TransactionUpdate
from services import TransactionService
from utils.auth import get_current_user, get_current_user_optional, is_admin
from utils.dates import end_of_day, start_of_day
from utils.dependencies import get_transaction_service

router = APIRouter(prefix="/transactions", tags=["Transactions"])


def _flag_shared(transactions, user_id):
    for tx in transactions:
        tx["is_shared"] = TransactionService.is_shared_transaction(tx, user_id)
    return transactions


async def _can_read(transaction: dict, current_user: dict, transactions: TransactionService) -> bool:
    owner = transaction.get("user_id")
    if owner == current_user["_id"] or is_admin(current_user):
        return True
    return owner in await transactions.membership.get_shared_member_ids(current_user["_id"])


async def _get_owned_or_404(transaction_id: str, current_user: dict, transactions: TransactionService):
    existing = await transactions.get(transaction_id)
    if not existing:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Transaction not found"
        )
    if existing.get("user_id") != current_user["_id"] and not is_admin(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have access to this transaction"
        )
    return existing


@router.get("/")
async def get_my_transactions(
    current_user: dict = Depends(get_current_user),
    transactions: TransactionService = Depends(get_transaction_service),
    start_date: Optional[date] = Query(None, description="First day (YYYY-MM-DD), inclusive"),
    end_date: Optional[date] = Query(None, description="Last day (YYYY-MM-DD), inclusive"),
):
    """Admins get every transaction, everyone else their own plus shared ones"""
    user_id = current_user["_id"]
    result = await transactions.get_accessible_transactions(
        user_id, is_admin=is_admin(current_user), start=start_date, end=end_date
    )
    return {"transactions": _flag_shared(result, user_id)}


@router.get("/shared")
async def get_shared_transactions(
    current_user: dict = Depends(get_current_user),
    transactions: TransactionService = Depends(get_transaction_service),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
):
    """Other group members' transactions; both bounds are whole days, inclusive"""
    start = start_of_day(start_date) if start_date else None
    end = end_of_day(end_date) if end_date else None
    shared = await transactions.get_shared_transactions(current_user["_id"], start, end)
    return {"transactions": _flag_shared(shared, current_user["_id"])}


@router.get("/category/{category_id}")
async def get_transactions_by_category(
    category_id: str,
    current_user: dict = Depends(get_current_user),
    transactions: TransactionService = Depends(get_transaction_service),
):
    result = await transactions.get_transactions_by_category(current_user["_id"], category_id)
    return {"transactions": result}


@router.get("/{transaction_id}")
async def get_transaction(
    transaction_id: str,
    current_user: dict = Depends(get_current_user),
    transactions: TransactionService = Depends(get_transaction_service),
):
    transaction = await transactions.get(transaction_id)
    if not transaction:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Transaction not found"
        )
    if not await _can_read(transaction, current_user, transactions):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have access to this transaction"
        )
    transaction["is_shared"] = TransactionService.is_shared_transaction(transaction, current_user["_id"])
    return transaction


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_transaction(
    transaction: TransactionCreate,
    current_user: Optional[dict] = Depends(get_current_user_optional),
    transactions: TransactionService = Depends(get_transaction_service),
):
    user_id = current_user["_id"] if current_user else None
    return await transactions.add_transaction(transaction.model_dump(exclude_none=True), user_id)


@router.put("/{transaction_id}")
async def update_transaction(
    transaction_id: str,
    transaction: TransactionUpdate,
    current_user: dict = Depends(get_current_user),
    transactions: TransactionService = Depends(get_transaction_service),
):
    await _get_owned_or_404(transaction_id, current_user, transactions)

    updated = await transactions.update(transaction_id, transaction.model_dump(exclude_unset=True))
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found")
    return updated


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction(
    transaction_id: str,
    current_user: dict = Depends(get_current_user),
    transactions: TransactionService = Depends(get_transaction_service),
):
    await _get_owned_or_404(transaction_id, current_user, transactions)
    await transactions.delete(transaction_id)
    return None
