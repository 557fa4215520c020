from fastapi import APIRouter, Depends

from services import TransactionService
from utils.auth import require_admin
from utils.dependencies import get_transaction_service

router = APIRouter(prefix="/admin/jobs", tags=["Admin Jobs"])


@router.post("/update-statuses")
async def update_transaction_statuses(
    current_user: dict = Depends(require_admin),
    transactions: TransactionService = Depends(get_transaction_service),
):
    """Mark upcoming transactions dated before today as overdue"""
    updated = await transactions.mark_overdue_transactions()
    return {"message": "Transaction statuses updated", "updated_count": updated}


@router.post("/process-recurring")
async def process_recurring_transactions(
    current_user: dict = Depends(require_admin),
    transactions: TransactionService = Depends(get_transaction_service),
):
    created = await transactions.process_recurring_transactions()
    return {"message": "Recurring transactions processed", "created_count": len(created)}
