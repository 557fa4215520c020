import calendar
import logging
from datetime import datetime
from typing import List, Optional

from pymongo import DESCENDING
from pymongo.errors import PyMongoError

from database import TRANSACTIONS
from services.base import DocumentService
from services.group_membership import GroupMembershipResolver
from utils.dates import (DateLike, end_of_day, now_iso, parse_date, start_of_day,
                         to_iso_string, utcnow)
from utils.errors import NotAuthenticatedError

logger = logging.getLogger(__name__)

BY_DATE_DESC = [("date", DESCENDING)]

DEFAULT_STATUS = "paid"


def signed_amount(amount: float, transaction_type: Optional[str]) -> float:
    """Expenses are stored negative, income positive"""
    if transaction_type == "expense":
        return -abs(amount)
    if transaction_type == "income":
        return abs(amount)
    return amount


def date_range_filter(start: Optional[DateLike], end: Optional[DateLike]) -> dict:
    bounds = {}
    if start is not None:
        bounds["$gte"] = to_iso_string(start)
    if end is not None:
        bounds["$lte"] = to_iso_string(end)
    return {"date": bounds} if bounds else {}


def filter_by_days(transactions: List[dict], start: DateLike, end: DateLike) -> List[dict]:
    """Keep transactions whose day lies within [start, end], both inclusive"""
    first = start_of_day(start)
    last = end_of_day(end)
    return [tx for tx in transactions if first <= parse_date(tx["date"]) <= last]


def _monthly_occurrence(year: int, month: int, day: int) -> datetime:
    last_day = calendar.monthrange(year, month)[1]
    return start_of_day(datetime(year, month, min(day, last_day)))


class TransactionService(DocumentService):
    collection_name = TRANSACTIONS

    def __init__(self, db, membership: Optional[GroupMembershipResolver] = None):
        super().__init__(db)
        self.membership = membership or GroupMembershipResolver(db)

    async def get(self, transaction_id: str) -> Optional[dict]:
        return await self.get_by_id(transaction_id)

    async def create(self, transaction: dict) -> dict:
        now = now_iso()
        new_tx = {
            **transaction,
            "date": to_iso_string(transaction["date"]),
            "status": transaction.get("status") or DEFAULT_STATUS,
            "is_recurring": bool(transaction.get("is_recurring", False)),
        }
        new_tx.setdefault("created_at", now)
        new_tx.setdefault("updated_at", now)
        return await super().create(new_tx)

    async def update(self, transaction_id: str, updates: dict) -> Optional[dict]:
        changes = dict(updates)
        if changes.get("date") is not None:
            changes["date"] = to_iso_string(changes["date"])
        amount, transaction_type = changes.get("amount"), changes.get("type")
        if amount is not None or transaction_type is not None:
            # Amount and type always agree on the sign, whichever one changes
            existing = await self.get(transaction_id)
            if existing is None:
                return None
            if amount is None:
                amount = existing.get("amount")
            if transaction_type is None:
                transaction_type = existing.get("type")
            if amount is not None:
                changes["amount"] = signed_amount(amount, transaction_type)
        changes["updated_at"] = now_iso()
        return await super().update(transaction_id, changes)

    async def add_transaction(self, transaction: dict, user_id: Optional[str]) -> dict:
        """Create a transaction owned by `user_id` with its amount signed by type"""
        if not user_id:
            raise NotAuthenticatedError()
        new_tx = {
            **transaction,
            "user_id": user_id,
            "amount": signed_amount(transaction["amount"], transaction.get("type")),
        }
        try:
            return await self.create(new_tx)
        except PyMongoError:
            logger.exception("Error adding transaction for user %s", user_id)
            raise

    async def get_user_transactions(self, user_id: str) -> List[dict]:
        return await self.query({"user_id": user_id}, BY_DATE_DESC)

    async def get_all_transactions(self) -> List[dict]:
        return await self.query({}, BY_DATE_DESC)

    async def get_transactions_by_date_range(self, user_id: str, start: DateLike,
                                             end: DateLike) -> List[dict]:
        filters = {"user_id": user_id, **date_range_filter(start, end)}
        return await self.query(filters, BY_DATE_DESC)

    async def get_all_transactions_by_date_range(self, start: DateLike, end: DateLike) -> List[dict]:
        return await self.query(date_range_filter(start, end), BY_DATE_DESC)

    async def get_transactions_by_category(self, user_id: str, category_id: str) -> List[dict]:
        return await self.query({"user_id": user_id, "category_id": category_id}, BY_DATE_DESC)

    async def get_shared_transactions(self, user_id: str, start: Optional[DateLike] = None,
                                      end: Optional[DateLike] = None) -> List[dict]:
        """Transactions owned by the other members of the user's groups"""
        try:
            member_ids = await self.membership.get_shared_member_ids(user_id)
            if not member_ids:
                return []
            filters = {"user_id": {"$in": sorted(member_ids)}, **date_range_filter(start, end)}
            return await self.query(filters, BY_DATE_DESC)
        except PyMongoError:
            logger.exception("Error fetching shared transactions for user %s", user_id)
            return []

    async def get_accessible_transactions(self, user_id: str, is_admin: bool = False,
                                          start: Optional[DateLike] = None,
                                          end: Optional[DateLike] = None) -> List[dict]:
        """Everything for admins; own plus shared for everyone else.

        Own and shared transactions are not de-duplicated. When both bounds
        are given the result is limited to whole days within the range.
        """
        bounded = start is not None and end is not None
        if bounded:
            first, last = start_of_day(start), end_of_day(end)
            if is_admin:
                transactions = await self.get_all_transactions_by_date_range(first, last)
            else:
                transactions = await self.get_transactions_by_date_range(user_id, first, last)
        else:
            first = last = None
            if is_admin:
                transactions = await self.get_all_transactions()
            else:
                transactions = await self.get_user_transactions(user_id)

        if not is_admin:
            shared = await self.get_shared_transactions(user_id, first, last)
            transactions = transactions + shared
            transactions.sort(key=lambda tx: parse_date(tx["date"]), reverse=True)

        if bounded:
            return filter_by_days(transactions, start, end)
        return transactions

    @staticmethod
    def is_shared_transaction(transaction: dict, current_user_id: Optional[str]) -> bool:
        owner = transaction.get("user_id")
        if not current_user_id or not owner:
            return False
        return owner != current_user_id

    async def mark_overdue_transactions(self, now: Optional[DateLike] = None) -> int:
        """Flip upcoming transactions dated before today to overdue"""
        now = parse_date(now) if now is not None else utcnow()
        today = to_iso_string(start_of_day(now))
        try:
            result = await self.collection.update_many(
                {"status": "upcoming", "date": {"$lt": today}},
                {"$set": {"status": "overdue", "updated_at": to_iso_string(now)}},
            )
        except PyMongoError:
            logger.exception("Error updating transaction statuses")
            raise
        logger.info("Marked %d transactions as overdue", result.modified_count)
        return result.modified_count

    async def process_recurring_transactions(self, now: Optional[DateLike] = None) -> List[dict]:
        """Create this period's upcoming instance of every recurring transaction.

        The instance falls on the transaction's `recurring_date` (default the
        1st) of the current month, or of next month when that day has passed.
        Instances already created for the same day are not created again.
        """
        now = parse_date(now) if now is not None else utcnow()
        created = []
        try:
            recurring = await self.query({"is_recurring": True})
            logger.info("Found %d recurring transactions", len(recurring))
            for transaction in recurring:
                day = transaction.get("recurring_date") or 1
                next_date = _monthly_occurrence(now.year, now.month, day)
                if next_date < now:
                    year, month = (now.year + 1, 1) if now.month == 12 else (now.year, now.month + 1)
                    next_date = _monthly_occurrence(year, month, day)

                next_iso = to_iso_string(next_date)
                source_id = transaction["_id"]
                existing = await self.collection.find_one(
                    {"recurring_source_id": source_id, "date": next_iso})
                if existing:
                    continue

                instance = {k: v for k, v in transaction.items()
                            if k not in ("_id", "created_at", "updated_at")}
                instance.update({
                    "date": next_iso,
                    "status": "upcoming",
                    "is_recurring": False,
                    "recurring_source_id": source_id,
                    "created_at": to_iso_string(now),
                    "updated_at": to_iso_string(now),
                })
                created.append(await self.create(instance))
        except PyMongoError:
            logger.exception("Error processing recurring transactions")
            raise

        logger.info("Created %d upcoming transactions from recurring ones", len(created))
        return created
