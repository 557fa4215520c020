from pydantic import BaseModel, Field
from typing import List, Literal, Optional

ShoppingListStatus = Literal["active", "completed"]


class ShoppingListItem(BaseModel):
    id: Optional[str] = None
    name: str = Field(..., min_length=1)
    completed: bool = False
    quantity: Optional[float] = None
    unit: Optional[str] = None


class ShoppingListCreate(BaseModel):
    name: str = Field(..., min_length=1)
    items: List[ShoppingListItem] = []
    group_id: Optional[str] = None
    category_id: Optional[str] = None


class ShoppingListUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    items: Optional[List[ShoppingListItem]] = None
    category_id: Optional[str] = None
    status: Optional[ShoppingListStatus] = None


class ShoppingListCompletion(BaseModel):
    total_amount: float = Field(..., gt=0)
    category_id: str
    # Create the expense transaction before completing the list
    create_transaction: bool = True
    linked_transaction_id: Optional[str] = None
