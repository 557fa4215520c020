from pydantic import BaseModel, Field
from typing import Literal, Optional, Union
from datetime import datetime

TransactionType = Literal["income", "expense"]
TransactionStatus = Literal["paid", "draft", "upcoming", "overdue"]


class TransactionCreate(BaseModel):
    amount: float
    description: str = ""
    date: Union[datetime, str]
    type: TransactionType
    category_id: Optional[str] = None
    status: Optional[TransactionStatus] = None
    is_recurring: Optional[bool] = None
    recurring_date: Optional[int] = Field(default=None, ge=1, le=31)
    shopping_list_id: Optional[str] = None


class TransactionUpdate(BaseModel):
    amount: Optional[float] = None
    description: Optional[str] = None
    date: Optional[Union[datetime, str]] = None
    type: Optional[TransactionType] = None
    category_id: Optional[str] = None
    status: Optional[TransactionStatus] = None
    is_recurring: Optional[bool] = None
    recurring_date: Optional[int] = Field(default=None, ge=1, le=31)
