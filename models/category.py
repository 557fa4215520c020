from pydantic import BaseModel, Field
from typing import Literal, Optional

CategoryType = Literal["income", "expense"]


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1)
    type: CategoryType


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    type: Optional[CategoryType] = None
