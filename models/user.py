from pydantic import BaseModel, Field, validator
from typing import List, Literal, Optional

UserRole = Literal["user", "admin"]


class UserBase(BaseModel):
    email: str
    username: str
    full_name: Optional[str] = None


class UserCreate(UserBase):
    password: str = Field(..., min_length=6, max_length=72)

    @validator('password')
    def validate_password_length(cls, v):
        # bcrypt only looks at the first 72 bytes
        if len(v.encode('utf-8')) > 72:
            raise ValueError('Password cannot be longer than 72 bytes')
        return v


class UserLogin(BaseModel):
    email: str
    password: str


class UserResponse(BaseModel):
    id: str = Field(alias="_id")
    email: str
    username: str
    full_name: Optional[str] = None
    role: UserRole = "user"
    group_ids: List[str] = []
    created_at: Optional[str] = None
    last_login_at: Optional[str] = None
    is_active: bool = True

    class Config:
        populate_by_name = True


class UserProfileUpdate(BaseModel):
    username: Optional[str] = None
    full_name: Optional[str] = None


class RoleUpdate(BaseModel):
    role: UserRole


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
