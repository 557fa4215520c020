from fastapi import APIRouter, Depends, HTTPException, status

from models.user import RoleUpdate, UserProfileUpdate, UserResponse
from services import UserService
from utils.auth import get_current_user, require_admin
from utils.dependencies import get_user_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/", response_model=list[UserResponse])
async def get_all_users(
    current_user: dict = Depends(require_admin),
    users: UserService = Depends(get_user_service),
):
    return await users.get_all_users()


@router.put("/me", response_model=UserResponse)
async def update_my_profile(
    profile: UserProfileUpdate,
    current_user: dict = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    updated = await users.update_user_profile(current_user["_id"], profile.model_dump(exclude_unset=True))
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return updated


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    current_user: dict = Depends(require_admin),
    users: UserService = Depends(get_user_service),
):
    user = await users.get(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.put("/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    user_id: str,
    body: RoleUpdate,
    current_user: dict = Depends(require_admin),
    users: UserService = Depends(get_user_service),
):
    """Change the stored role; the auth claim follows through role sync"""
    updated = await users.update_user_role(user_id, body.role)
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return updated


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    current_user: dict = Depends(require_admin),
    users: UserService = Depends(get_user_service),
):
    if not await users.delete_user_account(user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return None
