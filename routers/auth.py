import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pymongo.errors import PyMongoError

from models.user import Token, UserCreate, UserLogin, UserResponse
from services import AuthClaimsService, UserService
from utils.auth import create_access_token, get_current_user, get_password_hash, verify_password
from utils.dependencies import get_claims_service, get_user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/signup", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def signup(user: UserCreate, users: UserService = Depends(get_user_service)):
    if await users.get_user_by_email(user.email):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered"
        )

    try:
        created_user = await users.create_user({
            "email": user.email,
            "username": user.username,
            "full_name": user.full_name,
            "hashed_password": get_password_hash(user.password),
        })
    except PyMongoError:
        logger.exception("Error during signup")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred during signup"
        )

    logger.info("Created user %s", created_user["_id"])
    return created_user


@router.post("/login", response_model=Token)
async def login(
    user: UserLogin,
    users: UserService = Depends(get_user_service),
    claims: AuthClaimsService = Depends(get_claims_service),
):
    """Login user and return JWT token carrying the user's custom claims"""
    db_user = await users.get_user_by_email(user.email)

    if not db_user or not verify_password(user.password, db_user["hashed_password"]):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not db_user.get("is_active", True):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive"
        )

    await users.record_login(db_user["_id"])
    custom_claims = await claims.get_custom_user_claims(db_user["_id"])

    access_token = create_access_token(
        data={"sub": db_user["email"], "uid": db_user["_id"], **custom_claims}
    )
    return {"access_token": access_token, "token_type": "bearer"}


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: dict = Depends(get_current_user)):
    """Return the currently logged-in user"""
    return current_user
