from fastapi import Depends

from database import get_db
from services import (AuthClaimsService, CategoryService, ShoppingListService,
                      TransactionService, UserService)


def get_category_service(db=Depends(get_db)) -> CategoryService:
    return CategoryService(db)


def get_transaction_service(db=Depends(get_db)) -> TransactionService:
    return TransactionService(db)


def get_shopping_list_service(db=Depends(get_db)) -> ShoppingListService:
    return ShoppingListService(db)


def get_user_service(db=Depends(get_db)) -> UserService:
    return UserService(db)


def get_claims_service(db=Depends(get_db)) -> AuthClaimsService:
    return AuthClaimsService(db)
