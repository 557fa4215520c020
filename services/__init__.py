from .categories import CategoryService
from .claims import AuthClaimsService
from .group_membership import GroupMembershipResolver
from .shopping_lists import ShoppingListService
from .transactions import TransactionService
from .users import UserService
