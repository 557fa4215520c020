from .auth import router as auth
from .category import router as category
from .transactions import router as transactions
from .shopping_lists import router as shopping_lists
from .users import router as users
from .admin_jobs import router as admin_jobs

all_routers = [auth, category, transactions, shopping_lists, users, admin_jobs]
