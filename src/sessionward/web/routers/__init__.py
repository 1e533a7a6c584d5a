from sessionward.web.routers.accounts import router as accounts_router
from sessionward.web.routers.auth import router as auth_router

__all__ = [
    "accounts_router",
    "auth_router",
]
