# routers/__init__.py
from .leases import router as leases_router
from .payments import router as payments_router
from .webhooks import router as webhooks_router
from .users import router as users_router

__all__ = [
     "leases_router",
     "payments_router",
     "webhooks_router",
     "users_router",
]
