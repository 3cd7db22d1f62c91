"""HTTP routers."""

from sheet_relay.web.routes.auth import router as auth_router
from sheet_relay.web.routes.sheets import router as sheets_router
from sheet_relay.web.routes.webhook import router as webhook_router

__all__ = ["auth_router", "sheets_router", "webhook_router"]
