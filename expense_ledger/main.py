"""
Expense Ledger FastAPI application.

This is the entry point for the application.
All routers are registered here.
"""

from fastapi import FastAPI

from expense_ledger.config import get_settings
from expense_ledger.logging import configure_logging
from expense_ledger.api.health import router as health_router
from expense_ledger.api.groups import router as groups_router
from expense_ledger.api.friends import router as friends_router
from expense_ledger.api.expenses import router as expenses_router
from expense_ledger.api.positions import router as positions_router

settings = get_settings()
configure_logging()

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Shared-expense tracking with group and friend ledgers",
)

# Register routers
app.include_router(health_router)
app.include_router(groups_router)
app.include_router(friends_router)
app.include_router(expenses_router)
app.include_router(positions_router)
