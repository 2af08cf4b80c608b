"""Run the API server: ``python -m expense_ledger``."""

import uvicorn

from expense_ledger.config import get_settings

settings = get_settings()

uvicorn.run(
    "expense_ledger.main:app",
    host=settings.HOST,
    port=settings.PORT,
    reload=settings.DEBUG,
)
