"""Shared FastAPI dependencies."""

from typing import AsyncGenerator

import httpx

from bickers.config import settings


async def get_http_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    """Outbound client for the bank holiday feed, closed after the request."""
    async with httpx.AsyncClient(timeout=settings.BANK_HOLIDAYS_TIMEOUT_SECONDS) as client:
        yield client
