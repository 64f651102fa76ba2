"""Shared test fixtures — app, client, bank holiday feed stub, leave factories.

Reusable across all test modules. The bank holiday feed is served by an
``httpx.MockTransport`` so no test touches the network.
"""

from __future__ import annotations

from typing import Any, AsyncGenerator

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from bickers.dependencies import get_http_client
from bickers.main import create_app

# ── GOV.UK feed fixture data ────────────────────────────────────────

BANK_HOLIDAY_PAYLOAD: dict[str, Any] = {
    "england-and-wales": {
        "division": "england-and-wales",
        "events": [
            {"title": "Early May bank holiday", "date": "2024-05-06", "notes": "", "bunting": True},
            {"title": "Spring bank holiday", "date": "2024-05-27", "notes": "", "bunting": True},
            {"title": "Summer bank holiday", "date": "2024-08-26", "notes": "", "bunting": True},
            {"title": "New Year’s Day", "date": "2025-01-01", "notes": "", "bunting": True},
        ],
    },
    "scotland": {
        "division": "scotland",
        "events": [
            {"title": "Summer bank holiday", "date": "2024-08-05", "notes": "", "bunting": True},
        ],
    },
}


def _feed_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json=BANK_HOLIDAY_PAYLOAD)


def _broken_feed_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(502, text="Bad Gateway")


def make_feed_client(handler=_feed_handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app():
    """Create a fresh app instance with the feed client overridden."""
    application = create_app()

    async def _override_http_client() -> AsyncGenerator[httpx.AsyncClient, None]:
        async with make_feed_client() as feed:
            yield feed

    application.dependency_overrides[get_http_client] = _override_http_client
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
async def broken_feed_client(app) -> AsyncGenerator[AsyncClient, None]:
    """Client whose bank holiday feed always answers 502."""

    async def _override_http_client() -> AsyncGenerator[httpx.AsyncClient, None]:
        async with make_feed_client(_broken_feed_handler) as feed:
            yield feed

    app.dependency_overrides[get_http_client] = _override_http_client
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Document factories ──────────────────────────────────────────────

def _make_leave(
    *,
    id: str = "hol-1",
    employee: str = "Sam Driver",
    employee_code: str = "SD01",
    start: Any = "2024-06-03",
    end: Any = None,
    status: Any = "approved",
    **extra: Any,
) -> dict[str, Any]:
    """A leave document shaped like the ``holidays`` collection."""
    doc: dict[str, Any] = {
        "id": id,
        "employee": employee,
        "employeeCode": employee_code,
        "startDate": start,
        "status": status,
    }
    if end is not None:
        doc["endDate"] = end
    doc.update(extra)
    return doc


def _make_employee(
    *,
    name: str = "Sam Driver",
    user_code: str = "SD01",
    **extra: Any,
) -> dict[str, Any]:
    doc: dict[str, Any] = {"name": name, "userCode": user_code}
    doc.update(extra)
    return doc
