"""GOV.UK bank holiday feed tests — parsing, fetching, graceful fallback."""

from __future__ import annotations

from datetime import date

import httpx
import pytest

from bickers.common.exceptions import BankHolidayFeedError, ValidationException
from bickers.holidays.bank_holidays import (
    fetch_bank_holidays,
    load_bank_holidays,
    parse_bank_holidays,
)
from tests.conftest import (
    BANK_HOLIDAY_PAYLOAD,
    _broken_feed_handler,
    make_feed_client,
)


class TestParse:

    def test_default_region_all_years(self):
        holidays = parse_bank_holidays(BANK_HOLIDAY_PAYLOAD)
        assert list(holidays) == [
            date(2024, 5, 6),
            date(2024, 5, 27),
            date(2024, 8, 26),
            date(2025, 1, 1),
        ]
        assert holidays[date(2024, 5, 27)] == "Spring bank holiday"

    def test_year_filter(self):
        holidays = parse_bank_holidays(BANK_HOLIDAY_PAYLOAD, year=2025)
        assert list(holidays) == [date(2025, 1, 1)]

    def test_other_region(self):
        holidays = parse_bank_holidays(BANK_HOLIDAY_PAYLOAD, "scotland", 2024)
        assert list(holidays) == [date(2024, 8, 5)]

    def test_malformed_events_skipped(self):
        payload = {
            "england-and-wales": {
                "events": [
                    "2024-12-25",
                    {"title": "No date"},
                    {"title": "Bad date", "date": "25/12/2024"},
                    {"date": "2024-12-26"},
                    {"title": "Christmas Day", "date": "2024-12-25"},
                ]
            }
        }
        holidays = parse_bank_holidays(payload)
        assert holidays == {
            date(2024, 12, 25): "Christmas Day",
            date(2024, 12, 26): "Bank holiday",
        }

    @pytest.mark.parametrize(
        "payload",
        [None, [], {"england-and-wales": []}, {"england-and-wales": {"events": "none"}}, {}],
    )
    def test_unusable_payload(self, payload):
        assert parse_bank_holidays(payload) == {}


class TestFetch:

    async def test_fetch_via_client(self):
        async with make_feed_client() as feed:
            holidays = await fetch_bank_holidays(year=2024, client=feed)
        assert set(holidays) == {date(2024, 5, 6), date(2024, 5, 27), date(2024, 8, 26)}

    async def test_requests_configured_url(self):
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json=BANK_HOLIDAY_PAYLOAD)

        async with make_feed_client(handler) as feed:
            await fetch_bank_holidays(client=feed, url="https://feed.test/holidays.json")
        assert seen == ["https://feed.test/holidays.json"]

    async def test_upstream_error_raises(self):
        async with make_feed_client(_broken_feed_handler) as feed:
            with pytest.raises(BankHolidayFeedError) as exc_info:
                await fetch_bank_holidays(client=feed)
        assert exc_info.value.status_code == 503

    async def test_invalid_json_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>maintenance</html>")

        async with make_feed_client(handler) as feed:
            with pytest.raises(BankHolidayFeedError):
                await fetch_bank_holidays(client=feed)

    async def test_network_error_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with make_feed_client(handler) as feed:
            with pytest.raises(BankHolidayFeedError):
                await fetch_bank_holidays(client=feed)

    async def test_unknown_region(self):
        async with make_feed_client() as feed:
            with pytest.raises(ValidationException) as exc_info:
                await fetch_bank_holidays("wales", client=feed)
        assert "region" in exc_info.value.errors


class TestLoad:

    async def test_feed_down_yields_no_holidays(self, caplog):
        async with make_feed_client(_broken_feed_handler) as feed:
            with caplog.at_level("WARNING", logger="bickers.holidays.bank_holidays"):
                holidays = await load_bank_holidays(client=feed)
        assert holidays == {}
        assert "Bank holidays unavailable" in caplog.text

    async def test_feed_up(self):
        async with make_feed_client() as feed:
            holidays = await load_bank_holidays("scotland", client=feed)
        assert holidays == {date(2024, 8, 5): "Summer bank holiday"}
