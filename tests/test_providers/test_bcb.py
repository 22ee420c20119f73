"""Tests for the Central Bank SGS rate provider.

All tests use httpx.MockTransport to avoid real API calls.
"""

from datetime import date
from decimal import Decimal

import httpx
import pytest

from tracker.config import HttpSettings
from tracker.providers.bcb import BcbRateProvider, parse_sgs_response


def _provider(handler) -> BcbRateProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return BcbRateProvider(client, HttpSettings())


class TestParseSgsResponse:
    def test_items_keyed_by_iso_day(self) -> None:
        rates = parse_sgs_response(
            [
                {"data": "02/01/2024", "valor": "0.043739"},
                {"data": "01/02/2024", "valor": "0.42"},
            ]
        )
        assert rates == {
            "2024-01-02": Decimal("0.043739"),
            "2024-02-01": Decimal("0.42"),
        }

    def test_malformed_items_skipped(self) -> None:
        rates = parse_sgs_response(
            [
                {"data": "02/01/2024", "valor": ""},
                {"valor": "0.04"},
                {"data": "bad", "valor": "0.04"},
                "garbage",
                {"data": "03/01/2024", "valor": "0.05"},
            ]
        )
        assert rates == {"2024-01-03": Decimal("0.05")}

    def test_non_list_payload(self) -> None:
        assert parse_sgs_response({"error": "not found"}) == {}


class TestBcbRateProvider:
    @pytest.mark.asyncio
    async def test_request_shape(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[{"data": "02/01/2024", "valor": "0.04"}])

        rates = await _provider(handler).fetch_rate_series(
            12, date(2023, 1, 5), date(2024, 1, 10)
        )

        assert rates == {"2024-01-02": Decimal("0.04")}
        request = seen[0]
        assert request.url.path == "/dados/serie/bcdata.sgs.12/dados"
        assert request.url.params["formato"] == "json"
        assert request.url.params["dataInicial"] == "05/01/2023"
        assert request.url.params["dataFinal"] == "10/01/2024"

    @pytest.mark.asyncio
    async def test_http_error_returns_empty(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502)

        assert await _provider(handler).fetch_rate_series(
            433, date(2023, 1, 1), date(2024, 1, 1)
        ) == {}

    @pytest.mark.asyncio
    async def test_invalid_json_returns_empty(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>maintenance</html>")

        assert await _provider(handler).fetch_rate_series(
            12, date(2023, 1, 1), date(2024, 1, 1)
        ) == {}
