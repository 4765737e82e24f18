import json

import httpx
import pytest_asyncio

from services.price_feed import CoinGeckoPriceClient


def json_response(payload, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(payload).encode())


@pytest_asyncio.fixture
async def make_client():
    """Фабрика CoinGeckoPriceClient поверх httpx.MockTransport.
    Все созданные AsyncClient закрываются после теста."""
    opened: list[httpx.AsyncClient] = []

    def _make(handler, timeout: float = 5.0) -> CoinGeckoPriceClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        opened.append(http)
        return CoinGeckoPriceClient(
            http, base_url="https://api.test/api/v3", timeout=timeout
        )

    yield _make

    for http in opened:
        await http.aclose()
