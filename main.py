"""TickerLanding — точка входа: классификация посетителя + живой тикер цен.

Usage: python3 main.py "<User-Agent>" [--cycles N]
"""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Iterable

import httpx

import config
from services.price_feed import CoinGeckoPriceClient, PriceFeedPoller, PriceQuote
from services.visitor import classify, describe_visitor

logger = logging.getLogger("ticker_landing")

DEFAULT_IDENTITY = "Mozilla/5.0 (Windows NT 10.0; Win64; x64)"
USAGE = "Usage: python3 main.py \"<User-Agent>\" [--cycles N]"


def _fmt_price(val: float) -> str:
    """$65,432.1 — разделители тысяч, до 3 знаков после точки."""
    text = f"{val:,.3f}".rstrip("0").rstrip(".")
    return f"${text}"


def render_ticker(prices: Iterable[PriceQuote]) -> str:
    return "  ".join(f"{q.symbol} > {_fmt_price(q.price)}" for q in prices)


def _parse_args(argv: list[str]) -> tuple[str, int | None]:
    """[User-Agent] [--cycles N | --cycles=N]. Плохое N -> ValueError."""
    identity, cycles = DEFAULT_IDENTITY, None
    args = iter(argv)
    for arg in args:
        if arg == "--cycles":
            value = next(args, "")
        elif arg.startswith("--cycles="):
            value = arg.split("=", 1)[1]
        else:
            identity = arg
            continue
        if not value.isdigit() or int(value) < 1:
            raise ValueError(f"--cycles expects a positive integer, got {value!r}")
        cycles = int(value)
    return identity, cycles


async def run_ticker(
    identity: str,
    cycles: int | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> bool:
    """Классифицирует один раз; для краулера крутит тикер cycles раз
    (None — до Ctrl+C). Возвращает классификацию."""
    is_crawler = classify(identity)
    logger.info(f"Visitor: {describe_visitor(is_crawler)} ({identity!r})")

    if not is_crawler:
        print(f"[image] {config.HUMAN_IMAGE_URL}")
        return is_crawler

    updates: asyncio.Queue[tuple[PriceQuote, ...]] = asyncio.Queue()
    async with httpx.AsyncClient(transport=transport) as http:
        client = CoinGeckoPriceClient(
            http,
            base_url=config.COINGECKO_BASE_URL,
            timeout=config.PRICE_TIMEOUT,
            user_agent=config.USER_AGENT,
        )
        poller = PriceFeedPoller(
            client,
            ids=config.TICKER_IDS,
            vs_currency=config.VS_CURRENCY,
            interval=config.PRICE_POLL_INTERVAL,
        )
        poller.subscribe(updates.put_nowait)
        async with poller:
            shown = 0
            while cycles is None or shown < cycles:
                prices = await updates.get()
                print(render_ticker(prices))
                shown += 1
    return is_crawler


def main() -> None:
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
    try:
        identity, cycles = _parse_args(sys.argv[1:])
    except ValueError as e:
        print(f"❌ {e}\n{USAGE}")
        sys.exit(2)
    try:
        asyncio.run(run_ticker(identity, cycles))
    except KeyboardInterrupt:
        print("\nTicker stopped.")


if __name__ == "__main__":
    main()
