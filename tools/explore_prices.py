"""TickerLanding — исследование: один цикл цен + классификация User-Agent."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import asyncio
import logging

import httpx
from tabulate import tabulate

import config
from services.price_feed import CoinGeckoPriceClient, FetchStatus, PriceFeedPoller
from services.visitor import classify, describe_visitor

logging.basicConfig(level=logging.INFO, format=config.LOG_FORMAT)


def _fmt_price(val: float) -> str:
    """Форматирование цены: $65,432.1, до 3 знаков."""
    text = f"{val:,.3f}".rstrip("0").rstrip(".")
    return f"${text}"


# Образцы User-Agent для проверки классификатора
SAMPLE_USER_AGENTS: list[str] = [
    "Mozilla/5.0 (compatible; Googlebot/2.1; +http://www.google.com/bot.html)",
    "Mozilla/5.0 (compatible; bingbot/2.0; +http://www.bing.com/bingbot.htm)",
    "Mozilla/5.0 (compatible; YandexBot/3.0; +http://yandex.com/bots)",
    "facebookexternalhit/1.1 (+http://www.facebook.com/externalhit_uatext.php)",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 Chrome/124.0",
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_4 like Mac OS X) Safari/604.1",
    "",
]


def explore_visitors() -> None:
    print("\n══════════════ VISITOR ══════════════")
    rows = [
        [ua[:60] or "<empty>", describe_visitor(classify(ua))]
        for ua in SAMPLE_USER_AGENTS
    ]
    print(tabulate(rows, headers=["User-Agent", "Класс"], tablefmt="simple_outline"))


async def explore_prices() -> None:
    print("\n══════════════ COINGECKO ══════════════")
    print(f"🔌 {config.COINGECKO_BASE_URL}{config.PRICE_ENDPOINT}")
    print(f"   Монет в запросе: {len(config.TICKER_IDS)}, таймаут {config.PRICE_TIMEOUT:.0f}с")

    async with httpx.AsyncClient() as http:
        client = CoinGeckoPriceClient(http)
        poller = PriceFeedPoller(client)
        prices = await poller.refresh()

    if poller.last_status is FetchStatus.SUCCESS:
        print(f"✅ Live-цены: {len(prices)} монет")
    else:
        status = poller.last_status.value if poller.last_status else "unknown"
        print(f"⚠️ Ошибка ({status}), показан fallback")

    rows = [[i + 1, q.symbol, q.name, _fmt_price(q.price)] for i, q in enumerate(prices)]
    print(tabulate(
        rows, headers=["#", "Символ", "Название", "Цена"],
        tablefmt="simple_outline",
    ))


def main() -> None:
    explore_visitors()
    asyncio.run(explore_prices())


if __name__ == "__main__":
    main()
