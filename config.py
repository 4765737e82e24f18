"""TickerLanding — конфигурация проекта."""

import os

from dotenv import load_dotenv

load_dotenv()

# Base URLs
COINGECKO_BASE_URL: str = os.getenv(
    "COINGECKO_BASE_URL", "https://api.coingecko.com/api/v3"
)
PRICE_ENDPOINT: str = "/simple/price"

# HTTP
PRICE_TIMEOUT: float = 5.0          # секунд на весь запрос, потом abort
PRICE_POLL_INTERVAL: float = 60.0   # фиксированный период, от старта до старта
USER_AGENT: str = "TickerLanding/1.0"

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT: str = "%(asctime)s [%(levelname)s] %(message)s"

# CoinGecko slug ID для тикера, порядок запроса
TICKER_IDS: list[str] = [
    "bitcoin", "ethereum", "tether", "binancecoin", "cardano",
    "ripple", "solana", "polkadot", "dogecoin", "avalanche",
]
VS_CURRENCY: str = "usd"

# Подстроки User-Agent краулеров (lowercase)
CRAWLER_SIGNATURES: tuple[str, ...] = (
    "bot",
    "spider",
    "crawler",
    "googlebot",
    "bingbot",
    "slurp",
    "duckduckbot",
    "baiduspider",
    "yandexbot",
    "sogou",
    "exabot",
    "facebookexternalhit",
    "ia_archiver",
)

# Фиксированные цены, если API недоступен: (id, name, symbol, usd)
FALLBACK_PRICES: tuple[tuple[str, str, str, float], ...] = (
    ("bitcoin", "Bitcoin", "BTC", 65000),
    ("ethereum", "Ethereum", "ETH", 3500),
    ("tether", "Tether", "USDT", 1),
    ("binancecoin", "BNB", "BNB", 450),
    ("cardano", "Cardano", "ADA", 2.5),
)

# Статичная картинка для не-краулеров
HUMAN_IMAGE_URL: str = "https://i.ibb.co/Y7B2p0kF/T2.png"
