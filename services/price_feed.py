"""TickerLanding — живой тикер цен CoinGecko: fetch, deadline, fallback, refresh."""

from __future__ import annotations

import asyncio
import enum
import logging
import math
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import asdict, dataclass

import httpx

import config

logger = logging.getLogger("ticker_landing.price_feed")


@dataclass(frozen=True)
class PriceQuote:
    id: str
    name: str
    symbol: str
    price: float

    def to_dict(self) -> dict:
        return asdict(self)


class FetchStatus(enum.Enum):
    SUCCESS = "success"
    TIMEOUT = "timeout"
    NETWORK_ERROR = "network_error"
    PROTOCOL_ERROR = "protocol_error"
    RATE_LIMITED = "rate_limited"
    DATA_ERROR = "data_error"


@dataclass(frozen=True)
class FetchResult:
    """Результат одного запроса. data заполнен только при SUCCESS."""

    status: FetchStatus
    data: dict | None = None
    http_status: int | None = None
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status is FetchStatus.SUCCESS

    @classmethod
    def success(cls, data: dict, http_status: int = 200) -> FetchResult:
        return cls(FetchStatus.SUCCESS, data=data, http_status=http_status)

    @classmethod
    def failure(
        cls, status: FetchStatus, error: str, http_status: int | None = None
    ) -> FetchResult:
        return cls(status, http_status=http_status, error=error)


# ----------------------------------------------------------------------
# Нормализация
# ----------------------------------------------------------------------

def format_prices(data: dict, vs_currency: str = config.VS_CURRENCY) -> list[PriceQuote]:
    """{coin_id: {usd: price}} -> [PriceQuote] в порядке ответа.
    Любая битая запись -> ValueError, частичный список не возвращается."""
    quotes: list[PriceQuote] = []
    for coin_id, entry in data.items():
        if not isinstance(entry, dict) or vs_currency not in entry:
            raise ValueError(f"no {vs_currency} price for {coin_id!r}")
        raw = entry[vs_currency]
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            raise ValueError(f"bad {vs_currency} price for {coin_id!r}: {raw!r}")
        # огромный int из JSON не влезает во float
        try:
            price = float(raw)
        except OverflowError:
            raise ValueError(f"{vs_currency} price out of range for {coin_id!r}") from None
        if not math.isfinite(price) or price < 0:
            raise ValueError(f"bad {vs_currency} price for {coin_id!r}: {raw!r}")
        quotes.append(PriceQuote(
            id=coin_id,
            name=coin_id[:1].upper() + coin_id[1:],
            symbol=coin_id.upper(),
            price=price,
        ))
    return quotes


def fallback_prices() -> list[PriceQuote]:
    """Фиксированный список из 5 монет, когда live-данных нет."""
    return [
        PriceQuote(id=coin_id, name=name, symbol=symbol, price=float(price))
        for coin_id, name, symbol, price in config.FALLBACK_PRICES
    ]


# ----------------------------------------------------------------------
# HTTP
# ----------------------------------------------------------------------

class CoinGeckoPriceClient:
    """Async-клиент /simple/price. Ошибки не бросает, возвращает FetchResult."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str = config.COINGECKO_BASE_URL,
        timeout: float = config.PRICE_TIMEOUT,
        user_agent: str = config.USER_AGENT,
    ) -> None:
        self.http: httpx.AsyncClient = http_client
        self.base_url: str = base_url.rstrip("/")
        self.timeout: float = timeout
        self.user_agent: str = user_agent

    async def fetch_simple_prices(
        self, ids: Iterable[str], vs_currency: str = config.VS_CURRENCY
    ) -> FetchResult:
        url = f"{self.base_url}{config.PRICE_ENDPOINT}"
        params = {"ids": ",".join(ids), "vs_currencies": vs_currency}
        headers = {
            "Accept": "application/json",
            "Cache-Control": "no-cache",
            "User-Agent": self.user_agent,
        }

        # wait_for отменяет запрос по дедлайну, ретрая нет
        try:
            resp = await asyncio.wait_for(
                self.http.get(url, params=params, headers=headers),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            return FetchResult.failure(
                FetchStatus.TIMEOUT, f"no response in {self.timeout}s"
            )
        except httpx.TimeoutException as e:
            return FetchResult.failure(FetchStatus.TIMEOUT, f"transport timeout: {e}")
        except httpx.TransportError as e:
            return FetchResult.failure(
                FetchStatus.NETWORK_ERROR, f"{type(e).__name__}: {e}"
            )

        status = resp.status_code
        if status == 429:
            logger.warning("CoinGecko rate limit exceeded (429)")
            return FetchResult.failure(
                FetchStatus.RATE_LIMITED, "rate limit exceeded", http_status=status
            )
        if not resp.is_success:
            return FetchResult.failure(
                FetchStatus.PROTOCOL_ERROR, f"HTTP {status}", http_status=status
            )

        if not resp.content:
            return FetchResult.failure(
                FetchStatus.DATA_ERROR, "empty body", http_status=status
            )
        try:
            data = resp.json()
        except ValueError as e:
            return FetchResult.failure(
                FetchStatus.DATA_ERROR, f"invalid JSON: {e}", http_status=status
            )
        if not isinstance(data, dict) or not data:
            return FetchResult.failure(
                FetchStatus.DATA_ERROR, "no data received", http_status=status
            )
        return FetchResult.success(data, http_status=status)


# ----------------------------------------------------------------------
# Poller
# ----------------------------------------------------------------------

Listener = Callable[[tuple[PriceQuote, ...]], None]


class PriceFeedPoller:
    """
    Опрос цен с фиксированным периодом.
    Первый цикл сразу после start(), следующий через interval от старта
    предыдущего. Состояние всегда пустое или полный список, замена целиком.
    """

    def __init__(
        self,
        client: CoinGeckoPriceClient,
        ids: Iterable[str] | None = None,
        vs_currency: str = config.VS_CURRENCY,
        interval: float = config.PRICE_POLL_INTERVAL,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.client = client
        self.ids: list[str] = list(ids) if ids is not None else list(config.TICKER_IDS)
        self.vs_currency = vs_currency
        self.interval = interval
        self._sleep = sleep
        self._clock = clock

        self._prices: tuple[PriceQuote, ...] = ()
        self._listeners: list[Listener] = []
        self._task: asyncio.Task | None = None
        self._closed = False

        self.cycles: int = 0
        self.last_status: FetchStatus | None = None

    @property
    def prices(self) -> tuple[PriceQuote, ...]:
        return self._prices

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Listener вызывается с новым списком после каждой замены."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    async def refresh(self) -> tuple[PriceQuote, ...]:
        """Один цикл: fetch -> format или fallback -> публикация."""
        try:
            result = await self.client.fetch_simple_prices(self.ids, self.vs_currency)
        except Exception as e:
            logger.exception("Unexpected error while fetching prices")
            result = FetchResult.failure(FetchStatus.NETWORK_ERROR, str(e))

        quotes: list[PriceQuote] | None = None
        if result.ok:
            try:
                quotes = format_prices(result.data, self.vs_currency)
            except ValueError as e:
                result = FetchResult.failure(
                    FetchStatus.DATA_ERROR, str(e), http_status=result.http_status
                )
            except Exception as e:
                logger.exception("Unexpected error while formatting prices")
                result = FetchResult.failure(
                    FetchStatus.DATA_ERROR, str(e), http_status=result.http_status
                )

        if quotes is None:
            logger.warning(
                f"Price fetch failed [{result.status.value}] {result.error}"
                f" -> fallback ({len(config.FALLBACK_PRICES)} coins)"
            )
            quotes = fallback_prices()
        else:
            logger.info(f"Prices updated: {len(quotes)} coins")

        if self._closed:
            logger.debug("Poller closed, late price update dropped")
            return self._prices

        self.cycles += 1
        self.last_status = result.status
        self._publish(tuple(quotes))
        return self._prices

    def _publish(self, prices: tuple[PriceQuote, ...]) -> None:
        self._prices = prices
        for listener in list(self._listeners):
            try:
                listener(prices)
            except Exception:
                logger.exception("Price listener failed")

    async def _run(self) -> None:
        while not self._closed:
            started = self._clock()
            try:
                await self.refresh()
            except Exception:
                logger.exception("Price cycle failed, keeping previous prices")
            elapsed = self._clock() - started
            await self._sleep(max(0.0, self.interval - elapsed))

    def start(self) -> asyncio.Task:
        if self._closed:
            raise RuntimeError("PriceFeedPoller is closed")
        if not self.running:
            logger.info(
                f"Price poller started: {len(self.ids)} coins every {self.interval:.0f}s"
            )
            self._task = asyncio.get_running_loop().create_task(self._run())
        return self._task

    async def stop(self) -> None:
        """Teardown: после него состояние и listeners больше не трогаются."""
        self._closed = True
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info(f"Price poller stopped after {self.cycles} cycles")

    async def __aenter__(self) -> PriceFeedPoller:
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()
