"""TickerLanding — классификация посетителя по User-Agent."""

from __future__ import annotations

from collections.abc import Iterable

import config


def classify(
    identity: str | None,
    signatures: Iterable[str] = config.CRAWLER_SIGNATURES,
) -> bool:
    """True, если в User-Agent есть хотя бы одна подстрока краулера.
    Регистр не важен, пустая строка -> False."""
    ua = (identity or "").lower()
    return any(sig.lower() in ua for sig in signatures if sig)


def describe_visitor(is_crawler: bool) -> str:
    return "crawler" if is_crawler else "human"
