# invitation_engine/domain/pricing.py
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel

from invitation_engine.domain.descriptor import PricingConfig
from invitation_engine.domain.locales import get_locale


class EffectivePrice(BaseModel):
    price: float
    is_free: bool
    has_discount: bool
    discount_percent: Optional[float] = None
    original_price: Optional[float] = None
    free_until: Optional[datetime] = None
    discount_ends_at: Optional[datetime] = None


def _as_utc(moment: datetime) -> datetime:
    # Naive timestamps in template configs are UTC
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def evaluate(pricing: PricingConfig, now: datetime) -> EffectivePrice:
    now = _as_utc(now)

    if pricing.is_free:
        return EffectivePrice(price=0, is_free=True, has_discount=False)

    if pricing.free_until is not None and now < _as_utc(pricing.free_until):
        return EffectivePrice(price=0, is_free=True, has_discount=False, free_until=pricing.free_until)

    discount_live = pricing.discount_percent is not None and pricing.discount_percent > 0
    if discount_live and pricing.discount_ends_at is not None:
        discount_live = now < _as_utc(pricing.discount_ends_at)

    if not discount_live:
        return EffectivePrice(price=pricing.price, is_free=pricing.price <= 0, has_discount=False)

    return EffectivePrice(
        price=pricing.price,
        is_free=pricing.price <= 0,
        has_discount=True,
        discount_percent=pricing.discount_percent,
        original_price=pricing.original_price,
        discount_ends_at=pricing.discount_ends_at,
    )


def evaluate_now(pricing: PricingConfig) -> EffectivePrice:
    return evaluate(pricing, datetime.now(timezone.utc))


CURRENCY_SYMBOLS = {"USD": "$", "CNY": "¥"}


def format_price(price: float, currency: str, locale: str) -> str:
    if price == 0:
        return get_locale(locale).free_label
    symbol = CURRENCY_SYMBOLS.get(currency)
    if symbol:
        return f"{symbol}{price:.2f}"
    return f"{price:.2f} {currency}"
