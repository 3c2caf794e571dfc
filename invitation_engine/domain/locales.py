# invitation_engine/domain/locales.py
"""Per-locale grammar used when turning party data into drawn text."""
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Optional

from invitation_engine.config.settings import settings

MONTH_ABBR = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def english_ordinal(n: int) -> str:
    if 11 <= n % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def _clock_12h(moment: datetime) -> str:
    hour12 = moment.hour % 12 or 12
    ampm = "pm" if moment.hour >= 12 else "am"
    return f"{hour12}:{moment.minute:02d}{ampm}"


def _clock_24h(moment: datetime) -> str:
    return f"{moment.hour}:{moment.minute:02d}"


def _time_range(clock: Callable[[datetime], str], separator: str) -> Callable[[datetime, Optional[datetime]], str]:
    def fmt(start: datetime, end: Optional[datetime]) -> str:
        if end is None:
            return clock(start)
        return f"{clock(start)}{separator}{clock(end)}"
    return fmt


@dataclass(frozen=True)
class LocaleGrammar:
    tag: str
    possessive: Callable[[str], str]
    ordinal: Callable[[int], str]
    compact_datetime: Callable[[datetime], str]
    date: Callable[[datetime], str]
    time_range: Callable[[datetime, Optional[datetime]], str]
    free_label: str
    render_error: str
    print_title: Callable[[str], str]
    card_labels: Dict[str, str]


ENGLISH = LocaleGrammar(
    tag="en",
    possessive=lambda name: f"{name}'s",
    ordinal=english_ordinal,
    compact_datetime=lambda d: f"{MONTH_ABBR[d.month - 1]} {d.day}, {_clock_12h(d)}",
    date=lambda d: f"{MONTH_ABBR[d.month - 1]} {d.day}, {d.year}",
    time_range=_time_range(_clock_12h, " - "),
    free_label="Free",
    render_error="Could not load the invitation image",
    print_title=lambda name: f"Invitation - {name}'s Birthday Party",
    card_labels={
        "youre_invited": "You're Invited!",
        "birthday_party": "Birthday Party",
        "join_us": "Join us for a celebration!",
        "details": "Party Details",
        "when": "When",
        "where": "Where",
        "age": "Age",
        "years_old": "{age} years old",
        "notes": "Special Notes:",
        "scan": "Scan to RSVP",
        "visit": "or visit:",
        "closing": "Can't wait to celebrate with you!",
        "card_title": "Party Invitation Card",
    },
)

CHINESE = LocaleGrammar(
    tag="zh",
    possessive=lambda name: f"{name}的",
    ordinal=lambda n: f"{n}岁",
    compact_datetime=lambda d: f"{d.month}月{d.day}日 {_clock_24h(d)}",
    date=lambda d: f"{d.month}月{d.day}日",
    time_range=_time_range(_clock_24h, "-"),
    free_label="免费",
    render_error="邀请卡图片加载失败",
    print_title=lambda name: f"邀请卡 - {name}的生日派对",
    card_labels={
        "youre_invited": "诚挚邀请！",
        "birthday_party": "生日派对",
        "join_us": "一起来庆祝吧！",
        "details": "派对详情",
        "when": "时间",
        "where": "地点",
        "age": "年龄",
        "years_old": "{age}岁",
        "notes": "特别说明：",
        "scan": "扫码回复",
        "visit": "或访问：",
        "closing": "期待与你一起庆祝！",
        "card_title": "派对邀请卡",
    },
)

LOCALES: Dict[str, LocaleGrammar] = {grammar.tag: grammar for grammar in (ENGLISH, CHINESE)}


def get_locale(tag: Optional[str]) -> LocaleGrammar:
    """Exact tag first, then its language subtag (``zh-CN`` -> ``zh``), then the configured default."""
    if tag:
        normalized = tag.replace("_", "-").lower()
        if normalized in LOCALES:
            return LOCALES[normalized]
        language = normalized.split("-", 1)[0]
        if language in LOCALES:
            return LOCALES[language]
    return LOCALES.get(settings.DEFAULT_LOCALE, ENGLISH)
