"""
Models — запис рекламної кампанії, валідація та похідні метрики.

Кампанія зберігає лише «сирі» показники (бюджет, покази, кліки, конверсії,
виручку). CTR / CPC / CPA / ROI завжди рахуються на льоту і ніколи не
записуються в базу.
"""

import math
from dataclasses import dataclass

from adstats.constants import (
    CHANNELS, STATUSES, FIELD_SEPARATOR, FIELD_SEPARATOR_REPLACEMENT,
)


# ─── Помилки ───

class AdStatsError(Exception):
    """Базова помилка програми."""


class ValidationError(AdStatsError, ValueError):
    """Одне з полів кампанії не пройшло перевірку."""

    def __init__(self, message: str, field: str = None):
        super().__init__(message)
        self.field = field


class DuplicateNameError(AdStatsError):
    """Кампанія з такою назвою (без урахування регістру) вже є в базі."""

    def __init__(self, name: str):
        super().__init__(f"Кампанія з назвою '{name}' вже існує.")
        self.name = name


# ─── Тексти помилок по полях (показуються в статус-рядку) ───
FIELD_ERRORS = {
    "name": "Назва кампанії обов'язкова.",
    "channel": "Оберіть канал просування.",
    "status": "Оберіть статус кампанії.",
    "budget": "Бюджет має бути числом не менше 0.",
    "impressions": "Покази мають бути цілим числом не менше 0.",
    "clicks": "Кліки мають бути цілим числом не менше 0.",
    "conversions": "Конверсії мають бути цілим числом не менше 0.",
    "revenue": "Дохід має бути числом не менше 0.",
}
CLICKS_OVER_IMPRESSIONS = "Кліки не можуть перевищувати покази."
CONVERSIONS_OVER_CLICKS = "Конверсії не можуть перевищувати кліки."
NAME_FORMAT = "Назва не може починатися з '#' або містити '|' чи переноси рядків."


def _fail(field: str):
    raise ValidationError(FIELD_ERRORS[field], field)


def _is_real(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _is_count(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def normalize_name(name: str) -> str:
    """Назва у тому вигляді, в якому вона потрапляє у файл бази."""
    return name.replace(FIELD_SEPARATOR, FIELD_SEPARATOR_REPLACEMENT).strip()


def _check_text(name: str, channel: str, status: str):
    if not isinstance(name, str) or not name.strip():
        _fail("name")
    # Такий рядок у файлі став би коментарем, битим рядком або зайвим полем
    if (name.strip().startswith("#") or "\n" in name or "\r" in name
            or FIELD_SEPARATOR in name):
        raise ValidationError(NAME_FORMAT, "name")
    if channel not in CHANNELS:
        _fail("channel")
    if status not in STATUSES:
        _fail("status")


@dataclass
class Campaign:
    """Рекламна кампанія."""
    name: str
    channel: str
    status: str
    budget: float
    impressions: int
    clicks: int
    conversions: int
    revenue: float

    def __post_init__(self):
        if isinstance(self.name, str):
            self.name = normalize_name(self.name)
        self.validate()

    # ─── Валідація ───

    def validate(self):
        """
        Перевіряє всі інваріанти запису.
        Порядок перевірок такий самий, як у формі: перша помилка виграє.
        Raises: ValidationError
        """
        _check_text(self.name, self.channel, self.status)

        if not _is_real(self.budget) or self.budget < 0:
            _fail("budget")
        if not _is_count(self.impressions) or self.impressions < 0:
            _fail("impressions")
        if not _is_count(self.clicks) or self.clicks < 0:
            _fail("clicks")
        if not _is_count(self.conversions) or self.conversions < 0:
            _fail("conversions")
        if not _is_real(self.revenue) or self.revenue < 0:
            _fail("revenue")

        if self.clicks > self.impressions:
            raise ValidationError(CLICKS_OVER_IMPRESSIONS, "clicks")
        if self.conversions > self.clicks:
            raise ValidationError(CONVERSIONS_OVER_CLICKS, "conversions")

    def update_from(self, source: "Campaign"):
        """Замінює всі поля значеннями з іншої (вже валідної) кампанії."""
        self.name = source.name
        self.channel = source.channel
        self.status = source.status
        self.budget = source.budget
        self.impressions = source.impressions
        self.clicks = source.clicks
        self.conversions = source.conversions
        self.revenue = source.revenue

    def same_name(self, name: str) -> bool:
        return self.name.casefold() == normalize_name(name).casefold()

    # ─── Похідні метрики ───

    @property
    def ctr(self) -> float:
        """Click-Through Rate, %"""
        if self.impressions == 0:
            return 0.0
        return self.clicks / self.impressions * 100

    @property
    def cpc(self) -> float:
        """Cost Per Click"""
        if self.clicks == 0:
            return 0.0
        return self.budget / self.clicks

    @property
    def cpa(self) -> float:
        """Cost Per Acquisition"""
        if self.conversions == 0:
            return 0.0
        return self.budget / self.conversions

    @property
    def roi(self) -> float:
        """Return On Investment, %"""
        if self.budget == 0:
            return 0.0
        return (self.revenue - self.budget) / self.budget * 100

    def __str__(self) -> str:
        return f"{self.name} [{self.channel}] - {self.status}"


# ─── Розбір введення з форми ───

def parse_real(text: str) -> float:
    """
    Розбирає дійсне число з поля вводу. Кома приймається як десятковий
    роздільник. Raises: ValueError
    """
    value = float((text or "").strip().replace(",", "."))
    if not math.isfinite(value):
        raise ValueError(f"not a finite number: {text!r}")
    return value


def parse_count(text: str) -> int:
    """Розбирає ціле число з поля вводу. Raises: ValueError"""
    return int((text or "").strip())


def parse_form(name: str, channel: str, status: str, budget: str,
               impressions: str, clicks: str, conversions: str,
               revenue: str) -> Campaign:
    """
    Будує кампанію з «сирого» тексту полів форми.

    Returns: валідна Campaign
    Raises: ValidationError з повідомленням для першого помилкового поля
    """
    name = normalize_name(name or "")
    _check_text(name, channel, status)

    raw = {
        "budget": (budget, parse_real),
        "impressions": (impressions, parse_count),
        "clicks": (clicks, parse_count),
        "conversions": (conversions, parse_count),
        "revenue": (revenue, parse_real),
    }
    values = {}
    for field, (text, parse) in raw.items():
        try:
            values[field] = parse(text)
        except ValueError:
            _fail(field)
        if values[field] < 0:
            _fail(field)

    return Campaign(name=name, channel=channel, status=status, **values)
