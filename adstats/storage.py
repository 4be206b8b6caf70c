"""
Storage — база кампаній у текстовому файлі.

Формат файлу (UTF-8):
    # name|channel|status|budget|impressions|clicks|conversions|revenue
    Sale|Email|Active|1000.0|10000|500|25|1500.0

Перший рядок — коментар-заголовок. Порожні рядки та рядки з "#" ігноруються.
Символ "|" у текстових полях при записі замінюється на "/" (без зворотного
перетворення). Биті рядки при читанні пропускаються — у лог пишеться
попередження, але виклик load() не падає.
"""

import logging
import os

from adstats.constants import (
    FIELD_SEPARATOR, FIELD_SEPARATOR_REPLACEMENT,
    STORAGE_FIELDS, STORAGE_HEADER,
)
from adstats.models import Campaign, DuplicateNameError

logger = logging.getLogger(__name__)


# ─── Рядок файлу ↔ Campaign ───

def _escape(value: str) -> str:
    return (value or "").replace(FIELD_SEPARATOR, FIELD_SEPARATOR_REPLACEMENT).strip()


def to_storage_line(campaign: Campaign) -> str:
    """Серіалізує кампанію в один рядок файлу."""
    return FIELD_SEPARATOR.join([
        _escape(campaign.name),
        _escape(campaign.channel),
        _escape(campaign.status),
        repr(float(campaign.budget)),
        str(campaign.impressions),
        str(campaign.clicks),
        str(campaign.conversions),
        repr(float(campaign.revenue)),
    ])


def parse_storage_line(line: str) -> Campaign:
    """
    Розбирає один рядок файлу.
    Raises: ValueError (включно з ValidationError) якщо рядок битий
    """
    parts = line.strip().split(FIELD_SEPARATOR)
    if len(parts) != len(STORAGE_FIELDS):
        raise ValueError(f"expected {len(STORAGE_FIELDS)} fields, got {len(parts)}")

    name, channel, status = (p.strip() for p in parts[:3])
    return Campaign(
        name=name,
        channel=channel,
        status=status,
        budget=float(parts[3]),
        impressions=int(parts[4]),
        clicks=int(parts[5]),
        conversions=int(parts[6]),
        revenue=float(parts[7]),
    )


# ─── Сховище ───

class CampaignStore:
    """
    Колекція кампаній у пам'яті + файл бази.
    Кожна зміна (add / update / remove) одразу зберігається на диск.
    """

    def __init__(self, path: str):
        self.path = path
        self._campaigns: list = []

    # ─── Доступ ───

    @property
    def campaigns(self) -> tuple:
        return tuple(self._campaigns)

    def __len__(self) -> int:
        return len(self._campaigns)

    def __iter__(self):
        return iter(list(self._campaigns))

    def find(self, name: str) -> Campaign | None:
        """Пошук кампанії за назвою без урахування регістру."""
        for c in self._campaigns:
            if c.same_name(name):
                return c
        return None

    # ─── Зміни ───

    def add(self, candidate: Campaign):
        """
        Додає нову кампанію.
        Raises: ValidationError, DuplicateNameError
        """
        candidate.validate()
        if self.find(candidate.name) is not None:
            raise DuplicateNameError(candidate.name)

        self._campaigns.append(candidate)
        self.save()
        logger.info(f"➕ Додано кампанію: {candidate}")

    def update(self, existing: Campaign, updated: Campaign):
        """
        Переписує всі поля існуючої кампанії.
        Дозволено змінити регістр власної назви.
        Якщо existing немає в базі — нічого не робить.
        Raises: ValidationError, DuplicateNameError
        """
        if not any(c is existing for c in self._campaigns):
            return

        updated.validate()
        clash = any(c is not existing and c.same_name(updated.name)
                    for c in self._campaigns)
        if clash:
            raise DuplicateNameError(updated.name)

        existing.update_from(updated)
        self.save()
        logger.info(f"✏️ Оновлено кампанію: {existing.name}")

    def remove(self, existing: Campaign):
        """Видаляє кампанію. Якщо її немає в базі — нічого не робить."""
        for i, c in enumerate(self._campaigns):
            if c is existing:
                del self._campaigns[i]
                self.save()
                logger.info(f"🗑️ Видалено кампанію: {existing.name}")
                return

    # ─── Файл ───

    def load(self) -> int:
        """
        Читає базу з файлу. Якщо файлу немає — створює його з заголовком.
        Returns: кількість завантажених кампаній
        """
        self._campaigns.clear()

        if not os.path.isfile(self.path):
            self._write_lines([STORAGE_HEADER])
            logger.info(f"📄 Створено нову базу: {self.path}")
            return 0

        skipped = 0
        with open(self.path, "r", encoding="utf-8-sig") as f:
            for lineno, line in enumerate(f, 1):
                trimmed = line.strip()
                if not trimmed or trimmed.startswith("#"):
                    continue
                try:
                    campaign = parse_storage_line(trimmed)
                except ValueError as e:
                    skipped += 1
                    logger.warning(f"⚠️ {self.path}:{lineno} пропущено: {e}")
                    continue

                if self.find(campaign.name) is not None:
                    skipped += 1
                    logger.warning(f"⚠️ {self.path}:{lineno} пропущено: "
                                   f"дублікат назви '{campaign.name}'")
                    continue
                self._campaigns.append(campaign)

        logger.info(f"✅ Завантажено кампаній: {len(self._campaigns)} (пропущено: {skipped})")
        return len(self._campaigns)

    def save(self):
        """Перезаписує файл бази повністю (не атомарно)."""
        lines = [STORAGE_HEADER]
        lines.extend(to_storage_line(c) for c in self._campaigns)
        self._write_lines(lines)

    def _write_lines(self, lines: list):
        folder = os.path.dirname(self.path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        with open(self.path, "w", encoding="utf-8", newline="\n") as f:
            f.write("\n".join(lines) + "\n")
