"""Конфігурація програми — константи, довідники та шляхи."""

import os
import sys

# ─── Версія програми ───
APP_VERSION = "1.0.0"
APP_NAME = "AdStats"

# ─── Довідники (значення зберігаються в базі як є) ───
CHANNELS = ("Search", "Social", "Email", "Display", "Video", "Affiliate")
STATUSES = ("Active", "Paused", "Planned", "Completed")
STATUS_ACTIVE = "Active"

# Значення фільтра «без обмежень»
FILTER_ALL = "All"

# ─── Формат бази ───
DATABASE_FILENAME = "adstats_db.txt"
FIELD_SEPARATOR = "|"
FIELD_SEPARATOR_REPLACEMENT = "/"
STORAGE_FIELDS = ("name", "channel", "status", "budget",
                  "impressions", "clicks", "conversions", "revenue")
STORAGE_HEADER = "# " + FIELD_SEPARATOR.join(STORAGE_FIELDS)

# Частка зростання бюджету, що переходить у зростання виручки (прогноз)
REVENUE_ELASTICITY = 0.72

# Рівень логування (можна перевизначити змінною оточення)
LOG_LEVEL = os.environ.get("ADSTATS_LOG_LEVEL", "INFO").upper()


# ─── Надійна папка для settings (працює і в dev, і в .app) ───
def get_settings_dir() -> str:
    try:
        home = os.path.expanduser("~")
        if sys.platform == "darwin":
            d = os.path.join(home, "Library", "Application Support", APP_NAME)
        else:
            d = os.path.join(home, ".config", APP_NAME)
        os.makedirs(d, exist_ok=True)
        return d
    except OSError:
        return os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


SETTINGS_DIR = get_settings_dir()
SETTINGS_FILE = os.path.join(SETTINGS_DIR, "settings.json")
DEFAULT_DATABASE_FILE = os.path.join(SETTINGS_DIR, DATABASE_FILENAME)
