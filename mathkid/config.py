import os

APP_TITLE = os.getenv("APP_TITLE", "MathKid")
DB_PATH = os.getenv("DB_PATH", "mathkid.sqlite3")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

MAX_NUMBER_LIMIT = 999
MULTIPLICATION_CAP = 12
ANSWER_MAX_DIGITS = 4

STREAK_CELEBRATION = 5
ACCURACY_HISTORY_LIMIT = 30

PRACTICE_SET_DEFAULT = 10
PRACTICE_SET_MAX = 50
PREVIEW_COUNT = 3

# parent gate factors
GATE_MIN = 5
GATE_MAX = 12

SETTINGS_KEY = "mathkid_settings"
GAME_STATS_KEY = "mathkid_game_stats"
PROGRESS_KEY = "mathkid_progress"
BACKUP_VERSION = "1.0"

PARENT_COOKIE = "mathkid_parent"
