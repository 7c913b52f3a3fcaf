import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DATAVERSE_URL = os.getenv("DATAVERSE_URL", "")
DATAVERSE_TOKEN = os.getenv("DATAVERSE_TOKEN", "")
DATAVERSE_MAX_RETRIES = int(os.getenv("DATAVERSE_MAX_RETRIES", "3"))

# IANA zone used to decide day/night/sleep-in from shift start hours
LOCAL_TIMEZONE = os.getenv("LOCAL_TIMEZONE", "Europe/London")

ROTA_WINDOW_DAYS = int(os.getenv("ROTA_WINDOW_DAYS", "7"))
LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "0"))

AUTO_REFRESH_SECONDS = int(os.getenv("AUTO_REFRESH_SECONDS", "60"))
LAST_UPDATED_TICK_SECONDS = int(os.getenv("LAST_UPDATED_TICK_SECONDS", "30"))
STALE_AFTER_SECONDS = int(os.getenv("STALE_AFTER_SECONDS", "120"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
JSON_LOGS = bool(int(os.getenv("JSON_LOGS", "0")))

DEBUG = True
