import os

SECRET_KEY = "test-secret"

DATAVERSE_URL = os.getenv("DATAVERSE_URL", "https://example.crm11.dynamics.com")
DATAVERSE_TOKEN = "test-token"
DATAVERSE_MAX_RETRIES = 0

LOCAL_TIMEZONE = "UTC"

ROTA_WINDOW_DAYS = 7
LATE_GRACE_MINUTES = 0

AUTO_REFRESH_SECONDS = 60
LAST_UPDATED_TICK_SECONDS = 30
STALE_AFTER_SECONDS = 120

LOG_LEVEL = "WARNING"
JSON_LOGS = False

DEBUG = False
TESTING = True
