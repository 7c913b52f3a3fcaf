import os


def get_settings_module() -> str:
    # APP_ENV picks the settings module; anything unknown runs as development
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "care_rota.config.production"

    if env in {"test", "testing"}:
        return "care_rota.config.testing"

    return "care_rota.config.development"
