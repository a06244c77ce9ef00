import os


def get_settings_module() -> str:
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "timeclock.config.production"

    if env in {"test", "testing"}:
        return "timeclock.config.testing"

    return "timeclock.config.development"


def workday_from_env() -> dict:
    """Workday overrides from the environment; unset keys keep the built-in defaults."""
    keys = (
        "WORK_START",
        "WORK_END",
        "LATE_GRACE_MINUTES",
        "HOURS_PER_DAY",
        "MAX_HOURS_PER_DAY",
        "DEFAULT_CHECKOUT_HOURS",
    )
    return {key: os.environ[key] for key in keys if os.environ.get(key)}
