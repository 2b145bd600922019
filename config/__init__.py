import os

_ALIASES = {
    "prod": "production",
    "production": "production",
    "test": "testing",
    "testing": "testing",
    "dev": "development",
    "development": "development",
}


def get_settings_module() -> str:
    """Settings module for APP_ENV (development when unset or unknown).

    SHIFT_PLANNER_SETTINGS names a module directly and wins over APP_ENV.
    """

    override = os.getenv("SHIFT_PLANNER_SETTINGS")
    if override:
        return override

    env = os.getenv("APP_ENV", "development").strip().lower()
    return f"config.{_ALIASES.get(env, 'development')}"
