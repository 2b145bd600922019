"""Example: calling the service layer directly (no Flask).

Controllers stay thin; the rules live in the services wired by the container.
"""

import importlib
from datetime import date

from config import get_settings_module

from src.shift_planner.shift_planner.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, settings=settings)
    view = container.schedule_service.layered(work_date=date.today())
    for entry in view["schedules"][:10]:
        print(entry["staffId"], entry["status"], entry["start"], entry["end"], entry["layer"])


if __name__ == "__main__":
    main()
