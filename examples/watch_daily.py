"""Example: keep a daily rota view fresh without Flask.

Polls every AUTO_REFRESH_SECONDS while running and prints the day's stats
after each refresh. Ctrl+C to stop.

    APP_ENV=development python examples/watch_daily.py <sublocation_id> <rota_id> [YYYY-MM-DD]
"""

import asyncio
import importlib
import sys
from datetime import date

from dotenv import load_dotenv

from care_rota.common.datetime_utils import parse_iso_date
from care_rota.common.logging import configure_logging
from care_rota.config import get_settings_module
from care_rota.container import build_container
from care_rota.refresh.coordinator import LiveRefreshCoordinator
from care_rota.refresh.scheduler import AsyncioScheduler
from care_rota.refresh.visibility import VisibilitySignal


async def main(sublocation_id: str, rota_id: str, selected_date: date) -> None:
    settings = importlib.import_module(get_settings_module())
    configure_logging(log_level=settings.LOG_LEVEL, json_logs=settings.JSON_LOGS)
    container = build_container(settings=settings)
    service = container.daily_rota_service

    async def fetch():
        view = await service.daily_view(
            location_id=None, sublocation_id=sublocation_id, selected_date=selected_date, rota_id=rota_id
        )
        print(selected_date.isoformat(), view.stats)
        return view

    coordinator = LiveRefreshCoordinator(
        fetch,
        scheduler=AsyncioScheduler(),
        visibility=VisibilitySignal(visible=True),
        refresh_interval=settings.AUTO_REFRESH_SECONDS,
        text_interval=settings.LAST_UPDATED_TICK_SECONDS,
        stale_after=settings.STALE_AFTER_SECONDS,
    )
    coordinator.start()
    try:
        await coordinator.refresh()
        while True:
            await asyncio.sleep(settings.LAST_UPDATED_TICK_SECONDS)
            print("last updated:", coordinator.last_updated_text)
    finally:
        coordinator.stop()


if __name__ == "__main__":
    load_dotenv(override=False)
    day = parse_iso_date(sys.argv[3]) if len(sys.argv) > 3 else date.today()
    try:
        asyncio.run(main(sys.argv[1], sys.argv[2], day))
    except KeyboardInterrupt:
        pass
