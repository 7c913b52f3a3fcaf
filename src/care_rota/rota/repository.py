from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import RotaWindow


class RotaRepository(Protocol):
    async def fetch_rota_window(
        self,
        location_id: Optional[str],
        sublocation_id: str,
        start_date: date,
        window_days: int,
        rota_id: Optional[str] = None,
    ) -> RotaWindow:
        """Shifts and roster for `window_days` days from `start_date`.

        Raises DataFetchError on transport/auth/server failures.
        """

        raise NotImplementedError

    async def assign_staff(self, *, shift_id: str, staff_id: str) -> None:
        raise NotImplementedError

    async def unassign_staff(self, *, shift_id: str) -> None:
        raise NotImplementedError

    async def publish_shifts(self, *, shift_ids: Sequence[str]) -> None:
        raise NotImplementedError

    async def update_leadership(self, *, shift_id: str, shift_leader: bool, act_up: bool) -> None:
        raise NotImplementedError
