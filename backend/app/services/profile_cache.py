"""
Process-local copy of learner profiles and activity counters.

Secondary store next to the relational database: the profile tool writes
here after the primary write, and a failure here never fails the tool.
One JSON file per user under ``settings.profile_cache_dir``.
"""

import asyncio
import json
import logging
from datetime import date
from pathlib import Path
from typing import Any
from uuid import UUID, uuid4

logger = logging.getLogger(__name__)

ACTIVITY_TYPES = ("profile-create", "course-plan-create")


class LocalProfileCache:
    """JSON file store for dashboard data."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def _path(self, user_id: UUID | None) -> Path:
        return self.directory / f"{user_id or 'anonymous'}.json"

    def _read(self, user_id: UUID | None) -> dict[str, Any]:
        path = self._path(user_id)
        if not path.exists():
            return {"profile": None, "activity": {}}
        return json.loads(path.read_text(encoding="utf-8"))

    def _write(self, user_id: UUID | None, data: dict[str, Any]) -> None:
        """Replace the user's file in one step; readers never see a partial write."""
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(user_id)
        tmp = path.with_name(f"{path.name}.{uuid4().hex}.tmp")
        try:
            tmp.write_text(json.dumps(data, default=str), encoding="utf-8")
            tmp.replace(path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise

    def _save_profile(self, user_id: UUID | None, profile: dict[str, Any]) -> None:
        data = self._read(user_id)
        data["profile"] = profile
        self._write(user_id, data)

    def _record_activity(self, user_id: UUID | None, activity_type: str, day: date) -> None:
        data = self._read(user_id)
        counts = data["activity"].setdefault(day.isoformat(), {})
        counts[activity_type] = counts.get(activity_type, 0) + 1
        self._write(user_id, data)

    async def save_profile(self, user_id: UUID | None, profile: dict[str, Any]) -> None:
        await asyncio.to_thread(self._save_profile, user_id, profile)

    async def record_activity(
        self,
        user_id: UUID | None,
        activity_type: str,
        day: date | None = None,
    ) -> None:
        """Increment today's counter for ``activity_type``."""
        if activity_type not in ACTIVITY_TYPES:
            raise ValueError(f"Unknown activity type: {activity_type}")
        await asyncio.to_thread(self._record_activity, user_id, activity_type, day or date.today())
        logger.debug("Recorded %s activity for user %s", activity_type, user_id)

    async def get_profile(self, user_id: UUID | None) -> dict[str, Any] | None:
        data = await asyncio.to_thread(self._read, user_id)
        return data["profile"]

    async def get_activity(self, user_id: UUID | None) -> dict[str, dict[str, int]]:
        data = await asyncio.to_thread(self._read, user_id)
        return data["activity"]
