"""Tests for the local profile cache."""

from datetime import date
from pathlib import Path
from uuid import uuid4

import pytest


async def test_profile_and_activity_round_trip(profile_cache):
    user_id = uuid4()

    await profile_cache.save_profile(user_id, {"name": "Ada"})
    await profile_cache.record_activity(user_id, "profile-create", day=date(2026, 1, 5))
    await profile_cache.record_activity(user_id, "profile-create", day=date(2026, 1, 5))

    assert await profile_cache.get_profile(user_id) == {"name": "Ada"}
    assert await profile_cache.get_activity(user_id) == {"2026-01-05": {"profile-create": 2}}


async def test_unknown_activity_type_is_rejected(profile_cache):
    with pytest.raises(ValueError):
        await profile_cache.record_activity(uuid4(), "lesson-complete")


async def test_interrupted_write_keeps_previous_file(profile_cache, monkeypatch):
    user_id = uuid4()
    await profile_cache.save_profile(user_id, {"name": "Ada"})
    write_text = Path.write_text

    def write_half_then_fail(self, data, *args, **kwargs):
        write_text(self, data[: len(data) // 2], *args, **kwargs)
        raise OSError("disk full")

    monkeypatch.setattr(Path, "write_text", write_half_then_fail)
    with pytest.raises(OSError):
        await profile_cache.save_profile(user_id, {"name": "Grace"})
    monkeypatch.undo()

    assert await profile_cache.get_profile(user_id) == {"name": "Ada"}
    assert [path.name for path in profile_cache.directory.iterdir()] == [f"{user_id}.json"]
