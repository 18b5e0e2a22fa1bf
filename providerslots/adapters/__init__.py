"""
Adapters layer - Storage collaborators for bookings and listings.
"""

from typing import Sequence, Union

from ..config import StorageConfig
from .http_store import HttpScheduleStore
from .json_store import JsonScheduleStore


def create_schedule_store(
    storage: StorageConfig,
    busy_statuses: Sequence[str],
) -> Union[JsonScheduleStore, HttpScheduleStore]:
    """Build the schedule store selected in the configuration."""
    if storage.backend == "http":
        return HttpScheduleStore(
            base_url=storage.base_url,
            api_token=storage.api_token,
            timeout_seconds=storage.timeout_seconds,
            busy_statuses=busy_statuses,
        )
    return JsonScheduleStore(data_file=storage.data_file, busy_statuses=busy_statuses)


__all__ = ["HttpScheduleStore", "JsonScheduleStore", "create_schedule_store"]
