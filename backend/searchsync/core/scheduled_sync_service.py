"""Scheduled sync service.

A schedule firing never syncs by itself. It drops a new sync request record into the
request collection, and the request is then picked up like any manual request.
"""

from typing import Optional

from searchsync.core.config import SCHEDULE_DISABLED, settings
from searchsync.core.datetime_utils import utc_now
from searchsync.core.logging import logger
from searchsync.platform.sources._base import BaseSourceStore

DAYS_OF_WEEK = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def _is_every(value: str) -> bool:
    return value == "*"


def _parse_int(value: str) -> Optional[int]:
    try:
        return int(value)
    except ValueError:
        return None


def ordinal_suffix(day: str) -> str:
    """Ordinal suffix for a day of month ("1" -> "st", "12" -> "th")."""
    num = _parse_int(day)
    if num is None:
        return ""
    if num % 10 == 1 and num % 100 != 11:
        return "st"
    if num % 10 == 2 and num % 100 != 12:
        return "nd"
    if num % 10 == 3 and num % 100 != 13:
        return "rd"
    return "th"


def format_time(hour: int, minute: int) -> str:
    """Format a UTC time of day as ``2:05 AM UTC``."""
    ampm = "PM" if hour >= 12 else "AM"
    if hour == 0:
        display_hour = 12
    elif hour > 12:
        display_hour = hour - 12
    else:
        display_hour = hour
    return f"{display_hour}:{minute:02d} {ampm} UTC"


def cron_to_human_readable(cron_expression: Optional[str]) -> str:
    """Describe a 5-field cron expression in words.

    Examples:
        ``0 2 * * *`` -> ``Every day at 2:00 AM UTC``
        ``30 14 * * 1`` -> ``Every Monday at 2:30 PM UTC``
        ``0 0 15 * *`` -> ``Every 15th of the month at 12:00 AM UTC``

    Args:
        cron_expression: The cron expression, or None / ``never``

    Returns:
        The description; ``Never`` when disabled, the input unchanged when it is not
        a 5-field expression
    """
    if not cron_expression or cron_expression == SCHEDULE_DISABLED:
        return "Never"

    parts = cron_expression.split()
    if len(parts) != 5:
        return cron_expression

    minute, hour, day_of_month, _month, day_of_week = parts

    description = "Every "
    if not _is_every(day_of_week):
        day_num = _parse_int(day_of_week)
        if day_num is not None and 0 <= day_num <= 6:
            description += f"{DAYS_OF_WEEK[day_num]} "
        else:
            description += f"day {day_of_week} "
    elif not _is_every(day_of_month):
        description += f"{day_of_month}{ordinal_suffix(day_of_month)} of the month "
    else:
        description += "day "

    if not _is_every(hour) or not _is_every(minute):
        hour_num = 0 if _is_every(hour) else _parse_int(hour)
        minute_num = 0 if _is_every(minute) else _parse_int(minute)
        if hour_num is not None and minute_num is not None:
            description += f"at {format_time(hour_num, minute_num)}"

    return description.strip()


class ScheduledSyncService:
    """Creates sync request records when the recurring schedule fires."""

    def __init__(
        self, interval: Optional[str] = None, request_collection: Optional[str] = None
    ):
        """Initialize the service.

        Args:
            interval: Cron expression; defaults to SCHEDULED_SYNC_INTERVAL
            request_collection: Collection receiving requests; defaults to
                SYNC_REQUEST_COLLECTION
        """
        if interval is None:
            interval = settings.SCHEDULED_SYNC_INTERVAL
        self.interval = interval.strip() if interval else None
        self.request_collection = request_collection or settings.SYNC_REQUEST_COLLECTION

    @property
    def enabled(self) -> bool:
        """Whether a schedule is configured."""
        return bool(self.interval) and self.interval != SCHEDULE_DISABLED

    async def fire(self, source: BaseSourceStore) -> Optional[str]:
        """Create a sync request record for this firing.

        Args:
            source: Store holding the request collection

        Returns:
            The new request id, or None when scheduling is disabled
        """
        if not self.enabled:
            logger.info("Scheduled sync is disabled")
            return None

        logger.info(
            f"[SCHEDULED SYNC TRIGGERED] Starting scheduled sync at {utc_now().isoformat()}"
        )
        try:
            request_id = await source.add_document(
                self.request_collection,
                {
                    "scheduledSync": True,
                    "scheduledSyncCronInterval": self.interval,
                    "scheduledSyncInterval": cron_to_human_readable(self.interval),
                    "createdAt": utc_now().isoformat(),
                },
            )
        except Exception as e:
            logger.error(f"Scheduled sync: failed to create trigger document: {e}")
            raise

        logger.info(
            f"[SCHEDULED SYNC] Created trigger document {request_id} in {self.request_collection}"
        )
        return request_id
