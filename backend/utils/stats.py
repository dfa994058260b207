"""
Numeric and time helpers shared by the reporting and analytics services
"""
import logging
from datetime import datetime, timezone, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional, Union

logger = logging.getLogger(__name__)

ONE_DECIMAL = Decimal("0.1")


def round_one(value: float) -> float:
    """Round to one decimal place, halves away from zero (7.25 -> 7.3)"""
    return float(Decimal(str(value)).quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP))


def round_average(values: Iterable[float]) -> float:
    """Mean rounded to one decimal. An empty input averages to 0, never NaN."""
    values = list(values)
    if not values:
        return 0
    return round_one(sum(values) / len(values))


def parse_timestamp(value: Union[datetime, str, None]) -> Optional[datetime]:
    """Parse a stored created_at (datetime or ISO-8601 string) into an aware UTC datetime"""
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            logger.warning(f"Unparseable timestamp: {value!r}")
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def window_start(days: int, now: Optional[datetime] = None) -> datetime:
    """Start of a rolling window of `days` days ending at now"""
    return (now or utc_now()) - timedelta(days=days)


def filter_recent(reports: List[dict], days: int, now: Optional[datetime] = None) -> List[dict]:
    """Reports created within the last `days` days, newest first"""
    since = window_start(days, now)
    recent = []
    for report in reports:
        created = parse_timestamp(report.get("created_at"))
        if created is not None and created >= since:
            recent.append((created, report))
    recent.sort(key=lambda item: item[0], reverse=True)
    return [report for _, report in recent]
