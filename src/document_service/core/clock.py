"""Time source shared by the stores.

All timestamps are stored as naive UTC datetimes. Stores accept a ``Clock``
so expiry and TTL behaviour can be driven from tests.
"""

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Current UTC time as a naive datetime"""
    return datetime.now(timezone.utc).replace(tzinfo=None)
