from datetime import datetime
from zoneinfo import ZoneInfo

from correlativos.core.config import settings


def local_now() -> datetime:
    """Timezone-aware now in the zone that decides the correlative year."""

    return datetime.now(ZoneInfo(settings.CORRELATIVE_TIMEZONE))
