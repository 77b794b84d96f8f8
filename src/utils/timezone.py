"""Часовые пояса.

Время в логах показывается в поясе из LOGGING__TIMEZONE.
"""

from zoneinfo import ZoneInfo


def get_timezone(timezone_name: str) -> ZoneInfo:
    """Получить часовой пояс по имени из базы IANA.

    Args:
        timezone_name: Например "Europe/Moscow" или "UTC".

    Raises:
        ZoneInfoNotFoundError: Если часовой пояс не найден.
    """
    return ZoneInfo(timezone_name)
