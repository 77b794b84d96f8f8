"""Сервисы приложения.

- StreamStatus — статус трансляции (онлайн/офлайн)
- PointsService — баланс очков пользователей
- PermissionService — группы прав пользователей
"""

from src.services.permission_service import PermissionService
from src.services.points_service import PointsService
from src.services.stream_service import StreamStatus

__all__ = [
    "PermissionService",
    "PointsService",
    "StreamStatus",
]
