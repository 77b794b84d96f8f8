"""Сервис групп пользователей.

Определяет, в какой группе прав состоит пользователь чата:
- Владелец канала (BOT__OWNER) — всегда Caster
- Аккаунт бота (BOT__NAME) — всегда Administrator
- Остальные — из таблицы groups, по умолчанию Viewer
"""

from src.core.permissions import PermissionGroup
from src.db.datastore import Datastore
from src.db.tables import Table


class PermissionService:
    """Сервис групп пользователей."""

    def __init__(
        self,
        store: Datastore,
        bot_name: str,
        owner: str | None = None,
    ) -> None:
        """Инициализировать сервис.

        Args:
            store: Key-value хранилище.
            bot_name: Имя аккаунта бота.
            owner: Имя владельца канала (если настроено).
        """
        self._store = store
        self._bot_name = bot_name.lower()
        self._owner = owner.lower() if owner else None

    def get_user_group(self, username: str) -> PermissionGroup:
        """Получить группу пользователя."""
        name = username.lower()
        if self._owner is not None and name == self._owner:
            return PermissionGroup.CASTER
        if name == self._bot_name:
            return PermissionGroup.ADMIN

        value = self._store.get(Table.GROUPS, name)
        if value is None:
            return PermissionGroup.VIEWER
        return PermissionGroup.parse(value, PermissionGroup.VIEWER)

    def set_user_group(self, username: str, group: PermissionGroup) -> None:
        """Назначить пользователю группу."""
        self._store.set_int(Table.GROUPS, username.lower(), int(group))

    def is_moderator(self, username: str) -> bool:
        """Модератор или выше."""
        return self.get_user_group(username) <= PermissionGroup.MOD
