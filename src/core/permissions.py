"""Группы прав доступа к командам.

Группы упорядочены: чем меньше значение, тем больше прав.
Пользователь может выполнить команду, если его группа не ниже
(значение не больше) группы команды.

    CASTER (0) > ADMIN (1) > MOD (2) > SUB (3) > DONATOR (4)
        > VIP (5) > REGULAR (6) > VIEWER (7)

PANEL (30) — служебная группа для команд, которые вызываются только
из веб-панели. Для таких команд не работают цены, отключение
и ограничения по статусу стрима.
"""

from enum import IntEnum


class PermissionGroup(IntEnum):
    """Группа прав доступа."""

    CASTER = 0
    ADMIN = 1
    MOD = 2
    SUB = 3
    DONATOR = 4
    VIP = 5
    REGULAR = 6
    VIEWER = 7
    PANEL = 30

    @property
    def display_name(self) -> str:
        """Название группы для сообщений в чате.

        Для PANEL возвращается "Viewer" — в чате такая команда
        выглядит как обычная.
        """
        return GROUP_NAMES.get(self, "Viewer")

    def allows(self, user_group: "PermissionGroup") -> bool:
        """Проверить, может ли пользователь из user_group выполнить команду.

        Args:
            user_group: Группа пользователя.

        Returns:
            True если группа пользователя не ниже группы команды.
        """
        if self is PermissionGroup.PANEL:
            return user_group <= PermissionGroup.ADMIN
        return user_group <= self

    @classmethod
    def parse(cls, value: object, default: "PermissionGroup") -> "PermissionGroup":
        """Преобразовать значение из хранилища в группу.

        Args:
            value: Число или строка с числом.
            default: Группа, если значение не распознано.

        Returns:
            Группа прав доступа.
        """
        try:
            return cls(int(str(value)))
        except ValueError:
            return default


GROUP_NAMES: dict[PermissionGroup, str] = {
    PermissionGroup.CASTER: "Caster",
    PermissionGroup.ADMIN: "Administrator",
    PermissionGroup.MOD: "Moderator",
    PermissionGroup.SUB: "Subscriber",
    PermissionGroup.DONATOR: "Donator",
    PermissionGroup.VIP: "VIP",
    PermissionGroup.REGULAR: "Regular",
    PermissionGroup.VIEWER: "Viewer",
}
