"""Ограничения команд по статусу стрима.

Значения совпадают с теми, что хранятся в таблице command_restrictions,
поэтому старые базы читаются без миграции.
"""

from enum import IntEnum


class CommandRestriction(IntEnum):
    """Когда команду можно выполнять."""

    NONE = -1
    ONLINE = 1
    OFFLINE = 2

    @classmethod
    def from_name(cls, name: str) -> "CommandRestriction | None":
        """Найти ограничение по имени (none, online, offline).

        Args:
            name: Имя ограничения в любом регистре.

        Returns:
            Ограничение или None, если имя неизвестно.
        """
        return cls.__members__.get(name.strip().upper())

    @classmethod
    def parse(cls, value: object) -> "CommandRestriction | None":
        """Преобразовать сохранённое значение в ограничение.

        Returns:
            Ограничение или None для некорректного значения.
        """
        try:
            return cls(int(str(value)))
        except ValueError:
            return None
