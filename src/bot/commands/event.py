"""Событие чат-команды."""

from dataclasses import dataclass, field

from src.core.permissions import PermissionGroup


@dataclass(frozen=True)
class CommandEvent:
    """Команда, отправленная пользователем в чат.

    Attributes:
        sender: Имя отправителя.
        command: Имя команды (без префикса, в нижнем регистре после диспетчера).
        args: Аргументы команды.
        subcommand: Подкоманда из первого аргумента или "" (заполняет диспетчер).
        user_group: Группа прав отправителя (заполняет диспетчер).
    """

    sender: str
    command: str
    args: tuple[str, ...] = field(default_factory=tuple)
    subcommand: str = ""
    user_group: PermissionGroup = PermissionGroup.VIEWER

    @property
    def action(self) -> str | None:
        """Первый аргумент или None."""
        return self.args[0] if self.args else None
