"""Базовый класс модуля бота.

Модуль — набор чат-команд одного "скрипта" (система очков,
управление командами и т.д.). Идентификатор модуля одновременно
является скриптом, за которым в реестре закреплены его команды.

Команды объявляются декларативно (CommandSpec), а регистрирует их
ModuleManager при старте и при включении модуля из панели.

Пример:
    class HelloModule(BotModule):
        module_id = "commands.hello"
        commands = (CommandSpec("hello"),)

        def on_command(self, event: CommandEvent) -> str | None:
            return f"Привет, {event.sender}!"
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from src.bot.commands.event import CommandEvent
from src.bot.commands.restriction import CommandRestriction
from src.core.permissions import PermissionGroup

if TYPE_CHECKING:
    from src.bot.commands.registry import CommandRegistry
    from src.db.datastore import Datastore
    from src.services.permission_service import PermissionService
    from src.services.points_service import PointsService
    from src.utils.i18n import Localization


@dataclass(frozen=True)
class SubCommandSpec:
    """Объявление подкоманды.

    None в group или restriction — наследовать от команды.
    """

    name: str
    group: PermissionGroup | None = PermissionGroup.VIEWER
    restriction: CommandRestriction | None = None


@dataclass(frozen=True)
class CommandSpec:
    """Объявление команды модуля."""

    name: str
    group: PermissionGroup = PermissionGroup.VIEWER
    restriction: CommandRestriction = CommandRestriction.NONE
    subcommands: tuple[SubCommandSpec, ...] = ()


@dataclass
class ModuleContext:
    """Зависимости, доступные модулям.

    Attributes:
        registry: Реестр команд.
        store: Key-value хранилище.
        points: Сервис очков.
        permissions: Сервис групп пользователей.
        l10n: Локализация ответов бота.
        default_script: Скрипт по умолчанию для повторно включённых команд.
    """

    registry: "CommandRegistry"
    store: "Datastore"
    points: "PointsService"
    permissions: "PermissionService"
    l10n: "Localization"
    default_script: str


class BotModule(ABC):
    """Модуль бота с набором команд.

    Attributes:
        module_id: Уникальный идентификатор (он же скрипт команд).
        core: Системный модуль, его нельзя выключить.
        enabled_by_default: Состояние при первом запуске.
        commands: Команды модуля.
    """

    module_id: ClassVar[str]
    core: ClassVar[bool] = False
    enabled_by_default: ClassVar[bool] = True
    commands: ClassVar[tuple[CommandSpec, ...]] = ()

    def __init__(self, context: ModuleContext) -> None:
        self.context = context

    @abstractmethod
    def on_command(self, event: CommandEvent) -> str | None:
        """Выполнить команду модуля.

        Args:
            event: Событие команды (подкоманда и группа уже определены).

        Returns:
            Ответ в чат или None.
        """

    def on_panel_event(self, args: list[str]) -> str | None:
        """Обработать событие из веб-панели.

        По умолчанию модули событий панели не обрабатывают.

        Args:
            args: Аргументы события, первый — имя события.

        Returns:
            Описание результата или None.
        """
        return None
