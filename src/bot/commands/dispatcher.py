"""Диспетчер чат-команд.

Принимает CommandEvent из чата (или от бота по запросу панели),
проверяет его по реестру и передаёт модулю-владельцу команды.

Порядок проверок:
1. Алиас разворачивается в целевую команду с аргументами
2. Команда зарегистрирована
3. Модуль команды загружен и включён
4. Группа отправителя не ниже группы команды (подкоманды)
5. Ограничение по статусу стрима выполнено
6. Хватает очков (если у команды есть цена)
7. Модуль выполняет команду
8. Цена списывается только после успешного выполнения

Диспетчер синхронный: чат-адаптер вызывает его в пуле потоков,
а все проверки реестра потокобезопасны.
"""

from dataclasses import dataclass, replace
from enum import StrEnum

from src.bot.commands.event import CommandEvent
from src.bot.commands.registry import CommandRegistry, PriceCheckResult
from src.bot.modules.manager import ModuleManager
from src.config.constants import COMMAND_PREFIXES
from src.core.exceptions import InsufficientPointsError
from src.core.permissions import PermissionGroup
from src.services.permission_service import PermissionService
from src.services.points_service import PointsService
from src.utils.i18n import Localization
from src.utils.logging import get_logger

logger = get_logger(__name__)


class DispatchStatus(StrEnum):
    """Итог обработки команды."""

    EXECUTED = "executed"
    UNKNOWN_COMMAND = "unknown_command"
    MODULE_DISABLED = "module_disabled"
    PERMISSION_DENIED = "permission_denied"
    RESTRICTED = "restricted"
    UNAFFORDABLE = "unaffordable"
    FAILED = "failed"


@dataclass(frozen=True)
class DispatchResult:
    """Результат обработки команды.

    Attributes:
        status: Итог обработки.
        reply: Ответ в чат или None.
        charged: Сколько очков списано.
    """

    status: DispatchStatus
    reply: str | None = None
    charged: int = 0


def strip_prefix(name: str) -> str:
    """Убрать префикс команды ("!" или "/") и привести к нижнему регистру."""
    name = name.strip().lower()
    for prefix in COMMAND_PREFIXES:
        if name.startswith(prefix):
            return name[len(prefix) :]
    return name


class CommandDispatcher:
    """Диспетчер чат-команд."""

    def __init__(
        self,
        registry: CommandRegistry,
        modules: ModuleManager,
        permissions: PermissionService,
        points: PointsService,
        l10n: Localization,
    ) -> None:
        """Инициализировать диспетчер.

        Args:
            registry: Реестр команд.
            modules: Менеджер модулей.
            permissions: Сервис групп пользователей.
            points: Сервис очков.
            l10n: Локализация ответов.
        """
        self._registry = registry
        self._modules = modules
        self._permissions = permissions
        self._points = points
        self._l10n = l10n

    def dispatch(self, event: CommandEvent) -> DispatchResult:
        """Обработать команду из чата.

        Args:
            event: Событие команды.

        Returns:
            Результат обработки с ответом для чата.
        """
        command = strip_prefix(event.command)
        args = list(event.args)

        if not self._registry.command_exists(command):
            return DispatchResult(DispatchStatus.UNKNOWN_COMMAND)

        target = self._registry.get_alias_target(command)
        if target is not None:
            parts = target.split()
            command = strip_prefix(parts[0])
            args = parts[1:] + args
            if not self._registry.command_exists(command):
                return DispatchResult(DispatchStatus.UNKNOWN_COMMAND)

        script = self._registry.get_command_script(command)
        module = self._modules.find_by_script(script) if script else None
        if module is None or not self._modules.is_module_enabled(module.module_id):
            logger.debug("Команда !%s: модуль %s недоступен", command, script)
            return DispatchResult(DispatchStatus.MODULE_DISABLED)

        subcommand = self._registry.get_subcommand_from_arguments(command, args)
        user_group = self._permissions.get_user_group(event.sender)

        if subcommand:
            required = self._registry.get_subcommand_group(command, subcommand)
        else:
            required = self._registry.get_command_group(command)

        if not required.allows(user_group):
            return DispatchResult(
                DispatchStatus.PERMISSION_DENIED,
                self._l10n.get(
                    "cmd.permission_denied",
                    user=event.sender,
                    command=command,
                    group=required.display_name,
                ),
            )

        if not self._registry.resolve_restriction(command, subcommand or None):
            return DispatchResult(DispatchStatus.RESTRICTED)

        is_moderator = user_group <= PermissionGroup.MOD
        check = self._registry.price_check(
            event.sender, command, subcommand, is_moderator
        )
        price = self._registry.get_price(command, subcommand)
        if check is PriceCheckResult.UNAFFORDABLE:
            return DispatchResult(
                DispatchStatus.UNAFFORDABLE,
                self._l10n.get(
                    "cmd.need_points",
                    user=event.sender,
                    command=command,
                    points=price,
                ),
            )

        resolved = replace(
            event,
            command=command,
            args=tuple(args),
            subcommand=subcommand,
            user_group=user_group,
        )

        try:
            reply = module.on_command(resolved)
        except Exception:
            logger.exception("Ошибка выполнения команды !%s (%s)", command, script)
            return DispatchResult(DispatchStatus.FAILED)

        charged = 0
        if check is PriceCheckResult.AFFORDABLE and price > 0:
            try:
                self._points.take_points(event.sender, price)
                charged = price
            except InsufficientPointsError as e:
                # Баланс мог измениться, пока выполнялась команда
                logger.warning("Не удалось списать цену команды !%s: %s", command, e)

        return DispatchResult(DispatchStatus.EXECUTED, reply, charged)
