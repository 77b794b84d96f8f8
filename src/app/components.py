"""Сборка компонентов бота.

Все компоненты создаются один раз и связываются через конструкторы:

    Datastore ─┬─> StreamStatus, PointsService, PermissionService
               ├─> ModuleStates
               └─> CommandRegistry(store, stream, module_states, points)
                     └─> ModuleManager(registry, module_states)
                           └─> CommandDispatcher(registry, modules, ...)

Глобальных синглтонов нет: lifecycle кладёт компоненты в app.state,
а тесты собирают их поверх хранилища в памяти.
"""

from dataclasses import dataclass

from src.bot.commands.dispatcher import CommandDispatcher
from src.bot.commands.registry import CommandRegistry
from src.bot.modules.base import BotModule, ModuleContext
from src.bot.modules.command_register import CommandRegisterModule
from src.bot.modules.manager import ModuleManager, ModuleStates
from src.bot.modules.point_system import PointSystemModule
from src.config.models import BotSettings
from src.config.yaml_config import YamlConfig
from src.db.datastore import Datastore
from src.services.permission_service import PermissionService
from src.services.points_service import PointsService
from src.services.stream_service import StreamStatus
from src.utils.i18n import Localization
from src.utils.logging import get_logger

logger = get_logger(__name__)

# Модули, которые загружаются при старте (в порядке загрузки)
DEFAULT_MODULES: tuple[type[BotModule], ...] = (
    CommandRegisterModule,
    PointSystemModule,
)


@dataclass
class BotComponents:
    """Связанные компоненты бота."""

    store: Datastore
    stream_status: StreamStatus
    points: PointsService
    permissions: PermissionService
    registry: CommandRegistry
    module_manager: ModuleManager
    dispatcher: CommandDispatcher
    bot_name: str


def build_components(
    store: Datastore,
    bot_settings: BotSettings,
    yaml_config: YamlConfig,
    l10n: Localization,
    modules: tuple[type[BotModule], ...] = DEFAULT_MODULES,
) -> BotComponents:
    """Создать и связать все компоненты бота.

    Модули загружаются, но их команды ещё не зарегистрированы:
    для этого нужно вызвать module_manager.initialize().

    Args:
        store: Key-value хранилище.
        bot_settings: Настройки бота (имя аккаунта, владелец).
        yaml_config: Конфигурация из config.yaml.
        l10n: Локализация ответов.
        modules: Классы загружаемых модулей.

    Returns:
        Связанные компоненты.
    """
    stream_status = StreamStatus()
    points = PointsService(store, bot_settings.name)
    permissions = PermissionService(store, bot_settings.name, bot_settings.owner)
    module_states = ModuleStates(store, yaml_config.modules)

    registry = CommandRegistry(
        store,
        stream_status,
        module_states,
        points,
        moderators_pay=yaml_config.commands.moderators_pay,
    )
    module_manager = ModuleManager(registry, module_states)

    context = ModuleContext(
        registry=registry,
        store=store,
        points=points,
        permissions=permissions,
        l10n=l10n,
        default_script=yaml_config.commands.default_script,
    )
    for module_class in modules:
        module_manager.load(module_class(context))

    dispatcher = CommandDispatcher(registry, module_manager, permissions, points, l10n)

    logger.debug("Компоненты бота собраны: модулей %d", len(modules))
    return BotComponents(
        store=store,
        stream_status=stream_status,
        points=points,
        permissions=permissions,
        registry=registry,
        module_manager=module_manager,
        dispatcher=dispatcher,
        bot_name=bot_settings.name.lower(),
    )
