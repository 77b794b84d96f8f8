"""Управление модулями бота.

ModuleStates хранит, какие модули включены (таблица modules).
ModuleManager загружает модули, регистрирует их команды в реестре
и включает/выключает модули по запросу веб-панели.

Состояние модуля по умолчанию берётся из config.yaml (секция modules),
а если модуля там нет — из BotModule.enabled_by_default.
После первого переключения из панели состояние хранится в БД.
"""

from src.bot.commands.registry import CommandRegistry
from src.bot.modules.base import BotModule
from src.config.yaml_config import ModulesConfig
from src.core.exceptions import CoreModuleError, ModuleError, UnknownModuleError
from src.db.datastore import Datastore
from src.db.tables import Table
from src.utils.logging import get_logger

logger = get_logger(__name__)


class ModuleStates:
    """Состояние модулей (включён/выключен).

    Реализует протокол ModuleOracle реестра команд.
    """

    def __init__(self, store: Datastore, config: ModulesConfig) -> None:
        """Инициализировать состояние модулей.

        Args:
            store: Key-value хранилище.
            config: Настройки модулей из config.yaml.
        """
        self._store = store
        self._config = config
        self._defaults: dict[str, bool] = {}
        self._core: set[str] = set()

    def declare(self, module_id: str, enabled_by_default: bool, core: bool) -> None:
        """Запомнить значение по умолчанию для модуля."""
        self._defaults[module_id] = self._config.default_enabled(
            module_id, enabled_by_default
        )
        if core:
            self._core.add(module_id)

    def is_module_enabled(self, module_id: str) -> bool:
        """Включён ли модуль. Системные модули включены всегда."""
        if module_id in self._core:
            return True
        default = self._defaults.get(
            module_id, self._config.default_enabled(module_id, False)
        )
        return self._store.get_bool(Table.MODULES, module_id, default)

    def set_enabled(self, module_id: str, enabled: bool) -> None:
        """Сохранить состояние модуля."""
        self._store.set(Table.MODULES, module_id, enabled)


class ModuleManager:
    """Менеджер модулей.

    Пример использования:
        manager = ModuleManager(registry, states)
        manager.load(PointSystemModule(context))
        manager.initialize()
        manager.disable_module("systems.point_system")
    """

    def __init__(self, registry: CommandRegistry, states: ModuleStates) -> None:
        """Инициализировать менеджер.

        Args:
            registry: Реестр команд.
            states: Состояние модулей.
        """
        self._registry = registry
        self._states = states
        self._modules: dict[str, BotModule] = {}

    @property
    def modules(self) -> list[BotModule]:
        """Загруженные модули в порядке загрузки."""
        return list(self._modules.values())

    def load(self, module: BotModule) -> None:
        """Загрузить модуль.

        Raises:
            ModuleError: Модуль с таким идентификатором уже загружен.
        """
        if module.module_id in self._modules:
            raise ModuleError(
                module.module_id, f"Модуль уже загружен: {module.module_id}"
            )
        self._modules[module.module_id] = module
        self._states.declare(module.module_id, module.enabled_by_default, module.core)

    def get(self, module_id: str) -> BotModule:
        """Получить модуль по идентификатору.

        Raises:
            UnknownModuleError: Модуль не загружен.
        """
        module = self._modules.get(module_id)
        if module is None:
            raise UnknownModuleError(module_id)
        return module

    def find_by_script(self, script: str) -> BotModule | None:
        """Найти модуль, за которым закреплены команды скрипта."""
        return self._modules.get(script)

    def is_module_enabled(self, module_id: str) -> bool:
        """Включён ли модуль."""
        return self._states.is_module_enabled(module_id)

    def initialize(self) -> None:
        """Зарегистрировать команды всех включённых модулей."""
        for module in self._modules.values():
            enabled = self.is_module_enabled(module.module_id)
            if enabled:
                self._register_commands(module)
            logger.info(
                "Модуль %s: %s",
                module.module_id,
                "включён" if enabled else "выключен",
            )

    def enable_module(self, module_id: str) -> None:
        """Включить модуль и зарегистрировать его команды.

        Raises:
            UnknownModuleError: Модуль не загружен.
        """
        module = self.get(module_id)
        self._states.set_enabled(module_id, True)
        self._register_commands(module)
        logger.info("Модуль включён: %s", module_id)

    def disable_module(self, module_id: str) -> None:
        """Выключить модуль и удалить его команды из реестра.

        Raises:
            UnknownModuleError: Модуль не загружен.
            CoreModuleError: Модуль системный.
        """
        module = self.get(module_id)
        if module.core:
            raise CoreModuleError(module_id)

        self._states.set_enabled(module_id, False)
        for spec in module.commands:
            self._registry.unregister_command(spec.name)
        logger.info("Модуль выключен: %s", module_id)

    def handle_panel_event(self, script: str, args: list[str]) -> str | None:
        """Передать событие панели модулю скрипта.

        Raises:
            UnknownModuleError: Модуль не загружен.
        """
        module = self.get(script)
        logger.debug("Событие панели для %s: %s", script, args)
        return module.on_panel_event(args)

    def _register_commands(self, module: BotModule) -> None:
        """Зарегистрировать команды и подкоманды модуля."""
        for spec in module.commands:
            self._registry.register_command(
                module.module_id, spec.name, spec.group, spec.restriction
            )
            for sub in spec.subcommands:
                self._registry.register_subcommand(
                    spec.name, sub.name, sub.group, sub.restriction
                )
