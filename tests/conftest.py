"""Общие фикстуры для всех тестов.

Этот файл содержит pytest-фикстуры, которые используются во всех тестах:
- Хранилище на SQLite в памяти (для изоляции тестов)
- Поддельные источники статуса стрима, состояния модулей и очков
- Реестр команд поверх тестового хранилища
- Локализация с тестовыми переводами
- Собранные компоненты бота с тестовым модулем echo
"""

from collections.abc import Generator
from typing import Any

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from typing_extensions import override

from src.app.components import DEFAULT_MODULES, BotComponents, build_components
from src.bot.commands.event import CommandEvent
from src.bot.commands.registry import CommandRegistry
from src.bot.modules.base import BotModule, CommandSpec, ModuleContext, SubCommandSpec
from src.config.models import BotSettings
from src.config.yaml_config import YamlConfig
from src.core.permissions import PermissionGroup
from src.db.datastore import Datastore
from src.db.models import DataEntry  # noqa: F401
from src.db.models_base import Base
from src.utils.i18n import Localization, LocalizationConfig, LocalizationService


class FakeLiveness:
    """Статус стрима, которым управляет тест."""

    def __init__(self, live: bool = False) -> None:
        self.live = live

    def is_live(self) -> bool:
        return self.live


class FakeModules:
    """Состояние модулей: всё включено, кроме перечисленных."""

    def __init__(self) -> None:
        self.disabled: set[str] = set()

    def is_module_enabled(self, module_id: str) -> bool:
        return module_id not in self.disabled


class FakePoints:
    """Баланс очков в словаре."""

    def __init__(self, bot_name: str = "bot") -> None:
        self.balances: dict[str, int] = {}
        self.bot_name = bot_name

    def get_points(self, username: str) -> int:
        return self.balances.get(username.lower(), 0)

    def is_bot(self, username: str) -> bool:
        return username.lower() == self.bot_name


TEST_TRANSLATIONS: dict[str, dict[str, str]] = {
    "ru": {
        "cmd.permission_denied": "{user}: !{command} только для {group}",
        "cmd.need_points": "{user}: !{command} стоит {points}",
        "error.database": "Хранилище недоступно",
        "commandregister.disable.usage": "disable usage",
        "commandregister.disable.err": "disable err",
        "commandregister.disable.404": "disable 404",
        "commandregister.disable.success": "disabled {command}",
        "commandregister.enable.usage": "enable usage",
        "commandregister.enable.err": "enable err",
        "commandregister.enable.success": "enabled {command}",
        "commandregister.restriction.usage": "restriction usage",
        "commandregister.restriction.404": "restriction 404 {command}",
        "commandregister.restriction.success": "{command}: {restriction}",
        "points.balance": "{user}: {points}",
        "points.add.usage": "add usage",
        "points.take.usage": "take usage",
        "points.add.success": "{user} +{points} = {balance}",
        "points.take.success": "{user} -{points} = {balance}",
        "points.take.not_enough": "{user} has {points}",
    },
}


@pytest.fixture
def session_factory() -> Generator[sessionmaker[Any], None, None]:
    """Фабрика сессий для SQLite в памяти.

    StaticPool держит одно соединение, поэтому все сессии (и все потоки)
    видят одну и ту же базу. Каждый тест получает чистую БД.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    yield sessionmaker(bind=engine, expire_on_commit=False)

    engine.dispose()


@pytest.fixture
def store(session_factory: sessionmaker[Any]) -> Datastore:
    """Хранилище поверх тестовой БД."""
    return Datastore(session_factory)


@pytest.fixture
def liveness() -> FakeLiveness:
    """Стрим по умолчанию офлайн."""
    return FakeLiveness()


@pytest.fixture
def modules() -> FakeModules:
    """Все модули включены."""
    return FakeModules()


@pytest.fixture
def points() -> FakePoints:
    """Пустые балансы."""
    return FakePoints()


@pytest.fixture
def registry(
    store: Datastore,
    liveness: FakeLiveness,
    modules: FakeModules,
    points: FakePoints,
) -> CommandRegistry:
    """Реестр команд с поддельными зависимостями."""
    return CommandRegistry(store, liveness, modules, points)


@pytest.fixture
def l10n() -> Localization:
    """Локализация с короткими тестовыми строками."""
    service = LocalizationService(
        translations=TEST_TRANSLATIONS,
        config=LocalizationConfig(
            enabled=False,
            default_language="ru",
            available_languages=("ru",),
        ),
    )
    return Localization("ru", service)


class EchoModule(BotModule):
    """Тестовый модуль: повторяет аргументы, умеет падать."""

    module_id = "tests.echo"
    commands = (
        CommandSpec(
            "echo",
            subcommands=(SubCommandSpec("loud", PermissionGroup.SUB),),
        ),
        CommandSpec("boom"),
        CommandSpec("ban", PermissionGroup.MOD),
    )

    def __init__(self, context: ModuleContext) -> None:
        super().__init__(context)
        self.events: list[CommandEvent] = []

    @override
    def on_command(self, event: CommandEvent) -> str | None:
        self.events.append(event)
        if event.command == "boom":
            raise RuntimeError("boom")
        if event.subcommand == "loud":
            return " ".join(event.args[1:]).upper()
        return " ".join(event.args) or None


@pytest.fixture
def components(store: Datastore, l10n: Localization) -> BotComponents:
    """Собранные компоненты бота с тестовым модулем.

    Владелец канала — "caster", аккаунт бота — "bot".
    """
    built = build_components(
        store,
        BotSettings(name="bot", owner="caster"),
        YamlConfig(),
        l10n,
        modules=(*DEFAULT_MODULES, EchoModule),
    )
    built.module_manager.initialize()
    return built


@pytest.fixture
def echo_module(components: BotComponents) -> EchoModule:
    """Загруженный тестовый модуль."""
    module = components.module_manager.get(EchoModule.module_id)
    assert isinstance(module, EchoModule)
    return module
