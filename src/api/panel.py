"""API эндпоинты веб-панели.

Панель управляет ботом через эти эндпоинты:
- POST /api/panel/db/get — прочитать значения из хранилища
- POST /api/panel/db/update — записать значения в хранилище
- POST /api/panel/db/delete — удалить значения из хранилища
- POST /api/panel/db/keys — ключи раздела хранилища
- GET /api/panel/modules — список модулей и их состояние
- POST /api/panel/modules/enable — включить модуль
- POST /api/panel/modules/disable — выключить модуль
- POST /api/panel/events — событие для модуля (например, enable/disable команды)
- POST /api/panel/command — выполнить команду от имени бота
- GET /api/panel/commands — снимок реестра команд
- POST /api/panel/stream — сообщить статус стрима

Важно:
- Аутентификация панели в этот сервис не входит (закрывается прокси)
- Реестр и хранилище синхронные, поэтому вызовы идут через asyncio.to_thread
"""

import asyncio
from typing import Annotated, cast

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field, model_validator

from src.bot.commands.dispatcher import CommandDispatcher, DispatchStatus
from src.bot.commands.event import CommandEvent
from src.bot.commands.registry import CommandRegistry
from src.bot.commands.restriction import CommandRestriction
from src.bot.modules.manager import ModuleManager
from src.core.exceptions import CoreModuleError, UnknownModuleError
from src.db.datastore import Datastore
from src.db.tables import Table
from src.services.stream_service import StreamStatus
from src.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/panel", tags=["panel"])

PANEL_TABLES = frozenset(table.value for table in Table)


# =============================================================================
# СХЕМЫ ЗАПРОСОВ И ОТВЕТОВ
# =============================================================================


class DbGetRequest(BaseModel):
    """Запрос значений: пары (tables[i], keys[i])."""

    tables: list[str]
    keys: list[str]

    @model_validator(mode="after")
    def check_lengths(self) -> "DbGetRequest":
        if len(self.tables) != len(self.keys):
            raise ValueError("tables и keys должны быть одной длины")
        return self


class DbGetResponse(BaseModel):
    """Значения по ключам (None — значения нет)."""

    values: dict[str, str | None]


class DbUpdateRequest(BaseModel):
    """Запись значений: тройки (tables[i], keys[i], values[i])."""

    tables: list[str]
    keys: list[str]
    values: list[str]

    @model_validator(mode="after")
    def check_lengths(self) -> "DbUpdateRequest":
        if not len(self.tables) == len(self.keys) == len(self.values):
            raise ValueError("tables, keys и values должны быть одной длины")
        return self


class DbDeleteRequest(DbGetRequest):
    """Удаление значений: пары (tables[i], keys[i])."""


class DbKeysRequest(BaseModel):
    """Запрос ключей одного раздела."""

    table: str


class DbKeysResponse(BaseModel):
    """Ключи раздела в порядке хранилища."""

    keys: list[str]


class SuccessResponse(BaseModel):
    """Ответ об успешном выполнении."""

    success: bool = True


class ModuleRequest(BaseModel):
    """Запрос на включение/выключение модуля."""

    module_id: str


class ModuleInfo(BaseModel):
    """Описание модуля для панели."""

    module_id: str
    enabled: bool
    core: bool
    commands: list[str]


class PanelEventRequest(BaseModel):
    """Событие панели для модуля.

    Attributes:
        script: Идентификатор модуля.
        args: Аргументы, первый — имя события (enable, disable).
    """

    script: str
    args: list[str] = Field(default_factory=list)


class PanelEventResponse(BaseModel):
    """Результат обработки события."""

    handled: bool
    result: str | None = None


class PanelCommandRequest(BaseModel):
    """Команда от имени бота: "disablecom raffle"."""

    command: str = Field(min_length=1)


class PanelCommandResponse(BaseModel):
    """Результат выполнения команды."""

    status: DispatchStatus
    reply: str | None = None


class SubCommandInfo(BaseModel):
    """Подкоманда в снимке реестра."""

    name: str
    group: int | None
    restriction: str | None


class CommandInfo(BaseModel):
    """Команда в снимке реестра."""

    name: str
    script: str
    group: int
    group_name: str
    restriction: str
    subcommands: list[SubCommandInfo]


class CommandsResponse(BaseModel):
    """Снимок реестра команд."""

    commands: list[CommandInfo]
    aliases: list[str]


class StreamRequest(BaseModel):
    """Статус стрима."""

    online: bool


class StreamResponse(BaseModel):
    """Текущий статус стрима."""

    online: bool


# =============================================================================
# ЗАВИСИМОСТИ
# =============================================================================


def get_store(request: Request) -> Datastore:
    """Хранилище из app.state."""
    return cast("Datastore", request.app.state.store)


def get_registry(request: Request) -> CommandRegistry:
    """Реестр команд из app.state."""
    return cast("CommandRegistry", request.app.state.registry)


def get_module_manager(request: Request) -> ModuleManager:
    """Менеджер модулей из app.state."""
    return cast("ModuleManager", request.app.state.module_manager)


def get_dispatcher(request: Request) -> CommandDispatcher:
    """Диспетчер команд из app.state."""
    return cast("CommandDispatcher", request.app.state.dispatcher)


def get_stream_status(request: Request) -> StreamStatus:
    """Статус стрима из app.state."""
    return cast("StreamStatus", request.app.state.stream_status)


def get_bot_name(request: Request) -> str:
    """Имя аккаунта бота из app.state."""
    return cast("str", request.app.state.bot_name)


def _check_tables(tables: list[str]) -> None:
    """Проверить, что все разделы известны.

    Raises:
        HTTPException: 400 для неизвестного раздела.
    """
    unknown = sorted(set(tables) - PANEL_TABLES)
    if unknown:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown tables: {', '.join(unknown)}",
        )


def _restriction_name(value: int | str | None) -> str | None:
    """Имя ограничения для панели ("invalid" для испорченного значения)."""
    if value is None:
        return None
    restriction = CommandRestriction.parse(value)
    return "invalid" if restriction is None else restriction.name.lower()


# =============================================================================
# ХРАНИЛИЩЕ
# =============================================================================


@router.post("/db/get")
async def db_get(
    body: DbGetRequest,
    store: Annotated[Datastore, Depends(get_store)],
) -> DbGetResponse:
    """Прочитать значения из хранилища.

    Ответ — словарь {ключ: значение}, как его ждут формы панели.
    """
    _check_tables(body.tables)

    def read() -> dict[str, str | None]:
        return {
            key: store.get(table, key)
            for table, key in zip(body.tables, body.keys, strict=True)
        }

    return DbGetResponse(values=await asyncio.to_thread(read))


@router.post("/db/update")
async def db_update(
    body: DbUpdateRequest,
    store: Annotated[Datastore, Depends(get_store)],
) -> SuccessResponse:
    """Записать значения в хранилище."""
    _check_tables(body.tables)

    def write() -> None:
        for table, key, value in zip(body.tables, body.keys, body.values, strict=True):
            store.set(table, key, value)

    await asyncio.to_thread(write)
    logger.info("Панель обновила %d значений", len(body.keys))
    return SuccessResponse()


@router.post("/db/delete")
async def db_delete(
    body: DbDeleteRequest,
    store: Annotated[Datastore, Depends(get_store)],
) -> SuccessResponse:
    """Удалить значения из хранилища.

    Так панель снимает флаг в disabled_commands перед событием enable.
    Отсутствующий ключ ошибкой не считается.
    """
    _check_tables(body.tables)

    def remove() -> None:
        for table, key in zip(body.tables, body.keys, strict=True):
            store.delete(table, key)

    await asyncio.to_thread(remove)
    logger.info("Панель удалила %d значений", len(body.keys))
    return SuccessResponse()


@router.post("/db/keys")
async def db_keys(
    body: DbKeysRequest,
    store: Annotated[Datastore, Depends(get_store)],
) -> DbKeysResponse:
    """Ключи раздела, например список отключённых команд."""
    _check_tables([body.table])
    return DbKeysResponse(keys=await asyncio.to_thread(store.keys, body.table))


# =============================================================================
# МОДУЛИ
# =============================================================================


@router.get("/modules")
async def list_modules(
    manager: Annotated[ModuleManager, Depends(get_module_manager)],
) -> list[ModuleInfo]:
    """Список загруженных модулей."""

    def collect() -> list[ModuleInfo]:
        return [
            ModuleInfo(
                module_id=module.module_id,
                enabled=manager.is_module_enabled(module.module_id),
                core=module.core,
                commands=[spec.name for spec in module.commands],
            )
            for module in manager.modules
        ]

    return await asyncio.to_thread(collect)


@router.post("/modules/enable")
async def enable_module(
    body: ModuleRequest,
    manager: Annotated[ModuleManager, Depends(get_module_manager)],
) -> SuccessResponse:
    """Включить модуль и зарегистрировать его команды.

    Raises:
        HTTPException: 404 если модуль не загружен.
    """
    try:
        await asyncio.to_thread(manager.enable_module, body.module_id)
    except UnknownModuleError as e:
        raise HTTPException(status_code=404, detail=e.message) from e
    return SuccessResponse()


@router.post("/modules/disable")
async def disable_module(
    body: ModuleRequest,
    manager: Annotated[ModuleManager, Depends(get_module_manager)],
) -> SuccessResponse:
    """Выключить модуль и удалить его команды.

    Raises:
        HTTPException: 404 если модуль не загружен, 409 для системного модуля.
    """
    try:
        await asyncio.to_thread(manager.disable_module, body.module_id)
    except UnknownModuleError as e:
        raise HTTPException(status_code=404, detail=e.message) from e
    except CoreModuleError as e:
        raise HTTPException(status_code=409, detail=e.message) from e
    return SuccessResponse()


@router.post("/events")
async def panel_event(
    body: PanelEventRequest,
    manager: Annotated[ModuleManager, Depends(get_module_manager)],
) -> PanelEventResponse:
    """Передать событие панели модулю.

    Raises:
        HTTPException: 404 если модуль не загружен.
    """
    try:
        result = await asyncio.to_thread(
            manager.handle_panel_event, body.script, body.args
        )
    except UnknownModuleError as e:
        raise HTTPException(status_code=404, detail=e.message) from e
    return PanelEventResponse(handled=result is not None, result=result)


# =============================================================================
# КОМАНДЫ
# =============================================================================


@router.post("/command")
async def run_command(
    body: PanelCommandRequest,
    dispatcher: Annotated[CommandDispatcher, Depends(get_dispatcher)],
    bot_name: Annotated[str, Depends(get_bot_name)],
) -> PanelCommandResponse:
    """Выполнить команду от имени аккаунта бота."""
    parts = body.command.split()
    if not parts:
        raise HTTPException(status_code=422, detail="Empty command")

    event = CommandEvent(sender=bot_name, command=parts[0], args=tuple(parts[1:]))
    result = await asyncio.to_thread(dispatcher.dispatch, event)
    return PanelCommandResponse(status=result.status, reply=result.reply)


@router.get("/commands")
async def list_commands(
    registry: Annotated[CommandRegistry, Depends(get_registry)],
) -> CommandsResponse:
    """Снимок реестра: команды с группами, ограничениями и подкомандами."""
    commands = [
        CommandInfo(
            name=command.name,
            script=command.script,
            group=int(command.group),
            group_name=command.group.display_name,
            restriction=_restriction_name(command.restriction) or "none",
            subcommands=[
                SubCommandInfo(
                    name=sub.name,
                    group=None if sub.group is None else int(sub.group),
                    restriction=_restriction_name(sub.restriction),
                )
                for sub in command.subcommands.values()
            ],
        )
        for command in registry.snapshot()
    ]
    return CommandsResponse(commands=commands, aliases=sorted(registry.list_aliases()))


# =============================================================================
# СТРИМ
# =============================================================================


@router.get("/stream")
async def get_stream(
    stream: Annotated[StreamStatus, Depends(get_stream_status)],
) -> StreamResponse:
    """Текущий статус стрима."""
    return StreamResponse(online=stream.is_live())


@router.post("/stream")
async def set_stream(
    body: StreamRequest,
    stream: Annotated[StreamStatus, Depends(get_stream_status)],
) -> StreamResponse:
    """Сообщить статус стрима (от него зависят ограничения команд)."""
    stream.set_live(body.online)
    return StreamResponse(online=stream.is_live())
