"""Реестр чат-команд бота.

Реестр хранит в памяти зарегистрированные команды, их подкоманды и алиасы,
а переопределения (группа прав, ограничение, цена, отключение) — в хранилище.
Каждое изменение в памяти сразу записывается в хранилище, а при регистрации
команды значения читаются обратно. Так настройки панели переживают рестарт.

Как это работает:
1. Модули при старте регистрируют свои команды (register_command)
2. Диспетчер перед выполнением спрашивает реестр: есть ли команда,
   какая у неё группа, можно ли выполнять сейчас, хватает ли очков
3. Админ отключает команду (disablecom) — она удаляется из памяти,
   а скрипт запоминается, чтобы enablecom мог вернуть её обратно

Жизненный цикл имени команды:
    не зарегистрирована -> зарегистрирована -> временно отключена
        -> снова зарегистрирована (возможно, другим скриптом)
        -> удалена (unregister_command стирает все переопределения)

Блокировки:
- _alias_lock защищает множество алиасов
- _command_lock защищает словарь команд и их подкоманд
Порядок захвата: сначала алиасы, потом команды. Под _command_lock
никогда не захватывается _alias_lock. Проверка и последующее изменение
выполняются под одной блокировкой целиком.

Некорректные вызовы (дубликат, неизвестное ограничение, нет родительской
команды) молча игнорируются, запросы возвращают False. Ошибки хранилища
пробрасываются без обработки.

Пример использования:
    registry = CommandRegistry(store, stream_status, module_manager, points)
    registry.register_command("systems.point_system", "points")
    registry.register_subcommand("points", "add", PermissionGroup.ADMIN)
"""

import contextlib
import threading
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Protocol

from src.bot.commands.restriction import CommandRestriction
from src.core.permissions import PermissionGroup
from src.db.datastore import Datastore
from src.db.tables import Table
from src.utils.logging import get_logger

logger = get_logger(__name__)

# Команды, управляющие включением других команд.
# Их нельзя отключить, иначе админ потеряет управление ботом.
PROTECTED_COMMANDS: frozenset[str] = frozenset(
    {"disablecom", "enablecom", "pausecommands", "setcommandrestriction"}
)

# Модуль системы очков: цены работают только когда он включён
POINT_SYSTEM_MODULE = "systems.point_system"

# Ключ в таблице settings: платят ли модераторы за платные команды
MODERATORS_PAY_SETTING = "pricecom_mods"


class LivenessOracle(Protocol):
    """Источник статуса стрима."""

    def is_live(self) -> bool: ...


class ModuleOracle(Protocol):
    """Источник состояния модулей."""

    def is_module_enabled(self, module_id: str) -> bool: ...


class PointsLedger(Protocol):
    """Баланс очков пользователей."""

    def get_points(self, username: str) -> int: ...

    def is_bot(self, username: str) -> bool: ...


class PriceCheckResult(IntEnum):
    """Результат проверки цены команды."""

    AFFORDABLE = 0
    UNAFFORDABLE = 1
    NOT_APPLICABLE = -1


@dataclass
class SubCommand:
    """Подкоманда.

    None в group или restriction означает "как у родительской команды".
    Значение родителя берётся при каждом запросе, поэтому изменение
    ограничения команды сразу видно её подкомандам.

    Attributes:
        name: Имя подкоманды (в нижнем регистре).
        group: Группа прав или None.
        restriction: Сохранённое значение ограничения или None.
            Нечисловое значение из хранилища хранится строкой.
    """

    name: str
    group: PermissionGroup | None = None
    restriction: int | str | None = None


@dataclass
class Command:
    """Зарегистрированная команда.

    Attributes:
        name: Имя команды (в нижнем регистре).
        script: Идентификатор модуля, который выполняет команду.
        group: Группа прав.
        restriction: Сохранённое значение ограничения. Хранится как есть:
            испорченное значение не приводится к NONE, а запрещает выполнение.
        subcommands: Подкоманды по имени.
    """

    name: str
    script: str
    group: PermissionGroup = PermissionGroup.VIEWER
    restriction: int | str = CommandRestriction.NONE
    subcommands: dict[str, SubCommand] = field(default_factory=dict)


def _key(*parts: str) -> str:
    """Составной ключ хранилища: "команда подкоманда"."""
    return " ".join(parts)


class CommandRegistry:
    """Реестр чат-команд.

    Один экземпляр создаётся при старте приложения и передаётся
    всем, кому он нужен (модулям, диспетчеру, API панели).

    Attributes:
        _store: Хранилище переопределений.
        _liveness: Источник статуса стрима.
        _modules: Источник состояния модулей.
        _points: Баланс очков.
        _moderators_pay: Платят ли модераторы, если в settings нет значения.
    """

    def __init__(
        self,
        store: Datastore,
        liveness: LivenessOracle,
        modules: ModuleOracle,
        points: PointsLedger,
        moderators_pay: bool = False,
    ) -> None:
        """Инициализировать реестр.

        Args:
            store: Key-value хранилище.
            liveness: Источник статуса стрима.
            modules: Источник состояния модулей.
            points: Баланс очков пользователей.
            moderators_pay: Значение по умолчанию для настройки pricecom_mods.
        """
        self._store = store
        self._liveness = liveness
        self._modules = modules
        self._points = points
        self._moderators_pay = moderators_pay

        self._commands: dict[str, Command] = {}
        self._aliases: set[str] = set()

        self._alias_lock = threading.RLock()
        self._command_lock = threading.RLock()

    @property
    def protected_commands(self) -> frozenset[str]:
        """Команды, которые нельзя отключить."""
        return PROTECTED_COMMANDS

    # =========================================================================
    # РЕГИСТРАЦИЯ КОМАНД
    # =========================================================================

    def register_command(
        self,
        script: str,
        name: str,
        group: PermissionGroup = PermissionGroup.VIEWER,
        restriction: int = CommandRestriction.NONE,
    ) -> None:
        """Зарегистрировать команду.

        Повторная регистрация ничего не меняет: побеждает первая.

        Для группы PANEL переопределения группы и ограничения стираются,
        команда ставится как есть. Для остальных групп: если команда
        отключена админом, она не регистрируется, а скрипт запоминается
        для enablecom. Иначе группа и ограничение читаются из хранилища
        (а если их там нет, записываются переданные значения).

        Args:
            script: Идентификатор модуля, который выполняет команду.
            name: Имя команды.
            group: Группа прав по умолчанию.
            restriction: Ограничение по умолчанию. Некорректное — NONE.
        """
        name = name.lower()
        parsed = CommandRestriction.parse(restriction)
        restriction = CommandRestriction.NONE if parsed is None else parsed

        with self._command_lock:
            if name in self._commands:
                return

            if group == PermissionGroup.PANEL:
                self._store.delete(Table.COMMAND_PERMISSIONS, name)
                self._store.delete(Table.COMMAND_RESTRICTIONS, name)
                self._commands[name] = Command(
                    name, script, PermissionGroup.PANEL, int(restriction)
                )
                return

            protected = name in PROTECTED_COMMANDS
            if not protected and self._store.exists(Table.DISABLED_COMMANDS, name):
                self._store.set(Table.TEMP_DISABLED_COMMAND_SCRIPTS, name, script)
                logger.debug("Команда !%s отключена, регистрация отложена", name)
                return

            self._store.delete(Table.TEMP_DISABLED_COMMAND_SCRIPTS, name)

            stored_group = self._store.get_set_int(
                Table.COMMAND_PERMISSIONS, name, int(group)
            )
            resolved_group = PermissionGroup.parse(stored_group, group)

            resolved_restriction: int | str = int(restriction)
            if not protected:
                stored = self._stored_restriction(name, restriction)
                if stored is not None:
                    resolved_restriction = stored

            self._commands[name] = Command(
                name, script, resolved_group, resolved_restriction
            )

        logger.debug("Зарегистрирована команда !%s (%s)", name, script)

    def register_subcommand(
        self,
        command: str,
        subcommand: str,
        group: PermissionGroup | None = PermissionGroup.VIEWER,
        restriction: int | None = None,
    ) -> None:
        """Зарегистрировать подкоманду.

        Ничего не делает, если нет родительской команды или подкоманда
        уже есть. None в group или restriction означает "как у команды":
        значение по умолчанию не записывается в хранилище, но сохранённое
        там переопределение (например, из панели) читается.

        В отличие от register_command, ограничение по умолчанию не NONE,
        а None: подкоманда без явного ограничения следует за командой.
        Чтобы подкоманда выполнялась при любом статусе стрима независимо
        от команды, передайте CommandRestriction.NONE явно.

        Args:
            command: Имя родительской команды.
            subcommand: Имя подкоманды.
            group: Группа прав по умолчанию или None.
            restriction: Ограничение по умолчанию или None.
        """
        command = command.lower()
        subcommand = subcommand.lower()
        key = _key(command, subcommand)

        if restriction is not None and CommandRestriction.parse(restriction) is None:
            restriction = CommandRestriction.NONE

        with self._command_lock:
            parent = self._commands.get(command)
            if parent is None or subcommand in parent.subcommands:
                return

            resolved_group: PermissionGroup | None = None
            if group is not None:
                stored_group = self._store.get_set_int(
                    Table.COMMAND_PERMISSIONS, key, int(group)
                )
                resolved_group = PermissionGroup.parse(stored_group, group)
            else:
                # Группа, выданная из панели, читается и без значения по умолчанию
                stored_group = self._store.opt_int(Table.COMMAND_PERMISSIONS, key)
                if stored_group is not None:
                    with contextlib.suppress(ValueError):
                        resolved_group = PermissionGroup(stored_group)

            resolved_restriction = self._stored_restriction(key, restriction)

            parent.subcommands[subcommand] = SubCommand(
                subcommand, resolved_group, resolved_restriction
            )

    def _stored_restriction(self, key: str, default: int | None) -> int | str | None:
        """Прочитать ограничение из хранилища или записать default.

        Нечисловое значение возвращается как есть: resolve_restriction
        не распознает его и запретит выполнение. default записывается,
        только если ключа нет.
        """
        raw = self._store.get(Table.COMMAND_RESTRICTIONS, key)
        if raw is None:
            if default is not None:
                self._store.set_int(Table.COMMAND_RESTRICTIONS, key, int(default))
            return default

        try:
            return int(raw.strip())
        except ValueError:
            logger.warning("Нечисловое ограничение в хранилище: %s = %r", key, raw)
            return raw

    def unregister_command(self, name: str) -> None:
        """Удалить команду и все её переопределения.

        Удаляет команду и одноимённый алиас из памяти и стирает из хранилища
        группу, цену, кулдаун, награду, флаг отключения и ограничение.
        Повторный вызов безопасен.
        """
        name = name.lower()

        with self._alias_lock, self._command_lock:
            self._commands.pop(name, None)
            self._aliases.discard(name)

            for table in (
                Table.COMMAND_PERMISSIONS,
                Table.COMMAND_PRICES,
                Table.COMMAND_COOLDOWNS,
                Table.COMMAND_PAYOUTS,
                Table.DISABLED_COMMANDS,
                Table.COMMAND_RESTRICTIONS,
            ):
                self._store.delete(table, name)

    def temp_unregister_command(self, name: str) -> None:
        """Временно убрать команду (или алиас) из реестра.

        Скрипт команды запоминается в хранилище, остальные переопределения
        (цена, группа, ограничение) остаются. Для алиаса без команды
        убирается только отметка алиаса.
        """
        name = name.lower()

        with self._alias_lock, self._command_lock:
            command = self._commands.get(name)
            if command is not None:
                self._store.set(
                    Table.TEMP_DISABLED_COMMAND_SCRIPTS, name, command.script
                )
                del self._commands[name]
            elif name in self._aliases:
                self._aliases.discard(name)
            else:
                return

        logger.debug("Команда !%s временно убрана из реестра", name)

    def unregister_subcommand(self, command: str, subcommand: str) -> None:
        """Удалить подкоманду и её группу, цену и ограничение."""
        command = command.lower()
        subcommand = subcommand.lower()
        key = _key(command, subcommand)

        with self._command_lock:
            parent = self._commands.get(command)
            if parent is not None:
                parent.subcommands.pop(subcommand, None)

            self._store.delete(Table.COMMAND_PERMISSIONS, key)
            self._store.delete(Table.COMMAND_PRICES, key)
            self._store.delete(Table.COMMAND_RESTRICTIONS, key)

    # =========================================================================
    # АЛИАСЫ
    # =========================================================================

    def register_alias(
        self,
        alias: str,
        target: str | None = None,
        script: str | None = None,
    ) -> None:
        """Зарегистрировать алиас.

        Полная форма (указаны target и script) ничего не делает, если:
        - алиас совпадает с существующей командой
        - первое слово target не является командой
        - алиас уже сохранён в хранилище
        Иначе алиас регистрируется как команда скрипта script,
        а связь алиас -> target сохраняется.

        В любой форме алиас отмечается в множестве алиасов.

        Args:
            alias: Имя алиаса.
            target: Целевая команда с аргументами ("!lurk goaway").
            script: Скрипт, который выполняет алиас.
        """
        alias = alias.lower()

        with self._alias_lock:
            if target is not None and script is not None:
                if self.command_exists(alias):
                    return
                if not self._target_exists(target):
                    return
                if self._store.exists(Table.ALIASES, alias):
                    return

                self.register_command(script, alias)
                self._store.set(Table.ALIASES, alias, target)
                logger.debug("Алиас !%s -> %s", alias, target)

            self._aliases.add(alias)

    def _target_exists(self, target: str) -> bool:
        """Является ли первое слово target зарегистрированной командой.

        Слово проверяется как есть и без префикса "!".
        """
        parts = target.split()
        if not parts:
            return False
        token = parts[0].lower()
        return self.command_exists(token) or self.command_exists(token.lstrip("!"))

    def get_alias_target(self, alias: str) -> str | None:
        """Сохранённая целевая команда алиаса или None."""
        return self._store.get(Table.ALIASES, alias.lower())

    def unregister_alias(self, alias: str) -> None:
        """Удалить алиас, его команду и сохранённую связь."""
        alias = alias.lower()

        with self._alias_lock:
            self.unregister_command(alias)
            self._store.delete(Table.ALIASES, alias)
            self._aliases.discard(alias)

    # =========================================================================
    # ЗАПРОСЫ
    # =========================================================================

    def command_exists(self, name: str) -> bool:
        """Зарегистрирована ли команда."""
        with self._command_lock:
            return name.lower() in self._commands

    def subcommand_exists(self, command: str, subcommand: str) -> bool:
        """Зарегистрирована ли подкоманда."""
        with self._command_lock:
            parent = self._commands.get(command.lower())
            return parent is not None and subcommand.lower() in parent.subcommands

    def alias_exists(self, alias: str) -> bool:
        """Отмечен ли алиас."""
        with self._alias_lock:
            return alias.lower() in self._aliases

    def get_command_script(self, name: str) -> str | None:
        """Скрипт команды или None, если команды нет."""
        with self._command_lock:
            command = self._commands.get(name.lower())
            return None if command is None else command.script

    def get_command_group(self, name: str) -> PermissionGroup:
        """Группа команды. Для неизвестной команды — VIEWER."""
        with self._command_lock:
            command = self._commands.get(name.lower())
            return PermissionGroup.VIEWER if command is None else command.group

    def get_command_group_name(self, name: str) -> str:
        """Название группы команды для сообщений в чате."""
        return self.get_command_group(name).display_name

    def get_subcommand_group(self, command: str, subcommand: str) -> PermissionGroup:
        """Группа подкоманды.

        Если подкоманды нет или её группа не задана — группа команды.
        Если нет команды — VIEWER.
        """
        with self._command_lock:
            parent = self._commands.get(command.lower())
            if parent is None:
                return PermissionGroup.VIEWER
            sub = parent.subcommands.get(subcommand.lower())
            if sub is None or sub.group is None:
                return parent.group
            return sub.group

    def get_subcommand_group_name(self, command: str, subcommand: str) -> str:
        """Название группы подкоманды для сообщений в чате."""
        return self.get_subcommand_group(command, subcommand).display_name

    def update_command_group(self, name: str, group: PermissionGroup) -> None:
        """Изменить группу команды и сохранить её в хранилище."""
        name = name.lower()
        with self._command_lock:
            command = self._commands.get(name)
            if command is None:
                return
            command.group = group
            self._store.set_int(Table.COMMAND_PERMISSIONS, name, int(group))

    def update_subcommand_group(
        self, command: str, subcommand: str, group: PermissionGroup
    ) -> None:
        """Изменить группу подкоманды и сохранить её в хранилище."""
        command = command.lower()
        subcommand = subcommand.lower()
        with self._command_lock:
            parent = self._commands.get(command)
            if parent is None or subcommand not in parent.subcommands:
                return
            parent.subcommands[subcommand].group = group
            self._store.set_int(
                Table.COMMAND_PERMISSIONS, _key(command, subcommand), int(group)
            )

    def get_subcommand_from_arguments(self, command: str, args: list[str]) -> str:
        """Первый аргумент, если это подкоманда команды, иначе ""."""
        if not args:
            return ""
        candidate = args[0].lower()
        if self.subcommand_exists(command, candidate):
            return candidate
        return ""

    def list_commands(self) -> list[str]:
        """Снимок имён зарегистрированных команд."""
        with self._command_lock:
            return list(self._commands)

    def list_subcommands(self, command: str) -> list[str]:
        """Снимок имён подкоманд (пустой, если команды нет)."""
        with self._command_lock:
            parent = self._commands.get(command.lower())
            return [] if parent is None else list(parent.subcommands)

    def list_aliases(self) -> list[str]:
        """Снимок отмеченных алиасов."""
        with self._alias_lock:
            return list(self._aliases)

    def snapshot(self) -> list[Command]:
        """Копия всех команд с подкомандами (для панели)."""
        with self._command_lock:
            return [
                Command(
                    c.name,
                    c.script,
                    c.group,
                    c.restriction,
                    {
                        name: SubCommand(s.name, s.group, s.restriction)
                        for name, s in c.subcommands.items()
                    },
                )
                for c in self._commands.values()
            ]

    # =========================================================================
    # ОГРАНИЧЕНИЯ ПО СТАТУСУ СТРИМА
    # =========================================================================

    def resolve_restriction(self, command: str, subcommand: str | None = None) -> bool:
        """Можно ли сейчас выполнить команду.

        Ограничение подкоманды заменяет ограничение команды,
        только если задано явно.

        Returns:
            False для неизвестной команды и испорченного значения.
        """
        with self._command_lock:
            parent = self._commands.get(command.lower())
            if parent is None:
                return False

            value = parent.restriction
            if subcommand:
                sub = parent.subcommands.get(subcommand.lower())
                if sub is not None and sub.restriction is not None:
                    value = sub.restriction

        restriction = CommandRestriction.parse(value)
        if restriction is CommandRestriction.NONE:
            return True
        if restriction is CommandRestriction.ONLINE:
            return self._liveness.is_live()
        if restriction is CommandRestriction.OFFLINE:
            return not self._liveness.is_live()

        logger.warning("Некорректное ограничение команды !%s: %r", command, value)
        return False

    def set_restriction(
        self,
        command: str,
        subcommand: str | None,
        restriction: int,
    ) -> None:
        """Изменить ограничение команды или подкоманды.

        Некорректное значение молча игнорируется. Значение сохраняется
        в хранилище всегда, в памяти — если команда (подкоманда) есть.
        """
        parsed = CommandRestriction.parse(restriction)
        if parsed is None:
            return

        command = command.lower()
        subcommand = subcommand.lower() if subcommand else None

        with self._command_lock:
            parent = self._commands.get(command)
            if subcommand is not None:
                key = _key(command, subcommand)
                if parent is not None and subcommand in parent.subcommands:
                    parent.subcommands[subcommand].restriction = int(parsed)
            else:
                key = command
                if parent is not None:
                    parent.restriction = int(parsed)

            self._store.set_int(Table.COMMAND_RESTRICTIONS, key, int(parsed))

    # =========================================================================
    # ЦЕНЫ
    # =========================================================================

    def get_price(self, command: str, subcommand: str = "", action: str = "") -> int:
        """Цена команды в очках.

        Порядок поиска: "команда подкоманда действие", "команда подкоманда",
        "команда". Если цены нет нигде — 0.
        """
        command = command.lower()
        subcommand = subcommand.lower()
        action = action.lower()

        for key in (
            _key(command, subcommand, action),
            _key(command, subcommand),
            command,
        ):
            price = self._store.opt_int(Table.COMMAND_PRICES, key)
            if price is not None:
                return price
        return 0

    def price_check(
        self,
        username: str,
        command: str,
        subcommand: str,
        is_moderator: bool,
    ) -> PriceCheckResult:
        """Проверить, хватает ли пользователю очков на команду.

        NOT_APPLICABLE, если:
        - команда защищённая
        - для команды (и подкоманды) нет цены
        - модуль системы очков выключен
        - пользователь модератор, а модераторы не платят
          (или это аккаунт бота)

        Args:
            username: Имя пользователя.
            command: Имя команды.
            subcommand: Имя подкоманды или "".
            is_moderator: Модератор ли пользователь.
        """
        command = command.lower()
        subcommand = subcommand.lower()

        if command in PROTECTED_COMMANDS:
            return PriceCheckResult.NOT_APPLICABLE

        has_price = (
            subcommand
            and self._store.exists(Table.COMMAND_PRICES, _key(command, subcommand))
        ) or self._store.exists(Table.COMMAND_PRICES, command)
        if not has_price:
            return PriceCheckResult.NOT_APPLICABLE

        if is_moderator:
            moderators_pay = self._store.get_bool(
                Table.SETTINGS, MODERATORS_PAY_SETTING, self._moderators_pay
            )
            if not moderators_pay or self._points.is_bot(username):
                return PriceCheckResult.NOT_APPLICABLE

        if not self._modules.is_module_enabled(POINT_SYSTEM_MODULE):
            return PriceCheckResult.NOT_APPLICABLE

        if self._points.get_points(username) < self.get_price(command, subcommand):
            return PriceCheckResult.UNAFFORDABLE
        return PriceCheckResult.AFFORDABLE
