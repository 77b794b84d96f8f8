"""Системный модуль управления командами.

Команды:
- !disablecom [команда|@all] — отключить команду в чате
- !enablecom [команда|@all] — включить отключённую команду
- !setcommandrestriction [none|online|offline] [команда] [подкоманда] —
  ограничить команду по статусу стрима

События веб-панели:
- enable <команда> — вернуть команду в реестр с запомненным скриптом
- disable <команда> — временно убрать команду из реестра

Модуль системный: его нельзя выключить, а его команды защищены
от disablecom.
"""

from typing_extensions import override

from src.bot.commands.event import CommandEvent
from src.bot.commands.restriction import CommandRestriction
from src.bot.modules.base import BotModule, CommandSpec
from src.core.permissions import PermissionGroup
from src.db.tables import Table
from src.utils.logging import get_logger

logger = get_logger(__name__)

ALL_COMMANDS = "@all"


class CommandRegisterModule(BotModule):
    """Управление включением и ограничениями команд."""

    module_id = "core.command_register"
    core = True
    commands = (
        CommandSpec("disablecom", PermissionGroup.ADMIN),
        CommandSpec("enablecom", PermissionGroup.ADMIN),
        CommandSpec("setcommandrestriction", PermissionGroup.ADMIN),
    )

    @override
    def on_command(self, event: CommandEvent) -> str | None:
        if event.command == "disablecom":
            return self._disable(event)
        if event.command == "enablecom":
            return self._enable(event)
        if event.command == "setcommandrestriction":
            return self._set_restriction(event)
        return None

    @override
    def on_panel_event(self, args: list[str]) -> str | None:
        """Обработать событие панели: enable/disable команды."""
        if len(args) < 2:
            return None

        event_name = args[0]
        command = args[1].lower()
        registry = self.context.registry

        if event_name == "enable":
            script = self.context.store.get(Table.TEMP_DISABLED_COMMAND_SCRIPTS, command)
            if script is not None:
                registry.register_command(script, command)
                return command
        elif event_name == "disable":
            if registry.command_exists(command):
                registry.temp_unregister_command(command)
                return command
        else:
            logger.warning("Неизвестное событие панели: %s", event_name)
        return None

    def _disable(self, event: CommandEvent) -> str:
        """!disablecom [команда|@all]."""
        l10n = self.context.l10n
        registry = self.context.registry
        store = self.context.store

        if event.action is None:
            return l10n.get("commandregister.disable.usage")

        action = event.action.replace("!", "").lower()

        if store.exists(Table.DISABLED_COMMANDS, action):
            return l10n.get("commandregister.disable.err")
        if action in registry.protected_commands or (
            action != ALL_COMMANDS and not registry.command_exists(action)
        ):
            return l10n.get("commandregister.disable.404")

        if action == ALL_COMMANDS:
            for name in registry.list_commands():
                if name in registry.protected_commands:
                    continue
                # Пользовательские команды отключаются только по одной
                if registry.get_command_script(name) == self.context.default_script:
                    continue
                store.set(Table.DISABLED_COMMANDS, name, True)
                registry.temp_unregister_command(name)
        else:
            store.set(Table.DISABLED_COMMANDS, action, True)
            registry.temp_unregister_command(action)

        logger.info("%s отключил команду %s", event.sender, action)
        return l10n.get("commandregister.disable.success", command=action)

    def _enable(self, event: CommandEvent) -> str:
        """!enablecom [команда|@all]."""
        l10n = self.context.l10n
        store = self.context.store

        if event.action is None:
            return l10n.get("commandregister.enable.usage")

        action = event.action.replace("!", "").lower()

        if action != ALL_COMMANDS and not store.exists(Table.DISABLED_COMMANDS, action):
            return l10n.get("commandregister.enable.err")

        names = store.keys(Table.DISABLED_COMMANDS) if action == ALL_COMMANDS else [action]
        for name in names:
            self._reenable(name)

        logger.info("%s включил команду %s", event.sender, action)
        return l10n.get("commandregister.enable.success", command=action)

    def _reenable(self, name: str) -> None:
        """Снять флаг отключения и вернуть команду с запомненным скриптом."""
        store = self.context.store
        store.delete(Table.DISABLED_COMMANDS, name)
        script = store.get_str(
            Table.TEMP_DISABLED_COMMAND_SCRIPTS, name, self.context.default_script
        )
        self.context.registry.register_command(script, name)

    def _set_restriction(self, event: CommandEvent) -> str:
        """!setcommandrestriction [none|online|offline] [команда] [подкоманда]."""
        l10n = self.context.l10n
        registry = self.context.registry

        if len(event.args) < 2:
            return l10n.get("commandregister.restriction.usage")

        restriction = CommandRestriction.from_name(event.args[0])
        if restriction is None:
            return l10n.get("commandregister.restriction.usage")

        command = event.args[1].replace("!", "").lower()
        subcommand = event.args[2].lower() if len(event.args) > 2 else None

        if subcommand is None and not registry.command_exists(command):
            return l10n.get("commandregister.restriction.404", command=command)
        if subcommand is not None and not registry.subcommand_exists(command, subcommand):
            return l10n.get(
                "commandregister.restriction.404", command=f"{command} {subcommand}"
            )

        registry.set_restriction(command, subcommand, restriction)
        target = command if subcommand is None else f"{command} {subcommand}"
        return l10n.get(
            "commandregister.restriction.success",
            command=target,
            restriction=restriction.name.lower(),
        )
