"""Тесты для реестра команд бота.

Проверяют корректность работы CommandRegistry:
- Регистрация команд (побеждает первая, отложенная регистрация отключённых)
- Временное удаление и повторная регистрация
- Полное удаление со стиранием переопределений
- Подкоманды и наследование группы
- Алиасы
- Группы прав
"""

from typing import TYPE_CHECKING

import pytest

from src.bot.commands.registry import PROTECTED_COMMANDS, CommandRegistry
from src.bot.commands.restriction import CommandRestriction
from src.core.permissions import PermissionGroup
from src.db.datastore import Datastore
from src.db.tables import Table

if TYPE_CHECKING:
    from tests.conftest import FakeLiveness, FakeModules, FakePoints

# ==============================================================================
# РЕГИСТРАЦИЯ КОМАНД
# ==============================================================================


class TestRegisterCommand:
    """Тесты регистрации команд."""

    def test_register_new_command(self, registry: CommandRegistry) -> None:
        """Новая команда появляется в реестре со своим скриптом."""
        registry.register_command("games.raffle", "raffle")

        assert registry.command_exists("raffle")
        assert registry.get_command_script("raffle") == "games.raffle"
        assert registry.get_command_group("raffle") == PermissionGroup.VIEWER

    def test_names_are_case_insensitive(self, registry: CommandRegistry) -> None:
        """Имя команды приводится к нижнему регистру."""
        registry.register_command("games.raffle", "Raffle")

        assert registry.command_exists("raffle")
        assert registry.command_exists("RAFFLE")
        assert registry.list_commands() == ["raffle"]

    def test_first_registration_wins(self, registry: CommandRegistry) -> None:
        """Повторная регистрация другим скриптом ничего не меняет."""
        registry.register_command("A", "x")
        registry.register_command("B", "x")

        assert registry.get_command_script("x") == "A"

    def test_default_group_and_restriction_are_persisted(
        self, registry: CommandRegistry, store: Datastore
    ) -> None:
        """Значения по умолчанию записываются в хранилище."""
        registry.register_command(
            "games.raffle", "raffle", PermissionGroup.MOD, CommandRestriction.ONLINE
        )

        assert store.get(Table.COMMAND_PERMISSIONS, "raffle") == "2"
        assert store.get(Table.COMMAND_RESTRICTIONS, "raffle") == "1"

    def test_stored_overrides_take_precedence(
        self, registry: CommandRegistry, store: Datastore
    ) -> None:
        """Переопределения из панели важнее значений модуля."""
        store.set(Table.COMMAND_PERMISSIONS, "raffle", "1")
        store.set(Table.COMMAND_RESTRICTIONS, "raffle", "2")

        registry.register_command("games.raffle", "raffle", PermissionGroup.VIEWER)

        assert registry.get_command_group("raffle") == PermissionGroup.ADMIN
        assert registry.snapshot()[0].restriction == CommandRestriction.OFFLINE

    def test_invalid_restriction_is_normalized(
        self, registry: CommandRegistry, store: Datastore
    ) -> None:
        """Неизвестное ограничение при регистрации заменяется на NONE."""
        registry.register_command("games.raffle", "raffle", restriction=42)

        assert store.get(Table.COMMAND_RESTRICTIONS, "raffle") == "-1"
        assert registry.resolve_restriction("raffle")

    def test_disabled_command_is_deferred(
        self, registry: CommandRegistry, store: Datastore
    ) -> None:
        """Отключённая команда не регистрируется, скрипт запоминается."""
        store.set(Table.DISABLED_COMMANDS, "x", True)

        registry.register_command("S", "x")

        assert not registry.command_exists("x")
        assert store.get(Table.TEMP_DISABLED_COMMAND_SCRIPTS, "x") == "S"

    def test_protected_command_ignores_disabled_flag(
        self, registry: CommandRegistry, store: Datastore
    ) -> None:
        """Защищённую команду нельзя отложить флагом отключения."""
        store.set(Table.DISABLED_COMMANDS, "enablecom", True)

        registry.register_command("core.command_register", "enablecom")

        assert registry.command_exists("enablecom")

    def test_protected_command_restriction_not_persisted(
        self, registry: CommandRegistry, store: Datastore
    ) -> None:
        """Ограничение защищённой команды не сохраняется."""
        registry.register_command("core.command_register", "disablecom")

        assert not store.exists(Table.COMMAND_RESTRICTIONS, "disablecom")
        assert store.exists(Table.COMMAND_PERMISSIONS, "disablecom")

    def test_registration_clears_temp_script(
        self, registry: CommandRegistry, store: Datastore
    ) -> None:
        """Успешная регистрация стирает запомненный скрипт."""
        store.set(Table.TEMP_DISABLED_COMMAND_SCRIPTS, "x", "old.script")

        registry.register_command("S", "x")

        assert not store.exists(Table.TEMP_DISABLED_COMMAND_SCRIPTS, "x")

    def test_panel_group_purges_overrides(
        self, registry: CommandRegistry, store: Datastore
    ) -> None:
        """Команда панели ставится как есть, переопределения стираются."""
        store.set(Table.COMMAND_PERMISSIONS, "panelcmd", "0")
        store.set(Table.COMMAND_RESTRICTIONS, "panelcmd", "1")
        store.set(Table.DISABLED_COMMANDS, "panelcmd", True)

        registry.register_command("web.panel", "panelcmd", PermissionGroup.PANEL)

        assert registry.command_exists("panelcmd")
        assert registry.get_command_group("panelcmd") == PermissionGroup.PANEL
        assert not store.exists(Table.COMMAND_PERMISSIONS, "panelcmd")
        assert not store.exists(Table.COMMAND_RESTRICTIONS, "panelcmd")

    def test_protected_commands_property(self, registry: CommandRegistry) -> None:
        """Список защищённых команд фиксирован."""
        assert registry.protected_commands == PROTECTED_COMMANDS
        assert "disablecom" in registry.protected_commands
        assert "pausecommands" in registry.protected_commands


# ==============================================================================
# УДАЛЕНИЕ КОМАНД
# ==============================================================================


class TestUnregisterCommand:
    """Тесты временного и полного удаления команд."""

    def test_temp_unregister_remembers_script(
        self, registry: CommandRegistry, store: Datastore
    ) -> None:
        """Временное удаление запоминает скрипт."""
        registry.register_command("S", "x")

        registry.temp_unregister_command("x")

        assert not registry.command_exists("x")
        assert store.get(Table.TEMP_DISABLED_COMMAND_SCRIPTS, "x") == "S"

    def test_temp_unregister_then_register_other_script(
        self, registry: CommandRegistry, store: Datastore
    ) -> None:
        """После временного удаления команду может занять другой скрипт."""
        registry.register_command("S", "x")
        registry.temp_unregister_command("x")

        registry.register_command("T", "x")

        assert registry.get_command_script("x") == "T"
        assert not store.exists(Table.TEMP_DISABLED_COMMAND_SCRIPTS, "x")

    def test_temp_unregister_keeps_overrides(
        self, registry: CommandRegistry, store: Datastore
    ) -> None:
        """Цена и группа переживают временное удаление."""
        registry.register_command("S", "x", PermissionGroup.MOD)
        store.set(Table.COMMAND_PRICES, "x", "50")

        registry.temp_unregister_command("x")
        registry.register_command("S", "x")

        assert registry.get_command_group("x") == PermissionGroup.MOD
        assert registry.get_price("x") == 50

    def test_temp_unregister_unknown_is_noop(
        self, registry: CommandRegistry, store: Datastore
    ) -> None:
        """Временное удаление неизвестной команды ничего не делает."""
        registry.temp_unregister_command("ghost")

        assert not store.exists(Table.TEMP_DISABLED_COMMAND_SCRIPTS, "ghost")

    def test_unregister_purges_overrides(
        self, registry: CommandRegistry, store: Datastore
    ) -> None:
        """Полное удаление стирает все переопределения."""
        registry.register_command("S", "x")
        for table in (
            Table.COMMAND_PERMISSIONS,
            Table.COMMAND_PRICES,
            Table.COMMAND_COOLDOWNS,
            Table.COMMAND_PAYOUTS,
            Table.DISABLED_COMMANDS,
            Table.COMMAND_RESTRICTIONS,
        ):
            store.set(table, "x", "1")

        registry.unregister_command("x")

        assert not registry.command_exists("x")
        for table in (
            Table.COMMAND_PERMISSIONS,
            Table.COMMAND_PRICES,
            Table.COMMAND_COOLDOWNS,
            Table.COMMAND_PAYOUTS,
            Table.DISABLED_COMMANDS,
            Table.COMMAND_RESTRICTIONS,
        ):
            assert not store.exists(table, "x"), table

    def test_unregister_is_idempotent(self, registry: CommandRegistry) -> None:
        """Повторное удаление безопасно."""
        registry.register_command("S", "x")

        registry.unregister_command("x")
        registry.unregister_command("x")

        assert not registry.command_exists("x")

    def test_unregister_restores_defaults_on_next_registration(
        self, registry: CommandRegistry
    ) -> None:
        """После полного удаления команда регистрируется с нуля."""
        registry.register_command("S", "x", PermissionGroup.MOD)
        registry.update_command_group("x", PermissionGroup.ADMIN)

        registry.unregister_command("x")
        registry.register_command("S", "x", PermissionGroup.MOD)

        assert registry.get_command_group("x") == PermissionGroup.MOD


# ==============================================================================
# ПОДКОМАНДЫ
# ==============================================================================


class TestSubcommands:
    """Тесты подкоманд."""

    def test_register_subcommand(self, registry: CommandRegistry) -> None:
        """Подкоманда регистрируется под существующей командой."""
        registry.register_command("S", "points")
        registry.register_subcommand("points", "add", PermissionGroup.ADMIN)

        assert registry.subcommand_exists("points", "add")
        assert registry.list_subcommands("points") == ["add"]
        assert registry.get_subcommand_group("points", "add") == PermissionGroup.ADMIN

    def test_subcommand_without_parent_is_ignored(
        self, registry: CommandRegistry
    ) -> None:
        """Без родительской команды подкоманда не регистрируется."""
        registry.register_subcommand("ghost", "add")

        assert not registry.subcommand_exists("ghost", "add")
        assert registry.list_subcommands("ghost") == []

    def test_subcommand_inherits_group(self, registry: CommandRegistry) -> None:
        """Подкоманда без своей группы берёт группу команды."""
        registry.register_command("S", "raffle", PermissionGroup.MOD)
        registry.register_subcommand("raffle", "enter", group=None)

        assert registry.get_subcommand_group("raffle", "enter") == PermissionGroup.MOD
        assert registry.get_subcommand_group("raffle", "missing") == PermissionGroup.MOD
        assert registry.get_subcommand_group("ghost", "x") == PermissionGroup.VIEWER

    def test_subcommand_group_override_from_store(
        self, registry: CommandRegistry, store: Datastore
    ) -> None:
        """Группа подкоманды читается по ключу "команда подкоманда"."""
        store.set(Table.COMMAND_PERMISSIONS, "points add", "0")
        registry.register_command("S", "points")

        registry.register_subcommand("points", "add", PermissionGroup.ADMIN)

        assert registry.get_subcommand_group("points", "add") == PermissionGroup.CASTER

    def test_inherited_subcommand_group_survives_restart(
        self,
        registry: CommandRegistry,
        store: Datastore,
        liveness: "FakeLiveness",
        modules: "FakeModules",
        points: "FakePoints",
    ) -> None:
        """Группа, выданная подкоманде без своей группы, читается после рестарта."""
        registry.register_command("S", "raffle", PermissionGroup.MOD)
        registry.register_subcommand("raffle", "enter", group=None)
        registry.update_subcommand_group("raffle", "enter", PermissionGroup.ADMIN)

        restarted = CommandRegistry(store, liveness, modules, points)
        restarted.register_command("S", "raffle", PermissionGroup.MOD)
        restarted.register_subcommand("raffle", "enter", group=None)

        assert restarted.get_subcommand_group("raffle", "enter") == PermissionGroup.ADMIN
        assert restarted.get_command_group("raffle") == PermissionGroup.MOD

    def test_inherited_subcommand_group_is_not_written(
        self, registry: CommandRegistry, store: Datastore
    ) -> None:
        """Наследуемая группа не записывается в хранилище."""
        registry.register_command("S", "raffle", PermissionGroup.MOD)
        registry.register_subcommand("raffle", "enter", group=None)

        assert store.get(Table.COMMAND_PERMISSIONS, "raffle enter") is None

    def test_unregister_subcommand(
        self, registry: CommandRegistry, store: Datastore
    ) -> None:
        """Удаление подкоманды стирает её переопределения."""
        registry.register_command("S", "points")
        registry.register_subcommand("points", "add", PermissionGroup.ADMIN)
        store.set(Table.COMMAND_PRICES, "points add", "5")

        registry.unregister_subcommand("points", "add")

        assert not registry.subcommand_exists("points", "add")
        assert not store.exists(Table.COMMAND_PERMISSIONS, "points add")
        assert not store.exists(Table.COMMAND_PRICES, "points add")
        assert registry.command_exists("points")

    def test_subcommand_from_arguments(self, registry: CommandRegistry) -> None:
        """Первый аргумент считается подкомандой, только если она есть."""
        registry.register_command("S", "points")
        registry.register_subcommand("points", "add")

        assert registry.get_subcommand_from_arguments("points", ["ADD", "bob"]) == "add"
        assert registry.get_subcommand_from_arguments("points", ["bob"]) == ""
        assert registry.get_subcommand_from_arguments("points", []) == ""


# ==============================================================================
# АЛИАСЫ
# ==============================================================================


class TestAliases:
    """Тесты алиасов."""

    def test_register_full_alias(
        self, registry: CommandRegistry, store: Datastore
    ) -> None:
        """Полная форма регистрирует команду-алиас и сохраняет цель."""
        registry.register_command("S", "lurk")

        registry.register_alias("brb", "!lurk goaway", "commands.alias")

        assert registry.alias_exists("brb")
        assert registry.get_command_script("brb") == "commands.alias"
        assert registry.get_alias_target("brb") == "!lurk goaway"
        assert store.get(Table.ALIASES, "brb") == "!lurk goaway"

    def test_alias_to_unknown_target_is_ignored(
        self, registry: CommandRegistry
    ) -> None:
        """Алиас на незарегистрированную команду не создаётся."""
        registry.register_alias("brb", "!ghost", "commands.alias")

        assert not registry.alias_exists("brb")
        assert not registry.command_exists("brb")

    def test_alias_shadowing_command_is_ignored(
        self, registry: CommandRegistry
    ) -> None:
        """Алиас не может занять имя существующей команды."""
        registry.register_command("S", "lurk")
        registry.register_command("S", "brb")

        registry.register_alias("brb", "lurk", "commands.alias")

        assert registry.get_command_script("brb") == "S"
        assert registry.get_alias_target("brb") is None

    def test_short_form_only_marks_alias(self, registry: CommandRegistry) -> None:
        """Короткая форма только отмечает имя как алиас."""
        registry.register_alias("brb")

        assert registry.alias_exists("brb")
        assert not registry.command_exists("brb")

    def test_temp_unregister_bare_alias(self, registry: CommandRegistry) -> None:
        """Временное удаление алиаса без команды снимает отметку."""
        registry.register_alias("brb")

        registry.temp_unregister_command("brb")

        assert not registry.alias_exists("brb")

    def test_unregister_alias(
        self, registry: CommandRegistry, store: Datastore
    ) -> None:
        """Удаление алиаса стирает команду, отметку и цель."""
        registry.register_command("S", "lurk")
        registry.register_alias("brb", "!lurk", "commands.alias")

        registry.unregister_alias("brb")

        assert not registry.alias_exists("brb")
        assert not registry.command_exists("brb")
        assert not store.exists(Table.ALIASES, "brb")
        assert registry.command_exists("lurk")


# ==============================================================================
# ГРУППЫ И СНИМОК
# ==============================================================================


class TestGroups:
    """Тесты групп прав команд."""

    def test_unknown_command_group_is_viewer(self, registry: CommandRegistry) -> None:
        """Для неизвестной команды группа — Viewer."""
        assert registry.get_command_group("ghost") == PermissionGroup.VIEWER
        assert registry.get_command_group_name("ghost") == "Viewer"
        assert registry.get_command_script("ghost") is None

    def test_update_command_group_writes_through(
        self, registry: CommandRegistry, store: Datastore
    ) -> None:
        """Изменение группы сразу сохраняется."""
        registry.register_command("S", "x")

        registry.update_command_group("x", PermissionGroup.SUB)

        assert registry.get_command_group_name("x") == "Subscriber"
        assert store.get_int(Table.COMMAND_PERMISSIONS, "x") == int(PermissionGroup.SUB)

    def test_update_subcommand_group(
        self, registry: CommandRegistry, store: Datastore
    ) -> None:
        """Изменение группы подкоманды сохраняется по составному ключу."""
        registry.register_command("S", "points")
        registry.register_subcommand("points", "add")

        registry.update_subcommand_group("points", "add", PermissionGroup.MOD)

        assert registry.get_subcommand_group_name("points", "add") == "Moderator"
        assert store.get(Table.COMMAND_PERMISSIONS, "points add") == "2"

    @pytest.mark.parametrize("name", ["ghost", ""])
    def test_update_group_of_unknown_command_is_noop(
        self, registry: CommandRegistry, store: Datastore, name: str
    ) -> None:
        """Группа неизвестной команды не сохраняется."""
        registry.update_command_group(name, PermissionGroup.ADMIN)

        assert not store.exists(Table.COMMAND_PERMISSIONS, name)

    def test_snapshot_is_a_copy(self, registry: CommandRegistry) -> None:
        """Изменение снимка не влияет на реестр."""
        registry.register_command("S", "points")
        registry.register_subcommand("points", "add")

        snapshot = registry.snapshot()
        snapshot[0].subcommands.clear()
        snapshot[0].script = "changed"

        assert registry.subcommand_exists("points", "add")
        assert registry.get_command_script("points") == "S"
