"""Разделы key-value хранилища.

Каждый раздел — логическая "таблица" в datastore.
Ключи внутри разделов команд: "команда" или "команда подкоманда"
(и "команда подкоманда действие" для цен).
"""

from enum import StrEnum


class Table(StrEnum):
    """Имена разделов хранилища."""

    # Переопределённые группы прав: ключ -> номер группы
    COMMAND_PERMISSIONS = "command_permissions"

    # Цены команд в очках: ключ -> целое число
    COMMAND_PRICES = "command_prices"

    # Переопределённые ограничения по статусу стрима: ключ -> -1 | 1 | 2
    COMMAND_RESTRICTIONS = "command_restrictions"

    # Кулдауны и награды команд (очищаются при удалении команды)
    COMMAND_COOLDOWNS = "command_cooldowns"
    COMMAND_PAYOUTS = "command_payouts"

    # Отключённые админом команды: ключ -> "true"
    DISABLED_COMMANDS = "disabled_commands"

    # Скрипт отключённой команды для повторного включения: ключ -> скрипт
    TEMP_DISABLED_COMMAND_SCRIPTS = "temp_disabled_command_scripts"

    # Алиасы: алиас -> целевая команда с аргументами
    ALIASES = "aliases"

    # Состояние модулей: идентификатор модуля -> "true" | "false"
    MODULES = "modules"

    # Общие настройки бота
    SETTINGS = "settings"

    # Баланс очков: имя пользователя -> целое число
    POINTS = "points"

    # Группы пользователей: имя пользователя -> номер группы
    GROUPS = "groups"
