"""Реестр и диспетчер чат-команд.

Реестр хранит команды, подкоманды и алиасы, диспетчер проверяет
команду из чата по реестру и передаёт её модулю.
"""

from src.bot.commands.event import CommandEvent
from src.bot.commands.registry import (
    PROTECTED_COMMANDS,
    Command,
    CommandRegistry,
    PriceCheckResult,
    SubCommand,
)
from src.bot.commands.restriction import CommandRestriction

__all__ = [
    "PROTECTED_COMMANDS",
    "Command",
    "CommandEvent",
    "CommandRegistry",
    "CommandRestriction",
    "PriceCheckResult",
    "SubCommand",
]
