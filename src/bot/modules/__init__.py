"""Модули бота.

Модуль объединяет чат-команды одного скрипта. ModuleManager регистрирует
их в реестре при старте и при включении модуля из веб-панели.
"""

from src.bot.modules.base import (
    BotModule,
    CommandSpec,
    ModuleContext,
    SubCommandSpec,
)
from src.bot.modules.command_register import CommandRegisterModule
from src.bot.modules.manager import ModuleManager, ModuleStates
from src.bot.modules.point_system import PointSystemModule

__all__ = [
    "BotModule",
    "CommandRegisterModule",
    "CommandSpec",
    "ModuleContext",
    "ModuleManager",
    "ModuleStates",
    "PointSystemModule",
    "SubCommandSpec",
]
