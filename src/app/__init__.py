"""Модуль приложения.

Содержит factory для создания FastAPI app, сборку компонентов бота
и lifecycle management.
"""

from src.app.components import BotComponents, build_components
from src.app.factory import create_app
from src.app.lifecycle import ApplicationLifecycle

__all__ = [
    "ApplicationLifecycle",
    "BotComponents",
    "build_components",
    "create_app",
]
