"""Модели базы данных (таблицы).

Каждая модель — это класс Python, который соответствует таблице в БД.
Все модели должны наследоваться от Base (из db.models_base).
"""

from src.db.models.datastore import DataEntry

__all__ = ["DataEntry"]
