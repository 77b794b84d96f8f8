"""Базовый класс для всех моделей SQLAlchemy.

Этот модуль содержит только декларативную базу без побочных эффектов.
Используется для изоляции тестов от загрузки настроек при импорте моделей.

Пример использования в моделях:
    from src.db.models_base import Base

    class DataEntry(Base):
        __tablename__ = "datastore"
        ...
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Базовый класс для всех моделей.

    Все модели наследуются от Base. Это позволяет SQLAlchemy
    автоматически создавать таблицы через Base.metadata.create_all().
    """
