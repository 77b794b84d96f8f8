"""Модуль базы данных.

Содержит:
- base.py — подключение к БД (engine, фабрика сессий)
- models_base.py — базовый класс для моделей (без загрузки settings)
- models/ — модели SQLAlchemy (таблицы)
- repositories/ — репозитории для работы с данными
- datastore.py — key-value хранилище поверх репозитория
- tables.py — имена разделов хранилища

Для изоляции тестов используйте:
    from src.db.models_base import Base  # Без загрузки settings

Для runtime-использования с реальной БД:
    from src.db.base import create_datastore
"""

# Не импортируем из base.py здесь, чтобы тесты могли импортировать
# Base из models_base.py без загрузки settings.
