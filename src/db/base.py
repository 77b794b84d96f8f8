"""Базовая конфигурация SQLAlchemy.

Этот модуль отвечает за:
- Создание подключения к базе данных (engine)
- Настройку фабрики сессий (sessionmaker)
- Создание таблиц и хранилища (Datastore)

Как это работает:
1. get_engine() лениво создаёт engine — "трубу" к БД
2. sessionmaker — фабрика для создания сессий
3. Datastore открывает короткую сессию на каждую операцию

Почему sync:
- Реестр команд синхронный и вызывает хранилище под своими блокировками
- Чат-команды выполняются в пуле потоков (asyncio.to_thread),
  поэтому event loop не блокируется

URL базы данных:
- Если DATABASE__URL указан — используется он (например, PostgreSQL)
- Иначе — SQLite (./data/bot.db или /data/bot.db в контейнере)

ВАЖНО: Для изоляции тестов engine и session factory создаются лениво.
Импорт Base для моделей должен быть из src.db.models_base.
"""

from typing import TYPE_CHECKING

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from src.config.constants import DATA_DIR
from src.core.exceptions import DatabaseConnectionError
from src.db.models_base import Base
from src.utils.logging import get_logger

if TYPE_CHECKING:
    from src.config.settings import Settings
    from src.db.datastore import Datastore

__all__ = [
    "Base",
    "create_datastore",
    "get_engine",
    "get_session_factory",
    "init_database",
]

logger = get_logger(__name__)

# Ленивые синглтоны для engine и session factory
_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def _get_settings() -> "Settings":
    """Ленивая загрузка настроек.

    Используется для отложенной загрузки settings при первом обращении к БД,
    а не при импорте модуля. Это позволяет тестам импортировать модуль
    без загрузки настроек из .env файла.

    Returns:
        Объект Settings с настройками приложения.
    """
    from src.config.settings import settings

    return settings


def _get_database_url() -> str:
    """Получить URL подключения к базе данных.

    Логика выбора:
    1. Если DATABASE__URL указан — используем его
    2. Иначе — SQLite из DATA_DIR/bot.db

    Returns:
        URL подключения в формате SQLAlchemy.
    """
    settings = _get_settings()
    if settings.database.url:
        return settings.database.url

    db_path = DATA_DIR / "bot.db"
    return f"sqlite:///{db_path}"


def get_engine() -> Engine:
    """Получить engine (ленивая инициализация).

    Engine — пул соединений, который переиспользуется между операциями.
    Для SQLite отключаем проверку потока: к хранилищу обращаются
    из потоков пула, доступ сериализует Datastore.

    Returns:
        Engine для SQLAlchemy.
    """
    global _engine
    if _engine is None:
        url = _get_database_url()
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        _engine = create_engine(
            url,
            echo=False,
            pool_pre_ping=True,
            connect_args=connect_args,
        )
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Получить фабрику сессий (ленивая инициализация).

    expire_on_commit=False — не "протухать" объекты после commit.

    Returns:
        Фабрика синхронных сессий SQLAlchemy.
    """
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


def init_database(engine: Engine | None = None) -> None:
    """Создать таблицы, если их ещё нет.

    Схема состоит из одной таблицы datastore, поэтому
    достаточно create_all без миграций.

    Args:
        engine: Engine для создания таблиц. По умолчанию — get_engine().

    Raises:
        DatabaseConnectionError: База недоступна.
    """
    # Импорт регистрирует модели в Base.metadata
    import src.db.models  # noqa: F401

    target = engine or get_engine()
    try:
        Base.metadata.create_all(target)
    except OperationalError as e:
        raise DatabaseConnectionError(e) from e
    logger.info("Таблицы базы данных готовы")


def create_datastore() -> "Datastore":
    """Создать хранилище поверх настроенной базы данных.

    Returns:
        Datastore с готовыми таблицами.
    """
    from src.db.datastore import Datastore

    init_database()
    return Datastore(get_session_factory())
