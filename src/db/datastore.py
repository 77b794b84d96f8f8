"""Key-value хранилище настроек бота.

Datastore — тонкий фасад над DatastoreRepository, который:
- Открывает короткую сессию и транзакцию на каждую операцию
- Сериализует доступ внутренним RLock (SQLite — один писатель)
- Приводит строковые значения к int/bool
- Оборачивает ошибки SQLAlchemy в DatabaseOperationError

Реестр команд вызывает хранилище под своими блокировками, поэтому
каждая операция короткая и не ждёт ничего, кроме самой БД.

Пример использования:
    store = Datastore(get_session_factory())
    store.set(Table.COMMAND_PRICES, "raffle", "50")
    price = store.get_int(Table.COMMAND_PRICES, "raffle")
"""

import threading
from collections.abc import Callable
from typing import TypeVar

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from src.core.exceptions import DatabaseOperationError
from src.db.repositories.datastore_repo import DatastoreRepository
from src.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

TRUE_VALUES = frozenset({"true", "1", "yes", "on"})


class Datastore:
    """Потокобезопасное key-value хранилище (раздел, ключ) -> строка."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        """Инициализировать хранилище.

        Args:
            session_factory: Фабрика синхронных сессий SQLAlchemy.
        """
        self._session_factory = session_factory
        self._lock = threading.RLock()

    def _run(
        self,
        operation: str,
        action: Callable[[DatastoreRepository], T],
        *,
        write: bool = False,
    ) -> T:
        """Выполнить действие с репозиторием в отдельной сессии.

        Args:
            operation: Название операции для логов и исключений.
            action: Функция, получающая репозиторий.
            write: Нужно ли зафиксировать транзакцию.

        Returns:
            Результат action.

        Raises:
            DatabaseOperationError: Ошибка SQLAlchemy при выполнении.
        """
        with self._lock:
            try:
                with self._session_factory() as session:
                    result = action(DatastoreRepository(session))
                    if write:
                        session.commit()
                    return result
            except SQLAlchemyError as e:
                # "database is locked" и обрывы соединения считаются временными сбоями
                retryable = isinstance(e, OperationalError)
                logger.exception("Ошибка хранилища при операции %s", operation)
                raise DatabaseOperationError(operation, e, retryable=retryable) from e

    # ------------------------------------------------------------------
    # Базовые операции
    # ------------------------------------------------------------------

    def exists(self, table: str, key: str) -> bool:
        """Проверить, есть ли значение для ключа."""
        return self._run("exists", lambda repo: repo.get_entry(table, key) is not None)

    def get(self, table: str, key: str) -> str | None:
        """Получить значение или None, если ключа нет."""
        return self._run("get", lambda repo: repo.get_value(table, key))

    def set(self, table: str, key: str, value: object) -> None:
        """Записать значение (создать или перезаписать).

        bool сохраняется как "true"/"false", остальное — через str().
        """
        if isinstance(value, bool):
            stored = "true" if value else "false"
        else:
            stored = str(value)
        self._run("set", lambda repo: repo.upsert(table, key, stored), write=True)

    def delete(self, table: str, key: str) -> None:
        """Удалить значение. Отсутствие ключа не считается ошибкой."""
        self._run("delete", lambda repo: repo.delete(table, key), write=True)

    def keys(self, table: str) -> list[str]:
        """Все ключи раздела."""
        return self._run("keys", lambda repo: repo.get_keys(table))

    def get_all(self, table: str) -> dict[str, str]:
        """Все пары ключ-значение раздела."""
        return self._run("get_all", lambda repo: repo.get_items(table))

    # ------------------------------------------------------------------
    # Типизированные помощники
    # ------------------------------------------------------------------

    def get_str(self, table: str, key: str, default: str = "") -> str:
        """Получить строку или default."""
        value = self.get(table, key)
        return default if value is None else value

    def opt_int(self, table: str, key: str) -> int | None:
        """Получить целое число или None.

        Нечисловое значение считается отсутствующим (с предупреждением в логе).
        """
        value = self.get(table, key)
        if value is None:
            return None
        try:
            return int(value.strip())
        except ValueError:
            logger.warning(
                "Нечисловое значение в хранилище: %s/%s = %r", table, key, value
            )
            return None

    def get_int(self, table: str, key: str, default: int = 0) -> int:
        """Получить целое число или default."""
        value = self.opt_int(table, key)
        return default if value is None else value

    def set_int(self, table: str, key: str, value: int) -> None:
        """Записать целое число."""
        self.set(table, key, int(value))

    def get_set_int(self, table: str, key: str, default: int) -> int:
        """Прочитать число или записать default и вернуть его.

        Чтение и запись выполняются под одной блокировкой хранилища.
        """
        with self._lock:
            value = self.opt_int(table, key)
            if value is None:
                self.set_int(table, key, default)
                return default
            return value

    def get_bool(self, table: str, key: str, default: bool = False) -> bool:
        """Получить логическое значение или default."""
        value = self.get(table, key)
        if value is None:
            return default
        return value.strip().lower() in TRUE_VALUES
