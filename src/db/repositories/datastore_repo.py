"""Репозиторий для работы с key-value хранилищем.

Содержит все операции с таблицей datastore:
- Чтение значения по (раздел, ключ)
- Запись с обновлением существующей записи (upsert)
- Удаление
- Перечисление ключей раздела

Репозиторий синхронный: реестр команд вызывает хранилище под своими
блокировками из потоков пула, а не из event loop.
"""

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from src.db.models.datastore import DataEntry


class DatastoreRepository:
    """Репозиторий для работы с записями хранилища.

    Использует Dependency Injection — сессия передаётся в конструктор.
    Репозиторий не делает commit: транзакцией управляет вызывающий код.

    Пример использования:
        with session_factory() as session:
            repo = DatastoreRepository(session)
            repo.upsert("command_prices", "raffle", "50")
            session.commit()
    """

    def __init__(self, session: Session) -> None:
        """Инициализировать репозиторий.

        Args:
            session: Синхронная сессия SQLAlchemy.
        """
        self._session = session

    def get_entry(self, section: str, variable: str) -> DataEntry | None:
        """Найти запись по разделу и ключу.

        Args:
            section: Раздел хранилища.
            variable: Ключ внутри раздела.

        Returns:
            DataEntry если найдена, None если не существует.
        """
        stmt = select(DataEntry).where(
            DataEntry.section == section,
            DataEntry.variable == variable,
        )
        return self._session.execute(stmt).scalar_one_or_none()

    def get_value(self, section: str, variable: str) -> str | None:
        """Получить значение по разделу и ключу.

        Returns:
            Строковое значение или None если записи нет.
        """
        stmt = select(DataEntry.value).where(
            DataEntry.section == section,
            DataEntry.variable == variable,
        )
        return self._session.execute(stmt).scalar_one_or_none()

    def upsert(self, section: str, variable: str, value: str) -> DataEntry:
        """Создать запись или обновить значение существующей.

        Args:
            section: Раздел хранилища.
            variable: Ключ внутри раздела.
            value: Новое значение.

        Returns:
            Созданная или обновлённая запись.
        """
        entry = self.get_entry(section, variable)
        if entry is None:
            entry = DataEntry(section=section, variable=variable, value=value)
            self._session.add(entry)
        else:
            entry.value = value
        self._session.flush()
        return entry

    def delete(self, section: str, variable: str) -> int:
        """Удалить запись.

        Returns:
            Количество удалённых записей (0 или 1).
        """
        stmt = delete(DataEntry).where(
            DataEntry.section == section,
            DataEntry.variable == variable,
        )
        result = self._session.execute(stmt)
        return result.rowcount or 0

    def get_keys(self, section: str) -> list[str]:
        """Получить все ключи раздела (в порядке создания)."""
        stmt = (
            select(DataEntry.variable)
            .where(DataEntry.section == section)
            .order_by(DataEntry.id)
        )
        return list(self._session.execute(stmt).scalars().all())

    def get_items(self, section: str) -> dict[str, str]:
        """Получить все пары ключ-значение раздела."""
        stmt = (
            select(DataEntry.variable, DataEntry.value)
            .where(DataEntry.section == section)
            .order_by(DataEntry.id)
        )
        return {variable: value for variable, value in self._session.execute(stmt)}
