"""Сервис очков (внутренняя валюта чата).

Очки тратятся на платные команды. Цены команд хранятся в реестре
(таблица command_prices), а баланс пользователей — в таблице points.

Основной паттерн использования:
1. Перед выполнением — CommandRegistry.price_check() сравнивает баланс с ценой
2. После успешного выполнения — take_points() списывает цену

Почему списание ПОСЛЕ выполнения:
- Пользователь платит только за реально выполненные команды
- Если обработчик упал — очки не списываются
"""

import threading

from src.core.exceptions import InsufficientPointsError
from src.db.datastore import Datastore
from src.db.tables import Table
from src.utils.logging import get_logger

logger = get_logger(__name__)


class PointsService:
    """Сервис для управления балансом очков.

    Использует Dependency Injection — хранилище передаётся в конструктор.
    Реализует протокол PointsLedger реестра команд.

    Attributes:
        _store: Key-value хранилище.
        _bot_name: Имя служебного аккаунта бота (в нижнем регистре).
    """

    def __init__(self, store: Datastore, bot_name: str) -> None:
        """Инициализировать сервис.

        Args:
            store: Key-value хранилище.
            bot_name: Имя аккаунта бота.
        """
        self._store = store
        self._bot_name = bot_name.lower()
        # Чтение и запись баланса должны быть атомарны
        self._lock = threading.Lock()

    def is_bot(self, username: str) -> bool:
        """Является ли пользователь служебным аккаунтом бота."""
        return username.lower() == self._bot_name

    def get_points(self, username: str) -> int:
        """Получить баланс пользователя (0 если записи нет)."""
        return self._store.get_int(Table.POINTS, username.lower())

    def add_points(self, username: str, amount: int) -> int:
        """Начислить очки.

        Args:
            username: Имя пользователя.
            amount: Количество очков (неотрицательное).

        Returns:
            Новый баланс.

        Raises:
            ValueError: Отрицательное количество.
        """
        if amount < 0:
            raise ValueError(f"Количество очков не может быть отрицательным: {amount}")

        key = username.lower()
        with self._lock:
            balance = self._store.get_int(Table.POINTS, key) + amount
            self._store.set_int(Table.POINTS, key, balance)

        logger.debug("Начислено %d очков: %s (баланс %d)", amount, key, balance)
        return balance

    def take_points(self, username: str, amount: int) -> int:
        """Списать очки. Баланс никогда не уходит в минус.

        Args:
            username: Имя пользователя.
            amount: Количество очков (неотрицательное).

        Returns:
            Новый баланс.

        Raises:
            ValueError: Отрицательное количество.
            InsufficientPointsError: На балансе меньше, чем amount.
        """
        if amount < 0:
            raise ValueError(f"Количество очков не может быть отрицательным: {amount}")

        key = username.lower()
        with self._lock:
            available = self._store.get_int(Table.POINTS, key)
            if available < amount:
                raise InsufficientPointsError(key, amount, available)
            balance = available - amount
            self._store.set_int(Table.POINTS, key, balance)

        logger.debug("Списано %d очков: %s (баланс %d)", amount, key, balance)
        return balance
