"""Централизованные исключения приложения.

Этот модуль содержит ВСЕ кастомные исключения проекта.
Централизация исключений обеспечивает:
- Единый источник правды для всех типов ошибок
- Единообразную иерархию исключений
- Удобный импорт: `from src.core.exceptions import SomeError`

Организация исключений по доменам:
- Database: Ошибки хранилища (key-value поверх SQLAlchemy)
- Modules: Ошибки системы модулей (включение/выключение)
- Points: Ошибки системы очков

ВАЖНО: реестр команд НЕ выбрасывает исключений. Некорректные вызовы
(дубликат, неизвестное ограничение, нет родительской команды) молча
игнорируются, а запросы возвращают False. Исключения ниже относятся
к окружению реестра: хранилищу, модулям и сервисам.
"""

from typing_extensions import override

# =============================================================================
# DATABASE EXCEPTIONS
# =============================================================================
# Исключения для работы с хранилищем.
# Иерархия: DatabaseError -> DatabaseConnectionError, DatabaseOperationError
# =============================================================================


class DatabaseError(Exception):
    """Базовое исключение для ошибок работы с БД.

    Используется как родительский класс для всех ошибок хранилища.
    Может быть потенциально восстановимым (retry) в зависимости от причины.
    """

    def __init__(self, message: str, retryable: bool = False) -> None:
        """Создать исключение БД.

        Args:
            message: Описание ошибки.
            retryable: Можно ли повторить операцию (True для временных сбоев).
        """
        super().__init__(message)
        self.message = message
        self.retryable = retryable


class DatabaseConnectionError(DatabaseError):
    """Ошибка подключения к базе данных.

    Потенциально восстановимая — может помочь retry через несколько секунд.
    """

    def __init__(self, original_error: Exception) -> None:
        """Создать исключение о проблемах с подключением к БД.

        Args:
            original_error: Оригинальное исключение от SQLAlchemy.
        """
        super().__init__(
            f"Не удалось подключиться к БД: {original_error}",
            retryable=True,
        )
        self.original_error = original_error


class DatabaseOperationError(DatabaseError):
    """Ошибка выполнения операции с хранилищем.

    Может быть восстановимой (database is locked, timeout) или
    невосстановимой (constraint violation).
    """

    def __init__(
        self, operation: str, original_error: Exception, retryable: bool = False
    ) -> None:
        """Создать исключение об ошибке операции БД.

        Args:
            operation: Название операции (get, set, delete, и т.д.).
            original_error: Оригинальное исключение от SQLAlchemy.
            retryable: Можно ли повторить операцию.
        """
        super().__init__(
            f"Ошибка выполнения операции '{operation}': {original_error}",
            retryable=retryable,
        )
        self.operation = operation
        self.original_error = original_error


# =============================================================================
# MODULE EXCEPTIONS
# =============================================================================
# Исключения системы модулей.
# Модуль: набор команд одного скрипта (например, система очков).
# =============================================================================


class ModuleError(Exception):
    """Базовое исключение для ошибок системы модулей."""

    def __init__(self, module_id: str, message: str) -> None:
        """Создать исключение модуля.

        Args:
            module_id: Идентификатор модуля.
            message: Описание ошибки.
        """
        super().__init__(message)
        self.module_id = module_id
        self.message = message


class UnknownModuleError(ModuleError):
    """Модуль с указанным идентификатором не загружен."""

    def __init__(self, module_id: str) -> None:
        """Создать исключение о неизвестном модуле.

        Args:
            module_id: Идентификатор модуля.
        """
        super().__init__(module_id, f"Модуль не найден: {module_id}")


class CoreModuleError(ModuleError):
    """Попытка выключить системный модуль.

    Системные модули (например, управление командами) нельзя выключить —
    иначе админ потеряет возможность включить их обратно.
    """

    def __init__(self, module_id: str) -> None:
        """Создать исключение о системном модуле.

        Args:
            module_id: Идентификатор модуля.
        """
        super().__init__(module_id, f"Системный модуль нельзя выключить: {module_id}")


# =============================================================================
# POINTS EXCEPTIONS
# =============================================================================


class InsufficientPointsError(Exception):
    """Недостаточно очков для списания.

    Attributes:
        username: Имя пользователя.
        required: Требуемое количество очков.
        available: Доступное количество очков.
    """

    def __init__(self, username: str, required: int, available: int) -> None:
        """Создать исключение о недостаточном балансе очков.

        Args:
            username: Имя пользователя.
            required: Требуемое количество очков.
            available: Доступное количество очков.
        """
        self.username = username
        self.required = required
        self.available = available
        super().__init__(
            f"Недостаточно очков: требуется {required}, доступно {available} "
            f"(username={username})"
        )

    @override
    def __str__(self) -> str:
        """Строковое представление для логов."""
        return f"InsufficientPointsError({self.username}: {self.available}/{self.required})"
