"""Модель записи key-value хранилища.

Все настройки бота хранятся в одной таблице в виде троек
(раздел, ключ, значение). Раздел — логическая "таблица":
права команд, цены, ограничения, баланс очков и т.д.

Значения хранятся строками, типизацию делает Datastore
(get_int, get_bool и т.д.).

Пример:
    section="command_prices", variable="raffle enter", value="50"
"""

from datetime import datetime

from sqlalchemy import String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column
from typing_extensions import override

from src.db.models_base import Base


class DataEntry(Base):
    """Запись key-value хранилища.

    Attributes:
        id: Уникальный идентификатор записи.
        section: Раздел (логическая таблица), например "command_permissions".
        variable: Ключ внутри раздела (имя команды, "команда подкоманда").
        value: Значение в виде строки.
        updated_at: Дата последнего изменения.
    """

    __tablename__ = "datastore"
    __table_args__ = (
        UniqueConstraint("section", "variable", name="uq_datastore_section_variable"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    section: Mapped[str] = mapped_column(String(255), index=True)

    variable: Mapped[str] = mapped_column(String(255))

    # Text: значения панели могут быть длинными (JSON-настройки)
    value: Mapped[str] = mapped_column(Text, default="")

    updated_at: Mapped[datetime] = mapped_column(
        default=func.now(),
        onupdate=func.now(),
    )

    @override
    def __repr__(self) -> str:
        """Строковое представление записи для отладки."""
        value_preview = self.value[:50] + "..." if len(self.value) > 50 else self.value
        return (
            f"<DataEntry(section={self.section!r}, variable={self.variable!r}, "
            f"value={value_preview!r})>"
        )
