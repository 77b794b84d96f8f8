"""Статус стрима (в эфире или нет).

От статуса зависят ограничения команд:
- ONLINE — команда работает только во время стрима
- OFFLINE — только когда стрим не идёт

Статус выставляет веб-панель (POST /api/panel/stream).
"""

import threading

from src.utils.logging import get_logger

logger = get_logger(__name__)


class StreamStatus:
    """Потокобезопасный флаг "стрим в эфире".

    Реализует протокол LivenessOracle реестра команд.
    """

    def __init__(self, live: bool = False) -> None:
        self._live = live
        self._lock = threading.Lock()

    def is_live(self) -> bool:
        """Идёт ли сейчас стрим."""
        with self._lock:
            return self._live

    def set_live(self, live: bool) -> None:
        """Изменить статус стрима.

        Args:
            live: True если стрим начался, False если закончился.
        """
        with self._lock:
            changed = self._live != live
            self._live = live

        if changed:
            logger.info("Статус стрима: %s", "в эфире" if live else "не в эфире")
