"""API эндпоинты.

Этот модуль содержит FastAPI роутеры для:
- Health check (/health)
- Веб-панели (/api/panel): хранилище, модули, события, команды, статус стрима
"""

from src.api.health import router as health_router
from src.api.panel import router as panel_router

__all__ = ["health_router", "panel_router"]
