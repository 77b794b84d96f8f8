"""Health check эндпоинт.

Содержит endpoint для проверки работоспособности сервиса:
- GET /health — health check для мониторинга и liveness probes
"""

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(request: Request) -> dict[str, str | int]:
    """Проверка состояния сервиса.

    Используется хостингом и мониторингом, чтобы понять, что приложение живо.

    Returns:
        Статус "ok" и количество зарегистрированных команд.
    """
    registry = getattr(request.app.state, "registry", None)
    commands = len(registry.list_commands()) if registry is not None else 0
    return {"status": "ok", "commands": commands}
