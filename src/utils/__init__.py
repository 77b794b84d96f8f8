"""Вспомогательные модули.

- logging.py — настройка логирования (консоль, файл, Telegram)
- i18n.py — локализация ответов бота
- timezone.py — часовые пояса для времени в логах
"""
