"""Локализация ответов бота.

Переводы хранятся в YAML-файлах locales/<lang>.yaml в виде плоского
словаря {ключ: шаблон}. Шаблоны форматируются через str.format:

    commandregister.disable.success: "Команда !{command} выключена."

Сервис переводов создаётся один раз при старте (init_localization)
и передаётся в компоненты через конструкторы. В тестах его удобно
собрать напрямую:

    service = LocalizationService(
        translations={"ru": {"points.balance": "{user}: {points}"}},
        config=LocalizationConfig(default_language="ru"),
    )
    l10n = Localization("ru", service)
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from src.config.constants import PROJECT_ROOT
from src.utils.logging import get_logger

if TYPE_CHECKING:
    from src.config.yaml_config import LocalizationConfig as LocalizationSettings

logger = get_logger(__name__)

LOCALES_DIR = PROJECT_ROOT / "locales"


@dataclass(frozen=True)
class LocalizationConfig:
    """Настройки локализации, не зависящие от config.yaml.

    Attributes:
        enabled: Включена ли мультиязычность.
        default_language: Язык ответов по умолчанию (ISO 639-1).
        available_languages: Языки, для которых загружаются переводы.
    """

    enabled: bool = False
    default_language: str = "ru"
    available_languages: tuple[str, ...] = field(default_factory=lambda: ("ru",))


class LocalizationService:
    """Хранилище загруженных переводов.

    Attributes:
        translations: Словарь переводов {язык: {ключ: шаблон}}.
        config: Настройки локализации.
    """

    def __init__(
        self,
        translations: dict[str, dict[str, str]],
        config: LocalizationConfig,
    ) -> None:
        self._translations = translations
        self._config = config

    @property
    def translations(self) -> dict[str, dict[str, str]]:
        return self._translations

    @property
    def config(self) -> LocalizationConfig:
        return self._config

    def get_translation(self, language: str, key: str) -> str | None:
        """Шаблон для ключа на языке или None."""
        return self._translations.get(language, {}).get(key)


def load_translations_from_yaml(
    locales_dir: Path,
    available_languages: list[str],
) -> dict[str, dict[str, str]]:
    """Загрузить переводы из YAML-файлов.

    Языки без файла или с битым YAML пропускаются с ошибкой в логе.

    Args:
        locales_dir: Папка с файлами переводов.
        available_languages: Языки для загрузки.

    Returns:
        Словарь переводов {язык: {ключ: шаблон}}.

    Raises:
        RuntimeError: Не загружено ни одного языка.
    """
    translations: dict[str, dict[str, str]] = {}

    for lang in available_languages:
        file_path = locales_dir / f"{lang}.yaml"
        if not file_path.exists():
            logger.error("Файл перевода не найден: %s (язык: %s)", file_path, lang)
            continue

        try:
            with file_path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error("Ошибка загрузки переводов для %s: %s", lang, e)
            continue

        translations[lang] = {str(key): str(value) for key, value in data.items()}
        logger.info("Загружены переводы: %s (%d ключей)", lang, len(data))

    if not translations:
        raise RuntimeError(
            f"Не удалось загрузить ни одного языка из {locales_dir}: "
            f"{available_languages}"
        )

    return translations


def init_localization(
    settings: "LocalizationSettings | None" = None,
    locales_dir: Path = LOCALES_DIR,
) -> LocalizationService:
    """Создать сервис локализации при старте приложения.

    Args:
        settings: Секция localization из config.yaml.
            Если не указана — берётся из загруженного config.yaml.
        locales_dir: Папка с файлами переводов.

    Returns:
        Сервис с загруженными переводами.
    """
    if settings is None:
        # Импорт здесь: config.yaml читается при импорте модуля
        from src.config.yaml_config import yaml_config

        settings = yaml_config.localization

    config = LocalizationConfig(
        enabled=settings.enabled,
        default_language=settings.default_language,
        available_languages=tuple(settings.available_languages),
    )
    translations = load_translations_from_yaml(
        locales_dir=locales_dir,
        available_languages=list(config.available_languages),
    )

    logger.info(
        "Локализация инициализирована: languages=%s, default=%s",
        config.available_languages,
        config.default_language,
    )
    return LocalizationService(translations=translations, config=config)


class Localization:
    """Переводы на конкретном языке.

    Attributes:
        language: Текущий язык (ISO 639-1).
    """

    def __init__(self, language: str, service: LocalizationService) -> None:
        # Недоступный язык заменяется языком по умолчанию
        if language not in service.config.available_languages:
            language = service.config.default_language

        self.language = language
        self._service = service

    def get(self, key: str, **kwargs: Any) -> str:
        """Получить переведённую строку по ключу.

        Порядок поиска: текущий язык, язык по умолчанию, сам ключ.

        Args:
            key: Ключ перевода (например, "cmd.need_points").
            **kwargs: Параметры шаблона.

        Returns:
            Отформатированная строка.

        Example:
            >>> l10n.get("points.balance", user="alice", points=10)
            "alice, у тебя 10 очков."
        """
        default_language = self._service.config.default_language

        translation = self._service.get_translation(self.language, key)
        if translation is None:
            translation = self._service.get_translation(default_language, key)

        if translation is None:
            logger.warning(
                "Перевод не найден: key=%s, language=%s", key, self.language
            )
            return key

        if not kwargs:
            return translation

        try:
            return translation.format(**kwargs)
        except (KeyError, IndexError) as e:
            logger.error(
                "Ошибка форматирования перевода: key=%s, language=%s, error=%s",
                key,
                self.language,
                e,
            )
            return translation
