"""Тесты для системы локализации (i18n).

Модуль тестирует:
- LocalizationConfig dataclass
- LocalizationService — сервис хранения переводов
- Localization — получение и форматирование переводов
- load_translations_from_yaml и init_localization — загрузка из файлов
- Файлы locales/ проекта
"""

from pathlib import Path

import pytest
import yaml

from src.config.yaml_config import LocalizationConfig as LocalizationSettings
from src.utils.i18n import (
    LOCALES_DIR,
    Localization,
    LocalizationConfig,
    LocalizationService,
    init_localization,
    load_translations_from_yaml,
)

# ==============================================================================
# ФИКСТУРЫ
# ==============================================================================


@pytest.fixture
def mock_translations() -> dict[str, dict[str, str]]:
    """Тестовые переводы для двух языков."""
    return {
        "ru": {
            "points.balance": "{user}, у тебя {points} очков.",
            "commandregister.disable.usage": "Использование: !disablecom <команда>",
            "only.ru": "Только по-русски",
        },
        "en": {
            "points.balance": "{user}, you have {points} points.",
            "commandregister.disable.usage": "Usage: !disablecom <command>",
        },
    }


@pytest.fixture
def localization_config() -> LocalizationConfig:
    """Конфиг с двумя языками."""
    return LocalizationConfig(
        enabled=True,
        default_language="ru",
        available_languages=("ru", "en"),
    )


@pytest.fixture
def localization_service(
    mock_translations: dict[str, dict[str, str]],
    localization_config: LocalizationConfig,
) -> LocalizationService:
    """Сервис локализации с тестовыми данными."""
    return LocalizationService(
        translations=mock_translations,
        config=localization_config,
    )


def write_locale(directory: Path, language: str, data: dict[str, str]) -> None:
    """Записать файл перевода."""
    (directory / f"{language}.yaml").write_text(
        yaml.safe_dump(data, allow_unicode=True), encoding="utf-8"
    )


# ==============================================================================
# ТЕСТЫ LocalizationConfig и LocalizationService
# ==============================================================================


def test_localization_config_default_values() -> None:
    """Тест: по умолчанию мультиязычность выключена, доступен только русский."""
    config = LocalizationConfig()

    assert config.enabled is False
    assert config.default_language == "ru"
    assert config.available_languages == ("ru",)


def test_localization_config_is_immutable() -> None:
    """Тест: LocalizationConfig неизменяемый (frozen=True)."""
    config = LocalizationConfig()

    with pytest.raises(AttributeError):
        config.enabled = True  # type: ignore[misc]


def test_localization_service_stores_data(
    localization_service: LocalizationService,
    mock_translations: dict[str, dict[str, str]],
    localization_config: LocalizationConfig,
) -> None:
    """Тест: сервис хранит переводы и конфигурацию."""
    assert localization_service.translations == mock_translations
    assert localization_service.config == localization_config


def test_localization_service_get_translation(
    localization_service: LocalizationService,
) -> None:
    """Тест: get_translation возвращает шаблон или None."""
    assert (
        localization_service.get_translation("en", "points.balance")
        == "{user}, you have {points} points."
    )
    assert localization_service.get_translation("ru", "missing") is None
    assert localization_service.get_translation("fr", "points.balance") is None


# ==============================================================================
# ТЕСТЫ Localization
# ==============================================================================


def test_localization_invalid_language_uses_default(
    localization_service: LocalizationService,
) -> None:
    """Тест: недоступный язык заменяется языком по умолчанию."""
    assert Localization("en", localization_service).language == "en"
    assert Localization("fr", localization_service).language == "ru"


def test_localization_get_with_formatting(
    localization_service: LocalizationService,
) -> None:
    """Тест: параметры подставляются в шаблон."""
    l10n = Localization("en", localization_service)

    assert l10n.get("points.balance", user="alice", points=10) == (
        "alice, you have 10 points."
    )


def test_localization_get_without_params_returns_template(
    localization_service: LocalizationService,
) -> None:
    """Тест: без параметров шаблон возвращается как есть."""
    l10n = Localization("ru", localization_service)

    assert l10n.get("points.balance") == "{user}, у тебя {points} очков."


def test_localization_get_falls_back_to_default_language(
    localization_service: LocalizationService,
) -> None:
    """Тест: ключ без перевода берётся из языка по умолчанию."""
    l10n = Localization("en", localization_service)

    assert l10n.get("only.ru") == "Только по-русски"


def test_localization_get_returns_key_if_not_found(
    localization_service: LocalizationService,
) -> None:
    """Тест: отсутствующий везде ключ возвращается как есть."""
    l10n = Localization("ru", localization_service)

    assert l10n.get("no.such.key") == "no.such.key"


def test_localization_get_formatting_error_returns_template(
    localization_service: LocalizationService,
) -> None:
    """Тест: при нехватке параметров возвращается неформатированный шаблон."""
    l10n = Localization("ru", localization_service)

    assert l10n.get("points.balance", user="alice") == (
        "{user}, у тебя {points} очков."
    )


def test_localization_get_ignores_extra_params(
    localization_service: LocalizationService,
) -> None:
    """Тест: лишние параметры игнорируются."""
    l10n = Localization("en", localization_service)

    result = l10n.get("points.balance", user="bob", points=1, extra="x")

    assert result == "bob, you have 1 points."


# ==============================================================================
# ТЕСТЫ загрузки из YAML
# ==============================================================================


def test_load_translations_from_yaml_loads_all_languages(tmp_path: Path) -> None:
    """Тест: загружаются все доступные языки, значения приводятся к строкам."""
    write_locale(tmp_path, "ru", {"a": "А", "n": 5})  # type: ignore[dict-item]
    write_locale(tmp_path, "en", {"a": "A"})

    translations = load_translations_from_yaml(tmp_path, ["ru", "en"])

    assert translations == {"ru": {"a": "А", "n": "5"}, "en": {"a": "A"}}


def test_load_translations_from_yaml_skips_missing_file(tmp_path: Path) -> None:
    """Тест: язык без файла пропускается."""
    write_locale(tmp_path, "ru", {"a": "А"})

    translations = load_translations_from_yaml(tmp_path, ["ru", "de"])

    assert list(translations) == ["ru"]


def test_load_translations_from_yaml_skips_invalid_yaml(tmp_path: Path) -> None:
    """Тест: язык с битым YAML пропускается."""
    write_locale(tmp_path, "ru", {"a": "А"})
    (tmp_path / "en.yaml").write_text("key: [unclosed", encoding="utf-8")

    translations = load_translations_from_yaml(tmp_path, ["ru", "en"])

    assert list(translations) == ["ru"]


def test_load_translations_from_yaml_raises_if_nothing_loaded(
    tmp_path: Path,
) -> None:
    """Тест: RuntimeError, если не загружено ни одного языка."""
    with pytest.raises(RuntimeError, match="ни одного языка"):
        load_translations_from_yaml(tmp_path, ["ru", "en"])


def test_init_localization_from_settings(tmp_path: Path) -> None:
    """Тест: init_localization собирает сервис из секции config.yaml."""
    write_locale(tmp_path, "ru", {"a": "А"})
    write_locale(tmp_path, "en", {"a": "A"})
    settings = LocalizationSettings(
        enabled=True, default_language="en", available_languages=["ru", "en"]
    )

    service = init_localization(settings, locales_dir=tmp_path)

    assert service.config == LocalizationConfig(
        enabled=True, default_language="en", available_languages=("ru", "en")
    )
    assert Localization("de", service).get("a") == "A"


# ==============================================================================
# ТЕСТЫ файлов переводов проекта
# ==============================================================================


def test_project_locales_have_same_keys() -> None:
    """Тест: русский и английский переводы содержат одинаковые ключи."""
    translations = load_translations_from_yaml(LOCALES_DIR, ["ru", "en"])

    assert set(translations) == {"ru", "en"}
    assert set(translations["ru"]) == set(translations["en"])
