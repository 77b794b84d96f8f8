"""Загрузчик YAML-конфигурации.

Этот модуль загружает и валидирует config.yaml — файл с настройками,
которые можно менять без изменения кода.

Содержимое config.yaml:
- Состояние модулей по умолчанию (включён/выключен)
- Настройки команд (скрипт по умолчанию, цены для модераторов)
- Локализация ответов бота
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator


class LocalizationConfig(BaseModel):
    """Настройки мультиязычности.

    Переводы загружаются из файлов locales/<lang>.yaml.
    Бот в чате стрима отвечает на одном языке — default_language.

    Attributes:
        enabled: Включена ли мультиязычность.
        default_language: Язык по умолчанию (ISO 639-1 код: ru, en и т.д.)
        available_languages: Список доступных языков.
            Для каждого должен быть файл locales/<lang>.yaml
    """

    enabled: bool = Field(
        default=False,
        description="Включить поддержку мультиязычности (по умолчанию отключена)",
    )
    default_language: str = Field(
        default="ru",
        description="Язык по умолчанию (ISO 639-1)",
    )
    available_languages: list[str] = Field(
        default_factory=lambda: ["ru"],
        description="Список доступных языков (по умолчанию только русский)",
    )


class ModuleConfig(BaseModel):
    """Конфигурация одного модуля.

    Пример в config.yaml:
        modules:
          systems.point_system:
            enabled: true

    Значение используется только при первом запуске: после переключения
    модуля в панели состояние хранится в таблице modules.
    """

    enabled: bool = Field(
        default=True,
        description="Включён ли модуль по умолчанию",
    )


class ModulesConfig(BaseModel):
    """Конфигурация всех модулей.

    Attributes:
        modules: Словарь {идентификатор_модуля: настройки}.
    """

    modules: dict[str, ModuleConfig] = Field(
        default_factory=dict,
        description="Словарь модулей {id: настройки}",
    )

    def default_enabled(self, module_id: str, fallback: bool) -> bool:
        """Получить состояние модуля по умолчанию.

        Args:
            module_id: Идентификатор модуля.
            fallback: Значение, если модуль не указан в конфиге.

        Returns:
            True если модуль включён по умолчанию.
        """
        module_config = self.modules.get(module_id)
        if module_config is None:
            return fallback
        return module_config.enabled


class CommandsConfig(BaseModel):
    """Настройки реестра команд.

    Attributes:
        default_script: Скрипт, за которым закрепляется команда при
            включении через enablecom, если исходный скрипт неизвестен.
        moderators_pay: Списывать ли очки за платные команды с модераторов.
            Панель может переопределить значение (таблица settings).
    """

    default_script: str = Field(
        default="commands.custom_commands",
        description="Скрипт по умолчанию для повторно включённых команд",
    )
    moderators_pay: bool = Field(
        default=False,
        description="Списывать ли цену команды с модераторов",
    )


class YamlConfig(BaseModel):
    """Корневая конфигурация из config.yaml."""

    localization: LocalizationConfig = Field(
        default_factory=LocalizationConfig,
        description="Настройки мультиязычности",
    )
    modules: ModulesConfig = Field(
        default_factory=ModulesConfig,
        description="Состояние модулей по умолчанию",
    )
    commands: CommandsConfig = Field(
        default_factory=CommandsConfig,
        description="Настройки реестра команд",
    )

    @field_validator("modules", mode="before")
    @classmethod
    def parse_modules(cls, v: dict[str, Any] | None) -> dict[str, Any]:
        """Преобразовать данные модулей в структуру ModulesConfig.

        В YAML модули указываются напрямую:
            modules:
              systems.point_system:
                enabled: true

        Но ModulesConfig ожидает {"modules": {...}}.
        Этот валидатор оборачивает входные данные в нужную структуру.
        """
        if v is None:
            return {"modules": {}}
        if "modules" not in v:
            return {"modules": v}
        return v


def load_yaml_config(path: Path | str = "config.yaml") -> YamlConfig:
    """Загрузить и валидировать YAML-конфигурацию.

    Args:
        path: Путь к файлу конфигурации.

    Returns:
        Валидированный объект конфигурации.
        Если файла нет — конфигурация по умолчанию.

    Raises:
        yaml.YAMLError: Некорректный YAML.
        pydantic.ValidationError: Некорректная конфигурация.
    """
    config_path = Path(path)

    if not config_path.exists():
        return YamlConfig()

    with config_path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    return YamlConfig.model_validate(data)


yaml_config = load_yaml_config()
