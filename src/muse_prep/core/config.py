# ==============================================================================
# Configuration module for the Muse preprocessor
# Модуль конфигурации препроцессора Muse
# ==============================================================================
# Settings come from a YAML file; environment variables (and a .env file)
# override them.
#
# Настройки читаются из YAML-файла; переменные окружения (и файл .env)
# их переопределяют.
# ==============================================================================

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


# ==============================================================================
# Main configuration class
# Основной класс конфигурации
# ==============================================================================
class PreprocessConfig(BaseModel):
    """
    Which fixes to run and how.
    Какие исправления выполнять и как.
    """

    # Language code selecting the typography rules ("en", "ru", ...)
    # Код языка для типографских правил
    lang: str = "en"

    # Wrap bare URLs into [[url][domain]]
    # Оборачивать голые ссылки в [[url][domain]]
    fix_links: bool = True

    # Quotes, dashes, ligatures, ordinals, ellipsis
    # Кавычки, тире, лигатуры, порядковые, многоточие
    fix_typography: bool = True

    # Insert language-specific non-breaking spaces (only with fix_typography)
    # Расставлять неразрывные пробелы (только вместе с fix_typography)
    fix_nbsp: bool = True

    # Replace every non-breaking space with a plain one before filtering
    # Заменять все неразрывные пробелы обычными перед фильтрами
    remove_nbsp: bool = False

    # Make non-breaking spaces visible as ~~ in the output
    # Показывать неразрывные пробелы как ~~
    show_nbsp: bool = False

    # Renumber footnotes and refuse to write on mismatch
    # Перенумеровывать сноски и не писать файл при несовпадении
    fix_footnotes: bool = True

    # Logging level for the CLI / Уровень логирования для CLI
    log_level: str = "INFO"

    # Encoding of input and output files / Кодировка файлов
    encoding: str = "utf-8"

    # Directory for JSONL footnote mismatch reports (batch runs)
    # Директория для JSONL-отчётов о несовпадении сносок
    report_dir: Optional[Path] = None

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()


# ==============================================================================
# Environment variable overrides class
# Класс переопределений через переменные окружения
# ==============================================================================
class EnvPreprocessOverrides(BaseSettings):
    """
    Example: MUSEPREP_LANG=ru selects the Russian rules.
    Пример: MUSEPREP_LANG=ru включает русские правила.
    """

    model_config = SettingsConfigDict(
        env_prefix="MUSEPREP_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # None = keep the value from YAML / defaults
    # None = оставить значение из YAML / по умолчанию
    lang: Optional[str] = None
    fix_links: Optional[bool] = None
    fix_typography: Optional[bool] = None
    fix_nbsp: Optional[bool] = None
    remove_nbsp: Optional[bool] = None
    show_nbsp: Optional[bool] = None
    fix_footnotes: Optional[bool] = None
    log_level: Optional[str] = None
    encoding: Optional[str] = None
    report_dir: Optional[Path] = None


def _resolve_default_config_path() -> Path:
    """
    Find configs/preprocess.yaml by searching upward from this file.
    Ищет configs/preprocess.yaml, поднимаясь вверх от текущего файла.
    """
    start = Path(__file__).resolve()
    for p in [start] + list(start.parents):
        cand = p / "configs" / "preprocess.yaml"
        if cand.exists():
            return cand
    return Path("configs/preprocess.yaml")


# Default path to the configuration file
# Путь по умолчанию к конфигурационному файлу
DEFAULT_CONFIG_PATH = _resolve_default_config_path()


def _load_env() -> None:
    # Real environment wins over .env / Реальное окружение важнее .env
    dotenv_path = find_dotenv(filename=".env", usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path, override=False)


def load_preprocess_config(path: Optional[str | Path] = None) -> PreprocessConfig:
    """
    Load configuration from YAML and apply environment overrides.
    Загружает конфигурацию из YAML и применяет переопределения из окружения.

    Priority / Приоритет (highest to lowest / от высшего к низшему):
        1. Environment variables (MUSEPREP_*) / Переменные окружения
        2. YAML file settings / Настройки из YAML-файла
        3. Defaults in PreprocessConfig / Значения по умолчанию
    """
    file_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH

    if not file_path.exists():
        logger.info("Config %s not found, using defaults", file_path)
        data = {}
    else:
        logger.debug("Loading config %s", file_path)
        with file_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    # 'preprocess' section, or the whole mapping
    # Секция 'preprocess' или весь словарь
    params = data.get("preprocess", data) if isinstance(data, dict) else {}
    cfg = PreprocessConfig(**params)

    _load_env()
    override_dict = EnvPreprocessOverrides().model_dump(exclude_none=True)
    if override_dict:
        logger.debug("Environment overrides: %s", sorted(override_dict))
        cfg = PreprocessConfig(**{**cfg.model_dump(), **override_dict})

    return cfg
