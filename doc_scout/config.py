# === FILE: doc_scout/config.py ===
"""
Модуль для загрузки и валидации параметров обхода DocScout.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union
from urllib.parse import urlparse

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

logger = logging.getLogger("DocScout")


class CrawlScope(str, Enum):
    SUBPAGES = "subpages"
    HOSTNAME = "hostname"
    DOMAIN = "domain"


class ScrapeMode(str, Enum):
    """Как получать HTML: только загрузка, рендер в браузере или авто."""

    FETCH = "fetch"
    PLAYWRIGHT = "playwright"
    AUTO = "auto"


class ScrapeOptions(BaseModel):
    """Параметры одного запуска обхода."""
    model_config = ConfigDict(extra="forbid", frozen=True, use_enum_values=True)

    url: str = Field(..., min_length=1, description="Seed URL (http, https или file).")
    max_depth: int = Field(3, ge=0, description="Максимальная глубина обхода ссылок.")
    max_pages: int = Field(1000, ge=1, description="Жесткий лимит по числу страниц.")
    max_concurrency: int = Field(3, ge=1, description="Одновременных загрузок не больше.")
    scope: CrawlScope = Field(CrawlScope.SUBPAGES, description="Область обхода относительно seed.")
    include_patterns: Optional[list[str]] = Field(None, description="Glob или /regex/ для включения.")
    exclude_patterns: Optional[list[str]] = Field(None, description="Glob или /regex/ для исключения.")
    follow_redirects: bool = Field(True, description="Следовать 3xx-редиректам.")
    scrape_mode: ScrapeMode = Field(ScrapeMode.FETCH, description="fetch | playwright | auto.")
    timeout: float = Field(30.0, gt=0, description="Таймаут на один запрос (секунд).")
    user_agent: str = Field("DocScoutBot/1.0", min_length=1, description="Заголовок User-Agent.")
    retry_times: int = Field(3, ge=0, description="Число повторных попыток при 5xx/429.")
    retry_delay: float = Field(1.0, ge=0, description="Базовая задержка backoff (секунд).")
    exclude_selectors: list[str] = Field(
        default_factory=list, description="CSS-селекторы, удаляемые из HTML дополнительно."
    )
    allowed_schemes: tuple[str, ...] = Field(
        ("http", "https", "file"), description="Схемы ссылок, допустимые для обхода."
    )
    chunk_size: int = Field(5000, ge=1, description="Бюджет чанка в байтах по умолчанию для команды split.")

    @field_validator("allowed_schemes", mode="before")
    def _lower_schemes(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            return tuple(str(s).lower().rstrip(":") for s in v)
        return v

    @model_validator(mode="after")
    def _check_seed_scheme(self) -> ScrapeOptions:
        scheme = urlparse(self.url).scheme.lower()
        if scheme not in self.allowed_schemes:
            raise ValueError(
                f"Схема seed URL '{scheme or '<none>'}' не входит в allowed_schemes {self.allowed_schemes}"
            )
        return self


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def read_config_file(path: Union[str, Path]) -> dict[str, Any]:
    """Читает YAML или JSON и возвращает сырой mapping без валидации."""
    path_obj = Path(path).expanduser().resolve()
    if not path_obj.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path_obj)
    if suffix == ".json":
        return _read_json(path_obj)
    raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")


def load_config(path: Union[str, Path, None], **overrides: Any) -> ScrapeOptions:
    """
    Читает YAML или JSON и возвращает проверенный объект ScrapeOptions.
    ``overrides`` со значением ``None`` игнорируются, остальные перекрывают файл.
    Без файла все параметры (минимум ``url``) должны прийти через ``overrides``.
    """
    data: dict[str, Any] = read_config_file(path) if path is not None else {}
    data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return ScrapeOptions(**data)
    except ValidationError as exc:
        logger.error("Invalid configuration (%d errors): %s", exc.error_count(), path or "<overrides>")
        raise


__all__ = ["CrawlScope", "ScrapeMode", "ScrapeOptions", "load_config", "read_config_file"]
