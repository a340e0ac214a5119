# File: a11y_scout/config.py
"""
Конфигурация A11y Scout: схемы pydantic (CrawlConfig, TrackerConfig)
и загрузка из YAML или JSON.
"""
from __future__ import annotations

import errno
import json
import os
import re
from pathlib import Path
from typing import Any, Callable, Dict, List, Literal, Tuple, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    field_validator,
    model_validator,
)

from a11y_scout.models import IMPACTS

__all__ = ["TrackerConfig", "CrawlConfig", "load_config", "DEFAULT_AXE_SCRIPT", "DEFAULT_CONFIG_PATH"]

DEFAULT_AXE_SCRIPT = "https://cdnjs.cloudflare.com/ajax/libs/axe-core/4.9.1/axe.min.js"


class TrackerConfig(BaseModel):
    """Настройки трекера задач, в который заводятся найденные проблемы."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["github", "gh", "none"] = Field("none", description="Тип трекера.")
    repo: str = Field("", description="Репозиторий в формате owner/name.")
    labels: List[str] = Field(
        default_factory=lambda: ["accessibility", "a11y-scout"],
        description="Метки, добавляемые к каждой задаче.",
    )
    api_url: str = Field("https://api.github.com", min_length=1, description="Базовый URL REST API.")
    token_env: str = Field("GITHUB_TOKEN", min_length=1, description="Переменная окружения с токеном.")
    gh_path: str = Field("gh", min_length=1, description="Путь к исполняемому файлу gh.")
    timeout: float = Field(30.0, gt=0, description="Таймаут на один запрос к трекеру (секунд).")

    @model_validator(mode="after")
    def _check_repo(self) -> TrackerConfig:
        if self.kind != "none" and not re.fullmatch(r"[\w.-]+/[\w.-]+", self.repo):
            raise ValueError(f"tracker.repo must look like 'owner/name', got {self.repo!r}")
        return self


class CrawlConfig(BaseModel):
    """Конфигурация для одного запуска обхода и аудита."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    base_url: HttpUrl = Field(..., description="Корневой URL для обхода.")
    max_depth: int = Field(2, ge=0, description="Максимальное число переходов от корня.")
    impacts: List[str] = Field(
        default_factory=lambda: ["critical", "serious"],
        min_length=1,
        description="Учитываемые уровни серьёзности нарушений.",
    )
    exclude_patterns: List[str] = Field(
        default_factory=lambda: [r"/log-?out", r"/sign-?out"],
        description="Регулярные выражения для путей, которые нельзя посещать.",
    )
    output_dir: Path = Field(Path("a11y-reports"), description="Папка для markdown-отчётов.")
    report_frontmatter: bool = Field(False, description="Добавлять YAML frontmatter в отчёты.")
    report_tags: List[str] = Field(
        default_factory=lambda: ["accessibility"], description="Теги для frontmatter."
    )
    concurrency: int = Field(1, ge=1, le=16, description="Число страниц, проверяемых параллельно.")
    navigation_timeout: float = Field(30.0, gt=0, description="Таймаут загрузки страницы (секунд).")
    audit_timeout: float = Field(60.0, gt=0, description="Таймаут аудита страницы (секунд).")
    user_agent: str = Field("A11yScout/1.0", min_length=1, description="Заголовок User-Agent.")
    headless: bool = Field(True, description="Запускать браузер без окна.")
    axe_script: str = Field(DEFAULT_AXE_SCRIPT, min_length=1, description="URL или путь к axe.min.js.")
    axe_tags: List[str] = Field(
        default_factory=lambda: ["wcag2a", "wcag2aa"], description="Наборы правил axe-core."
    )
    file_audit_failures: bool = Field(False, description="Заводить задачи для неудачных аудитов.")

    tracker: TrackerConfig = Field(default_factory=TrackerConfig)

    @field_validator("impacts")
    def _check_impacts(cls, v: List[str]) -> List[str]:
        normalized = [i.strip().lower() for i in v]
        unknown = [i for i in normalized if i not in IMPACTS]
        if unknown:
            raise ValueError(f"unknown impact level(s): {', '.join(unknown)}")
        return list(dict.fromkeys(normalized))

    @field_validator("exclude_patterns")
    def _check_patterns(cls, v: List[str]) -> List[str]:
        for pattern in v:
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ValueError(f"invalid exclude pattern {pattern!r}: {exc}") from exc
        return v


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


def _parse_yaml(text: str) -> Any:
    return yaml.safe_load(text)


def _parse_json(text: str) -> Any:
    return json.loads(text)


_PARSERS: Dict[str, Tuple[str, Callable[[str], Any], Tuple[type, ...]]] = {
    ".yaml": ("YAML", _parse_yaml, (yaml.YAMLError,)),
    ".yml": ("YAML", _parse_yaml, (yaml.YAMLError,)),
    ".json": ("JSON", _parse_json, (json.JSONDecodeError,)),
}


def _resolve(path: Union[str, Path, None]) -> Path:
    candidate = DEFAULT_CONFIG_PATH if path is None else Path(path).expanduser()
    if not candidate.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(candidate))
    return candidate


def load_config(path: Union[str, Path, None]) -> CrawlConfig:
    """
    Читает конфиг (YAML: .yaml/.yml, JSON: .json) и проверяет его моделью CrawlConfig.

    Без пути берётся configs/default.yaml относительно текущей папки.
    Ошибки: FileNotFoundError (нет файла), ValueError (синтаксис или
    неизвестное расширение), TypeError (верхний уровень не mapping),
    pydantic.ValidationError (неверные значения).
    """
    cfg_path = _resolve(path)
    suffix = cfg_path.suffix.lower()
    if suffix not in _PARSERS:
        raise ValueError(f"Неподдерживаемый формат конфига {cfg_path.name!r}: ожидается .yaml, .yml или .json")
    fmt, parse, syntax_errors = _PARSERS[suffix]

    try:
        data = parse(cfg_path.read_text(encoding="utf-8"))
    except syntax_errors as exc:
        raise ValueError(f"Ошибка синтаксиса {fmt} в {cfg_path}: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise TypeError(f"{cfg_path}: ожидался mapping на верхнем уровне, получено {type(data).__name__}")
    return CrawlConfig.model_validate(data)
