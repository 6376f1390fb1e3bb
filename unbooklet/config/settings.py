"""Centralised environment configuration for unbooklet.

This module ensures `.env` loading happens in one place and exposes a typed
snapshot of the pipeline knobs. Other modules call `get_settings()` instead of
reading `os.environ` directly, which keeps defaults in one spot and makes
overrides easy in tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os
from pathlib import Path

from dotenv import load_dotenv


_DEFAULT_ENV_PATH = Path(__file__).resolve().parents[2] / ".env"

DEFAULT_INPUT_DIR = "documents"
DEFAULT_RENDER_ZOOM = 1.5
DEFAULT_PAGE_WIDTH = 600
DEFAULT_PAGE_HEIGHT = 820
DEFAULT_OUTPUT_SUFFIX = "-processed"

_TRUTHY = {"1", "true", "yes", "on"}


def _coerce_int(value: str | None, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _coerce_float(value: str | None, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _coerce_bool(value: str | None, default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in _TRUTHY


@dataclass(frozen=True)
class PageCanvas:
    """Fixed output page size in PDF points."""

    width: int
    height: int


@dataclass(frozen=True)
class UnbookletSettings:
    """Top-level snapshot of configuration values."""

    env_file: Path
    input_dir: Path
    render_zoom: float
    canvas: PageCanvas
    output_suffix: str
    work_dir: Path | None
    keep_failed_scratch: bool


def _resolve_env_path(env_file: os.PathLike[str] | str | None) -> Path:
    if env_file is None:
        return _DEFAULT_ENV_PATH
    return Path(env_file).resolve()


@lru_cache(maxsize=4)
def _load_settings(env_path: Path) -> UnbookletSettings:
    # Existing environment variables take precedence over `.env` values.
    load_dotenv(dotenv_path=env_path, override=False)

    zoom = _coerce_float(os.getenv("UNBOOKLET_RENDER_ZOOM"), DEFAULT_RENDER_ZOOM)
    if zoom <= 0:
        zoom = DEFAULT_RENDER_ZOOM

    canvas = PageCanvas(
        width=_coerce_int(os.getenv("UNBOOKLET_PAGE_WIDTH"), DEFAULT_PAGE_WIDTH),
        height=_coerce_int(os.getenv("UNBOOKLET_PAGE_HEIGHT"), DEFAULT_PAGE_HEIGHT),
    )
    if canvas.width <= 0 or canvas.height <= 0:
        canvas = PageCanvas(width=DEFAULT_PAGE_WIDTH, height=DEFAULT_PAGE_HEIGHT)

    work_dir = os.getenv("UNBOOKLET_WORK_DIR")

    return UnbookletSettings(
        env_file=env_path,
        input_dir=Path(os.getenv("UNBOOKLET_INPUT_DIR") or DEFAULT_INPUT_DIR),
        render_zoom=zoom,
        canvas=canvas,
        output_suffix=os.getenv("UNBOOKLET_OUTPUT_SUFFIX") or DEFAULT_OUTPUT_SUFFIX,
        work_dir=Path(work_dir) if work_dir else None,
        keep_failed_scratch=_coerce_bool(os.getenv("UNBOOKLET_KEEP_FAILED_SCRATCH"), False),
    )


def get_settings(
    env_file: os.PathLike[str] | str | None = None,
    *,
    reload: bool = False,
) -> UnbookletSettings:
    """Return the cached settings snapshot.

    Args:
        env_file: Optional explicit path to a `.env` file. When omitted the repo
            root `.env` file is used.
        reload: When True the cached snapshot is cleared before loading.
    """
    env_path = _resolve_env_path(env_file)
    if reload:
        _load_settings.cache_clear()
    return _load_settings(env_path)
