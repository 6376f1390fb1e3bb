"""Progress reporting for the page pipeline."""

from __future__ import annotations

from typing import Protocol

from tqdm import tqdm


class ProgressReporter(Protocol):
    """Lightweight progress reporter abstraction."""

    def start(self, total: int) -> None: ...

    def increment(self) -> None: ...

    def close(self) -> None: ...


class TqdmProgressReporter:
    """Progress reporter backed by tqdm, one tick per physical page."""

    def __init__(self, desc: str) -> None:
        self._desc = desc
        self._pbar: tqdm | None = None

    def start(self, total: int) -> None:
        if self._pbar is not None:
            self._pbar.close()
        self._pbar = tqdm(
            total=total,
            desc=self._desc,
            unit="page",
            smoothing=0,
            leave=False,
        )

    def increment(self) -> None:
        if self._pbar is not None:
            self._pbar.update(1)

    def close(self) -> None:
        if self._pbar is not None:
            self._pbar.close()
            self._pbar = None


__all__ = ["ProgressReporter", "TqdmProgressReporter"]
