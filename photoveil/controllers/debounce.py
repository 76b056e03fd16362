"""Предлагаемое и зафиксированное значение с окном тишины.

Значение ползунка обновляется сразу (`proposed`), а фиксация (`committed`)
с дорогим пересчётом происходит один раз, когда ввод не менялся в течение
`quiet_period` секунд.
"""
from __future__ import annotations

import time
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class DebouncedValue(Generic[T]):
    def __init__(
        self,
        initial: T,
        quiet_period: float,
        on_commit: Optional[Callable[[T], None]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._proposed: T = initial
        self._committed: T = initial
        self._quiet_period = quiet_period
        self._clock = clock
        self._last_change: Optional[float] = None
        self.on_commit = on_commit

    @property
    def proposed(self) -> T:
        return self._proposed

    @property
    def committed(self) -> T:
        return self._committed

    @property
    def is_pending(self) -> bool:
        return self._last_change is not None

    def propose(self, value: T) -> None:
        self._proposed = value
        self._last_change = self._clock()

    def poll(self) -> bool:
        """Фиксирует значение, если окно тишины истекло. Возвращает True при фиксации."""
        if self._last_change is None:
            return False
        if self._clock() - self._last_change < self._quiet_period:
            return False
        return self.flush()

    def flush(self) -> bool:
        """Немедленная фиксация без ожидания."""
        if self._last_change is None:
            return False
        self._last_change = None
        if self._proposed == self._committed:
            return False
        self._committed = self._proposed
        if self.on_commit:
            self.on_commit(self._committed)
        return True

    def reset(self, value: T) -> None:
        self._proposed = value
        self._committed = value
        self._last_change = None
