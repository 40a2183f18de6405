"""
Одномерные интервалы.

Interval — либо пустой (EmptyInterval), либо строгий (StrictInterval).
Строгий интервал содержит хотя бы одну точку: это PointInterval (одно значение)
или PointsInterval (отрезок lo <= hi).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class Interval:
    """Непрерывный диапазон значений, возможно пустой."""

    __slots__ = ()

    @staticmethod
    def empty() -> "Interval":
        """Пустой интервал."""
        return EmptyInterval()

    @staticmethod
    def from_point(p: float) -> "Interval":
        """Интервал из одной точки."""
        return StrictInterval.from_point(p)

    @staticmethod
    def from_points(lo: float, hi: float) -> "Interval":
        """Интервал [lo, hi]. Пустой, если hi < lo."""
        strict = StrictInterval.from_points(lo, hi)
        if strict is None:
            return EmptyInterval()
        return strict

    def extend(self, p: float) -> "Interval":
        raise NotImplementedError

    def intersection(self, other: "Interval") -> "Interval":
        raise NotImplementedError

    def is_empty(self) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class EmptyInterval(Interval):
    """Пустой интервал. Всегда корректное значение."""

    __slots__ = ()

    def extend(self, p: float) -> Interval:
        return PointInterval(float(p))

    def intersection(self, other: Interval) -> Interval:
        return self

    def is_empty(self) -> bool:
        return True


class StrictInterval(Interval):
    """Непустой интервал: точка или отрезок."""

    __slots__ = ()

    @staticmethod
    def from_point(p: float) -> "StrictInterval":
        return PointInterval(float(p))

    @staticmethod
    def from_points(lo: float, hi: float) -> Optional["StrictInterval"]:
        """Отрезок [lo, hi], или None если диапазон некорректен."""
        if hi < lo:
            return None
        return PointsInterval(float(lo), float(hi))

    def is_empty(self) -> bool:
        return False

    def lo(self) -> float:
        raise NotImplementedError

    def hi(self) -> float:
        raise NotImplementedError

    def center(self) -> float:
        """Середина интервала."""
        lo = self.lo()
        return lo + (self.hi() - lo) / 2.0

    def length(self) -> float:
        """Длина интервала (0 для точки)."""
        return self.hi() - self.lo()

    def contains(self, p: float) -> bool:
        return self.lo() <= p <= self.hi()

    def contains_interval(self, other: Interval) -> bool:
        """Является ли интервал надмножеством other."""
        if other.is_empty():
            return True
        return self.contains(other.lo()) and self.contains(other.hi())

    def clamp_point(self, p: float) -> float:
        """Ближайшая к p точка интервала."""
        lo = self.lo()
        hi = self.hi()
        if p > hi:
            return hi
        if p < lo:
            return lo
        return p

    def intersection(self, other: Interval) -> Interval:
        if other.is_empty():
            return Interval.empty()

        lo = max(self.lo(), other.lo())
        hi = min(self.hi(), other.hi())
        if lo > hi:
            return Interval.empty()
        # Пересечение с точкой — точка, независимо от порядка операндов
        if isinstance(self, PointInterval) or isinstance(other, PointInterval):
            return PointInterval(lo)
        return PointsInterval(lo, hi)


@dataclass(frozen=True)
class PointInterval(StrictInterval):
    """Интервал из единственного значения."""

    value: float

    def lo(self) -> float:
        return self.value

    def hi(self) -> float:
        return self.value

    def center(self) -> float:
        return self.value

    def length(self) -> float:
        return 0.0

    def contains(self, p: float) -> bool:
        return p == self.value

    def clamp_point(self, p: float) -> float:
        return self.value

    def extend(self, p: float) -> StrictInterval:
        p = float(p)
        if self.value < p:
            return PointsInterval(self.value, p)
        if self.value > p:
            return PointsInterval(p, self.value)
        return self


@dataclass(frozen=True)
class PointsInterval(StrictInterval):
    """Замкнутый отрезок [lo, hi], lo <= hi."""

    low: float
    high: float

    def __post_init__(self) -> None:
        if self.high < self.low:
            raise ValueError(f"invalid interval: lo={self.low} > hi={self.high}")

    def lo(self) -> float:
        return self.low

    def hi(self) -> float:
        return self.high

    def extend(self, p: float) -> StrictInterval:
        p = float(p)
        if p < self.low:
            return PointsInterval(p, self.high)
        if p > self.high:
            return PointsInterval(self.low, p)
        return self
