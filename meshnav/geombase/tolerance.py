"""
Допуски и общие векторные утилиты для геометрического ядра.
"""

from __future__ import annotations

from typing import Optional, Sequence, Union
import numpy as np

# Относительный допуск для сравнения скаляров
EPSILON = 1e-9

# Допуск для проверки параллельности плоскостей (1 - w^2 < eps^2)
PARALLEL_EPSILON = 1e-7

# Длина, ниже которой вектор считается нулевым
_ZERO_LENGTH = 1e-12

VectorLike = Union[np.ndarray, Sequence[float]]


def as_vec3(value: VectorLike) -> np.ndarray:
    """Привести 3-последовательность к np.ndarray (3,) float64."""
    arr = np.asarray(value, dtype=np.float64)
    if arr.shape != (3,):
        raise ValueError(f"expected 3 components, got shape {arr.shape}")
    return arr


def approx_eq(a: float, b: float, eps: float = EPSILON) -> bool:
    """Сравнение скаляров с допуском, масштабированным по величине."""
    return abs(a - b) <= eps * max(1.0, abs(a), abs(b))


def approx_zero(value: float, scale: float = 1.0, eps: float = EPSILON) -> bool:
    """Близко ли value к нулю относительно характерного масштаба scale."""
    return abs(value) <= eps * max(1.0, abs(scale))


def length(v: np.ndarray) -> float:
    return float(np.linalg.norm(v))


def normalize(v: np.ndarray) -> Optional[np.ndarray]:
    """Единичный вектор или None для вырожденного (нулевого) вектора."""
    n = length(v)
    if n < _ZERO_LENGTH:
        return None
    return v / n


def is_zero_length(v: np.ndarray) -> bool:
    return length(v) < _ZERO_LENGTH
