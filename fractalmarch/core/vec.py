from __future__ import annotations

import math
from typing import Iterator, Union

Scalar = Union[int, float]


class _Vec:
    """Shared componentwise algebra for the fixed-size float vectors.

    Subclasses only declare ``__slots__``; every arithmetic operator accepts
    either a vector of the same size or a scalar, which is broadcast.
    """

    __slots__ = ()

    def __init__(self, *components: Scalar):
        if len(components) != len(self.__slots__):
            raise TypeError(f"{type(self).__name__} takes {len(self.__slots__)} components")
        for name, value in zip(self.__slots__, components):
            object.__setattr__(self, name, float(value))

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __iter__(self) -> Iterator[float]:
        for name in self.__slots__:
            yield getattr(self, name)

    def __len__(self) -> int:
        return len(self.__slots__)

    def __getitem__(self, index: int) -> float:
        return tuple(self)[index]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({', '.join(repr(c) for c in self)})"

    def __eq__(self, other) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return tuple(self) == tuple(other)

    def __hash__(self) -> int:
        return hash((type(self).__name__,) + tuple(self))

    def _zip(self, other, op):
        if isinstance(other, (int, float)):
            return type(self)(*(op(a, other) for a in self))
        if type(other) is type(self):
            return type(self)(*(op(a, b) for a, b in zip(self, other)))
        return NotImplemented

    def __add__(self, other):
        return self._zip(other, lambda a, b: a + b)

    def __radd__(self, other):
        return self._zip(other, lambda a, b: b + a)

    def __sub__(self, other):
        return self._zip(other, lambda a, b: a - b)

    def __rsub__(self, other):
        return self._zip(other, lambda a, b: b - a)

    def __mul__(self, other):
        return self._zip(other, lambda a, b: a * b)

    def __rmul__(self, other):
        return self._zip(other, lambda a, b: b * a)

    def __truediv__(self, other):
        return self._zip(other, lambda a, b: a / b)

    def __rtruediv__(self, other):
        return self._zip(other, lambda a, b: b / a)

    def __neg__(self):
        return type(self)(*(-a for a in self))

    def dot(self, other) -> float:
        return sum(a * b for a, b in zip(self, other))

    def length(self) -> float:
        return math.sqrt(self.dot(self))

    def fract(self):
        return type(self)(*(a - math.floor(a) for a in self))

    def sin(self):
        return type(self)(*(math.sin(a) for a in self))

    def tanh(self):
        return type(self)(*(math.tanh(a) for a in self))

    def max(self, floor: float):
        """Componentwise ``max(component, floor)``."""
        return type(self)(*(a if a > floor else floor for a in self))


class Vec2(_Vec):
    __slots__ = ("x", "y")

    @property
    def yx(self) -> Vec2:
        return Vec2(self.y, self.x)

    @property
    def xyyx(self) -> Vec4:
        return Vec4(self.x, self.y, self.y, self.x)

    def __mul__(self, other):
        if isinstance(other, Rotation2D):
            return other.apply(self)
        return super().__mul__(other)


class Vec3(_Vec):
    __slots__ = ("x", "y", "z")

    @property
    def xz(self) -> Vec2:
        return Vec2(self.x, self.z)

    def with_xz(self, xz: Vec2) -> Vec3:
        return Vec3(xz.x, self.y, xz.y)


class Vec4(_Vec):
    __slots__ = ("x", "y", "z", "w")

    def with_w(self, w: float) -> Vec4:
        return Vec4(self.x, self.y, self.z, w)


class Rotation2D:
    """2x2 rotation matrix with rows ``(c, -s)`` and ``(s, c)``."""

    __slots__ = ("m",)

    def __init__(self, angle: float):
        s = math.sin(angle)
        c = math.cos(angle)
        object.__setattr__(self, "m", ((c, -s), (s, c)))

    def __setattr__(self, name, value):
        raise AttributeError("Rotation2D is immutable")

    def apply(self, v: Vec2) -> Vec2:
        (m00, m01), (m10, m11) = self.m
        return Vec2(v.x * m00 + v.y * m01, v.x * m10 + v.y * m11)

    def __repr__(self) -> str:
        return f"Rotation2D({self.m!r})"
