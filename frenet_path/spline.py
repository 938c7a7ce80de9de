"""Cubic and linear spline interpolation with a banded LU solver."""

from __future__ import annotations

import bisect
import enum
from collections.abc import Sequence


class BandMatrix:
    """Square band matrix with ``n_upper`` super- and ``n_lower`` sub-diagonals.

    Entries are accessed as ``m[i, j]``. The lower storage keeps one extra
    diagonal used to save the inverse of the original diagonal during LU
    decomposition.
    """

    def __init__(self, dim: int, n_upper: int, n_lower: int) -> None:
        self._upper: list[list[float]] = []
        self._lower: list[list[float]] = []
        self.resize(dim, n_upper, n_lower)

    def resize(self, dim: int, n_upper: int, n_lower: int) -> None:
        """Reset the matrix to the given shape, filled with zeros."""
        if dim <= 0:
            raise ValueError("dimension must be positive")
        if n_upper < 0 or n_lower < 0:
            raise ValueError("band widths must not be negative")
        self._upper = [[0.0] * dim for _ in range(n_upper + 1)]
        self._lower = [[0.0] * dim for _ in range(n_lower + 1)]

    @property
    def dim(self) -> int:
        return len(self._upper[0]) if self._upper else 0

    @property
    def num_upper(self) -> int:
        return len(self._upper) - 1

    @property
    def num_lower(self) -> int:
        return len(self._lower) - 1

    def _locate(self, key: tuple[int, int]) -> tuple[list[float], int]:
        i, j = key
        n = self.dim
        if not (0 <= i < n and 0 <= j < n):
            raise IndexError(f"index ({i}, {j}) outside a {n}x{n} matrix")
        k = j - i
        if not (-self.num_lower <= k <= self.num_upper):
            raise IndexError(f"index ({i}, {j}) outside the band")
        if k >= 0:
            return self._upper[k], i
        return self._lower[-k], i

    def __getitem__(self, key: tuple[int, int]) -> float:
        row, i = self._locate(key)
        return row[i]

    def __setitem__(self, key: tuple[int, int], value: float) -> None:
        row, i = self._locate(key)
        row[i] = float(value)

    def _saved_diag(self, i: int) -> float:
        return self._lower[0][i]

    def lu_decompose(self) -> None:
        """Decompose in place into unit-lower L and upper R."""
        n = self.dim
        for i in range(n):
            if self[i, i] == 0.0:
                raise ValueError("matrix is singular: zero on the diagonal")
            self._lower[0][i] = 1.0 / self[i, i]
            scale = self._lower[0][i]
            for j in range(max(0, i - self.num_lower), min(n - 1, i + self.num_upper) + 1):
                self[i, j] = self[i, j] * scale
            self[i, i] = 1.0

        for k in range(n):
            i_max = min(n - 1, k + self.num_lower)
            for i in range(k + 1, i_max + 1):
                if self[k, k] == 0.0:
                    raise ValueError("matrix is singular: zero pivot")
                x = -self[i, k] / self[k, k]
                self[i, k] = -x
                j_max = min(n - 1, k + self.num_upper)
                for j in range(k + 1, j_max + 1):
                    self[i, j] = self[i, j] + x * self[k, j]

    def _check_rhs(self, b: Sequence[float]) -> None:
        if len(b) != self.dim:
            raise ValueError(f"right-hand side has {len(b)} entries, expected {self.dim}")

    def l_solve(self, b: Sequence[float]) -> list[float]:
        """Solve L y = b after decomposition."""
        self._check_rhs(b)
        x: list[float] = []
        for i, bi in enumerate(b):
            start = max(0, i - self.num_lower)
            acc = sum(self[i, j] * x[j] for j in range(start, i))
            x.append(bi * self._saved_diag(i) - acc)
        return x

    def r_solve(self, b: Sequence[float]) -> list[float]:
        """Solve R x = b after decomposition."""
        self._check_rhs(b)
        n = self.dim
        x = [0.0] * n
        for i in reversed(range(n)):
            stop = min(n - 1, i + self.num_upper)
            acc = sum(self[i, j] * x[j] for j in range(i + 1, stop + 1))
            x[i] = (b[i] - acc) / self[i, i]
        return x

    def lu_solve(self, b: Sequence[float], is_lu_decomposed: bool = False) -> list[float]:
        """Solve A x = b, decomposing first unless already done."""
        self._check_rhs(b)
        if not is_lu_decomposed:
            self.lu_decompose()
        return self.r_solve(self.l_solve(b))


class BoundaryType(enum.Enum):
    FIRST_DERIV = 1
    SECOND_DERIV = 2


class Spline:
    """Piecewise interpolant f(x) = a(x-x_i)^3 + b(x-x_i)^2 + c(x-x_i) + y_i.

    Defaults to a natural cubic spline (zero second derivative at both ends).
    """

    def __init__(
        self,
        x: Sequence[float],
        y: Sequence[float],
        cubic: bool = True,
        left: BoundaryType = BoundaryType.SECOND_DERIV,
        left_value: float = 0.0,
        right: BoundaryType = BoundaryType.SECOND_DERIV,
        right_value: float = 0.0,
        force_linear_extrapolation: bool = False,
    ) -> None:
        if len(x) != len(y):
            raise ValueError("x and y must have the same length")
        if len(x) <= 2:
            raise ValueError("at least three points are required")
        xs = [float(v) for v in x]
        ys = [float(v) for v in y]
        if any(a >= b for a, b in zip(xs, xs[1:])):
            raise ValueError("x must be strictly increasing")
        self._x = xs
        self._y = ys
        self._left = BoundaryType(left)
        self._right = BoundaryType(right)
        self._left_value = float(left_value)
        self._right_value = float(right_value)
        self._force_linear = force_linear_extrapolation

        n = len(xs)
        if cubic:
            self._fit_cubic()
        else:
            self._a = [0.0] * n
            self._b = [0.0] * n
            self._c = [(y1 - y0) / (x1 - x0) for x0, x1, y0, y1 in zip(xs, xs[1:], ys, ys[1:])]
            self._c.append(0.0)

        self._b0 = 0.0 if force_linear_extrapolation else self._b[0]
        self._c0 = self._c[0]
        h = xs[-1] - xs[-2]
        self._a[-1] = 0.0
        self._c[-1] = 3.0 * self._a[-2] * h * h + 2.0 * self._b[-2] * h + self._c[-2]
        if force_linear_extrapolation:
            self._b[-1] = 0.0

    def _fit_cubic(self) -> None:
        x, y = self._x, self._y
        n = len(x)
        matrix = BandMatrix(n, 1, 1)
        rhs = [0.0] * n
        for i in range(1, n - 1):
            matrix[i, i - 1] = (x[i] - x[i - 1]) / 3.0
            matrix[i, i] = 2.0 / 3.0 * (x[i + 1] - x[i - 1])
            matrix[i, i + 1] = (x[i + 1] - x[i]) / 3.0
            rhs[i] = (y[i + 1] - y[i]) / (x[i + 1] - x[i]) - (y[i] - y[i - 1]) / (x[i] - x[i - 1])

        if self._left is BoundaryType.SECOND_DERIV:
            matrix[0, 0] = 2.0
            matrix[0, 1] = 0.0
            rhs[0] = self._left_value
        else:
            h0 = x[1] - x[0]
            matrix[0, 0] = 2.0 * h0
            matrix[0, 1] = h0
            rhs[0] = 3.0 * ((y[1] - y[0]) / h0 - self._left_value)

        if self._right is BoundaryType.SECOND_DERIV:
            matrix[n - 1, n - 1] = 2.0
            matrix[n - 1, n - 2] = 0.0
            rhs[n - 1] = self._right_value
        else:
            hn = x[n - 1] - x[n - 2]
            matrix[n - 1, n - 1] = 2.0 * hn
            matrix[n - 1, n - 2] = hn
            rhs[n - 1] = 3.0 * (self._right_value - (y[n - 1] - y[n - 2]) / hn)

        b = matrix.lu_solve(rhs)
        self._b = b
        self._a = [0.0] * n
        self._c = [0.0] * n
        for i in range(n - 1):
            h = x[i + 1] - x[i]
            self._a[i] = (b[i + 1] - b[i]) / (3.0 * h)
            self._c[i] = (y[i + 1] - y[i]) / h - (2.0 * b[i] + b[i + 1]) * h / 3.0

    def _segment(self, x: float) -> tuple[int, float]:
        idx = max(bisect.bisect_left(self._x, x) - 1, 0)
        return idx, x - self._x[idx]

    def __call__(self, x: float) -> float:
        idx, h = self._segment(x)
        if x < self._x[0]:
            return (self._b0 * h + self._c0) * h + self._y[0]
        if x > self._x[-1]:
            return (self._b[-1] * h + self._c[-1]) * h + self._y[-1]
        return ((self._a[idx] * h + self._b[idx]) * h + self._c[idx]) * h + self._y[idx]

    def deriv(self, order: int, x: float) -> float:
        """Value of the ``order``-th derivative at ``x``."""
        if order <= 0:
            raise ValueError("derivative order must be positive")
        idx, h = self._segment(x)
        if x < self._x[0]:
            if order == 1:
                return 2.0 * self._b0 * h + self._c0
            if order == 2:
                return 2.0 * self._b0 * h
            return 0.0
        if x > self._x[-1]:
            if order == 1:
                return 2.0 * self._b[-1] * h + self._c[-1]
            if order == 2:
                return 2.0 * self._b[-1]
            return 0.0
        if order == 1:
            return (3.0 * self._a[idx] * h + 2.0 * self._b[idx]) * h + self._c[idx]
        if order == 2:
            return 6.0 * self._a[idx] * h + 2.0 * self._b[idx]
        if order == 3:
            return 6.0 * self._a[idx]
        return 0.0