# Copyright 2025 Qilimanjaro Quantum Tech
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""The closed set of failure kinds reported by optimal_learning."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

import numpy as np

from optimal_learning.exceptions.errors import ContractViolationError
from optimal_learning.exceptions.formatting import (
    build_message,
    describe_bounds,
    describe_mismatch,
    describe_singular_matrix,
)
from optimal_learning.exceptions.value_types import coerce, highest, is_floating, lowest, resolve_value_type

if TYPE_CHECKING:
    from numpy.typing import ArrayLike

    from optimal_learning.exceptions.context import ErrorContext
    from optimal_learning.exceptions.value_types import ValueTypeLike

ValueT = TypeVar("ValueT", int, float)

_SPECIALIZATIONS: dict[tuple[type, np.dtype], type] = {}


class _ValueTypeParameter:
    """
    Makes ``Failure[T]`` select the value type at run time.

    Subscripting with a concrete type returns a cached subclass whose value type is fixed to ``T``, so
    ``UpperBoundFailure[float](context, 11, 10)`` pins ``min`` to the lowest float64 even though the
    payload is made of ints. Subscripting with a ``TypeVar`` keeps the usual ``Generic`` behavior.
    """

    _preset_value_type: ClassVar[np.dtype | None] = None

    def __class_getitem__(cls, item: Any) -> Any:
        if isinstance(item, TypeVar):
            return super().__class_getitem__(item)  # type: ignore[misc]
        dtype = resolve_value_type(item)
        key = (cls, dtype)
        if key not in _SPECIALIZATIONS:
            namespace = {
                "__module__": cls.__module__,
                "__qualname__": f"{cls.__qualname__}[{dtype.name}]",
                "_preset_value_type": dtype,
            }
            _SPECIALIZATIONS[key] = type(f"{cls.__name__}[{dtype.name}]", (cls,), namespace)
        return _SPECIALIZATIONS[key]

    @classmethod
    def _requested_value_type(cls, value_type: ValueTypeLike | None) -> ValueTypeLike | None:
        if cls._preset_value_type is None:
            return value_type
        if value_type is not None and resolve_value_type(value_type) != cls._preset_value_type:
            raise ContractViolationError(
                f"{cls.__qualname__} is fixed to {cls._preset_value_type}, got value_type={value_type!r}."
            )
        return cls._preset_value_type


class OptimalLearningException(Exception):
    """
    Base of every failure record.

    The message is formatted exactly once, in ``__init__``, from the kind name, the
    :class:`~optimal_learning.exceptions.context.ErrorContext` and the kind-specific payload.
    Afterwards :attr:`message` hands back that same string object.

    Subclasses store their payload before calling ``super().__init__`` and override
    :meth:`_describe` to contribute the payload part of the message.
    """

    kind_name: ClassVar[str] = "OptimalLearningException"

    def __init__(self, context: ErrorContext) -> None:
        self._context = context
        self._message = build_message(self.kind_name, context, self._describe)
        super().__init__(self._message)

    def _describe(self) -> str | None:  # noqa: PLR6301
        return None

    @property
    def context(self) -> ErrorContext:
        return self._context

    @property
    def message(self) -> str:
        """
        The diagnostic message built at construction.

        Returns:
            str: ``KIND: DETAIL CUSTOM_MESSAGE FUNC (FILE:LINE)`` with absent parts omitted.
        """
        return self._message

    def __str__(self) -> str:
        return self._message


class RuntimeFailure(OptimalLearningException):
    """General runtime failure that fits no other kind. Carries only its context."""

    kind_name: ClassVar[str] = "RuntimeFailure"


class BoundsFailure(_ValueTypeParameter, OptimalLearningException, Generic[ValueT]):
    """
    Failure for ``value < min`` or ``value > max``.

    Stores value, min and max as scalars of the record's value type for debugging, logging or
    reacting to the failure. The record only reports: neither ``min <= max`` nor the value actually
    being out of range is checked. ``BoundsFailure[float]`` fixes the value type, so int payloads are
    stored as float64; a payload that would lose its value in the conversion is rejected.

    Example:
        .. code-block:: python

            from optimal_learning.exceptions import BoundsFailure, raise_failure

            raise_failure(BoundsFailure, "Invalid length scale.", length, 0.0, 10.0)
    """

    kind_name: ClassVar[str] = "BoundsFailure"

    def __init__(
        self,
        context: ErrorContext,
        value: ValueT,
        min_value: ValueT,
        max_value: ValueT,
        *,
        value_type: ValueTypeLike | None = None,
    ) -> None:
        """
        Args:
            context (ErrorContext): Where the failure was detected.
            value (ValueT): The value violating its bounds.
            min_value (ValueT): Lower bound for ``value``.
            max_value (ValueT): Upper bound for ``value``.
            value_type (ValueTypeLike | None): Integer or floating-point type of the payload. Inferred
                from the values when omitted and the class is not subscripted.

        Raises:
            ContractViolationError: If the value type is not an integer or floating-point type.
        """
        self._value_type = resolve_value_type(self._requested_value_type(value_type), value, min_value, max_value)
        self._value = coerce(self._value_type, value)
        self._min = coerce(self._value_type, min_value)
        self._max = coerce(self._value_type, max_value)
        super().__init__(context)

    def _describe(self) -> str:
        return describe_bounds(self._value, self._min, self._max)

    @property
    def value_type(self) -> np.dtype:
        return self._value_type

    @property
    def value(self) -> np.generic:
        return self._value

    @property
    def min(self) -> np.generic:
        return self._min

    @property
    def max(self) -> np.generic:
        return self._max


class LowerBoundFailure(BoundsFailure[ValueT]):
    """Failure for ``value < min``. The max bound is pinned to the largest value of the value type."""

    kind_name: ClassVar[str] = "LowerBoundFailure"

    def __init__(
        self,
        context: ErrorContext,
        value: ValueT,
        min_value: ValueT,
        *,
        value_type: ValueTypeLike | None = None,
    ) -> None:
        dtype = resolve_value_type(self._requested_value_type(value_type), value, min_value)
        super().__init__(context, value, min_value, highest(dtype), value_type=dtype)


class UpperBoundFailure(BoundsFailure[ValueT]):
    """Failure for ``value > max``. The min bound is pinned to the most negative value of the value type."""

    kind_name: ClassVar[str] = "UpperBoundFailure"

    def __init__(
        self,
        context: ErrorContext,
        value: ValueT,
        max_value: ValueT,
        *,
        value_type: ValueTypeLike | None = None,
    ) -> None:
        dtype = resolve_value_type(self._requested_value_type(value_type), value, max_value)
        super().__init__(context, value, lowest(dtype), max_value, value_type=dtype)


class InvalidValueFailure(_ValueTypeParameter, OptimalLearningException, Generic[ValueT]):
    """
    Failure for ``value != truth``, optionally within ``± tolerance``.

    The tolerance form is only available for floating-point value types.
    """

    kind_name: ClassVar[str] = "InvalidValueFailure"

    def __init__(
        self,
        context: ErrorContext,
        value: ValueT,
        truth: ValueT,
        tolerance: ValueT | None = None,
        *,
        value_type: ValueTypeLike | None = None,
    ) -> None:
        """
        Args:
            context (ErrorContext): Where the failure was detected.
            value (ValueT): The invalid value.
            truth (ValueT): What ``value`` is supposed to be.
            tolerance (ValueT | None): Maximum acceptable ``|value - truth|``.
            value_type (ValueTypeLike | None): Integer or floating-point type of the payload. Inferred
                from ``value`` and ``truth`` when omitted.

        Raises:
            ContractViolationError: If the value type is not numeric, or a tolerance is given for an
                integer value type.
        """
        self._value_type = resolve_value_type(self._requested_value_type(value_type), value, truth)
        if tolerance is not None and not is_floating(self._value_type):
            raise ContractViolationError(
                f"{self.kind_name} accepts a tolerance only for floating-point values, got {self._value_type}."
            )
        self._value = coerce(self._value_type, value)
        self._truth = coerce(self._value_type, truth)
        self._tolerance = coerce(self._value_type, tolerance) if tolerance is not None else None
        super().__init__(context)

    def _describe(self) -> str:
        return describe_mismatch(self._value, self._truth, self._tolerance)

    @property
    def value_type(self) -> np.dtype:
        return self._value_type

    @property
    def value(self) -> np.generic:
        return self._value

    @property
    def truth(self) -> np.generic:
        return self._truth

    @property
    def tolerance(self) -> np.generic | None:
        return self._tolerance


class SingularMatrixFailure(OptimalLearningException):
    """
    Failure for a singular matrix ``A`` (``num_rows x num_cols``).

    The matrix is copied at construction (row-major, ``float64``) so the record stays valid after the
    caller's buffer is reused. The message only reports the dimensions; the entries are available
    through :attr:`matrix` and :meth:`as_array`.
    """

    kind_name: ClassVar[str] = "SingularMatrixFailure"

    def __init__(
        self,
        context: ErrorContext,
        matrix: ArrayLike,
        num_rows: int | None = None,
        num_cols: int | None = None,
    ) -> None:
        """
        Args:
            context (ErrorContext): Where the failure was detected.
            matrix (ArrayLike): The singular matrix, either 2-D or a flat row-major buffer holding at
                least ``num_rows * num_cols`` entries.
            num_rows (int | None): Number of rows. Defaults to ``matrix.shape[0]`` for 2-D input.
            num_cols (int | None): Number of columns. Defaults to ``matrix.shape[1]`` for 2-D input.

        Raises:
            ContractViolationError: If the buffer is not numeric, the dimensions are missing for non
                2-D input or negative, or the buffer is too short.
        """
        try:
            source = np.asarray(matrix, dtype=np.float64)
        except (TypeError, ValueError) as exc:
            raise ContractViolationError(f"{self.kind_name} needs a numeric matrix.") from exc

        if num_rows is None or num_cols is None:
            if source.ndim != 2:  # noqa: PLR2004
                raise ContractViolationError(
                    f"{self.kind_name} needs num_rows and num_cols for a {source.ndim}-D buffer."
                )
            num_rows = source.shape[0] if num_rows is None else num_rows
            num_cols = source.shape[1] if num_cols is None else num_cols

        num_rows, num_cols = int(num_rows), int(num_cols)
        if num_rows < 0 or num_cols < 0:
            raise ContractViolationError(f"Matrix dimensions must be non-negative, got {num_rows} x {num_cols}.")

        flat = source.reshape(-1)
        size = num_rows * num_cols
        if flat.size < size:
            raise ContractViolationError(
                f"A {num_rows} x {num_cols} matrix needs {size} entries, the buffer holds {flat.size}."
            )

        self._num_rows = num_rows
        self._num_cols = num_cols
        self._matrix = np.array(flat[:size], dtype=np.float64, copy=True)
        self._matrix.setflags(write=False)
        super().__init__(context)

    def _describe(self) -> str:
        return describe_singular_matrix(self._num_rows, self._num_cols)

    @property
    def num_rows(self) -> int:
        return self._num_rows

    @property
    def num_cols(self) -> int:
        return self._num_cols

    @property
    def matrix(self) -> np.ndarray:
        """
        The copied matrix entries.

        Returns:
            np.ndarray: Read-only, flat, row-major array of ``num_rows * num_cols`` floats.
        """
        return self._matrix

    def as_array(self) -> np.ndarray:
        """
        Returns:
            np.ndarray: Read-only ``(num_rows, num_cols)`` view of :attr:`matrix`.
        """
        return self._matrix.reshape(self._num_rows, self._num_cols)


TAXONOMY: tuple[type[OptimalLearningException], ...] = (
    RuntimeFailure,
    BoundsFailure,
    LowerBoundFailure,
    UpperBoundFailure,
    InvalidValueFailure,
    SingularMatrixFailure,
)
