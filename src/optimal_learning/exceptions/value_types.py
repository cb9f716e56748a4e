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
from __future__ import annotations

from typing import Any, TypeAlias

import numpy as np

from optimal_learning.exceptions.errors import ContractViolationError

ValueTypeLike: TypeAlias = type | np.dtype | str


def _is_ordered_numeric(dtype: np.dtype) -> bool:
    return np.issubdtype(dtype, np.integer) or np.issubdtype(dtype, np.floating)


def resolve_value_type(value_type: ValueTypeLike | None, *values: Any) -> np.dtype:
    """
    Resolves the numeric type a generic failure record is instantiated with.

    An explicit ``value_type`` wins; otherwise the type is promoted from the payload values, so
    ``(5, 0, 10)`` resolves to the default integer type and ``(11.0, 10.0)`` to ``float64``.

    Args:
        value_type (ValueTypeLike | None): ``int``, ``float``, a NumPy scalar type or dtype, or None.
        *values (Any): Payload values used for inference when ``value_type`` is None.

    Returns:
        np.dtype: An integer or floating-point dtype.

    Raises:
        ContractViolationError: If the type is not an integer or floating-point type.
    """
    try:
        dtype = np.dtype(value_type) if value_type is not None else np.result_type(*(np.asarray(v).dtype for v in values))
    except (TypeError, ValueError) as exc:
        raise ContractViolationError(f"Cannot interpret {value_type!r} as a numeric value type.") from exc
    if not _is_ordered_numeric(dtype):
        raise ContractViolationError(f"Failure payloads require an integer or floating-point type, got {dtype}.")
    return dtype


def is_floating(dtype: np.dtype) -> bool:
    return bool(np.issubdtype(dtype, np.floating))


def lowest(dtype: np.dtype) -> np.generic:
    """Most negative representable value of ``dtype``."""
    info = np.finfo(dtype) if is_floating(dtype) else np.iinfo(dtype)
    return dtype.type(info.min)


def highest(dtype: np.dtype) -> np.generic:
    """Largest representable value of ``dtype``."""
    info = np.finfo(dtype) if is_floating(dtype) else np.iinfo(dtype)
    return dtype.type(info.max)


def coerce(dtype: np.dtype, value: Any) -> np.generic:
    """
    Converts a payload value to a scalar of ``dtype``.

    Integer types must hold the value exactly, so ``1.7`` is not silently truncated to ``1``. Floating types may
    round (``0.1`` as ``float32``) but must not overflow to infinity.

    Raises:
        ContractViolationError: If ``value`` cannot be represented in ``dtype`` without loss.
    """
    try:
        with np.errstate(over="ignore"):
            coerced = dtype.type(value)
        if is_floating(dtype):
            lossy = bool(np.isinf(coerced)) and not bool(np.isinf(value))
        else:
            lossy = bool(coerced != value)
    except (OverflowError, TypeError, ValueError) as exc:
        raise ContractViolationError(f"Value {value!r} cannot be stored as {dtype}.") from exc
    if lossy:
        raise ContractViolationError(f"Value {value!r} cannot be stored as {dtype} without loss.")
    return coerced
