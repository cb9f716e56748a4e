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

import numpy as np
import pytest

from optimal_learning.exceptions import ContractViolationError
from optimal_learning.exceptions.value_types import coerce, highest, is_floating, lowest, resolve_value_type


@pytest.mark.parametrize(
    ("value_type", "values", "expected"),
    [
        (None, (5, 0, 10), np.dtype(int)),
        (None, (11.0, 10.0), np.dtype(np.float64)),
        (None, (1, 2.5), np.dtype(np.float64)),
        (None, (np.float32(1.0), np.float32(2.0)), np.dtype(np.float32)),
        (int, (5.0,), np.dtype(int)),
        (float, (5,), np.dtype(np.float64)),
        (np.int32, (5,), np.dtype(np.int32)),
        ("float32", (5,), np.dtype(np.float32)),
    ],
)
def test_resolve_value_type(value_type, values, expected):
    assert resolve_value_type(value_type, *values) == expected


@pytest.mark.parametrize(
    ("value_type", "values"), [(None, (True,)), (complex, (1,)), (None, ("a",)), ("nope", (1,)), (None, ())]
)
def test_resolve_value_type_rejects_non_ordered_types(value_type, values):
    with pytest.raises(ContractViolationError):
        resolve_value_type(value_type, *values)


def test_representable_limits():
    assert highest(np.dtype(np.int32)) == np.iinfo(np.int32).max
    assert lowest(np.dtype(np.int32)) == np.iinfo(np.int32).min
    assert highest(np.dtype(np.float64)) == np.finfo(np.float64).max
    assert lowest(np.dtype(np.float64)) == -np.finfo(np.float64).max


def test_is_floating():
    assert is_floating(np.dtype(np.float32))
    assert not is_floating(np.dtype(np.int64))


def test_coerce_rejects_unrepresentable_value():
    with pytest.raises(ContractViolationError):
        coerce(np.dtype(np.int8), 1000)


@pytest.mark.parametrize(("dtype", "value"), [(np.int64, 1.7), (np.int32, -0.5), (np.float32, 1e300)])
def test_coerce_rejects_lossy_conversion(dtype, value):
    with pytest.raises(ContractViolationError, match="without loss"):
        coerce(np.dtype(dtype), value)


def test_coerce_keeps_exact_and_rounded_values():
    assert coerce(np.dtype(np.int64), 5.0) == 5
    assert coerce(np.dtype(np.float32), 0.1) == np.float32(0.1)
    assert np.isinf(coerce(np.dtype(np.float64), float("inf")))
