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

from optimal_learning.exceptions import ErrorContext
from optimal_learning.exceptions import formatting
from optimal_learning.exceptions.formatting import (
    build_message,
    describe_bounds,
    describe_mismatch,
    describe_singular_matrix,
    format_message,
    render_value,
)


class _Aborted(Exception):
    pass


def test_format_message_full_context():
    context = ErrorContext("gpp_math.py:42", "GaussianProcess.fit", "Invalid length scale.")
    message = format_message("BoundsFailure", context, describe_bounds(5, 0, 10))
    assert message == (
        "BoundsFailure: 5 is not in range [0, 10]. Invalid length scale. GaussianProcess.fit (gpp_math.py:42)"
    )


@pytest.mark.parametrize(
    ("context", "expected"),
    [
        (ErrorContext(), "RuntimeFailure"),
        (ErrorContext(custom_message="oops"), "RuntimeFailure: oops"),
        (ErrorContext(location="a.py:1"), "RuntimeFailure: (a.py:1)"),
        (ErrorContext("a.py:1", "", ""), "RuntimeFailure: (a.py:1)"),
        (ErrorContext("a.py:1", "run", None), "RuntimeFailure: run (a.py:1)"),
    ],
)
def test_format_message_omits_absent_parts(context, expected):
    assert format_message("RuntimeFailure", context) == expected


def test_describe_mismatch_with_and_without_tolerance():
    assert describe_mismatch(1.0, 2.0) == "1.0 != 2.0."
    assert describe_mismatch(1.0, 2.0, 0.01) == "1.0 != 2.0 ± 0.01."


def test_describe_singular_matrix():
    assert describe_singular_matrix(3, 4) == "3 x 4 matrix is singular."


def test_render_value_prints_numpy_scalars_as_numbers():
    assert render_value(np.int64(5)) == "5"
    assert render_value(np.float64(10.0)) == "10.0"
    assert render_value(np.iinfo(np.int32).max) == "2147483647"


def test_render_value_keeps_precision_of_narrow_floats():
    assert render_value(np.float32(0.1)) == "0.1"
    assert render_value(np.finfo(np.float32).max) == "3.4028235e+38"


def test_build_message_escalates_memory_error(monkeypatch):
    """Running out of memory while formatting aborts instead of producing a failure record."""

    def fake_abort():
        raise _Aborted

    def exhausted():
        raise MemoryError

    monkeypatch.setattr(formatting.os, "abort", fake_abort)
    with pytest.raises(_Aborted):
        build_message("RuntimeFailure", ErrorContext(), exhausted)


def test_build_message_without_detail():
    assert build_message("RuntimeFailure", ErrorContext(custom_message="x")) == "RuntimeFailure: x"
