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

import sys
from dataclasses import FrozenInstanceError

import pytest

from optimal_learning.exceptions import ErrorContext, capture_context


def _detect_with_note():
    return capture_context("note"), sys._getframe().f_lineno  # noqa: SLF001


def test_context_defaults_are_empty():
    context = ErrorContext()
    assert context.location is None
    assert context.operation_name is None
    assert context.custom_message is None


def test_context_is_immutable():
    context = ErrorContext("gp.py:12", "fit", "bad")
    with pytest.raises(FrozenInstanceError):
        context.location = "other.py:1"  # type: ignore[misc]


def test_capture_context_reports_caller():
    """The captured context points at the function that called capture_context."""
    context, line = _detect_with_note()
    assert context.location == f"test_context.py:{line}"
    assert context.operation_name.endswith("_detect_with_note")
    assert context.custom_message == "note"


def test_capture_context_depth_walks_up_the_stack():
    def helper():
        return capture_context(depth=2)

    context = helper()
    assert context.operation_name.endswith("test_capture_context_depth_walks_up_the_stack")
    assert context.custom_message is None


def test_from_frame_uses_file_basename():
    frame = sys._getframe()  # noqa: SLF001
    context = ErrorContext.from_frame(frame)
    assert context.location.startswith("test_context.py:")
    assert "/" not in context.location
