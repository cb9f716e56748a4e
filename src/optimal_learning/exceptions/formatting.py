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

import os
import sys
from contextlib import suppress
from typing import TYPE_CHECKING, Any, Callable, NoReturn

if TYPE_CHECKING:
    from optimal_learning.exceptions.context import ErrorContext

_ABORT_NOTE = b"optimal_learning: failed to format a failure message; aborting.\n"


def escalate_formatting_failure() -> NoReturn:
    """
    Terminates the process after a failure message could not be built.

    The note is a preallocated bytes constant written straight to the stderr file descriptor.
    """
    with suppress(OSError, ValueError, AttributeError):
        os.write(sys.stderr.fileno(), _ABORT_NOTE)
    os.abort()


def render_value(value: Any) -> str:
    """Renders a payload number at the precision of its own type, so ``np.float32(0.1)`` prints as ``0.1``."""
    return str(value)


def describe_bounds(value: Any, min_value: Any, max_value: Any) -> str:
    return f"{render_value(value)} is not in range [{render_value(min_value)}, {render_value(max_value)}]."


def describe_mismatch(value: Any, truth: Any, tolerance: Any = None) -> str:
    if tolerance is None:
        return f"{render_value(value)} != {render_value(truth)}."
    return f"{render_value(value)} != {render_value(truth)} ± {render_value(tolerance)}."


def describe_singular_matrix(num_rows: int, num_cols: int) -> str:
    return f"{num_rows} x {num_cols} matrix is singular."


def format_message(kind_name: str, context: ErrorContext, detail: str | None = None) -> str:
    """
    Builds the diagnostic message of a failure record.

    The message follows ``KIND: DETAIL CUSTOM_MESSAGE FUNC (FILE:LINE)``; any part that is missing
    or empty is left out. A record with nothing but its kind renders as the bare kind name.

    Args:
        kind_name (str): Literal name of the failure kind.
        context (ErrorContext): Call-site context.
        detail (str | None): Kind-specific payload description, e.g. from :func:`describe_bounds`.

    Returns:
        str: The formatted message.
    """
    parts = [detail, context.custom_message, context.operation_name]
    if context.location:
        parts.append(f"({context.location})")
    body = " ".join(part for part in parts if part)
    return f"{kind_name}: {body}" if body else kind_name


def build_message(kind_name: str, context: ErrorContext, describe: Callable[[], str] | None = None) -> str:
    """
    Formats a message, escalating to process termination if formatting runs out of memory.

    A ``MemoryError`` raised here is never converted into a failure record.

    Args:
        kind_name (str): Literal name of the failure kind.
        context (ErrorContext): Call-site context.
        describe (Callable[[], str] | None): Builds the kind-specific detail.

    Returns:
        str: The formatted message.
    """
    try:
        detail = describe() if describe is not None else None
        return format_message(kind_name, context, detail)
    except MemoryError:
        escalate_formatting_failure()
