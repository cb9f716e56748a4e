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

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from types import FrameType


@dataclass(frozen=True)
class ErrorContext:
    """
    Call-site identity attached to a failure.

    Holds only text; nothing is validated, and empty or missing fields are simply left out of the
    formatted message.

    Attributes:
        location (str | None): ``"FILE:LINE"`` of the code that detected the failure.
        operation_name (str | None): Qualified name of the function that detected the failure.
        custom_message (str | None): Free-text note supplied by the detecting code.
    """

    location: str | None = None
    operation_name: str | None = None
    custom_message: str | None = None

    @classmethod
    def from_frame(cls, frame: FrameType, custom_message: str | None = None) -> ErrorContext:
        """
        Builds a context from a live stack frame.

        Args:
            frame (FrameType): The frame executing the detecting code.
            custom_message (str | None): Optional note to attach.

        Returns:
            ErrorContext: Context pointing at ``frame``'s file, line and function.
        """
        code = frame.f_code
        operation_name = getattr(code, "co_qualname", code.co_name)
        return cls(
            location=f"{Path(code.co_filename).name}:{frame.f_lineno}",
            operation_name=operation_name,
            custom_message=custom_message,
        )


def capture_context(custom_message: str | None = None, *, depth: int = 1) -> ErrorContext:
    """
    Captures the context of the code calling this function.

    Call it at the exact place the failure is detected, not from a distant wrapper: the
    context records whatever frame sits ``depth`` levels above this function.

    Args:
        custom_message (str | None): Optional note to attach.
        depth (int): How many frames to walk up. ``1`` is the direct caller.

    Returns:
        ErrorContext: The captured context.
    """
    frame = sys._getframe(depth)  # noqa: SLF001
    try:
        return ErrorContext.from_frame(frame, custom_message)
    finally:
        del frame
