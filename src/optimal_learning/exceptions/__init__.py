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

from .context import ErrorContext, capture_context
from .dispatcher import (
    Dispatcher,
    NativeUnwindDispatcher,
    TerminalHandler,
    TerminalHandlerDispatcher,
    abort_handler,
    dispatch,
    get_dispatcher,
    install_dispatcher,
    raise_failure,
)
from .errors import ContractViolationError, DispatchConfigurationError
from .taxonomy import (
    TAXONOMY,
    BoundsFailure,
    InvalidValueFailure,
    LowerBoundFailure,
    OptimalLearningException,
    RuntimeFailure,
    SingularMatrixFailure,
    UpperBoundFailure,
)

__all__ = [
    "TAXONOMY",
    "BoundsFailure",
    "ContractViolationError",
    "DispatchConfigurationError",
    "Dispatcher",
    "ErrorContext",
    "InvalidValueFailure",
    "LowerBoundFailure",
    "NativeUnwindDispatcher",
    "OptimalLearningException",
    "RuntimeFailure",
    "SingularMatrixFailure",
    "TerminalHandler",
    "TerminalHandlerDispatcher",
    "UpperBoundFailure",
    "abort_handler",
    "capture_context",
    "dispatch",
    "get_dispatcher",
    "install_dispatcher",
    "raise_failure",
]
