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

"""
Single funnel through which every failure leaves normal control flow.

Detecting code never writes ``raise SomeFailure(...)``. It uses one of:

.. code-block:: python

    raise_failure(BoundsFailure, "Invalid length scale.", value, 0.0, 10.0)  # preferred
    dispatch(BoundsFailure(capture_context("Invalid length scale."), value, 0.0, 10.0))  # uncommon

Which strategy performs the hand-off is fixed once per process: native ``raise`` (the default) or an
integrator-supplied terminal handler that must never return. See :func:`install_dispatcher`.
"""

from __future__ import annotations

import importlib
import os
from abc import ABC, abstractmethod
from typing import Any, Callable, ClassVar, NoReturn, get_origin

from loguru import logger

from optimal_learning.exceptions.context import capture_context
from optimal_learning.exceptions.errors import ContractViolationError, DispatchConfigurationError
from optimal_learning.exceptions.taxonomy import OptimalLearningException
from optimal_learning.settings import DispatchMode, get_settings

TerminalHandler = Callable[[OptimalLearningException], NoReturn]


class Dispatcher(ABC):
    """Strategy performing the actual hand-off of a failure record."""

    mode: ClassVar[DispatchMode]

    @abstractmethod
    def dispatch(self, exception: OptimalLearningException) -> NoReturn:
        """
        Hands ``exception`` off. **Never returns.**

        Args:
            exception (OptimalLearningException): The record to dispatch.
        """


class NativeUnwindDispatcher(Dispatcher):
    """Raises the record with Python's ``raise``."""

    mode: ClassVar[DispatchMode] = DispatchMode.EXCEPTIONS_ENABLED

    def dispatch(self, exception: OptimalLearningException) -> NoReturn:  # noqa: PLR6301
        __tracebackhide__ = True
        raise exception


class TerminalHandlerDispatcher(Dispatcher):
    """
    Delegates to an integrator-supplied handler instead of raising.

    The handler receives the record and must never return: it aborts the process, exits the thread or
    escalates elsewhere. A handler that returns anyway breaks that contract; the dispatcher logs the
    breach and aborts the process.
    """

    mode: ClassVar[DispatchMode] = DispatchMode.EXCEPTIONS_DISABLED

    def __init__(self, handler: TerminalHandler) -> None:
        if not callable(handler):
            raise DispatchConfigurationError(f"Terminal handler must be callable, got {type(handler).__qualname__}.")
        self._handler = handler

    @property
    def handler(self) -> TerminalHandler:
        return self._handler

    def dispatch(self, exception: OptimalLearningException) -> NoReturn:
        self._handler(exception)
        logger.critical(
            "Terminal handler {} returned after receiving {}; aborting.",
            getattr(self._handler, "__qualname__", repr(self._handler)),
            exception.kind_name,
        )
        os.abort()


def abort_handler(exception: OptimalLearningException) -> NoReturn:
    """Terminal handler that logs the failure message at CRITICAL level and aborts the process."""
    logger.critical("{}", exception.message)
    os.abort()


def load_terminal_handler(path: str) -> TerminalHandler:
    """
    Imports a terminal handler from an import path.

    Args:
        path (str): ``"package.module:function"``; the attribute part may be dotted.

    Returns:
        TerminalHandler: The imported callable.

    Raises:
        DispatchConfigurationError: If the path is malformed, cannot be imported or is not callable.
    """
    module_name, _, attribute = path.partition(":")
    if not module_name or not attribute:
        raise DispatchConfigurationError(f"Terminal handler path must look like 'package.module:function', got {path!r}.")
    try:
        target: Any = importlib.import_module(module_name)
        for name in attribute.split("."):
            target = getattr(target, name)
    except (ImportError, AttributeError) as exc:
        raise DispatchConfigurationError(f"Cannot load terminal handler {path!r}: {exc}") from exc
    if not callable(target):
        raise DispatchConfigurationError(f"Terminal handler {path!r} is not callable.")
    return target


_active_dispatcher: Dispatcher | None = None


def install_dispatcher(
    mode: DispatchMode | str | None = None, handler: TerminalHandler | None = None
) -> Dispatcher:
    """
    Selects the dispatch strategy used by every later :func:`dispatch` call.

    Call it once at program start-up; replacing an already active dispatcher logs a warning. Arguments
    left as None are taken from :func:`~optimal_learning.settings.get_settings`
    (``OPTIMAL_LEARNING_DISPATCH_MODE`` and ``OPTIMAL_LEARNING_TERMINAL_HANDLER``). If it is never called,
    the first dispatch installs the configured strategy.

    Args:
        mode (DispatchMode | str | None): ``"exceptions-enabled"`` or ``"exceptions-disabled"``.
        handler (TerminalHandler | None): Never-returning handler used when exceptions are disabled.

    Returns:
        Dispatcher: The installed dispatcher.

    Raises:
        DispatchConfigurationError: If exceptions are disabled without a handler, or a handler is given
            while exceptions are enabled.
    """
    global _active_dispatcher  # noqa: PLW0603

    settings = get_settings()
    try:
        selected = DispatchMode(mode) if mode is not None else settings.dispatch_mode
    except ValueError as exc:
        raise DispatchConfigurationError(f"Unknown dispatch mode {mode!r}.") from exc

    dispatcher: Dispatcher
    if selected is DispatchMode.EXCEPTIONS_ENABLED:
        if handler is not None:
            raise DispatchConfigurationError("A terminal handler is only used when exceptions are disabled.")
        dispatcher = NativeUnwindDispatcher()
    else:
        if handler is None and settings.terminal_handler:
            handler = load_terminal_handler(settings.terminal_handler)
        if handler is None:
            raise DispatchConfigurationError(
                "Exceptions are disabled but no terminal handler was provided. "
                "Pass one to install_dispatcher() or set OPTIMAL_LEARNING_TERMINAL_HANDLER."
            )
        dispatcher = TerminalHandlerDispatcher(handler)

    if _active_dispatcher is not None:
        logger.warning(
            "Replacing active {} with {}; install_dispatcher() is meant to run once at start-up.",
            type(_active_dispatcher).__qualname__,
            type(dispatcher).__qualname__,
        )
    _active_dispatcher = dispatcher
    logger.debug("Installed {} ({})", type(dispatcher).__qualname__, selected.value)
    return dispatcher


def get_dispatcher() -> Dispatcher:
    """
    Returns the active dispatcher, installing the configured one on first use.

    Returns:
        Dispatcher: The process-wide dispatcher.
    """
    if _active_dispatcher is None:
        return install_dispatcher()
    return _active_dispatcher


def dispatch(exception: OptimalLearningException) -> NoReturn:
    """
    Hands a constructed failure record to the active dispatcher. **Never returns.**

    Args:
        exception (OptimalLearningException): The record to dispatch.

    Raises:
        ContractViolationError: If ``exception`` is not an :class:`OptimalLearningException`.
    """
    __tracebackhide__ = True
    if not isinstance(exception, OptimalLearningException):
        raise ContractViolationError(
            f"Only OptimalLearningException records can be dispatched, got {type(exception).__qualname__}."
        )
    logger.debug("Dispatching {}", exception.kind_name)
    get_dispatcher().dispatch(exception)


def raise_failure(
    failure_type: type[OptimalLearningException], custom_message: str | None = None, *args: Any, **kwargs: Any
) -> NoReturn:
    """
    Builds a failure record at the calling site and dispatches it. **Never returns.**

    The caller's file, line and function become the record's context; ``args`` and ``kwargs`` are
    forwarded unchanged to ``failure_type`` after the context.

    .. code-block:: python

        raise_failure(LowerBoundFailure, "Need at least one sample.", num_samples, 1)

    Args:
        failure_type (type[OptimalLearningException]): Kind to raise, e.g. ``BoundsFailure``, or
            ``BoundsFailure[float]`` to fix the payload value type.
        custom_message (str | None): Optional note attached to the context.
        *args (Any): Payload arguments of ``failure_type``.
        **kwargs (Any): Keyword payload arguments of ``failure_type``.

    Raises:
        ContractViolationError: If ``failure_type`` is not a failure kind.
    """
    __tracebackhide__ = True
    origin = get_origin(failure_type) or failure_type
    if not (isinstance(origin, type) and issubclass(origin, OptimalLearningException)):
        raise ContractViolationError(f"{failure_type!r} is not an OptimalLearningException type.")
    context = capture_context(custom_message, depth=2)
    dispatch(failure_type(context, *args, **kwargs))
