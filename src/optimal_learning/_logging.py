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
Loguru configuration for optimal_learning.

Failure dispatch logs through ``loguru``. Hosts that want those records on a different sink, or that want
their own stdlib ``logging`` output routed through the same sinks, call :func:`configure_logging` with a
YAML file shaped like the packaged ``logging_config.yaml``.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, TextIO

from loguru import logger
from pydantic import BaseModel
from pydantic_settings import BaseSettings
from ruamel.yaml import YAML

from optimal_learning.settings import get_settings

if TYPE_CHECKING:
    from types import FrameType

_STREAM_NAMES = ("stderr", "stdout")


class SinkConfig(BaseModel):
    """One loguru sink: a stream name (``stderr`` / ``stdout``) or a file path, plus its options."""

    sink: str | Path
    level: str = "INFO"
    format: str | None = None
    filter: str | dict[str, str] | None = None
    colorize: bool = False
    enqueue: bool = False
    rotation: str | None = None
    serialize: bool = False

    def target(self) -> TextIO | Path | str:
        if isinstance(self.sink, str) and self.sink.lower() in _STREAM_NAMES:
            # Looked up on each call so pytest's capture of sys.stderr is honored.
            return getattr(sys, self.sink.lower())
        return self.sink

    def options(self) -> dict[str, Any]:
        """Keyword arguments for ``logger.add``; unset options are left to loguru's defaults."""
        return {key: value for key, value in self.model_dump(exclude={"sink"}).items() if value is not None}


class InterceptLibraryConfig(BaseModel):
    """Minimum level kept for a stdlib logger once it is routed into loguru."""

    name: str
    level: str = "ERROR"


class LoggingSettings(BaseSettings):
    sinks: list[SinkConfig] = []
    intercept_libraries: list[InterceptLibraryConfig] = []

    @classmethod
    def load(cls, path: str | Path) -> LoggingSettings:
        """
        Reads the sink and intercept configuration from a YAML file.

        Args:
            path (str | Path): YAML file to read. An empty file yields no sinks.

        Returns:
            LoggingSettings: The parsed configuration.
        """
        data = YAML(typ="safe").load(Path(path)) or {}
        return cls(**data)


class InterceptHandler(logging.Handler):
    """Forwards stdlib ``logging`` records to loguru, attributed to the frame that made the logging call."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame: FrameType | None = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _resolve_config_path(path: str | Path | None) -> Path:
    config_path = Path(path if path is not None else get_settings().logging_config_path).expanduser()
    if not config_path.is_absolute():
        config_path = (Path.cwd() / config_path).resolve()
    return config_path


def configure_logging(path: str | Path | None = None) -> list[int]:
    """
    Replaces the loguru sinks with those of a YAML file and routes stdlib ``logging`` into them.

    Args:
        path (str | Path | None): YAML file to load. Defaults to the ``logging_config_path`` setting
            (overridable through ``OPTIMAL_LEARNING_LOGGING_CONFIG_PATH``).

    Returns:
        list[int]: Identifiers of the added sinks, usable with ``logger.remove``.

    Raises:
        FileNotFoundError: If the configuration file does not exist.
    """
    config_path = _resolve_config_path(path)
    settings = LoggingSettings.load(config_path)

    logger.remove()
    sink_ids = [logger.add(sink.target(), **sink.options()) for sink in settings.sinks]

    for library in settings.intercept_libraries:
        logging.getLogger(library.name).setLevel(library.level)

    logging.root.handlers = [InterceptHandler()]
    logging.root.setLevel(logging.NOTSET)
    for name in list(logging.root.manager.loggerDict):
        stdlib_logger = logging.getLogger(name)
        stdlib_logger.handlers = []
        stdlib_logger.propagate = True

    logger.debug("Configured {} loguru sink(s) from {}", len(sink_ids), config_path)
    return sink_ids
