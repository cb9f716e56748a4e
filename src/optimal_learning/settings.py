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

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def default_logging_config_path() -> Path:
    return Path(__file__).with_name("logging_config.yaml").resolve()


class DispatchMode(str, Enum):
    """How :func:`optimal_learning.exceptions.dispatch` hands off a failure."""

    EXCEPTIONS_ENABLED = "exceptions-enabled"
    EXCEPTIONS_DISABLED = "exceptions-disabled"


class OptimalLearningSettings(BaseSettings):
    """
    Environment-based configuration settings for optimal_learning.

    These settings are automatically loaded from environment variables
    prefixed with `OPTIMAL_LEARNING_`, or from a local `.env` file if present.
    They are read once, when the failure dispatcher is installed, and fix the
    dispatch strategy for the rest of the process.
    """

    model_config = SettingsConfigDict(env_prefix="optimal_learning_", env_file=".env", env_file_encoding="utf-8")

    dispatch_mode: DispatchMode = Field(
        default=DispatchMode.EXCEPTIONS_ENABLED,
        description="Raise failures natively or hand them to a terminal handler. [env: OPTIMAL_LEARNING_DISPATCH_MODE]",
    )
    terminal_handler: str | None = Field(
        default=None,
        description=(
            "Import path ('package.module:function') of the never-returning handler used when exceptions are "
            "disabled. [env: OPTIMAL_LEARNING_TERMINAL_HANDLER]"
        ),
    )
    logging_config_path: Path = Field(
        default_factory=default_logging_config_path,
        description="YAML file used for logging configuration. [env: OPTIMAL_LEARNING_LOGGING_CONFIG_PATH]",
    )


@lru_cache(maxsize=1)
def get_settings() -> OptimalLearningSettings:
    """
    Returns a singleton instance of OptimalLearningSettings.

    This function caches the parsed environment-based settings to avoid
    redundant re-parsing across the application lifecycle.

    Returns:
        OptimalLearningSettings: The cached configuration object populated from environment variables.
    """
    return OptimalLearningSettings()
