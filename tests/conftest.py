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

import pytest

from optimal_learning.exceptions import dispatcher
from optimal_learning.settings import get_settings


@pytest.fixture(autouse=True)
def fresh_dispatch_configuration(monkeypatch):
    """Every test starts with no installed dispatcher and settings re-read from the environment."""
    for name in ("OPTIMAL_LEARNING_DISPATCH_MODE", "OPTIMAL_LEARNING_TERMINAL_HANDLER"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(dispatcher, "_active_dispatcher", None)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
