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


class ContractViolationError(TypeError):
    """Raised when a failure record is built or dispatched in a way its API forbids.

    Not part of the failure taxonomy: it is raised directly and never passes through dispatch.
    """


class DispatchConfigurationError(RuntimeError):
    """Raised when the failure dispatcher cannot be installed from the given configuration."""
