# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
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
Result accumulators threaded through the conversion stages.
"""
from typing import List
from pydantic import BaseModel, ConfigDict


class Diagnostics(BaseModel):
    """
    Warnings and errors produced by one stage.
    Stages return their own instance; the caller merges them.
    """
    model_config = ConfigDict(frozen=True)

    warnings: List[str] = []
    errors: List[str] = []

    @property
    def ok(self) -> bool:
        return not self.errors

    def with_warning(self, message: str) -> "Diagnostics":
        return Diagnostics(warnings=self.warnings + [message], errors=self.errors)

    def with_error(self, message: str) -> "Diagnostics":
        return Diagnostics(warnings=self.warnings, errors=self.errors + [message])

    def merge(self, other: "Diagnostics") -> "Diagnostics":
        """
        Combines two accumulators, keeping the order in which entries were raised.
        """
        return Diagnostics(warnings=self.warnings + other.warnings, errors=self.errors + other.errors)


class ValidationResult(BaseModel):
    """
    Outcome of structural validation of a compose document.
    """
    valid: bool
    errors: List[str] = []
