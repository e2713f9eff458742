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
Models describing where and how a compose document is deployed.
"""
from typing import Optional
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from .deployment_payload import ShapeConfig


class Architecture(str, Enum):
    """
    CPU architecture families offered for container instances.
    """
    X86 = "x86"
    ARM64 = "ARM64"

    @property
    def shape(self) -> str:
        return "CI.Standard.A1.Flex" if self is Architecture.ARM64 else "CI.Standard.E4.Flex"

    @property
    def minimum_memory_gbs(self) -> float:
        return 6 if self is Architecture.ARM64 else 16

    @property
    def minimum_vcpus(self) -> float:
        return 1


class TargetConfig(BaseModel):
    """
    Deployment target for a conversion.
    """
    model_config = ConfigDict(frozen=True)

    compartment_id: str = Field(min_length=1)
    subnet_id: str = Field(min_length=1)
    architecture: Architecture = Architecture.X86
    shape_config: Optional[ShapeConfig] = None
    dependency_delay_seconds: int = Field(default=10, ge=0)
