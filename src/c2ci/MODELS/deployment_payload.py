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
Models for the container instance deployment payload.

Field names follow Python conventions; aliases carry the camelCase names
the container instance API expects, so ``model_dump(by_alias=True)``
produces a request body directly.
"""
from typing import List, Dict, Optional
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _PayloadModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_api(self) -> Dict:
        """
        Serializes the model into the API's JSON shape, omitting unset optional fields.
        """
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ContainerRestartPolicy(str, Enum):
    """
    Instance-wide restart policies supported by the platform.
    """
    ALWAYS = "ALWAYS"
    NEVER = "NEVER"
    ON_FAILURE = "ON_FAILURE"


class ResourceConfig(_PayloadModel):
    """
    Per-container resource limits.
    """
    memory_limit_in_gbs: float = Field(alias="memoryLimitInGBs")
    vcpus_limit: float


class ShapeConfig(_PayloadModel):
    """
    Sizing of the whole instance.
    """
    memory_in_gbs: float = Field(alias="memoryInGBs")
    ocpus: float


class VolumeMount(_PayloadModel):
    mount_path: str
    volume_name: str


class InstanceVolume(_PayloadModel):
    """
    An instance-level volume, shared by every container that mounts it.
    """
    name: str
    volume_type: str = "EMPTYDIR"
    backing_store: str = "EPHEMERAL_STORAGE"


class ContainerDescriptor(_PayloadModel):
    """
    One container of the instance.
    """
    display_name: str
    image_url: str
    is_resource_principal_disabled: bool = False
    resource_config: Optional[ResourceConfig] = None
    environment_variables: Optional[Dict[str, str]] = None
    command: Optional[List[str]] = None
    arguments: Optional[List[str]] = None
    volume_mounts: Optional[List[VolumeMount]] = None
    freeform_tags: Optional[Dict[str, str]] = None


class DeploymentPayload(_PayloadModel):
    """
    The complete create request for one container instance.
    """
    display_name: str
    compartment_id: str
    # Fetched instances report their subnet through their VNICs instead
    subnet_id: Optional[str] = None
    shape: str
    shape_config: Optional[ShapeConfig] = None
    containers: List[ContainerDescriptor]
    volumes: Optional[List[InstanceVolume]] = None
    container_restart_policy: ContainerRestartPolicy = ContainerRestartPolicy.NEVER
    freeform_tags: Dict[str, str] = {}
