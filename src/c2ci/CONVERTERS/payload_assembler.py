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
Assembles mapped containers into one deployment payload.

Port tags are keyed by container display name and share the tag namespace
with the reserved ``architecture`` and ``volumes`` tags. A container named
like a reserved tag overwrites it (or is overwritten by it); the collision
is only logged.
"""
import logging
from typing import Dict, List
from ..MODELS.deployment_payload import (
    ContainerRestartPolicy, DeploymentPayload, InstanceVolume, ShapeConfig, VolumeMount,
)
from ..MODELS.service_definition import VolumeSpec
from ..MODELS.target_config import TargetConfig
from .service_mapper import MappedService

VOLUMES_TAG = "volumes"
ARCHITECTURE_TAG = "architecture"

logger = logging.getLogger(__name__)


def union_volumes(mapped: List[MappedService]) -> List[VolumeSpec]:
    """
    Unifies volumes by name across services. The first mount path seen for a name wins.
    """
    volumes: Dict[str, VolumeSpec] = {}
    for service in mapped:
        for volume in service.volumes:
            if volume.name not in volumes:
                volumes[volume.name] = volume
    return list(volumes.values())


class PayloadAssembler:
    """
    Builds the instance payload around a set of mapped containers.
    """
    def __init__(self, target: TargetConfig):
        self.target = target

    def shape_config(self) -> ShapeConfig:
        """
        The explicit override if given, otherwise the architecture's floor.
        Containers are not summed: the shape sizes the instance as a whole.
        """
        if self.target.shape_config is not None:
            return self.target.shape_config
        architecture = self.target.architecture
        return ShapeConfig(memory_in_gbs=architecture.minimum_memory_gbs, ocpus=architecture.minimum_vcpus)

    def freeform_tags(self, mapped: List[MappedService], volumes: List[VolumeSpec]) -> Dict[str, str]:
        """
        Instance tags: the architecture, each container's first port, and the volume list.
        """
        tags = {ARCHITECTURE_TAG: self.target.architecture.value}
        for service in mapped:
            if service.port is not None:
                if service.container.display_name in (ARCHITECTURE_TAG, VOLUMES_TAG):
                    logger.debug("Port tag for container %s collides with a reserved tag",
                                 service.container.display_name)
                tags[service.container.display_name] = str(service.port)
        if volumes:
            tags[VOLUMES_TAG] = ",".join(f"{v.name}:{v.mount_path}" for v in volumes)
        return tags

    def assemble(self, mapped: List[MappedService], volumes: List[VolumeSpec],
                 restart_policy: ContainerRestartPolicy, display_name: str) -> DeploymentPayload:
        """
        Builds the payload.

        Every container mounts every volume, since the instance has one flat
        volume namespace. Every container carries the instance tags.

        :param mapped: Mapped services in boot order.
        :param volumes: The volumes unified across services.
        :param restart_policy: The instance-wide restart policy.
        :param display_name: The instance display name.
        :return: The deployment payload.
        """
        tags = self.freeform_tags(mapped, volumes)
        mounts = [VolumeMount(mount_path=v.mount_path, volume_name=v.name) for v in volumes]

        containers = []
        for service in mapped:
            containers.append(service.container.model_copy(update={
                'volume_mounts': list(mounts) if mounts else None,
                'freeform_tags': dict(tags),
            }))

        return DeploymentPayload(
            display_name=display_name,
            compartment_id=self.target.compartment_id,
            subnet_id=self.target.subnet_id,
            shape=self.target.architecture.shape,
            shape_config=self.shape_config(),
            containers=containers,
            volumes=[InstanceVolume(name=v.name) for v in volumes] or None,
            container_restart_policy=restart_policy,
            freeform_tags=tags,
        )
