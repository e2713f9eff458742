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
Maps a single compose service onto a container descriptor.
"""
from typing import List, Optional, Tuple
from pydantic import BaseModel, ConfigDict
from ..MODELS.deployment_payload import ContainerDescriptor, ContainerRestartPolicy, ResourceConfig
from ..MODELS.diagnostics import Diagnostics
from ..MODELS.service_definition import ServiceSpec, VolumeSpec, RestartPolicyCondition
from ..MODELS.target_config import Architecture

RESTART_POLICIES = {
    RestartPolicyCondition.ALWAYS.value: ContainerRestartPolicy.ALWAYS,
    RestartPolicyCondition.NO.value: ContainerRestartPolicy.NEVER,
    RestartPolicyCondition.NEVER.value: ContainerRestartPolicy.NEVER,
    RestartPolicyCondition.ON_FAILURE.value: ContainerRestartPolicy.ON_FAILURE,
    # No unless-stopped on the platform; ALWAYS is the closest match
    RestartPolicyCondition.UNLESS_STOPPED.value: ContainerRestartPolicy.ALWAYS,
}


def restart_policy_for(service: Optional[ServiceSpec]) -> ContainerRestartPolicy:
    """
    Maps a service's ``restart`` value onto the platform's instance-wide policy.
    Unset or unrecognized values map to NEVER.
    """
    if service is None or not service.restart:
        return ContainerRestartPolicy.NEVER
    return RESTART_POLICIES.get(service.restart.lower(), ContainerRestartPolicy.NEVER)


class MappedService(BaseModel):
    """
    A converted service: its container plus what the assembler aggregates.
    """
    model_config = ConfigDict(frozen=True)

    service_name: str
    container: ContainerDescriptor
    volumes: List[VolumeSpec] = []
    port: Optional[int] = None


class ServiceMapper:
    """
    Converts services into container descriptors for one architecture.
    """
    def __init__(self, architecture: Architecture = Architecture.X86):
        self.architecture = architecture

    def resource_config(self) -> ResourceConfig:
        """
        The fixed per-container sizing for the architecture.
        Billing is per instance, so services do not get individual limits.
        """
        return ResourceConfig(
            memory_limit_in_gbs=self.architecture.minimum_memory_gbs,
            vcpus_limit=self.architecture.minimum_vcpus,
        )

    def map_service(self, service: ServiceSpec, wait_command: Optional[List[str]] = None,
                    waits_on_dependencies: bool = False) -> Tuple[MappedService, Diagnostics]:
        """
        Converts one service.

        :param service: The normalized service.
        :param wait_command: The synthesized command wrapping the start command, if any.
        :param waits_on_dependencies: Whether the service declares dependencies.
        :return: The mapped service and its warnings.
        """
        diagnostics = Diagnostics()

        if waits_on_dependencies:
            command = wait_command
            if command is None:
                diagnostics = diagnostics.with_warning(
                    f'Service "{service.name}": no command or entrypoint specified, so the image '
                    f'default is kept and depends_on ordering will not be enforced. Add a command '
                    f'or entrypoint to enable startup ordering.'
                )
        else:
            command = service.start_command or None

        ports = service.container_ports()
        container = ContainerDescriptor(
            display_name=service.display_name,
            image_url=service.image or '',
            resource_config=self.resource_config(),
            environment_variables=dict(service.environment) or None,
            command=command,
        )
        mapped = MappedService(
            service_name=service.name,
            container=container,
            volumes=list(service.volumes),
            port=ports[0] if ports else None,
        )
        return mapped, diagnostics

    def unsupported_features(self, service: ServiceSpec) -> Diagnostics:
        """
        Warns about compose features the platform cannot honour. Conversion continues regardless.
        """
        diagnostics = Diagnostics()
        if service.networks:
            diagnostics = diagnostics.with_warning(
                f'Service "{service.name}": networks are ignored (containers share the instance network)')
        if service.build:
            diagnostics = diagnostics.with_warning(
                f'Service "{service.name}": build is not supported (use pre-built images)')
        if service.healthcheck:
            diagnostics = diagnostics.with_warning(
                f'Service "{service.name}": healthcheck is not supported. '
                f'Use depends_on with a single port for startup ordering instead.')
        if isinstance(service.deploy, dict) and service.deploy.get('resources'):
            diagnostics = diagnostics.with_warning(
                f'Service "{service.name}": deploy.resources are ignored (using defaults)')
        return diagnostics
