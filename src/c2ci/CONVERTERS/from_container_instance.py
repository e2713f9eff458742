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
Exports a container instance payload back into a Docker Compose document.

The round trip is lossy. Ports are only known through the freeform tag
written at conversion time (one per container), and commands wrapped in a
wait preamble are exported as-is, without recovering ``depends_on``.
Containers sharing a display name become separate services, the later
ones renamed with a numeric suffix and keeping the display name as
``container_name``.
"""
import logging
import re
import yaml
from typing import Any, Dict, List, Union
from ..MODELS.compose_document import ComposeDocument
from ..MODELS.deployment_payload import ContainerRestartPolicy, DeploymentPayload
from ..MODELS.service_definition import ServiceSpec, RangeStringPort, VolumeSpec

COMPOSE_RESTART_VALUES = {
    ContainerRestartPolicy.ALWAYS: "always",
    ContainerRestartPolicy.NEVER: "no",
    ContainerRestartPolicy.ON_FAILURE: "on-failure",
}

_PATH_SEPARATORS = re.compile(r"[\\/]")

logger = logging.getLogger(__name__)


class ComposeExporter:
    """
    Converts deployment payloads into compose documents.
    """
    def load_payload(self, payload: Union[DeploymentPayload, Dict[str, Any]]) -> DeploymentPayload:
        """
        Accepts a payload model or a camelCase mapping as returned by the API.
        """
        if isinstance(payload, DeploymentPayload):
            return payload
        return DeploymentPayload.model_validate(payload)

    def to_document(self, payload: Union[DeploymentPayload, Dict[str, Any]]) -> ComposeDocument:
        """
        Rebuilds one service per container.

        :param payload: The deployment payload.
        :return: The compose document.
        """
        payload = self.load_payload(payload)
        tags = payload.freeform_tags or {}
        restart = COMPOSE_RESTART_VALUES.get(payload.container_restart_policy)

        services: Dict[str, ServiceSpec] = {}
        volume_names: List[str] = []
        warnings: List[str] = []
        for container in payload.containers:
            name = container.display_name
            port_tag = tags.get(name)
            if container.freeform_tags and name in container.freeform_tags:
                port_tag = container.freeform_tags[name]
            ports = []
            if port_tag and port_tag.isdigit():
                ports.append(RangeStringPort(raw=f"{port_tag}:{port_tag}"))

            volumes = [
                VolumeSpec(name=mount.volume_name, mount_path=mount.mount_path)
                for mount in container.volume_mounts or []
            ]
            for volume in volumes:
                if volume.name not in volume_names:
                    volume_names.append(volume.name)

            service_name = name
            suffix = 2
            while service_name in services:
                service_name = f"{name}-{suffix}"
                suffix += 1
            if service_name != name:
                logger.debug("Renaming duplicate container %s to service %s", name, service_name)
                warnings.append(
                    f'Container "{name}" appears more than once; exported as service "{service_name}"'
                )

            services[service_name] = ServiceSpec(
                name=service_name,
                container_name=name if service_name != name else None,
                image=container.image_url,
                command=list(container.command or []) + list(container.arguments or []),
                environment=dict(container.environment_variables or {}),
                ports=ports,
                volumes=volumes,
                restart=restart,
            )

        return ComposeDocument(services=services, volumes=volume_names, load_warnings=warnings)

    def to_yaml(self, payload: Union[DeploymentPayload, Dict[str, Any]]) -> str:
        """
        Serializes the exported document as compose YAML.
        """
        document = self.to_document(payload)
        return yaml.safe_dump(document.to_compose_dict(), sort_keys=False, default_flow_style=False)

    def suggested_filename(self, payload: Union[DeploymentPayload, Dict[str, Any]]) -> str:
        """
        ``<displayName>-docker-compose.yaml``, with path separators in the name replaced.
        """
        name = _PATH_SEPARATORS.sub("-", self.load_payload(payload).display_name)
        return f"{name}-docker-compose.yaml"

    def export(self, payload: Union[DeploymentPayload, Dict[str, Any]]) -> Dict[str, str]:
        """
        Produces the compose text and a file name for it.

        :param payload: The deployment payload.
        :return: ``{'filename': ..., 'content': ...}``
        """
        payload = self.load_payload(payload)
        return {
            'filename': self.suggested_filename(payload),
            'content': self.to_yaml(payload),
        }
