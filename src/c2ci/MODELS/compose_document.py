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
Models for a whole compose document.
"""
from typing import List, Dict, Any
from pydantic import BaseModel, ConfigDict
from .service_definition import ServiceSpec


class ComposeDocument(BaseModel):
    """
    A parsed docker-compose.yml: services keyed by name, in document order.
    """
    model_config = ConfigDict(frozen=True)

    services: Dict[str, ServiceSpec]
    volumes: List[str] = []

    # Non-fatal notes raised while normalizing the raw document
    load_warnings: List[str] = []

    @property
    def service_names(self) -> List[str]:
        return list(self.services.keys())

    def to_compose_dict(self) -> Dict[str, Any]:
        """
        Renders the document back into plain compose structures, omitting empty fields.

        :return: A dictionary ready to be dumped as YAML.
        """
        services = {}
        for name, svc in self.services.items():
            entry: Dict[str, Any] = {}
            if svc.container_name and svc.container_name != name:
                entry['container_name'] = svc.container_name
            if svc.image:
                entry['image'] = svc.image
            if svc.entrypoint:
                entry['entrypoint'] = list(svc.entrypoint)
            if svc.command:
                entry['command'] = list(svc.command)
            if svc.environment:
                entry['environment'] = dict(svc.environment)
            if svc.ports:
                entry['ports'] = [_port_to_compose(p) for p in svc.ports]
            if svc.volumes:
                entry['volumes'] = [f"{v.name}:{v.mount_path}" for v in svc.volumes]
            if svc.depends_on:
                entry['depends_on'] = list(svc.depends_on)
            if svc.restart:
                entry['restart'] = svc.restart
            services[name] = entry

        data: Dict[str, Any] = {'services': services}
        if self.volumes:
            data['volumes'] = {name: {} for name in self.volumes}
        return data


def _port_to_compose(port) -> Any:
    if port.kind == "scalar":
        return port.value
    if port.kind == "string":
        return port.raw
    return port.model_dump(exclude={'kind'}, exclude_none=True)
