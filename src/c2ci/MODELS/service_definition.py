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
Models for defining compose services, including port and volume specs.
"""
import re
from typing import List, Dict, Optional, Any, Union, Literal, Annotated
from pydantic import BaseModel, ConfigDict, Field
from enum import Enum

_LEADING_DIGITS = re.compile(r'^\s*(\d+)')


def _leading_int(value: Any) -> Optional[int]:
    """
    Reads the leading digits of a value, the way ports like "53/udp" are written.
    """
    match = _LEADING_DIGITS.match(str(value))
    return int(match.group(1)) if match else None


class RestartPolicyCondition(str, Enum):
    """
    Restart conditions understood by Docker Compose.
    """
    NO = "no"
    NEVER = "never"
    ALWAYS = "always"
    ON_FAILURE = "on-failure"
    UNLESS_STOPPED = "unless-stopped"


class ScalarPort(BaseModel):
    """
    A port written as a bare number, e.g. ``- 8080``.
    """
    model_config = ConfigDict(frozen=True)

    kind: Literal["scalar"] = "scalar"
    value: int

    def container_port(self) -> Optional[int]:
        return self.value


class RangeStringPort(BaseModel):
    """
    A port written as a string: "80", "8080:80", "127.0.0.1:8080:80", "8000-8005" or "53/udp".
    """
    model_config = ConfigDict(frozen=True)

    kind: Literal["string"] = "string"
    raw: str

    def container_port(self) -> Optional[int]:
        # The container side is always the last segment
        return _leading_int(self.raw.split(':')[-1])


class ObjectPort(BaseModel):
    """
    A port in long syntax, e.g. ``{target: 80, published: 8080}``.
    """
    model_config = ConfigDict(frozen=True)

    kind: Literal["object"] = "object"
    target: Optional[Union[int, str]] = None
    published: Optional[Union[int, str]] = None
    protocol: Optional[str] = None

    def container_port(self) -> Optional[int]:
        if self.target is None:
            return None
        return _leading_int(self.target)


PortSpec = Annotated[Union[ScalarPort, RangeStringPort, ObjectPort], Field(discriminator="kind")]


class VolumeSpec(BaseModel):
    """
    A volume mount reduced to the shared volume name and its mount path.
    Volumes sharing a name across services are the same volume.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    mount_path: str


class ServiceSpec(BaseModel):
    """
    A single compose service, normalized from the raw document.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    image: Optional[str] = None
    command: List[str] = []
    entrypoint: List[str] = []
    environment: Dict[str, str] = {}
    ports: List[PortSpec] = []
    volumes: List[VolumeSpec] = []
    depends_on: List[str] = []
    restart: Optional[str] = None
    container_name: Optional[str] = None

    # Declared but unsupported by the target platform, kept for warnings
    build: Optional[Any] = None
    networks: Optional[Any] = None
    healthcheck: Optional[Any] = None
    deploy: Optional[Any] = None

    @property
    def display_name(self) -> str:
        return self.container_name or self.name

    @property
    def start_command(self) -> List[str]:
        """
        The resolved start command: entrypoint first, then command.
        """
        return list(self.entrypoint) + list(self.command)

    def container_ports(self) -> List[int]:
        """
        Container-side ports that could be parsed, in declaration order.
        """
        ports = []
        for port in self.ports:
            number = port.container_port()
            if number is not None:
                ports.append(number)
        return ports
