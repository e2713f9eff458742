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
Parsers for compose port declarations.
"""
import logging
from typing import Any, List, Optional
from pydantic import ValidationError
from ..MODELS.service_definition import PortSpec, ScalarPort, RangeStringPort, ObjectPort

logger = logging.getLogger(__name__)


def parse_port(raw: Any) -> Optional[PortSpec]:
    """
    Classifies one raw port entry into its spec variant.

    :param raw: A number, a string such as "8080:80", or a long-syntax mapping.
    :return: The port spec, or None when the entry has an unsupported type.
    """
    # bool is an int subclass but never a port
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return ScalarPort(value=raw)
    if isinstance(raw, str):
        return RangeStringPort(raw=raw)
    if isinstance(raw, dict):
        try:
            return ObjectPort(
                target=raw.get('target'),
                published=raw.get('published'),
                protocol=raw.get('protocol'),
            )
        except ValidationError as e:
            logger.debug("Ignoring malformed port mapping %r: %s", raw, e)
            return None
    logger.debug("Ignoring port entry of type %s", type(raw).__name__)
    return None


def parse_ports(raw_ports: Any) -> List[PortSpec]:
    """
    Parses a service's ``ports`` list. Anything that is not a list yields no ports.
    """
    if not isinstance(raw_ports, list):
        return []
    ports = []
    for raw in raw_ports:
        port = parse_port(raw)
        if port is not None:
            ports.append(port)
    return ports
