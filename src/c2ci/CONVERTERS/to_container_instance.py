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
Converts a compose document into a container instance deployment payload.
"""
import logging
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict
from ..BUILDERS.wait_script_builder import WaitScriptBuilder
from ..MODELS.compose_document import ComposeDocument
from ..MODELS.deployment_payload import DeploymentPayload
from ..MODELS.diagnostics import Diagnostics
from ..MODELS.target_config import TargetConfig
from ..PARSERS.compose_parser import ComposeParser
from ..RESOLVERS.dependency_resolver import DependencyResolver
from .payload_assembler import PayloadAssembler, union_volumes
from .service_mapper import ServiceMapper, restart_policy_for

logger = logging.getLogger(__name__)

CYCLE_WARNING = "Circular dependencies detected in depends_on. Using best-effort ordering."


class ConversionResult(BaseModel):
    """
    The payload and every non-fatal warning raised while building it.
    """
    model_config = ConfigDict(frozen=True)

    payload: DeploymentPayload
    warnings: List[str] = []

    def to_api(self) -> Dict:
        return {'payload': self.payload.to_api(), 'warnings': list(self.warnings)}


class ContainerInstanceConverter:
    """
    Runs the conversion pipeline: order services, synthesize wait commands,
    map each service, then assemble the payload.
    """
    def __init__(self, target: TargetConfig):
        """
        Initializes the converter.

        :param target: Where the instance will be created.
        """
        self.target = target
        self.resolver = DependencyResolver()
        self.wait_builder = WaitScriptBuilder(delay_seconds=target.dependency_delay_seconds)
        self.mapper = ServiceMapper(target.architecture)
        self.assembler = PayloadAssembler(target)

    def convert(self, document: ComposeDocument) -> ConversionResult:
        """
        Converts a parsed document.

        :param document: The compose document.
        :return: The payload and warnings.
        """
        diagnostics = Diagnostics(warnings=list(document.load_warnings))
        services = document.services
        names = document.service_names
        if not names:
            raise ValueError("No services found in Docker Compose file")

        order = self.resolver.resolve_order(document)
        if order.has_cycle:
            diagnostics = diagnostics.with_warning(CYCLE_WARNING)
        logger.debug("Boot order: %s", ", ".join(order.sequence))

        mapped = []
        for name in order.sequence:
            service = services[name]
            wait_command = None
            if service.depends_on:
                wait_command = self.wait_builder.synthesize(service, service.depends_on, services)
            result, service_diagnostics = self.mapper.map_service(
                service, wait_command=wait_command, waits_on_dependencies=bool(service.depends_on))
            mapped.append(result)
            diagnostics = diagnostics.merge(service_diagnostics)

        # The instance has a single restart policy and name, both taken from the first declared service
        first = services[names[0]]
        payload = self.assembler.assemble(
            mapped,
            union_volumes(mapped),
            restart_policy_for(first),
            display_name=names[0],
        )

        for name in names:
            diagnostics = diagnostics.merge(self.mapper.unsupported_features(services[name]))

        return ConversionResult(payload=payload, warnings=diagnostics.warnings)


def convert_compose(content: str, target: TargetConfig, context: Optional[Dict[str, str]] = None) -> ConversionResult:
    """
    Parses compose text and converts it in one step.

    :param content: YAML content of the compose file.
    :param target: Where the instance will be created.
    :param context: Optional variables for ${VAR} interpolation.
    :return: The payload and warnings.
    :raises ComposeParseError: If the YAML is malformed.
    :raises ComposeValidationError: If the document is structurally invalid.
    """
    document = ComposeParser(context).parse_from_string(content)
    return ContainerInstanceConverter(target).convert(document)
