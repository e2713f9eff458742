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
Parsers for Docker Compose YAML files.
"""
import logging
import shlex
import yaml
from typing import Dict, Any, List, Optional, Tuple
from ..MODELS.compose_document import ComposeDocument
from ..MODELS.diagnostics import Diagnostics, ValidationResult
from ..MODELS.service_definition import ServiceSpec
from ..UTILS.string_interpolation import EnvironmentInterpolator
from .environment_parser import parse_environment
from .port_parser import parse_ports
from .volume_parser import parse_volumes

logger = logging.getLogger(__name__)


class UniqueKeySafeLoader(yaml.SafeLoader):
    """
    Safe YAML loader that rejects a mapping key repeated within one mapping.
    """
    def construct_mapping(self, node, deep=False):
        seen = set()
        # Runs before merge keys are flattened, so `<<: *defaults` overrides are allowed
        for key_node, _ in node.value:
            if key_node.tag == 'tag:yaml.org,2002:merge':
                continue
            key = self.construct_object(key_node, deep=deep)
            try:
                duplicate = key in seen
            except TypeError:
                # Unhashable keys are reported by the base constructor
                break
            if duplicate:
                raise yaml.constructor.ConstructorError(
                    "while constructing a mapping", node.start_mark,
                    f"found duplicate key \"{key}\"", key_node.start_mark,
                )
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


class ComposeParseError(ValueError):
    """
    Raised when the document text is not valid YAML.
    """


class ComposeValidationError(ValueError):
    """
    Raised when a document is structurally unusable. Carries every error found.
    """
    def __init__(self, errors: List[str]):
        super().__init__("Invalid Docker Compose file: " + "; ".join(errors))
        self.errors = list(errors)


class ComposeParser:
    """
    Parser for docker-compose.yml files.
    """
    def __init__(self, context: Optional[Dict[str, str]] = None):
        """
        Initializes the parser with an optional context for variable interpolation.

        :param context: Variables for ${VAR} substitution. When None, the text is parsed verbatim.
        """
        self.context = context

    def parse(self, compose_path: str) -> ComposeDocument:
        """
        Parses a compose file from a path.

        :param compose_path: Path to the compose file.
        :return: Parsed document.
        """
        with open(compose_path, 'r') as f:
            content = f.read()
        return self.parse_from_string(content)

    def parse_from_string(self, content: str) -> ComposeDocument:
        """
        Loads, validates and normalizes a compose document.

        :param content: YAML content of the compose file.
        :return: Parsed document.
        :raises ComposeParseError: If the YAML is malformed.
        :raises ComposeValidationError: If the document is structurally invalid.
        """
        data, diagnostics = self.load(content)
        result = self.validate(data)
        if not result.valid:
            raise ComposeValidationError(result.errors)
        document, normalize_diagnostics = self.to_document(data)
        diagnostics = diagnostics.merge(normalize_diagnostics)
        return document.model_copy(update={'load_warnings': diagnostics.warnings})

    def load(self, content: str) -> Tuple[Any, Diagnostics]:
        """
        Interpolates and parses the raw YAML text.

        Only the safe YAML schema is used, so tags that would construct
        arbitrary Python objects are rejected, as are keys repeated
        within one mapping.

        :param content: YAML content.
        :return: The raw parsed data and interpolation warnings.
        :raises ComposeParseError: If the YAML is malformed.
        """
        diagnostics = Diagnostics()
        if self.context is not None:
            content, missing = EnvironmentInterpolator.interpolate(content, self.context)
            for var_name in missing:
                diagnostics = diagnostics.with_warning(
                    f'Variable "{var_name}" is not set. Defaulting to a blank string.'
                )

        try:
            data = yaml.load(content, Loader=UniqueKeySafeLoader)
        except yaml.YAMLError as e:
            raise ComposeParseError(f"Failed to parse YAML: {e}") from e
        return data, diagnostics

    def validate(self, data: Any) -> ValidationResult:
        """
        Checks the structure of a loaded document, collecting every problem.

        :param data: The raw parsed document.
        :return: The validation outcome.
        """
        errors: List[str] = []

        if not isinstance(data, dict):
            errors.append('Invalid Docker Compose structure: root must be a mapping')
            return ValidationResult(valid=False, errors=errors)

        services = data.get('services')
        if not isinstance(services, dict):
            errors.append('Invalid Docker Compose structure: "services" section is required')
            return ValidationResult(valid=False, errors=errors)

        if not services:
            errors.append('No services found in Docker Compose file')

        for name, spec in services.items():
            if not isinstance(spec, dict):
                errors.append(f'Service "{name}": definition must be a mapping')
            elif not spec.get('image'):
                if spec.get('build'):
                    errors.append(f'Service "{name}": "build" is not supported, use a pre-built "image"')
                else:
                    errors.append(f'Service "{name}": "image" is required')
            elif not isinstance(spec['image'], str):
                errors.append(f'Service "{name}": "image" must be a string')

        return ValidationResult(valid=not errors, errors=errors)

    def to_document(self, data: Dict[str, Any]) -> Tuple[ComposeDocument, Diagnostics]:
        """
        Normalizes a validated document into service specs.

        :param data: The raw parsed document, already validated.
        :return: The document and any normalization warnings.
        """
        diagnostics = Diagnostics()
        services = {}
        for name, spec in data['services'].items():
            name = str(name)
            service, skipped = self._parse_service(name, spec)
            services[name] = service
            for entry in skipped:
                diagnostics = diagnostics.with_warning(
                    f'Service "{name}": environment entry "{entry}" has no value and was skipped'
                )

        volumes = data.get('volumes')
        document = ComposeDocument(
            services=services,
            volumes=[str(v) for v in volumes] if isinstance(volumes, dict) else [],
        )
        logger.debug("Parsed %d services", len(services))
        return document, diagnostics

    def _parse_service(self, name: str, spec: Dict[str, Any]) -> Tuple[ServiceSpec, List[str]]:
        """
        Parses a single service definition from a compose file.

        :param name: The name of the service.
        :param spec: The service specification dictionary.
        :return: The service spec and skipped environment entries.
        """
        environment, skipped = parse_environment(spec.get('environment'))
        restart = spec.get('restart')
        # YAML reads a bare `no` as False
        if restart is False:
            restart = 'no'

        container_name = spec.get('container_name')
        service = ServiceSpec(
            name=name,
            image=spec.get('image'),
            command=self._to_list(spec.get('command')),
            entrypoint=self._to_list(spec.get('entrypoint')),
            environment=environment,
            ports=parse_ports(spec.get('ports')),
            volumes=parse_volumes(spec.get('volumes')),
            depends_on=self._dependencies(spec.get('depends_on')),
            restart=str(restart) if restart is not None else None,
            container_name=str(container_name) if container_name else None,
            build=spec.get('build'),
            networks=spec.get('networks'),
            healthcheck=spec.get('healthcheck'),
            deploy=spec.get('deploy'),
        )
        return service, skipped

    def _dependencies(self, depends_on: Any) -> List[str]:
        """
        Reads ``depends_on`` in list or mapping form, keeping first-seen order.
        """
        if isinstance(depends_on, dict):
            names = list(depends_on.keys())
        elif isinstance(depends_on, list):
            names = depends_on
        elif isinstance(depends_on, str):
            names = [depends_on]
        else:
            return []

        ordered: List[str] = []
        for dep in names:
            dep = str(dep)
            if dep not in ordered:
                ordered.append(dep)
        return ordered

    def _to_list(self, val: Any) -> List[str]:
        """
        Helper to ensure a command value is a list of strings.
        Strings are split with shell rules, as Docker Compose does.

        :param val: The value to convert.
        :return: A list of strings.
        """
        if val is None:
            return []
        if isinstance(val, str):
            try:
                return shlex.split(val)
            except ValueError:
                # Unbalanced quotes; keep the string whole
                return [val]
        if isinstance(val, list):
            return [str(v) for v in val]
        return [str(val)]
