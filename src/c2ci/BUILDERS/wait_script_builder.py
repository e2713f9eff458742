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
Builders for the shell preambles that enforce startup ordering.

Container instances start every container at once and share one network
namespace, so a dependent container waits for its dependencies by probing
their ports on loopback before exec'ing its real command.
"""
import logging
import re
from typing import Dict, List, Optional
from jinja2 import Template
from pydantic import BaseModel, ConfigDict
from ..MODELS.service_definition import ServiceSpec

logger = logging.getLogger(__name__)

PROBE_TIMEOUT_SECONDS = 60
PROBE_INTERVAL_SECONDS = 2
SECONDS_PER_UNPROBED_DEPENDENCY = 5
NO_DEPENDENCIES_SCRIPT = 'echo "No dependencies to wait for"'

PORT_PROBE_TEMPLATE = """echo "Waiting for {{ name }} on port {{ port }}..."
timeout={{ timeout }}
elapsed=0
port_check() {
  # bash /dev/tcp
  if command -v bash >/dev/null 2>&1; then
    if timeout 1 bash -c "echo > /dev/tcp/127.0.0.1/{{ port }}" 2>/dev/null; then
      return 0
    fi
  fi
  # netcat
  if command -v nc >/dev/null 2>&1; then
    if nc -z 127.0.0.1 {{ port }} 2>/dev/null; then
      return 0
    fi
  fi
  # telnet
  if command -v telnet >/dev/null 2>&1; then
    if echo "" | timeout 1 telnet 127.0.0.1 {{ port }} 2>/dev/null | grep -q "Connected"; then
      return 0
    fi
  fi
  return 1
}
while ! port_check; do
  if [ $elapsed -ge $timeout ]; then
    echo "ERROR: Timeout waiting for {{ name }} on port {{ port }} (checked 127.0.0.1:{{ port }})"
    exit 1
  fi
  echo "Port {{ port }} not ready yet (elapsed: ${elapsed}s), retrying in {{ interval }}s..."
  sleep {{ interval }}
  elapsed=$((elapsed + {{ interval }}))
done
echo "{{ name }} is ready\""""

DELAY_TEMPLATE = """echo "Waiting for dependencies without ports: {{ names | join(', ') }}..."
sleep {{ seconds }}
echo "Dependencies should be ready\""""

_NEEDS_QUOTING = re.compile(r'[\s$"]')


class DependencyTarget(BaseModel):
    """
    A dependency to wait for. ``port`` is None when no single port is known.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    port: Optional[int] = None


def quote_token(token: str) -> str:
    """
    Double-quotes a command token containing whitespace, ``$`` or ``"``.
    """
    if _NEEDS_QUOTING.search(token):
        return '"' + token.replace('"', '\\"') + '"'
    return token


class WaitScriptBuilder:
    """
    Synthesizes wait preambles and wraps them around a service's start command.
    """
    def __init__(self, delay_seconds: int = 10):
        """
        Initializes the builder.

        :param delay_seconds: Minimum sleep for dependencies that cannot be probed.
        """
        self.delay_seconds = delay_seconds
        self.probe_template = Template(PORT_PROBE_TEMPLATE)
        self.delay_template = Template(DELAY_TEMPLATE)

    def resolve_targets(self, dependency_names: List[str], services: Dict[str, ServiceSpec]) -> List[DependencyTarget]:
        """
        Determines how each dependency is waited for.
        Only a dependency declaring exactly one port is probed.

        :param dependency_names: Names from ``depends_on``.
        :param services: All services of the document.
        :return: One target per dependency, in declaration order.
        """
        targets = []
        for name in dependency_names:
            dependency = services.get(name)
            port = None
            if dependency is not None and len(dependency.ports) == 1:
                port = dependency.ports[0].container_port()
            targets.append(DependencyTarget(name=name, port=port))
        return targets

    def build_preamble(self, targets: List[DependencyTarget]) -> str:
        """
        Renders the wait preamble: one probe loop per known port, then a
        single sleep covering every dependency without one.

        :param targets: The dependencies to wait for.
        :return: Shell script text.
        """
        sections = []
        for target in targets:
            if target.port is not None:
                sections.append(self.probe_template.render(
                    name=target.name,
                    port=target.port,
                    timeout=PROBE_TIMEOUT_SECONDS,
                    interval=PROBE_INTERVAL_SECONDS,
                ))

        unprobed = [target.name for target in targets if target.port is None]
        if unprobed:
            seconds = max(self.delay_seconds, SECONDS_PER_UNPROBED_DEPENDENCY * len(unprobed))
            sections.append(self.delay_template.render(names=unprobed, seconds=seconds))

        if not sections:
            return NO_DEPENDENCIES_SCRIPT
        return "\n".join(sections)

    def synthesize(self, service: ServiceSpec, dependency_names: List[str], services: Dict[str, ServiceSpec]) -> Optional[List[str]]:
        """
        Builds the command that waits for dependencies and then execs the service.

        A service with neither command nor entrypoint relies on the image's
        entrypoint, which cannot be wrapped without knowing it.

        :param service: The dependent service.
        :param dependency_names: Names from its ``depends_on``.
        :param services: All services of the document.
        :return: The wrapped command, or None to keep the image default untouched.
        """
        start_command = service.start_command
        if not start_command:
            logger.debug("Service %s has no command to wrap, keeping image default", service.name)
            return None

        targets = self.resolve_targets(dependency_names, services)
        preamble = self.build_preamble(targets)
        command_line = " ".join(quote_token(token) for token in start_command)
        return ["sh", "-c", f"{preamble} && exec {command_line}"]
