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
Parsers for the ``environment`` section of a compose service.
"""
from typing import Any, Dict, List, Tuple


def _to_env_value(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


def parse_environment(env_spec: Any) -> Tuple[Dict[str, str], List[str]]:
    """
    Normalizes an environment section into a mapping.

    Accepts a mapping or a list of ``KEY=value`` tokens. The first ``=``
    splits key from value, so the value may itself contain ``=``.

    :param env_spec: The raw ``environment`` value.
    :return: The mapping, and the list entries that were skipped for having no value.
    """
    environment: Dict[str, str] = {}
    skipped: List[str] = []

    if isinstance(env_spec, dict):
        for key, value in env_spec.items():
            environment[str(key)] = _to_env_value(value)
    elif isinstance(env_spec, list):
        for entry in env_spec:
            entry = str(entry)
            if '=' in entry:
                key, value = entry.split('=', 1)
                environment[key] = value
            else:
                skipped.append(entry)

    return environment, skipped
