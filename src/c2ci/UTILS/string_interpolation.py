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
Utilities for compose-style variable interpolation.
"""
import re
from typing import Dict, List, Tuple

# $$ escape, ${VAR:-default}, ${VAR:+value} or ${VAR}
_PATTERN = re.compile(r'\$\$|\$\{([^}:]+)(?::(-|\+)([^}]*))?\}')


class EnvironmentInterpolator:
    """
    Substitutes ${VAR}, ${VAR:-default} and ${VAR:+value} from an explicit context.
    ``$$`` yields a literal ``$``.
    """
    @staticmethod
    def interpolate(template: str, context: Dict[str, str]) -> Tuple[str, List[str]]:
        """
        Interpolates variables in the template using the provided context.

        Unset variables without a modifier resolve to an empty string, as
        Docker Compose does, and are reported back to the caller.

        :param template: The text containing ${VAR} placeholders.
        :param context: The variables available for substitution.
        :return: The interpolated text and the names of unset variables, in order of first use.
        """
        missing: List[str] = []

        def replace(match):
            if match.group(0) == '$$':
                return '$'

            var_name = match.group(1)
            modifier = match.group(2)
            alt_value = match.group(3)
            value = context.get(var_name)

            if modifier == '-':
                return value if value else alt_value
            if modifier == '+':
                return alt_value if value else ''
            if value is None:
                if var_name not in missing:
                    missing.append(var_name)
                return ''
            return value

        return _PATTERN.sub(replace, template), missing
