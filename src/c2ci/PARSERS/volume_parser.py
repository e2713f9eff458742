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
Parsers for compose volume declarations.

Every mount is reduced to a (name, path) pair. Named volumes keep their
name; bind mounts and anonymous volumes get a name derived from the path,
since the target platform only knows instance-level named volumes.
"""
import logging
from typing import Any, List, Optional
from ..MODELS.service_definition import VolumeSpec

logger = logging.getLogger(__name__)

_PATH_PREFIXES = ('/', '.', '~')


def derive_volume_name(path: str) -> str:
    """
    Builds a deterministic volume name from a path: "/var/data" -> "volume-var-data".

    :param path: A host or container path.
    :return: The generated volume name.
    """
    slug = path.replace('/', '-')
    if slug.startswith('-'):
        slug = slug[1:]
    return f"volume-{slug}"


def _is_path(source: str) -> bool:
    return source.startswith(_PATH_PREFIXES)


def parse_volume(raw: Any) -> Optional[VolumeSpec]:
    """
    Parses one volume entry in short ("name:/path[:ro]", "/host:/path", "/path")
    or long (``{type, source, target}``) syntax.

    :param raw: The raw volume entry.
    :return: The volume spec, or None if the entry cannot be mounted.
    """
    if isinstance(raw, str):
        if raw.startswith(':'):
            raw = raw[1:]
        if ':' not in raw:
            return VolumeSpec(name=derive_volume_name(raw), mount_path=raw)

        parts = raw.split(':')
        source, target = parts[0], parts[1]
        if _is_path(source):
            return VolumeSpec(name=derive_volume_name(source), mount_path=target)
        return VolumeSpec(name=source, mount_path=target)

    if isinstance(raw, dict):
        target = raw.get('target')
        if not isinstance(target, str) or not target:
            logger.debug("Ignoring volume mapping without a target: %r", raw)
            return None
        source = raw.get('source')
        if not source:
            return VolumeSpec(name=derive_volume_name(target), mount_path=target)
        source = str(source)
        if raw.get('type', 'volume') == 'volume' and not _is_path(source):
            return VolumeSpec(name=source, mount_path=target)
        return VolumeSpec(name=derive_volume_name(source), mount_path=target)

    logger.debug("Ignoring volume entry of type %s", type(raw).__name__)
    return None


def parse_volumes(raw_volumes: Any) -> List[VolumeSpec]:
    """
    Parses a service's ``volumes`` list, dropping entries that cannot be mounted.
    """
    if not isinstance(raw_volumes, list):
        return []
    volumes = []
    for raw in raw_volumes:
        volume = parse_volume(raw)
        if volume is not None:
            volumes.append(volume)
    return volumes
