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
Command Line Interface for C2CI.
"""
import json
import logging
import os
import click
from dotenv import dotenv_values
from pydantic import ValidationError
from ..CONVERTERS.from_container_instance import ComposeExporter
from ..CONVERTERS.to_container_instance import ContainerInstanceConverter, CYCLE_WARNING
from ..MODELS.deployment_payload import ShapeConfig
from ..MODELS.target_config import Architecture, TargetConfig
from ..PARSERS.compose_parser import ComposeParser, ComposeParseError, ComposeValidationError
from ..RESOLVERS.dependency_resolver import DependencyResolver


def _echo_warnings(warnings):
    for warning in warnings:
        click.echo(f"Warning: {warning}", err=True)


def _load_document(ctx, context=None):
    """
    Parses the compose file named on the group, exiting with status 1 on any error.
    """
    path = ctx.obj['file']
    if not os.path.exists(path):
        click.echo(f"Error: {path} not found.", err=True)
        ctx.exit(1)
    try:
        return ComposeParser(context).parse(path)
    except ComposeParseError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)
    except ComposeValidationError as e:
        for error in e.errors:
            click.echo(f"Error: {error}", err=True)
        ctx.exit(1)


@click.group()
@click.option('--file', '-f', default='docker-compose.yml', help='Compose file path')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, file, verbose):
    """
    C2CI - Compose to Container Instance converter.

    Turns a Docker Compose setup into a single container instance payload.
    """
    ctx.ensure_object(dict)
    ctx.obj['file'] = file
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(name)s: %(message)s')


@cli.command()
@click.pass_context
def validate(ctx):
    """Check the compose file for structural errors."""
    path = ctx.obj['file']
    if not os.path.exists(path):
        click.echo(f"Error: {path} not found.", err=True)
        ctx.exit(1)
    parser = ComposeParser()
    with open(path, 'r') as f:
        content = f.read()
    try:
        data, _ = parser.load(content)
    except ComposeParseError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)
    result = parser.validate(data)
    if not result.valid:
        for error in result.errors:
            click.echo(f"Error: {error}", err=True)
        ctx.exit(1)
    click.echo("Valid")


@cli.command()
@click.pass_context
def order(ctx):
    """Show the order in which services boot."""
    document = _load_document(ctx)
    result = DependencyResolver().resolve_order(document)
    if result.has_cycle:
        _echo_warnings([CYCLE_WARNING])
    for index, name in enumerate(result.sequence, 1):
        click.echo(f"{index:3} {name}")


@cli.command()
@click.option('--compartment-id', envvar='C2CI_COMPARTMENT_ID', required=True, help='Target compartment OCID')
@click.option('--subnet-id', envvar='C2CI_SUBNET_ID', required=True, help='Target subnet OCID')
@click.option('--architecture', '-a', envvar='C2CI_ARCHITECTURE',
              type=click.Choice([a.value for a in Architecture]), default=Architecture.X86.value)
@click.option('--memory', type=float, help='Instance memory in GB (requires --ocpus)')
@click.option('--ocpus', type=float, help='Instance OCPUs (requires --memory)')
@click.option('--delay', envvar='C2CI_DEPENDENCY_DELAY', type=int, default=10,
              help='Seconds to wait for dependencies without a single port')
@click.option('--env-file', type=click.Path(exists=True, dir_okay=False), help='Variables for ${VAR} interpolation')
@click.option('--interpolate', is_flag=True, help='Interpolate ${VAR} from the process environment')
@click.option('--out', '-o', type=click.Path(dir_okay=False), help='Write the payload JSON to a file')
@click.pass_context
def convert(ctx, compartment_id, subnet_id, architecture, memory, ocpus, delay, env_file, interpolate, out):
    """Convert the compose file into a container instance payload."""
    if (memory is None) != (ocpus is None):
        click.echo("Error: --memory and --ocpus must be given together.", err=True)
        ctx.exit(1)

    context = None
    if interpolate:
        context = dict(os.environ)
    if env_file:
        context = dict(context or {})
        context.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})

    try:
        target = TargetConfig(
            compartment_id=compartment_id,
            subnet_id=subnet_id,
            architecture=Architecture(architecture),
            shape_config=ShapeConfig(memory_in_gbs=memory, ocpus=ocpus) if memory is not None else None,
            dependency_delay_seconds=delay,
        )
    except ValidationError as e:
        click.echo(f"Error: invalid target configuration: {e}", err=True)
        ctx.exit(1)

    document = _load_document(ctx, context)
    result = ContainerInstanceConverter(target).convert(document)
    _echo_warnings(result.warnings)

    body = json.dumps(result.payload.to_api(), indent=2)
    if out:
        with open(out, 'w') as f:
            f.write(body + "\n")
        click.echo(f"Payload written to {out}")
    else:
        click.echo(body)


@cli.command()
@click.argument('payload_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--out', '-o', default='.', type=click.Path(file_okay=False), help='Output directory')
@click.pass_context
def export(ctx, payload_file, out):
    """Export a payload JSON file back into a compose file."""
    with open(payload_file, 'r') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            click.echo(f"Error: {payload_file} is not valid JSON: {e}", err=True)
            ctx.exit(1)

    # Accept a conversion result as well as a bare payload
    if isinstance(data, dict) and 'payload' in data:
        data = data['payload']

    exporter = ComposeExporter()
    try:
        exported = exporter.export(data)
    except ValidationError as e:
        click.echo(f"Error: invalid payload: {e}", err=True)
        ctx.exit(1)

    os.makedirs(out, exist_ok=True)
    path = os.path.join(out, os.path.basename(exported['filename']))
    with open(path, 'w') as f:
        f.write(exported['content'])
    click.echo(f"Compose file written to {path}")


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})


if __name__ == '__main__':
    main()
