import json
import yaml
from click.testing import CliRunner
from c2ci.CLI.main import cli

COMPOSE = {
    'services': {
        'web': {
            'image': 'nginx',
            'command': ['nginx', '-g', 'daemon off;'],
            'ports': ['80:80'],
            'depends_on': ['db'],
        },
        'db': {
            'image': 'postgres:16',
            'ports': ['5432'],
            'volumes': ['pgdata:/var/lib/postgresql/data'],
            'networks': ['back'],
        },
    }
}


def write_compose(path, content=COMPOSE):
    compose_file = path / "docker-compose.yml"
    with open(compose_file, 'w') as f:
        yaml.dump(content, f, sort_keys=False)
    return str(compose_file)

def test_cli_help():
    runner = CliRunner()
    result = runner.invoke(cli, ['--help'])
    assert result.exit_code == 0
    assert 'Convert the compose file' in result.output

def test_cli_convert_no_file():
    runner = CliRunner()
    result = runner.invoke(cli, ['-f', 'non_existent.yml', 'convert', '--compartment-id', 'c', '--subnet-id', 's'])
    assert result.exit_code == 1
    assert 'Error: non_existent.yml not found.' in result.output

def test_cli_convert_help():
    runner = CliRunner()
    result = runner.invoke(cli, ['convert', '--help'])
    assert result.exit_code == 0
    assert '--compartment-id' in result.output

def test_cli_validate(tmp_path):
    runner = CliRunner()
    result = runner.invoke(cli, ['-f', write_compose(tmp_path), 'validate'])
    assert result.exit_code == 0
    assert 'Valid' in result.output

def test_cli_validate_reports_errors(tmp_path):
    path = write_compose(tmp_path, {'services': {'a': {'build': '.'}, 'b': {}}})
    result = CliRunner().invoke(cli, ['-f', path, 'validate'])
    assert result.exit_code == 1
    assert 'Service "a"' in result.output
    assert 'Service "b"' in result.output

def test_cli_order(tmp_path):
    result = CliRunner().invoke(cli, ['-f', write_compose(tmp_path), 'order'])
    assert result.exit_code == 0
    lines = result.output.strip().splitlines()
    assert lines[0].split() == ['1', 'db']
    assert lines[1].split() == ['2', 'web']

def test_cli_convert_to_file(tmp_path):
    out = tmp_path / "payload.json"
    result = CliRunner().invoke(cli, [
        '-f', write_compose(tmp_path), 'convert',
        '--compartment-id', 'ocid1.compartment', '--subnet-id', 'ocid1.subnet',
        '--architecture', 'ARM64', '--out', str(out),
    ])
    assert result.exit_code == 0
    assert 'networks are ignored' in result.output
    payload = json.loads(out.read_text())
    assert payload['shape'] == 'CI.Standard.A1.Flex'
    assert payload['shapeConfig'] == {'memoryInGBs': 6, 'ocpus': 1}
    assert [c['displayName'] for c in payload['containers']] == ['db', 'web']
    assert 'port 5432' in payload['containers'][1]['command'][2]

def test_cli_convert_env_fallback(tmp_path):
    result = CliRunner().invoke(
        cli, ['-f', write_compose(tmp_path), 'convert', '--memory', '32', '--ocpus', '2'],
        env={'C2CI_COMPARTMENT_ID': 'c', 'C2CI_SUBNET_ID': 's'},
    )
    assert result.exit_code == 0
    assert '"memoryInGBs": 32' in result.output

def test_cli_convert_memory_without_ocpus(tmp_path):
    result = CliRunner().invoke(cli, [
        '-f', write_compose(tmp_path), 'convert', '--compartment-id', 'c', '--subnet-id', 's', '--memory', '8'])
    assert result.exit_code == 1
    assert '--memory and --ocpus' in result.output

def test_cli_convert_env_file(tmp_path):
    path = write_compose(tmp_path, {'services': {'web': {'image': 'nginx:${TAG}'}}})
    env_file = tmp_path / ".env"
    env_file.write_text("TAG=1.27\n")
    out = tmp_path / "payload.json"
    result = CliRunner().invoke(cli, [
        '-f', path, 'convert', '--compartment-id', 'c', '--subnet-id', 's',
        '--env-file', str(env_file), '--out', str(out),
    ])
    assert result.exit_code == 0
    assert json.loads(out.read_text())['containers'][0]['imageUrl'] == 'nginx:1.27'

def test_cli_export(tmp_path):
    runner = CliRunner()
    payload_file = tmp_path / "payload.json"
    result = runner.invoke(cli, [
        '-f', write_compose(tmp_path), 'convert',
        '--compartment-id', 'c', '--subnet-id', 's', '--out', str(payload_file),
    ])
    assert result.exit_code == 0

    out_dir = tmp_path / "exported"
    result = runner.invoke(cli, ['export', str(payload_file), '--out', str(out_dir)])
    assert result.exit_code == 0
    exported = out_dir / "web-docker-compose.yaml"
    assert exported.exists()
    data = yaml.safe_load(exported.read_text())
    assert data['services']['db']['ports'] == ['5432:5432']

def test_cli_export_invalid_json(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("{not json")
    result = CliRunner().invoke(cli, ['export', str(bad)])
    assert result.exit_code == 1
    assert 'not valid JSON' in result.output
