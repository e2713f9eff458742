import pytest
from c2ci.PARSERS.compose_parser import ComposeParser, ComposeParseError
from c2ci.BUILDERS.wait_script_builder import WaitScriptBuilder
from c2ci.MODELS.service_definition import ServiceSpec

def test_python_object_tags_rejected():
    """
    The parser must not construct arbitrary objects from YAML tags.
    """
    content = (
        "services:\n"
        "  evil:\n"
        "    image: !!python/object/apply:os.system [\"touch /tmp/pwned\"]\n"
    )
    with pytest.raises(ComposeParseError):
        ComposeParser().parse_from_string(content)

def test_custom_tags_rejected():
    with pytest.raises(ComposeParseError):
        ComposeParser().parse_from_string("services: !include other.yml\n")

def test_command_tokens_with_quotes_stay_single_arguments():
    """
    A double quote inside a token is escaped so it cannot close the quoted argument.
    """
    svc = ServiceSpec(name='web', image='x', command=['echo', 'a" ; touch /tmp/x ; "b'])
    command = WaitScriptBuilder().synthesize(svc, [], {})
    assert command[2].endswith('&& exec echo "a\\" ; touch /tmp/x ; \\"b"')

def test_export_filename_stays_inside_output_directory():
    """
    A display name containing path segments cannot pick the exported file's directory.
    """
    from c2ci.CONVERTERS.from_container_instance import ComposeExporter
    for display_name in ('../../evil', '..\\..\\evil', '/etc/cron.d/evil'):
        payload = {
            'displayName': display_name,
            'compartmentId': 'c',
            'shape': 'CI.Standard.E4.Flex',
            'containers': [{'displayName': 'web', 'imageUrl': 'nginx'}],
        }
        filename = ComposeExporter().suggested_filename(payload)
        assert '/' not in filename
        assert '\\' not in filename
        assert filename.endswith('-docker-compose.yaml')
