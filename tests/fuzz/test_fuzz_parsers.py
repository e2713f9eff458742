import random
import string
import pytest
from c2ci.PARSERS.compose_parser import ComposeParser, ComposeParseError, ComposeValidationError
from c2ci.PARSERS.port_parser import parse_port
from c2ci.PARSERS.volume_parser import parse_volume
from c2ci.PARSERS.environment_parser import parse_environment

def random_string(length):
    return ''.join(random.choice(string.printable) for _ in range(length))

def test_fuzz_compose_parser():
    parser = ComposeParser()
    for _ in range(100):
        content = random_string(random.randint(0, 1000))
        # Junk must fail only with the documented errors
        try:
            parser.parse_from_string(content)
        except (ComposeParseError, ComposeValidationError):
            pass

def test_fuzz_compose_services():
    parser = ComposeParser()
    values = [None, 1, True, "x", "8080:80", "/a:/b", ["a"], {"target": "80"}, {}, [1, None]]
    rng = random.Random(3)
    for _ in range(200):
        spec = {key: rng.choice(values) for key in
                ('command', 'entrypoint', 'environment', 'ports', 'volumes', 'depends_on', 'restart')}
        spec['image'] = 'img'
        document, _ = parser.to_document({'services': {'svc': spec}})
        assert 'svc' in document.services

def test_fuzz_field_parsers():
    for _ in range(200):
        text = random_string(random.randint(0, 40))
        port = parse_port(text)
        port.container_port()
        parse_volume(text)
        parse_environment([text])

def test_edge_cases_parsers():
    compose_parser = ComposeParser()

    # Empty string
    with pytest.raises(ComposeValidationError):
        compose_parser.parse_from_string("")

    # Only whitespace; a tab cannot start a YAML token
    with pytest.raises((ComposeParseError, ComposeValidationError)):
        compose_parser.parse_from_string("   \n\t  ")

    # Very long image name
    doc = compose_parser.parse_from_string("services:\n  a:\n    image: " + "a" * 10000 + "\n")
    assert len(doc.services['a'].image) == 10000
