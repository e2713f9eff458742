import pytest
import time
from c2ci.CONVERTERS.to_container_instance import ContainerInstanceConverter
from c2ci.MODELS.compose_document import ComposeDocument
from c2ci.MODELS.service_definition import ServiceSpec, ScalarPort
from c2ci.MODELS.target_config import TargetConfig
from c2ci.RESOLVERS.dependency_resolver import DependencyResolver

def test_stress_long_chain():
    """
    Ordering a 2000 service dependency chain declared in reverse.
    """
    services = {}
    for i in reversed(range(2000)):
        name = f"service_{i}"
        services[name] = ServiceSpec(
            name=name,
            image="dummy",
            depends_on=[f"service_{i - 1}"] if i else [],
        )

    start_time = time.time()
    result = DependencyResolver().resolve_order(ComposeDocument(services=services))
    end_time = time.time()

    assert not result.has_cycle
    assert result.sequence == [f"service_{i}" for i in range(2000)]
    assert end_time - start_time < 2.0

def test_stress_wide_conversion():
    """
    One service depending on 200 others, each with a single port.
    """
    services = {
        f"dep_{i}": ServiceSpec(name=f"dep_{i}", image="dummy", ports=[ScalarPort(value=10000 + i)])
        for i in range(200)
    }
    services['app'] = ServiceSpec(name='app', image='dummy', command=['run'], depends_on=list(services))
    target = TargetConfig(compartment_id='c', subnet_id='s')

    result = ContainerInstanceConverter(target).convert(ComposeDocument(services=services))

    app = result.payload.containers[-1]
    assert app.display_name == 'app'
    assert app.command[2].count('port_check() {') == 200
    assert len(result.payload.freeform_tags) == 201

def test_large_config_parsing():
    from c2ci.PARSERS.compose_parser import ComposeParser
    parser = ComposeParser()

    # Generate a large compose file
    content = "services:\n"
    for i in range(1000):
        content += f"  service_{i}:\n"
        content += f"    image: image_{i}\n"
        content += f"    environment:\n"
        content += f"      - VAR_{i}=VALUE_{i}\n"

    start_time = time.time()
    parser.parse_from_string(content)
    end_time = time.time()

    assert end_time - start_time < 2.0  # Should parse 1000 services in less than 2 seconds
