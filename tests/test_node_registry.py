"""
Tests for the node type catalog and registry.
"""

import pytest

from flowcanvas.errors import NodeRegistryError, UnknownNodeType
from flowcanvas.node_configs import DelayConfig, HttpRequestConfig
from flowcanvas.node_registry import NodeRegistry, NodeTypeDescriptor, load_registry


@pytest.fixture(scope='module')
def registry():
    return load_registry()


def write_catalog(tmp_path, text):
    path = tmp_path / "node_types.yaml"
    path.write_text(text, encoding='utf-8')
    return path


class TestDefaultCatalog:
    """Test the bundled catalog."""

    def test_types_in_palette_order(self, registry):
        assert registry.type_ids == [
            'trigger', 'http', 'database', 'email', 'webhook', 'code', 'filter', 'delay',
        ]

    def test_by_category(self, registry):
        assert [d.type_id for d in registry.by_category('triggers')] == ['trigger', 'webhook']
        assert [d.type_id for d in registry.by_category('actions')] == ['http', 'database', 'email', 'code']
        assert [d.type_id for d in registry.by_category('logic')] == ['filter', 'delay']
        assert len(registry.by_category('all')) == len(registry) == 8
        assert registry.by_category('unknown') == []

    def test_descriptor_metadata(self, registry):
        http = registry.get('http')
        assert http.display_name == 'HTTP Request'
        assert http.category == 'actions'
        assert http.description == 'Make API calls'
        assert isinstance(http.default_config(), HttpRequestConfig)
        assert isinstance(registry.get('delay').default_config(), DelayConfig)

    def test_require_unknown(self, registry):
        with pytest.raises(UnknownNodeType) as exc:
            registry.require('teleport')
        assert exc.value.type_id == 'teleport'
        assert 'teleport' in str(exc.value)

    def test_unknown_type_is_a_key_error(self, registry):
        with pytest.raises(KeyError):
            registry.require('teleport')

    def test_membership(self, registry):
        assert 'filter' in registry
        assert 'teleport' not in registry
        assert registry.get('teleport') is None


class TestCatalogLoading:
    """Test loading catalogs from YAML files."""

    def test_invalid_entries_are_skipped(self, tmp_path):
        path = write_catalog(tmp_path, """
node_types:
  - id: ping
    name: Ping
    category: actions
    config: http
  - id: Bad-Id
    name: Bad
    category: actions
  - id: nocat
    name: No category
    category: other
  - id: norecord
    name: No record
    category: logic
    config: missing
  - name: No id
    category: logic
  - id: ping
    name: Ping again
    category: triggers
""")
        registry = load_registry(path)
        assert registry.type_ids == ['ping']
        assert registry.get('ping').config_cls is HttpRequestConfig

    def test_defaults_for_optional_keys(self, tmp_path):
        path = write_catalog(tmp_path, """
node_types:
  - id: note
    name: Note
    category: logic
""")
        descriptor = load_registry(path).get('note')
        assert descriptor.icon == 'extension'
        assert descriptor.description == ''
        assert [s.key for s in descriptor.config_schema] == ['retry_on_failure', 'continue_on_error']

    def test_missing_file(self, tmp_path):
        with pytest.raises(NodeRegistryError):
            load_registry(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = write_catalog(tmp_path, "node_types: [unclosed")
        with pytest.raises(NodeRegistryError):
            load_registry(path)

    def test_missing_node_types_list(self, tmp_path):
        path = write_catalog(tmp_path, "types: {}\n")
        with pytest.raises(NodeRegistryError):
            load_registry(path)

    def test_duplicate_descriptor_ids(self):
        a = NodeTypeDescriptor('note', 'Note', 'logic')
        with pytest.raises(NodeRegistryError):
            NodeRegistry([a, a])
