
import json
import tempfile
import unittest
from unittest_data_provider import data_provider
from ..tunprov.endpoint import EndpointStore, EndpointPublisher
from ..tunprov.resources import FileWriter
from ..tunprov.model import EndpointRecord
from ..tunprov.logger import setup_dummy_logger
from .helpers import create_example_definition


def malformed_documents_provider():
    return [
        [b'{not json'],
        [b'["a", "list"]'],
        [b'{"key": "k", "node": "n", "tunnel": "t"}'],
        [b'{"key": "k", "node": "n", "tunnel": "t", "record": {"user": "u", "port": 1}}'],
        [b'{"key": "k", "node": "n", "tunnel": "t", "record": {"user": "u", "port": 1, "monitor_port": 2, '
         b'"host": "h", "pubkey": "", "enable": true, "protocol": "tcp"}}'],
        [b'\xff\xfe'],
    ]


class EndpointPublisherTest(unittest.TestCase):
    def setUp(self) -> None:
        setup_dummy_logger()
        self.writer = FileWriter(root_path=tempfile.mkdtemp(prefix='tunprov-store-'), manage_ownership=False)
        self.store = EndpointStore('/srv/endpoints', self.writer)
        self.publisher = EndpointPublisher(self.store, node='node1.example.org')

    def test_publish_writes_document_under_endpoint_key(self):
        definition = create_example_definition(tunnel_type='reverse', port=2222, hostport=22)

        change = self.publisher.publish(definition)
        document = json.loads(self.writer.read('/srv/endpoints/tunnel-endpoint-gateway.example.org-2222.json'))

        self.assertEqual('create', change.action)
        self.assertEqual('node1.example.org', document['node'])
        self.assertEqual('db', document['tunnel'])
        self.assertEqual({
            'user': 'autossh', 'port': 2222, 'monitor_port': 20000, 'host': 'gateway.example.org',
            'pubkey': definition.pubkey, 'enable': True
        }, document['record'])

    def test_publish_twice_is_a_no_op(self):
        definition = create_example_definition()

        self.publisher.publish(definition)

        self.assertIsNone(self.publisher.publish(definition))

    def test_collect_filters_by_host(self):
        self.publisher.publish(create_example_definition(name='a', port=1001, remote_ssh_host='a.example.org'))
        self.publisher.publish(create_example_definition(name='b', port=1002, remote_ssh_host='b.example.org'))
        self.publisher.publish(create_example_definition(name='c', port=1003, remote_ssh_host='a.example.org',
                                                         tunnel_type='forward', hostport=80))

        documents = self.store.collect(host='a.example.org')

        self.assertEqual(['a', 'c'], [document['tunnel'] for document in documents])
        self.assertIsInstance(documents[1]['record'], EndpointRecord)
        self.assertEqual(80, documents[1]['record'].port)
        self.assertEqual(3, len(self.store.collect()))

    @data_provider(malformed_documents_provider)
    def test_collect_skips_malformed_documents(self, content: bytes):
        self.publisher.publish(create_example_definition())

        with open(self.writer.resolve('/srv/endpoints/broken.json'), 'wb') as f:
            f.write(content)

        self.assertEqual(1, len(self.store.collect()))

    def test_collect_from_empty_store(self):
        self.assertEqual([], EndpointStore('/not-published-yet', self.writer).collect())

    def test_prune_removes_only_own_undeclared_documents(self):
        kept = create_example_definition(name='kept', port=1001)
        dropped = create_example_definition(name='dropped', port=1002)
        foreign = create_example_definition(name='foreign', port=1003)

        self.publisher.publish(kept)
        self.publisher.publish(dropped)
        EndpointPublisher(self.store, node='node2.example.org').publish(foreign)

        changes = self.publisher.prune([kept])

        self.assertEqual(['file:/srv/endpoints/tunnel-endpoint-gateway.example.org-1002.json'],
                         [change.ident for change in changes])
        self.assertEqual('remove', changes[0].action)
        self.assertEqual(['foreign', 'kept'], [document['tunnel'] for document in self.store.collect()])

    def test_prune_in_dry_run_keeps_documents(self):
        self.publisher.publish(create_example_definition())
        self.writer.dry_run = True

        self.assertEqual(1, len(self.publisher.prune([])))
        self.assertEqual(1, len(self.store.collect()))
