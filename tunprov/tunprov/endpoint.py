import os
import json
import socket
from typing import Iterable, List, Tuple, Union
from .model import TunnelDefinition, EndpointRecord
from .resources import FileWriter, ManagedFile, Change
from .logger import Logger


class EndpointStore(object):
    """
    Shared directory of endpoint documents, one JSON file per endpoint key

    Publishing side: every node upserts documents for its tunnels and prunes the ones it no longer declares
    Collecting side: a reconciler on the remote node reads the documents matching its host
    """

    path: str
    _writer: FileWriter

    def __init__(self, path: str, writer: FileWriter):
        self.path = path
        self._writer = writer

    def get_document_path(self, key: str) -> str:
        return os.path.join(self.path, key + '.json')

    def publish(self, key: str, record: EndpointRecord, node: str, tunnel: str) -> Union[Change, None]:
        document = {
            'key': key,
            'node': node,
            'tunnel': tunnel,
            'record': record._asdict()
        }

        return self._writer.apply(ManagedFile(
            path=self.get_document_path(key),
            content=json.dumps(document, indent=4, sort_keys=True) + "\n",
            mode=0o644
        ))

    def collect(self, host: str = '') -> List[dict]:
        """
        Reads all published documents, optionally only the ones for tunnels connecting to given host

        :param host: remote_ssh_host
        :return: list of documents (key, node, tunnel, record)
        """

        return [document for file_name, document in self._load_documents()
                if not host or document['record'].host == host]

    def prune(self, node: str, keep: Iterable[str]) -> List[Change]:
        """
        Removes documents published by given node under keys it does not declare anymore

        :param node: publishing node name
        :param keep: endpoint keys that are still declared on the node
        :return: list of removals
        """

        keep = set(keep)
        changes = []

        for file_name, document in self._load_documents():
            if document.get('node') != node or document.get('key') in keep:
                continue

            path = os.path.join(self.path, file_name)

            Logger.info('%s stale endpoint document %s' % (
                'Would remove' if self._writer.dry_run else 'Removing', path))
            self._writer.remove(path)
            changes.append(Change(ident='file:' + path, action='remove', diff=''))

        return changes

    def _load_documents(self) -> List[Tuple[str, dict]]:
        real_path = self._writer.resolve(self.path)

        if not os.path.isdir(real_path):
            return []

        documents = []

        for file_name in sorted(os.listdir(real_path)):
            if not file_name.endswith('.json'):
                continue

            with open(os.path.join(real_path, file_name), 'rb') as f:
                content = f.read()

            try:
                document = json.loads(content.decode('utf-8'))
                document['record'] = EndpointRecord(**document['record'])
            except (ValueError, KeyError, TypeError) as e:
                Logger.warning('Skipping malformed endpoint document "%s": %s' % (file_name, str(e)))
                continue

            documents.append((file_name, document))

        return documents


class EndpointPublisher(object):
    """
    Publishes the endpoint records of the tunnels declared on this node
    """

    def __init__(self, store: EndpointStore, node: str = ''):
        self._store = store
        self._node = node or socket.getfqdn()

    def publish(self, definition: TunnelDefinition) -> Union[Change, None]:
        Logger.debug('Publishing %s for %s' % (definition.endpoint_key, definition))

        return self._store.publish(
            key=definition.endpoint_key,
            record=definition.create_endpoint_record(),
            node=self._node,
            tunnel=definition.name
        )

    def prune(self, definitions: List[TunnelDefinition]) -> List[Change]:
        """ Drops endpoints this node published earlier for tunnels that are no longer declared """

        return self._store.prune(self._node, [definition.endpoint_key for definition in definitions])
