import os
from importlib.util import spec_from_file_location, module_from_spec
from typing import List
from .settings import Config
from .exceptions import ConfigurationError
from .model import TunnelDefinition, TUNNEL_TYPES
from .logger import Logger


DEFAULTS = {
    'remote_ssh_port': 22,
    'bind': 'localhost',
    'forward_host': 'localhost',
    'enable': True,
    'user': 'autossh',
    'pubkey': '',
    'ssh_reuse_established_connections': True,
    'ssh_enable_compression': False,
    'ssh_ciphers': [
        'aes128-ctr', 'aes192-ctr', 'aes256-ctr',
        'aes128-gcm@openssh.com', 'aes256-gcm@openssh.com', 'chacha20-poly1305@openssh.com'
    ],
    'ssh_stricthostkeychecking': False,
    'ssh_tcpkeepalives': True,
    'enable_host_ssh_config': False
}

REQUIRED = ['name', 'port', 'hostport', 'remote_ssh_host', 'remote_ssh_user', 'tunnel_type', 'monitor_port']
INTEGERS = ['port', 'hostport', 'remote_ssh_port', 'monitor_port']
BOOLEANS = ['enable', 'ssh_reuse_established_connections', 'ssh_enable_compression',
            'ssh_stricthostkeychecking', 'ssh_tcpkeepalives', 'enable_host_ssh_config']

TRUE_VALUES = ('true', 'yes', 'on', '1')
FALSE_VALUES = ('false', 'no', 'off', '0')


class ConfigurationFactory(object):
    """
    Factory method for the model
    """

    _definitions: list

    def __init__(self, config: Config):
        self._definitions = []
        self._load_from_directory(os.path.join(config.CONFIG_PATH, 'conf.d'))

    def _load_from_directory(self, path: str):
        Logger.debug('Looking up configuration at "%s" path' % path)

        if not os.path.isdir(path):
            raise NotADirectoryError('Specified directory "%s" does not exist' % path)

        # declaration order matters for the ssh config, keep it stable
        for file_name in sorted(os.listdir(path)):
            conf_path = os.path.join(path, file_name)

            if not file_name.endswith('.py') or not os.path.isfile(conf_path):
                continue

            raw_cfg = self._load_module(conf_path)

            try:
                self._definitions += self._parse(raw_cfg)
            except (AttributeError, ConfigurationError, TypeError, ValueError) as e:
                raise ConfigurationError('Error while parsing "%s". %s' % (conf_path, str(e)))

    @staticmethod
    def _load_module(conf_path: str):
        spec = spec_from_file_location('tunprov_conf_' + os.path.basename(conf_path)[:-3], conf_path)
        module = module_from_spec(spec)
        spec.loader.exec_module(module)

        return module

    def provide_all_definitions(self) -> List[TunnelDefinition]:
        return self._definitions

    def _parse(self, raw) -> List[TunnelDefinition]:
        defaults = dict(DEFAULTS)
        defaults.update(getattr(raw, 'DEFAULTS', {}))

        return [self.create_definition(raw_definition, defaults) for raw_definition in raw.TUNNELS]

    @staticmethod
    def create_definition(raw_definition: dict, defaults: dict = None) -> TunnelDefinition:
        """
        Merges a single raw tunnel declaration with defaults and validates it

        :param raw_definition:
        :param defaults:
        :return:
        """

        params = dict(DEFAULTS if defaults is None else defaults)
        params.update(raw_definition)

        missing = [key for key in REQUIRED if params.get(key) in (None, '')]

        if missing:
            raise ConfigurationError('Tunnel "%s" is missing required parameters: %s' % (
                params.get('name', '?'), ', '.join(missing)))

        unknown = set(params.keys()) - set(REQUIRED) - set(DEFAULTS.keys())

        if unknown:
            raise ConfigurationError('Tunnel "%s" has unknown parameters: %s' % (
                params['name'], ', '.join(sorted(unknown))))

        if params['tunnel_type'] not in TUNNEL_TYPES:
            raise ConfigurationError('Tunnel "%s" has invalid tunnel_type "%s", expected one of: %s' % (
                params['name'], params['tunnel_type'], ', '.join(TUNNEL_TYPES)))

        for key in INTEGERS:
            params[key] = int(params[key])

        for key in BOOLEANS:
            params[key] = _to_bool(params['name'], key, params[key])

        if isinstance(params['ssh_ciphers'], str):
            params['ssh_ciphers'] = [cipher.strip() for cipher in params['ssh_ciphers'].split(',') if cipher.strip()]

        return TunnelDefinition(**params)


def _to_bool(name: str, key: str, value) -> bool:
    if isinstance(value, bool):
        return value

    if isinstance(value, int) and value in (0, 1):
        return bool(value)

    if isinstance(value, str) and value.strip().lower() in TRUE_VALUES + FALSE_VALUES:
        return value.strip().lower() in TRUE_VALUES

    raise ConfigurationError('Tunnel "%s" has invalid boolean value for "%s": %s' % (name, key, repr(value)))
