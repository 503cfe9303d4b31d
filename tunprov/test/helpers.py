
import tempfile
from typing import List
from ..tunprov.settings import Config
from ..tunprov.factory import ConfigurationFactory
from ..tunprov.model import TunnelDefinition
from ..tunprov.manager.sysprocess import SystemCommandRunner, CommandResult


def create_example_definition(**overrides) -> TunnelDefinition:
    raw = {
        'name': 'db',
        'port': 13306,
        'hostport': 3306,
        'remote_ssh_host': 'gateway.example.org',
        'remote_ssh_user': 'tunnel',
        'tunnel_type': 'reverse',
        'monitor_port': 20000,
        'user': 'autossh',
        'pubkey': 'ssh-ed25519 AAAAC3NzaC1lZDI1NTE5AAAAIExample autossh@node1'
    }
    raw.update(overrides)

    return ConfigurationFactory.create_definition(raw)


def create_test_settings(root_path: str = None, dry_run: bool = False) -> Config:
    settings = Config()
    settings.ROOT_PATH = root_path or tempfile.mkdtemp(prefix='tunprov-test-')
    settings.ENDPOINT_STORE_PATH = '/var/lib/tunprov/endpoints'
    settings.MANAGE_OWNERSHIP = False
    settings.DRY_RUN = dry_run

    return settings


class FakeSystemRunner(SystemCommandRunner):
    """
    Simulates systemd, SysV (service + chkconfig), upstart (initctl) and the package managers
    """

    commands: List[List[str]]

    def __init__(self, installed: tuple = ('autossh',)):
        self.installed = list(installed)
        self.running = set()
        self.enabled = set()
        self.commands = []
        self.failing = []

    def run(self, cmd: List[str]) -> CommandResult:
        self.commands.append(cmd)

        if cmd in self.failing:
            return CommandResult(returncode=1, stdout='', stderr='Job failed')

        returncode, stdout = self._handle(cmd)

        return CommandResult(returncode=returncode, stdout=stdout, stderr='')

    def count(self, *cmd) -> int:
        return len([executed for executed in self.commands if executed == list(cmd)])

    def _handle(self, cmd: List[str]) -> tuple:
        binary = cmd[0]

        if binary == 'systemctl':
            return self._systemctl(cmd[1:])

        if binary == 'service':
            return self._set_running(cmd[1], cmd[2])

        if binary == 'chkconfig':
            return self._chkconfig(cmd[1:])

        if binary == 'initctl':
            return self._initctl(cmd[1:])

        if binary == 'rpm':
            return (0 if cmd[-1] in self.installed else 1), ''

        if binary == 'dpkg-query':
            if cmd[-1] in self.installed:
                return 0, 'install ok installed'

            return 1, ''

        return 127, ''

    def _systemctl(self, args: List[str]) -> tuple:
        action, name = args[0], args[-1]

        if action == 'is-active':
            return (0 if name in self.running else 3), ''

        if action == 'is-enabled':
            return (0 if name in self.enabled else 1), ''

        if action == 'enable':
            self.enabled.add(name)
        elif action == 'disable':
            self.enabled.discard(name)
        elif action != 'daemon-reload':
            return self._set_running(name, action)

        return 0, ''

    def _chkconfig(self, args: List[str]) -> tuple:
        if len(args) == 1:
            return (0 if args[0] in self.enabled else 1), ''

        if args[1] == 'on':
            self.enabled.add(args[0])
        elif args[1] == 'off':
            self.enabled.discard(args[0])

        return 0, ''

    def _initctl(self, args: List[str]) -> tuple:
        if args[0] == 'reload-configuration':
            return 0, ''

        name = args[1]

        if args[0] == 'status':
            return 0, '%s %s' % (name, 'start/running, process 1234' if name in self.running else 'stop/waiting')

        if args[0] == 'stop' and name not in self.running:
            return 1, ''

        return self._set_running(name, args[0])

    def _set_running(self, name: str, action: str) -> tuple:
        if action == 'status':
            return (0 if name in self.running else 3), ''

        if action in ('start', 'restart'):
            self.running.add(name)
        elif action == 'stop':
            self.running.discard(name)

        return 0, ''
