from typing import Union
from ..interfaces import ServiceManagerInterface
from ..exceptions import MissingDependencyError
from ..resources import FileWriter, ManagedFile
from ..system.osrelease import FAMILY_REDHAT, FAMILY_DEBIAN
from ..units import UnitKind
from ..logger import Logger
from .sysprocess import SystemCommandRunner


class SystemdServiceManager(ServiceManagerInterface):
    def is_running(self, name: str) -> bool:
        return self.runner.succeeds(['systemctl', 'is-active', '--quiet', name])

    def is_enabled(self, name: str) -> bool:
        return self.runner.succeeds(['systemctl', 'is-enabled', '--quiet', name])

    def start(self, name: str):
        self.runner.check(['systemctl', 'start', name])

    def stop(self, name: str):
        self.runner.check(['systemctl', 'stop', name])

    def restart(self, name: str):
        self.runner.check(['systemctl', 'restart', name])

    def enable(self, name: str):
        self.runner.check(['systemctl', 'enable', name])

    def disable(self, name: str):
        self.runner.check(['systemctl', 'disable', name])

    def on_unit_changed(self, name: str):
        if self.dry_run:
            return

        Logger.info('Reloading systemd units after %s was changed' % name)
        self.runner.check(['systemctl', 'daemon-reload'])


class SysVServiceManager(ServiceManagerInterface):
    """
    Init scripts registered with chkconfig (RedHat 5 and 6)
    """

    def is_running(self, name: str) -> bool:
        return self.runner.succeeds(['service', name, 'status'])

    def is_enabled(self, name: str) -> bool:
        return self.runner.succeeds(['chkconfig', name])

    def start(self, name: str):
        self.runner.check(['service', name, 'start'])

    def stop(self, name: str):
        self.runner.check(['service', name, 'stop'])

    def restart(self, name: str):
        self.runner.check(['service', name, 'restart'])

    def enable(self, name: str):
        self.runner.check(['chkconfig', '--add', name])
        self.runner.check(['chkconfig', name, 'on'])

    def disable(self, name: str):
        self.runner.check(['chkconfig', name, 'off'])


class UpstartServiceManager(ServiceManagerInterface):
    """
    Upstart jobs start on boot unless /etc/init/<name>.override contains "manual"
    """

    writer: FileWriter

    def __init__(self, runner: SystemCommandRunner, writer: FileWriter, dry_run: bool = False):
        super().__init__(runner, dry_run)
        self.writer = writer

    @staticmethod
    def get_override_path(name: str) -> str:
        return '/etc/init/%s.override' % name

    def is_running(self, name: str) -> bool:
        result = self.runner.run(['initctl', 'status', name])

        return result.returncode == 0 and 'start/running' in result.stdout

    def is_enabled(self, name: str) -> bool:
        content = self.writer.read(self.get_override_path(name))

        return content is None or 'manual' not in content

    def start(self, name: str):
        self.runner.check(['initctl', 'start', name])

    def stop(self, name: str):
        self.runner.check(['initctl', 'stop', name])

    def restart(self, name: str):
        if not self.is_running(name):
            return self.start(name)

        self.runner.check(['initctl', 'restart', name])

    def enable(self, name: str):
        self.writer.remove(self.get_override_path(name))

    def disable(self, name: str):
        self.writer.apply(ManagedFile(
            path=self.get_override_path(name), content='manual\n', mode=0o644, owner='root', group='root'
        ))

    def on_unit_changed(self, name: str):
        if self.dry_run:
            return

        self.runner.check(['initctl', 'reload-configuration'])


class PackageChecker(object):
    """
    Verifies that a package is installed. Installation itself is left to the package manager
    """

    _installed: dict

    def __init__(self, family: str, runner: SystemCommandRunner):
        self._family = family
        self._runner = runner
        self._installed = {}

    def is_installed(self, package: str) -> bool:
        if package not in self._installed:
            self._installed[package] = self._query(package)

        return self._installed[package]

    def _query(self, package: str) -> bool:
        if self._family == FAMILY_REDHAT:
            return self._runner.succeeds(['rpm', '-q', package])

        if self._family == FAMILY_DEBIAN:
            result = self._runner.run(['dpkg-query', '-W', '-f=${Status}', package])
            return result.returncode == 0 and 'install ok installed' in result.stdout

        raise MissingDependencyError('Cannot check if package "%s" is installed on "%s" family' % (
            package, self._family))

    def require(self, package: str):
        if not self.is_installed(package):
            raise MissingDependencyError('Package "%s" is not installed' % package)


def create_service_manager(kind: UnitKind, runner: SystemCommandRunner, writer: FileWriter,
                           dry_run: bool = False) -> Union[ServiceManagerInterface, None]:
    if kind == UnitKind.SYSTEMD:
        return SystemdServiceManager(runner, dry_run)

    if kind == UnitKind.SYSV:
        return SysVServiceManager(runner, dry_run)

    if kind == UnitKind.UPSTART:
        return UpstartServiceManager(runner, writer, dry_run)

    return None
