import socket
from traceback import format_exc
from typing import Dict, List, Union
from ..model import TunnelDefinition
from ..settings import Config
from ..exceptions import TunProvError
from ..resources import FileWriter, ManagedFile, Change
from ..render import Renderer
from ..units import UnitKind, select_unit_kind, get_unit_spec, get_unit_path
from ..endpoint import EndpointStore, EndpointPublisher
from ..sshconfig import SSHConfigContributor
from ..system.osrelease import Platform
from ..interfaces import ServiceManagerInterface
from ..logger import Logger
from .service import PackageChecker, create_service_manager
from .sysprocess import SystemCommandRunner


class ConvergenceReport(object):
    """
    Outcome of a single convergence run
    """

    changes: List[Change]
    service_actions: Dict[str, List[str]]
    unsupported: List[str]
    failed: Dict[str, str]
    dry_run: bool

    def __init__(self, dry_run: bool = False):
        self.changes = []
        self.service_actions = {}
        self.unsupported = []
        self.failed = {}
        self.dry_run = dry_run

    def record(self, change: Union[Change, None]) -> bool:
        if change is None:
            return False

        self.changes.append(change)
        return True

    def record_service_actions(self, service_name: str, actions: List[str]):
        if actions:
            self.service_actions[service_name] = actions

    @property
    def changed(self) -> bool:
        return bool(self.changes or self.service_actions)

    @property
    def successful(self) -> bool:
        return not self.failed

    def __str__(self) -> str:
        return 'Report<changes=%i, service_actions=%i, unsupported=%i, failed=%i%s>' % (
            len(self.changes), len(self.service_actions), len(self.unsupported), len(self.failed),
            ', dry-run' if self.dry_run else ''
        )


class TunnelProvisioner(object):
    """
    Converges the host to the declared tunnels

    Order per tunnel: config file -> unit file -> package check -> service state -> endpoint -> ssh config
    Any change of the config or unit file restarts the service
    """

    unit_kind: UnitKind
    _services: Union[ServiceManagerInterface, None]

    def __init__(self, settings: Config, platform: Platform, runner: SystemCommandRunner = None,
                 renderer: Renderer = None, node: str = ''):
        runner = runner or SystemCommandRunner()

        self._settings = settings
        self.platform = platform
        self._renderer = renderer or Renderer(settings.TEMPLATES_PATH, settings.AUTOSSH_BINARY)
        self._writer = FileWriter(
            root_path=settings.ROOT_PATH,
            manage_ownership=settings.MANAGE_OWNERSHIP,
            dry_run=settings.DRY_RUN
        )
        self.unit_kind = select_unit_kind(platform.family, platform.release)
        self._services = create_service_manager(self.unit_kind, runner, self._writer, settings.DRY_RUN)
        self._packages = PackageChecker(platform.family, runner)
        self._publisher = EndpointPublisher(
            EndpointStore(settings.ENDPOINT_STORE_PATH, self._writer),
            node or socket.getfqdn()
        )
        self._ssh_config = SSHConfigContributor(self._writer, self._renderer)

    @property
    def services(self) -> Union[ServiceManagerInterface, None]:
        return self._services

    def provision_all(self, definitions: List[TunnelDefinition]) -> ConvergenceReport:
        report = ConvergenceReport(dry_run=self._settings.DRY_RUN)
        self._ssh_config.reset()

        if self.unit_kind == UnitKind.UNSUPPORTED:
            Logger.warning('Platform "%s %s" is not supported, no service units will be installed' % (
                self.platform.family, self.platform.release))

        for definition in definitions:
            try:
                self.provision(definition, report)
            except (TunProvError, OSError) as e:
                Logger.error('Cannot provision %s: %s' % (definition, str(e)))
                Logger.debug(format_exc())
                report.failed[definition.name] = str(e)

        self._prune(definitions, report)

        Logger.info('Convergence finished: %s' % report)

        return report

    def provision(self, definition: TunnelDefinition, report: ConvergenceReport):
        Logger.info('Provisioning %s' % definition)

        config_changed = report.record(self._writer.apply(ManagedFile(
            path=definition.config_path,
            content=self._renderer.render_config(definition),
            mode=0o660,
            owner=definition.user,
            group=definition.user
        )))

        if self.unit_kind == UnitKind.UNSUPPORTED:
            report.unsupported.append(definition.name)
        else:
            unit_changed = self._install_unit(definition, report)
            self._enforce_service_state(definition, report, notify=config_changed or unit_changed)

        report.record(self._publisher.publish(definition))

        if definition.enable_host_ssh_config:
            report.record(self._ssh_config.contribute(definition))

    def _prune(self, definitions: List[TunnelDefinition], report: ConvergenceReport):
        """
        Removes endpoint documents and SSH config sections left by tunnels that are not declared anymore

        SSH config of a user whose tunnel failed in this run is left as it is
        """

        try:
            for change in self._publisher.prune(definitions):
                report.record(change)
        except (TunProvError, OSError) as e:
            Logger.error('Cannot prune stale endpoints: %s' % str(e))
            report.failed['endpoints'] = str(e)

        failed_users = set(definition.user for definition in definitions if definition.name in report.failed)

        for user in sorted(set(definition.user for definition in definitions) - failed_users):
            keep = [definition.remote_ssh_host for definition in definitions
                    if definition.user == user and definition.enable_host_ssh_config]

            try:
                report.record(self._ssh_config.prune(user, keep))
            except (TunProvError, OSError) as e:
                Logger.error('Cannot prune SSH config of user "%s": %s' % (user, str(e)))
                report.failed['ssh-config:' + user] = str(e)

    def _install_unit(self, definition: TunnelDefinition, report: ConvergenceReport) -> bool:
        spec = get_unit_spec(self.unit_kind)

        changed = report.record(self._writer.apply(ManagedFile(
            path=get_unit_path(spec, definition.name),
            content=self._renderer.render_unit(definition, spec),
            mode=spec.mode,
            owner='root',
            group='root'
        )))

        if changed:
            self._services.on_unit_changed(definition.service_name)

        return changed

    def _enforce_service_state(self, definition: TunnelDefinition, report: ConvergenceReport, notify: bool):
        self._packages.require(self._settings.PACKAGE_NAME)

        actions = self._services.ensure(definition.service_name, enable=definition.enable, restart=notify)

        if actions:
            Logger.info('%s %s: %s' % (
                'Would perform on' if self._settings.DRY_RUN else 'Performed on',
                definition.service_name, ', '.join(actions)
            ))

        report.record_service_actions(definition.service_name, actions)
