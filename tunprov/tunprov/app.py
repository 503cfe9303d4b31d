from typing import List
from .manager.provision import TunnelProvisioner, ConvergenceReport
from .manager.sysprocess import SystemCommandRunner, SystemProcessManager
from .factory import ConfigurationFactory
from .endpoint import EndpointStore
from .resources import FileWriter
from .system.osrelease import detect_platform
from .settings import Config
from .logger import setup_logger, Logger

"""
    Application main() - converges all tunnels declared in conf.d
"""


class TunProvApplication(object):
    config: ConfigurationFactory
    settings: Config
    provisioner: TunnelProvisioner

    def __init__(self, config: Config, runner: SystemCommandRunner = None):
        setup_logger(config.LOG_PATH, config.LOG_LEVEL)
        self.settings = config
        self.config = ConfigurationFactory(config)
        self.provisioner = TunnelProvisioner(config, detect_platform(config), runner=runner)

    def converge(self) -> ConvergenceReport:
        """ Apply all tunnel definitions """

        return self.provisioner.provision_all(self.config.provide_all_definitions())

    def plan(self) -> ConvergenceReport:
        """ Show what would be changed, without changing anything """

        report = self.converge()

        for change in report.changes:
            print('~ %s (%s)' % (change.ident, change.action))

            if change.diff:
                print(change.diff)

        for service_name, actions in report.service_actions.items():
            print('~ service:%s (%s)' % (service_name, ', '.join(actions)))

        if not report.changed:
            print('Nothing to change')

        return report

    def status(self) -> List[dict]:
        """ Current state of the services of all declared tunnels """

        statuses = []
        services = self.provisioner.services

        for definition in self.config.provide_all_definitions():
            proc = SystemProcessManager.find_process_by_signature('-M %i ' % definition.monitor_port)

            statuses.append({
                'name': definition.name,
                'service': definition.service_name,
                'unit': self.provisioner.unit_kind.value,
                'desired': 'enabled' if definition.enable else 'disabled',
                'running': services.is_running(definition.service_name) if services else None,
                'enabled': services.is_enabled(definition.service_name) if services else None,
                'pid': proc.pid if proc else None,
                'ident': definition.ident
            })

        return statuses

    def collect_endpoints(self, host: str = '') -> List[dict]:
        """ Endpoint records published by all nodes into the shared store """

        return collect_endpoints(self.settings, host)


def collect_endpoints(settings: Config, host: str = '') -> List[dict]:
    """
    Reads the shared endpoint store, does not need any tunnel declared on this machine
    """

    writer = FileWriter(root_path=settings.ROOT_PATH, manage_ownership=False, dry_run=True)
    documents = EndpointStore(settings.ENDPOINT_STORE_PATH, writer).collect(host)

    Logger.debug('Collected %i endpoint documents' % len(documents))

    return [dict(document, record=document['record']._asdict()) for document in documents]
