import abc
from typing import List
from .manager.sysprocess import SystemCommandRunner


class ServiceManagerInterface(abc.ABC):
    """
    Controls services of a single init system
    """

    runner: SystemCommandRunner
    dry_run: bool

    def __init__(self, runner: SystemCommandRunner, dry_run: bool = False):
        self.runner = runner
        self.dry_run = dry_run

    @abc.abstractmethod
    def is_running(self, name: str) -> bool:
        pass

    @abc.abstractmethod
    def is_enabled(self, name: str) -> bool:
        pass

    @abc.abstractmethod
    def start(self, name: str):
        pass

    @abc.abstractmethod
    def stop(self, name: str):
        pass

    @abc.abstractmethod
    def restart(self, name: str):
        pass

    @abc.abstractmethod
    def enable(self, name: str):
        pass

    @abc.abstractmethod
    def disable(self, name: str):
        pass

    def on_unit_changed(self, name: str):
        """ Called after the unit file was written """
        pass

    def ensure(self, name: str, enable: bool, restart: bool = False) -> List[str]:
        """
        Brings the service to the desired running and boot state

        :param name: service name
        :param enable: should be running and started at boot
        :param restart: a watched file was changed
        :return: list of performed actions
        """

        actions = []
        running = self.is_running(name)

        if enable and not running:
            actions.append('start')
        elif enable and restart:
            actions.append('restart')
        elif not enable and running:
            actions.append('stop')

        if self.is_enabled(name) != enable:
            actions.append('enable' if enable else 'disable')

        for action in actions:
            if self.dry_run:
                continue

            getattr(self, action)(name)

        return actions
