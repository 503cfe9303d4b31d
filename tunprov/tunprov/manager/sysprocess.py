import psutil
import subprocess
from typing import List, NamedTuple, Union
from ..exceptions import CommandError
from ..logger import Logger


CommandResult = NamedTuple('CommandResult', [('returncode', int), ('stdout', str), ('stderr', str)])


class SystemCommandRunner:
    """
    Executes system commands (service managers, package queries)
    """

    def run(self, cmd: List[str]) -> CommandResult:
        Logger.debug('Executing: %s' % ' '.join(cmd))

        try:
            proc = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
        except FileNotFoundError as e:
            raise CommandError(cmd, 127, str(e))

        result = CommandResult(
            returncode=proc.returncode,
            stdout=proc.stdout.decode('utf-8').strip(),
            stderr=proc.stderr.decode('utf-8')
        )

        if result.stderr:
            Logger.debug('stderr: %s' % result.stderr)

        return result

    def check(self, cmd: List[str]) -> str:
        """
        Executes a command that has to succeed

        :param cmd:
        :return: stdout
        """

        result = self.run(cmd)

        if result.returncode != 0:
            raise CommandError(cmd, result.returncode, result.stderr)

        return result.stdout

    def succeeds(self, cmd: List[str]) -> bool:
        return self.run(cmd).returncode == 0


class SystemProcessManager:
    """
    Looks up autossh processes spawned by the service managers
    """

    @staticmethod
    def find_process_by_signature(signature: str) -> Union[psutil.Process, None]:
        for proc in psutil.process_iter():
            try:
                cmdline = " ".join(proc.cmdline())
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue

            if signature in cmdline and "autossh" in cmdline:
                return proc

        return None
