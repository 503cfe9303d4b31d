
class TunProvError(Exception):
    """Base class for errors that stop the provisioning of a single tunnel"""
    pass


class ConfigurationError(TunProvError):
    pass


class MissingDependencyError(TunProvError):
    """A package required by the service is not installed"""
    pass


class CommandError(TunProvError):
    def __init__(self, cmd: list, returncode: int, stderr: str):
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr

        super().__init__('Command "%s" exited with code %i: %s' % (' '.join(cmd), returncode, stderr.strip()))


class ManagedFileError(TunProvError):
    """A managed file exists but cannot be read or owned as declared"""
    pass
