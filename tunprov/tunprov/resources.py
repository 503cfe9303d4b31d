import os
import pwd
import grp
import stat
import shutil
import difflib
import tempfile
from typing import NamedTuple, Union
from .exceptions import ConfigurationError, ManagedFileError
from .logger import Logger


Change = NamedTuple('Change', [('ident', str), ('action', str), ('diff', str)])


class ManagedFile(object):
    """
    Desired state of a single file: content, permissions and ownership
    """

    path: str
    content: str
    mode: int
    owner: Union[str, None]
    group: Union[str, None]

    def __init__(self, path: str, content: str, mode: int, owner: str = None, group: str = None):
        self.path = path
        self.content = content
        self.mode = mode
        self.owner = owner
        self.group = group

    def __str__(self) -> str:
        return 'File<%s, mode=%s, owner=%s:%s>' % (self.path, oct(self.mode), self.owner, self.group)

    @property
    def ident(self) -> str:
        return 'file:' + self.path


class FileWriter(object):
    """
    Converges files on the disk. Writes only when the content or the permissions differ,
    the content is replaced atomically
    """

    root_path: str
    manage_ownership: bool
    dry_run: bool

    def __init__(self, root_path: str = '/', manage_ownership: bool = True, dry_run: bool = False):
        self.root_path = root_path
        self.manage_ownership = manage_ownership
        self.dry_run = dry_run

    def resolve(self, path: str) -> str:
        return os.path.join(self.root_path, path.lstrip('/'))

    def read(self, path: str) -> Union[str, None]:
        real_path = self.resolve(path)

        if not os.path.isfile(real_path):
            return None

        with open(real_path, 'rb') as f:
            content = f.read()

        try:
            return content.decode('utf-8')
        except UnicodeDecodeError as e:
            raise ManagedFileError('"%s" is not a valid UTF-8 text file: %s' % (path, str(e)))

    def apply(self, resource: ManagedFile) -> Union[Change, None]:
        """
        :param resource:
        :return: Change when anything was (or in dry run mode: would be) modified, None when already converged
        """

        real_path = self.resolve(resource.path)
        self._check_ownership(resource.owner, resource.group)
        current = self.read(resource.path)

        if current is None:
            action = 'create'
        elif current != resource.content:
            action = 'update'
        elif not self._permissions_match(real_path, resource):
            action = 'permissions'
        else:
            Logger.debug('%s is up to date' % resource)
            return None

        diff = ''.join(difflib.unified_diff(
            (current or '').splitlines(keepends=True),
            resource.content.splitlines(keepends=True),
            fromfile=resource.path if current is not None else '/dev/null',
            tofile=resource.path
        ))

        if self.dry_run:
            Logger.info('Would %s %s' % (action, resource))
            return Change(ident=resource.ident, action=action, diff=diff)

        Logger.info('Applying %s on %s' % (action, resource))

        if action != 'permissions':
            self._write(real_path, resource.content)

        self._set_permissions(real_path, resource)

        return Change(ident=resource.ident, action=action, diff=diff)

    @staticmethod
    def _write(real_path: str, content: str):
        directory = os.path.dirname(real_path)
        os.makedirs(directory, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.tunprov-')

        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(content.encode('utf-8'))

            os.replace(tmp_path, real_path)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def _set_permissions(self, real_path: str, resource: ManagedFile):
        os.chmod(real_path, resource.mode)

        if self.manage_ownership and (resource.owner or resource.group):
            shutil.chown(real_path, user=resource.owner, group=resource.group)

    def _check_ownership(self, owner: Union[str, None], group: Union[str, None]):
        """ Owner and group have to exist before anything is written """

        if not self.manage_ownership:
            return

        if owner:
            try:
                pwd.getpwnam(owner)
            except KeyError:
                raise ConfigurationError('User "%s" does not exist' % owner)

        if group:
            try:
                grp.getgrnam(group)
            except KeyError:
                raise ConfigurationError('Group "%s" does not exist' % group)

    def _permissions_match(self, real_path: str, resource: ManagedFile) -> bool:
        st = os.stat(real_path)

        if stat.S_IMODE(st.st_mode) != resource.mode:
            return False

        if not self.manage_ownership:
            return True

        if resource.owner and _owner_name(st.st_uid) != resource.owner:
            return False

        if resource.group and _group_name(st.st_gid) != resource.group:
            return False

        return True

    def ensure_directory(self, path: str, mode: int, owner: str = None, group: str = None):
        real_path = self.resolve(path)
        self._check_ownership(owner, group)
        os.makedirs(real_path, exist_ok=True)
        os.chmod(real_path, mode)

        if self.manage_ownership and (owner or group):
            shutil.chown(real_path, user=owner, group=group)

    def exists(self, path: str) -> bool:
        return os.path.exists(self.resolve(path))

    def remove(self, path: str) -> bool:
        real_path = self.resolve(path)

        if not os.path.exists(real_path):
            return False

        if not self.dry_run:
            os.unlink(real_path)

        return True


def _owner_name(uid: int) -> str:
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return str(uid)


def _group_name(gid: int) -> str:
    try:
        return grp.getgrgid(gid).gr_name
    except KeyError:
        return str(gid)
