import os
import re
from typing import NamedTuple, List
from ..settings import Config
from ..logger import Logger


FAMILY_REDHAT = 'RedHat'
FAMILY_DEBIAN = 'Debian'

REDHAT_IDS = ['rhel', 'centos', 'fedora', 'rocky', 'almalinux', 'ol', 'scientific', 'amzn']
DEBIAN_IDS = ['debian', 'ubuntu', 'raspbian', 'linuxmint']

# distributions that report "YY.MM" as their major release
FULL_VERSION_IDS = ['ubuntu', 'linuxmint']

Platform = NamedTuple('Platform', [('family', str), ('release', str)])


class ParsedOsRelease(object):
    """
    /etc/os-release parser

    Resolves the OS family (RedHat, Debian, ...) and the major release the way the configuration management tools
    usually report it: "7" for CentOS 7.9, "16.04" for Ubuntu 16.04, "9" for Debian 9.
    """

    _parsed: dict

    def __init__(self, os_release_content: str):
        self._parsed = {}
        self._parse(os_release_content.split("\n"))

    def _parse(self, lines: List[str]):
        for line in lines:
            line = line.strip()

            if not line or line.startswith('#') or '=' not in line:
                continue

            key, value = line.split('=', 1)
            self._parsed[key.strip()] = value.strip().strip('"').strip("'")

    @property
    def id(self) -> str:
        return self._parsed.get('ID', '').lower()

    @property
    def id_like(self) -> List[str]:
        return self._parsed.get('ID_LIKE', '').lower().split()

    @property
    def version_id(self) -> str:
        return self._parsed.get('VERSION_ID', '')

    @property
    def family(self) -> str:
        """
        Family name, or the raw distribution id when it is neither RedHat nor Debian based

        :return:
        """

        candidates = [self.id] + self.id_like

        if any(candidate in REDHAT_IDS for candidate in candidates):
            return FAMILY_REDHAT

        if any(candidate in DEBIAN_IDS for candidate in candidates):
            return FAMILY_DEBIAN

        return self.id

    @property
    def release(self) -> str:
        if self.id in FULL_VERSION_IDS:
            return self.version_id

        return self.version_id.split('.')[0]


class ParsedRedhatRelease(object):
    """
    /etc/redhat-release parser, for old systems without /etc/os-release (CentOS 5 and 6)

    `CentOS release 6.10 (Final)`
    """

    _release: str

    def __init__(self, content: str):
        match = re.search(r'release ([0-9]+)', content)
        self._release = match.group(1) if match else ''

    @property
    def family(self) -> str:
        return FAMILY_REDHAT

    @property
    def release(self) -> str:
        return self._release


def detect_platform(config: Config) -> Platform:
    """
    Detects the OS family and release, explicit settings take precedence over the detection
    """

    if config.OS_FAMILY:
        return Platform(family=config.OS_FAMILY, release=config.OS_RELEASE)

    root = config.ROOT_PATH
    os_release_path = os.path.join(root, config.OS_RELEASE_PATH.lstrip('/'))
    redhat_release_path = os.path.join(root, config.REDHAT_RELEASE_PATH.lstrip('/'))

    if os.path.isfile(os_release_path):
        with open(os_release_path, 'rb') as f:
            parsed = ParsedOsRelease(f.read().decode('utf-8'))
    elif os.path.isfile(redhat_release_path):
        with open(redhat_release_path, 'rb') as f:
            parsed = ParsedRedhatRelease(f.read().decode('utf-8'))
    else:
        Logger.warning('Cannot detect the operating system, neither %s nor %s exists' % (
            os_release_path, redhat_release_path))
        return Platform(family='', release=config.OS_RELEASE)

    platform = Platform(family=parsed.family, release=config.OS_RELEASE or parsed.release)
    Logger.debug('Detected platform: %s %s' % platform)

    return platform
