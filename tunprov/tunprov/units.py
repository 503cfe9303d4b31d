from enum import Enum
from typing import NamedTuple, Union
from .system.osrelease import FAMILY_REDHAT, FAMILY_DEBIAN


class UnitKind(Enum):
    SYSV = 'sysv'
    SYSTEMD = 'systemd'
    UPSTART = 'upstart'
    UNSUPPORTED = 'unsupported'


ANY_RELEASE = None

UnitSpec = NamedTuple('UnitSpec', [
    ('kind', UnitKind), ('path', str), ('mode', int), ('template', str), ('daemonize', bool)
])

#
# (family, releases) -> unit kind
# Rows are checked top to bottom, release-specific rows have to be placed before the family default
#
UNIT_TABLE = [
    (FAMILY_REDHAT, ('5', '6'), UnitKind.SYSV),
    (FAMILY_REDHAT, ('7',), UnitKind.SYSTEMD),
    (FAMILY_DEBIAN, ('16.04',), UnitKind.SYSTEMD),
    (FAMILY_DEBIAN, ANY_RELEASE, UnitKind.UPSTART),
]

UNIT_SPECS = {
    UnitKind.SYSV: UnitSpec(
        kind=UnitKind.SYSV, path='/etc/init.d/autossh-%s', mode=0o750,
        template='sysv.init.j2', daemonize=True
    ),
    UnitKind.SYSTEMD: UnitSpec(
        kind=UnitKind.SYSTEMD, path='/etc/systemd/system/autossh-%s.service', mode=0o750,
        template='systemd.service.j2', daemonize=False
    ),
    UnitKind.UPSTART: UnitSpec(
        kind=UnitKind.UPSTART, path='/etc/init/autossh-%s.conf', mode=0o644,
        template='upstart.conf.j2', daemonize=False
    )
}


def select_unit_kind(family: str, release: str) -> UnitKind:
    """
    Maps the operating system to exactly one service supervision format

    :param family: RedHat, Debian, ...
    :param release: major release as reported by the system, ex. "7" or "16.04"
    :return: UnitKind.UNSUPPORTED when no row matches
    """

    for row_family, releases, kind in UNIT_TABLE:
        if row_family != family:
            continue

        if releases is ANY_RELEASE or release in releases:
            return kind

    return UnitKind.UNSUPPORTED


def get_unit_spec(kind: UnitKind) -> Union[UnitSpec, None]:
    return UNIT_SPECS.get(kind)


def get_unit_path(spec: UnitSpec, tunnel_name: str) -> str:
    return spec.path % tunnel_name
