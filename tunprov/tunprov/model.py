from typing import List, NamedTuple, Tuple


TUNNEL_TYPE_FORWARD = 'forward'
TUNNEL_TYPE_REVERSE = 'reverse'
TUNNEL_TYPES = [TUNNEL_TYPE_FORWARD, TUNNEL_TYPE_REVERSE]

EndpointRecord = NamedTuple('EndpointRecord', [
    ('user', str), ('port', int), ('monitor_port', int), ('host', str), ('pubkey', str), ('enable', bool)
])


SSH_CONFIG_PATH = '/home/%s/.ssh/config'

class TunnelDefinition(object):
    """
    Single autossh tunnel declared on this host

    Decides about the generated paths, the unit name and the autossh/ssh arguments
    """

    # identity
    name: str

    # connection
    port: int
    hostport: int
    remote_ssh_host: str
    remote_ssh_port: int
    remote_ssh_user: str
    bind: str
    forward_host: str

    # behavior
    tunnel_type: str
    monitor_port: int
    enable: bool
    user: str
    pubkey: str

    # ssh hardening
    ssh_reuse_established_connections: bool
    ssh_enable_compression: bool
    ssh_ciphers: List[str]
    ssh_stricthostkeychecking: bool
    ssh_tcpkeepalives: bool

    enable_host_ssh_config: bool

    def __init__(self, name: str,
                 port: int,
                 hostport: int,
                 remote_ssh_host: str,
                 remote_ssh_port: int,
                 remote_ssh_user: str,
                 bind: str,
                 forward_host: str,
                 tunnel_type: str,
                 monitor_port: int,
                 enable: bool,
                 user: str,
                 pubkey: str,
                 ssh_reuse_established_connections: bool,
                 ssh_enable_compression: bool,
                 ssh_ciphers: List[str],
                 ssh_stricthostkeychecking: bool,
                 ssh_tcpkeepalives: bool,
                 enable_host_ssh_config: bool):
        self.name = name
        self.port = port
        self.hostport = hostport
        self.remote_ssh_host = remote_ssh_host
        self.remote_ssh_port = remote_ssh_port
        self.remote_ssh_user = remote_ssh_user
        self.bind = bind
        self.forward_host = forward_host
        self.tunnel_type = tunnel_type
        self.monitor_port = monitor_port
        self.enable = enable
        self.user = user
        self.pubkey = pubkey
        self.ssh_reuse_established_connections = ssh_reuse_established_connections
        self.ssh_enable_compression = ssh_enable_compression
        self.ssh_ciphers = ssh_ciphers
        self.ssh_stricthostkeychecking = ssh_stricthostkeychecking
        self.ssh_tcpkeepalives = ssh_tcpkeepalives
        self.enable_host_ssh_config = enable_host_ssh_config

    def is_forward(self) -> bool:
        """
        Local port is forwarded through the SSH host to forward_host:hostport (-L)
        """

        return self.tunnel_type == TUNNEL_TYPE_FORWARD

    def is_reverse(self) -> bool:
        """
        Port opened on the SSH host is forwarded back to forward_host:hostport on this machine (-R)
        """

        return self.tunnel_type == TUNNEL_TYPE_REVERSE

    @property
    def service_name(self) -> str:
        return 'autossh-' + self.name

    @property
    def config_path(self) -> str:
        return '/etc/autossh/%s.conf' % self.name

    @property
    def forwarding_flag(self) -> str:
        return '-R' if self.is_reverse() else '-L'

    @property
    def forwarding_spec(self) -> str:
        return '%s:%i:%s:%i' % (self.bind, self.port, self.forward_host, self.hostport)

    @property
    def endpoint_port(self) -> int:
        """
        Port that is meaningful when looking from the remote side of the tunnel

        :return:
        """

        return self.hostport if self.is_forward() else self.port

    @property
    def endpoint_key(self) -> str:
        return 'tunnel-endpoint-%s-%i' % (self.remote_ssh_host, self.port)

    @property
    def ssh_config_key(self) -> Tuple[str, str]:
        return self.user, self.remote_ssh_host

    @property
    def ssh_config_path(self) -> str:
        return SSH_CONFIG_PATH % self.user

    def create_ssh_options(self) -> str:
        """
        Creates a set of SSH options from the hardening switches
        :return:
        """

        opts = ['-o ServerAliveInterval=15', '-o ServerAliveCountMax=4', '-o ExitOnForwardFailure=yes']

        if self.ssh_reuse_established_connections:
            opts += ['-o ControlMaster=auto', '-o ControlPath=~/.ssh/autossh-%r@%h:%p', '-o ControlPersist=yes']

        opts.append('-o Compression=%s' % _yes_no(self.ssh_enable_compression))

        if self.ssh_ciphers:
            opts.append('-c %s' % ','.join(self.ssh_ciphers))

        opts.append('-o StrictHostKeyChecking=%s' % _yes_no(self.ssh_stricthostkeychecking))
        opts.append('-o TCPKeepAlive=%s' % _yes_no(self.ssh_tcpkeepalives))

        return ' '.join(opts)

    def create_autossh_flags(self, daemonize: bool) -> str:
        flags = '-M %i' % self.monitor_port

        if daemonize:
            flags += ' -f'

        return flags + ' -N ' + self.forwarding_flag

    def create_endpoint_record(self) -> EndpointRecord:
        return EndpointRecord(
            user=self.user,
            port=self.endpoint_port,
            monitor_port=self.monitor_port,
            host=self.remote_ssh_host,
            pubkey=self.pubkey,
            enable=self.enable
        )

    def __str__(self) -> str:
        return 'Tunnel<%s, %s %s via %s@%s:%i>' % (
            self.name, self.tunnel_type, self.forwarding_spec,
            self.remote_ssh_user, self.remote_ssh_host, self.remote_ssh_port
        )

    @property
    def ident(self) -> str:
        return self.name + '[' + self.forwarding_flag + ' ' + self.forwarding_spec + ']_at_' + self.remote_ssh_host


def _yes_no(value: bool) -> str:
    return 'yes' if value else 'no'
