#
# CONFIGURATION REFERENCE
# -----------------------
#
#  This file should always contain all possible configuration options for documentation
#  It does not serve to run. The configuration should show possible options, not a well configured setup to run.
#
#  Files are placed in <config>/conf.d/*.py and loaded in the order of file names
#


# ===============================================================
#  Defaults applied to every tunnel declared in this file only
# ===============================================================
DEFAULTS = {
    'remote_ssh_port': 22,
    'user': 'autossh',                   # local account the tunnel is running as
    'ssh_ciphers': ['aes128-ctr', 'aes256-ctr'],
}

# ======================================
#  Tunnels provisioned on this machine
# ======================================
TUNNELS = [
    {
        'name': 'backoffice-ssh',               # unique on the host: /etc/autossh/<name>.conf, autossh-<name> service
        'tunnel_type': 'reverse',               # reverse (-R): open "port" on the remote, lead it to forward_host:hostport
                                                # forward (-L): open "port" locally, lead it to forward_host:hostport
                                                #               as seen from the remote
        'port': 2201,
        'hostport': 22,
        'bind': 'localhost',                    # address to bind "port" to
        'forward_host': 'localhost',

        'remote_ssh_host': 'gateway.example.org',
        'remote_ssh_port': 22,
        'remote_ssh_user': 'tunnel',

        'monitor_port': 20000,                  # autossh -M, uses this port and the port above it
        'enable': True,                         # running and started at boot
        'user': 'autossh',
        'pubkey': 'ssh-ed25519 AAAA... autossh@node1',  # published with the endpoint, for the remote side

        'ssh_reuse_established_connections': True,  # ControlMaster/ControlPersist
        'ssh_enable_compression': False,
        'ssh_ciphers': ['aes128-ctr', 'aes192-ctr', 'aes256-ctr'],  # cheapest first
        'ssh_stricthostkeychecking': False,
        'ssh_tcpkeepalives': True,

        'enable_host_ssh_config': True,         # add "Host gateway.example.org" to /home/<user>/.ssh/config
                                                # the first tunnel per (user, remote_ssh_host) wins
    }
]
