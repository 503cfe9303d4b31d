#
# Exposes SSH of this machine on the gateway (localhost:2201 on gateway.example.org)
#

TUNNELS = [
    {
        'name': 'ssh',
        'tunnel_type': 'reverse',
        'port': 2201,
        'hostport': 22,
        'remote_ssh_host': 'gateway.example.org',
        'remote_ssh_user': 'tunnel',
        'monitor_port': 20000,
        'pubkey': 'ssh-ed25519 AAAAC3NzaC1lZDI1NTE5AAAAIExample autossh@node1',
        'enable_host_ssh_config': True
    }
]
