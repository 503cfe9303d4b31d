#
# Makes services of the database host reachable locally through the bastion
#

DEFAULTS = {
    'remote_ssh_host': 'bastion.example.org',
    'remote_ssh_user': 'forwarder',
    'user': 'tunnels',
    'ssh_enable_compression': True,
    'enable_host_ssh_config': True
}

TUNNELS = [
    {
        'name': 'postgres',
        'tunnel_type': 'forward',
        'port': 15432,
        'hostport': 5432,
        'forward_host': 'db.internal',
        'monitor_port': 20010
    },
    {
        # second tunnel to the same bastion: its SSH config section is already contributed by "postgres"
        'name': 'redis',
        'tunnel_type': 'forward',
        'port': 16379,
        'hostport': 6379,
        'forward_host': 'cache.internal',
        'monitor_port': 20012,
        'enable': False
    }
]
