#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""The app module, containing the command line entrypoint."""

import argparse
import json
import os
import sys
from .tunprov.settings import Config, ProdConfig, DevConfig
from .tunprov.app import TunProvApplication, collect_endpoints
from .tunprov.logger import setup_logger
from .tunprov.exceptions import ConfigurationError

ACTIONS = ['converge', 'plan', 'status', 'endpoints']


def start_application(config: Config, action: str, host: str = '') -> int:
    if action not in ACTIONS:
        print('Invalid command name, possible commands: %s' % ', '.join(ACTIONS))
        return 1

    if action == 'plan':
        config.DRY_RUN = True

    if action == 'endpoints':
        setup_logger(config.LOG_PATH, config.LOG_LEVEL)
        print(json.dumps(collect_endpoints(config, host), indent=4, sort_keys=True))
        return 0

    try:
        tunprov = TunProvApplication(config)
    except (ConfigurationError, NotADirectoryError) as e:
        print('Configuration error: %s' % str(e), file=sys.stderr)
        return 1

    try:
        if action == 'converge':
            return 0 if tunprov.converge().successful else 2
        elif action == 'plan':
            return 0 if tunprov.plan().successful else 2
        elif action == 'status':
            print(json.dumps(tunprov.status(), indent=4))
    except KeyboardInterrupt:
        print('[CTRL] + [C]')
        return 130

    return 0


def main():
    #
    # Arguments parsing
    #
    parser = argparse.ArgumentParser()
    parser.add_argument(
        '-c',
        '--config',
        help='Path to the configuration directory (containing conf.d)',
        default=os.getenv('TUNPROV_CONFIG', '.')
    )
    parser.add_argument(
        '-r',
        '--root',
        help='Filesystem root to provision into, defaults to /',
        default=os.getenv('TUNPROV_ROOT', '/')
    )
    parser.add_argument(
        '-s',
        '--store',
        help='Shared directory where the tunnel endpoints are published',
        default=os.getenv('TUNPROV_ENDPOINT_STORE', '/var/lib/tunprov/endpoints')
    )
    parser.add_argument(
        '--os-family',
        help='Skip the detection, ex. RedHat, Debian',
        default=os.getenv('TUNPROV_OS_FAMILY', '')
    )
    parser.add_argument(
        '--os-release',
        help='Major OS release, ex. 7, 16.04',
        default=os.getenv('TUNPROV_OS_RELEASE', '')
    )
    parser.add_argument(
        '--host',
        help='"endpoints" action: show only endpoints of tunnels connecting to this host',
        default=''
    )
    parser.add_argument(
        '--log-path',
        help='Additionally log into a file',
        default=''
    )
    parser.add_argument(
        'action',
        metavar='N',
        type=str,
        help='Action. Choice: %s' % ', '.join(ACTIONS)
    )
    parser.add_argument(
        '-e',
        '--env',
        help='Environment: dev, prod',
        default=os.getenv('TUNPROV_ENV', 'prod')
    )

    parsed = parser.parse_args()
    config = ProdConfig() if parsed.env == 'prod' else DevConfig()
    config.CONFIG_PATH = parsed.config
    config.ROOT_PATH = parsed.root
    config.ENDPOINT_STORE_PATH = parsed.store
    config.OS_FAMILY = parsed.os_family
    config.OS_RELEASE = parsed.os_release
    config.LOG_PATH = parsed.log_path

    sys.exit(start_application(config, parsed.action, parsed.host))


if __name__ == '__main__':
    main()
