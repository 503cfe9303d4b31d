
import os
import tempfile
import unittest
from unittest.mock import patch
from ..tunprov.app import TunProvApplication
from ..tunprov.manager.sysprocess import SystemProcessManager
from ..tunprov.logger import setup_dummy_logger
from .. import start_application
from .helpers import create_test_settings, FakeSystemRunner


CONF = '''
DEFAULTS = {
    'remote_ssh_host': 'gateway.example.org',
    'remote_ssh_user': 'tunnel',
}

TUNNELS = [
    {'name': 'ssh', 'port': 2201, 'hostport': 22, 'tunnel_type': 'reverse', 'monitor_port': 20000},
    {'name': 'web', 'port': 8080, 'hostport': 80, 'tunnel_type': 'forward', 'monitor_port': 20002,
     'enable': False},
]
'''


class TunProvApplicationTest(unittest.TestCase):
    def setUp(self) -> None:
        self.settings = create_test_settings()
        self.settings.CONFIG_PATH = tempfile.mkdtemp(prefix='tunprov-conf-')
        self.settings.OS_FAMILY = 'RedHat'
        self.settings.OS_RELEASE = '7'
        os.mkdir(self.settings.CONFIG_PATH + '/conf.d')

        with open(self.settings.CONFIG_PATH + '/conf.d/tunnels.py', 'wb') as f:
            f.write(CONF.encode('utf-8'))

    def tearDown(self) -> None:
        setup_dummy_logger()

    def test_converge_and_collect_endpoints(self):
        runner = FakeSystemRunner()
        app = TunProvApplication(self.settings, runner=runner)

        report = app.converge()
        endpoints = app.collect_endpoints('gateway.example.org')

        self.assertTrue(report.successful)
        self.assertEqual({'autossh-ssh'}, runner.running)
        self.assertEqual(['ssh', 'web'], [endpoint['tunnel'] for endpoint in endpoints])
        self.assertEqual(2201, endpoints[0]['record']['port'])
        self.assertEqual(80, endpoints[1]['record']['port'])
        self.assertFalse(endpoints[1]['record']['enable'])

    def test_status(self):
        runner = FakeSystemRunner()
        app = TunProvApplication(self.settings, runner=runner)
        app.converge()

        with patch.object(SystemProcessManager, 'find_process_by_signature') as find_process_mock:
            find_process_mock.return_value = None
            statuses = app.status()

        self.assertEqual('systemd', statuses[0]['unit'])
        self.assertTrue(statuses[0]['running'])
        self.assertTrue(statuses[0]['enabled'])
        self.assertFalse(statuses[1]['running'])
        self.assertEqual('disabled', statuses[1]['desired'])
        self.assertIsNone(statuses[0]['pid'])

    def test_plan_does_not_change_anything(self):
        self.settings.DRY_RUN = True
        runner = FakeSystemRunner()

        report = TunProvApplication(self.settings, runner=runner).plan()

        self.assertTrue(report.changed)
        self.assertFalse(os.path.exists(self.settings.ROOT_PATH + '/etc/autossh/ssh.conf'))
        self.assertEqual(set(), runner.running)

    def test_start_application_rejects_unknown_action(self):
        self.assertEqual(1, start_application(self.settings, 'destroy'))

    def test_start_application_reports_configuration_errors(self):
        self.settings.CONFIG_PATH = '/non-existing-tunprov-directory'

        self.assertEqual(1, start_application(self.settings, 'converge'))

    def test_endpoints_action_does_not_need_tunnels_declared(self):
        self.settings.CONFIG_PATH = '/non-existing-tunprov-directory'

        with patch('builtins.print') as print_mock:
            self.assertEqual(0, start_application(self.settings, 'endpoints', 'gateway.example.org'))

        self.assertEqual('[]', print_mock.call_args[0][0])
