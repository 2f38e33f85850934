"""Tests for conf: config persistence and the Settings object."""

import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from unittest.mock import patch

import max7219.conf as conf
from max7219.conf import (
    DEFAULTS,
    Settings,
    get_selected_controller,
    get_setting,
    load_config,
    save_config,
    save_selected_controller,
    save_setting,
)


class _ConfigTestCase(unittest.TestCase):
    """Redirect CONFIG_PATH into a temp dir for each test."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, 'max7219', 'config.json')
        self.patcher = patch.object(conf, 'CONFIG_PATH', self.path)
        self.patcher.start()

    def tearDown(self):
        self.patcher.stop()
        self.tmp.cleanup()


class TestConfigPersistence(_ConfigTestCase):

    def test_missing_file_is_empty(self):
        self.assertEqual(load_config(), {})

    def test_corrupt_file_is_empty(self):
        os.makedirs(os.path.dirname(self.path))
        with open(self.path, 'w') as f:
            f.write('{not json')
        with self.assertLogs('max7219.conf', level='WARNING'):
            self.assertEqual(load_config(), {})

    def test_non_dict_is_empty(self):
        os.makedirs(os.path.dirname(self.path))
        with open(self.path, 'w') as f:
            json.dump([1, 2], f)
        self.assertEqual(load_config(), {})

    def test_round_trip_creates_directory(self):
        save_config({'bus': 1})
        self.assertTrue(os.path.isfile(self.path))
        self.assertEqual(load_config(), {'bus': 1})

    def test_get_setting_falls_back_to_default(self):
        self.assertEqual(get_setting('intensity'), DEFAULTS['intensity'])
        self.assertIsNone(get_setting('unknown'))

    def test_save_setting_keeps_other_keys(self):
        save_config({'bus': 1})
        save_setting('count', 4)
        self.assertEqual(load_config(), {'bus': 1, 'count': 4})

    def test_selected_controller(self):
        self.assertEqual(get_selected_controller(), 0)
        save_selected_controller(3)
        self.assertEqual(get_selected_controller(), 3)

    def test_selected_controller_bad_value(self):
        save_config({'device': 'two'})
        with self.assertLogs('max7219.conf', level='WARNING'):
            self.assertEqual(get_selected_controller(), 0)


class TestSettings(_ConfigTestCase):

    def test_defaults(self):
        s = Settings()
        self.assertEqual(s.as_dict(), DEFAULTS)

    def test_saved_values(self):
        save_config({'bus': 1, 'device': 2, 'count': 3, 'intensity': 15})
        s = Settings()
        self.assertEqual((s.bus, s.device, s.count, s.intensity), (1, 2, 3, 15))
        self.assertEqual(s.speed_hz, DEFAULTS['speed_hz'])

    def test_override_not_persisted(self):
        s = Settings()
        s.override(bus=1, count=2)
        self.assertEqual((s.bus, s.device, s.count), (1, 0, 2))
        self.assertEqual(load_config(), {})

    def test_override_none_keeps_value(self):
        save_config({'device': 1})
        s = Settings()
        s.override(device=None)
        self.assertEqual(s.device, 1)

    def test_bad_value_type_falls_back_to_default(self):
        save_config({'bus': 'zero', 'count': [2], 'intensity': True, 'device': '1'})
        with self.assertLogs('max7219.conf', level='WARNING') as cm:
            s = Settings()
        self.assertEqual(s.bus, DEFAULTS['bus'])
        self.assertEqual(s.count, DEFAULTS['count'])
        self.assertEqual(s.intensity, DEFAULTS['intensity'])
        self.assertEqual(s.device, 1)
        self.assertEqual(len(cm.output), 3)
        self.assertIn("'bus'", cm.output[0])

    def test_config_command_survives_bad_value(self):
        from max7219.cli import main

        save_config({'bus': 'zero'})
        with self.assertLogs('max7219.conf', level='WARNING'):
            fresh = Settings()
        with patch.object(conf, 'settings', fresh), redirect_stdout(io.StringIO()) as out:
            self.assertEqual(main(['config']), 0)
        self.assertIn('/dev/spidev0.0', out.getvalue())

    def test_reload(self):
        s = Settings()
        save_setting('bus', 1)
        s.reload()
        self.assertEqual(s.bus, 1)


if __name__ == '__main__':
    unittest.main()
