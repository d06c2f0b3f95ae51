#!/usr/bin/python3
# Copyright (c) 2024 by Fred Morris Tacoma WA
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import sys
import types
import unittest

import timetally.config as config
from timetally.buffer import Buffer
from timetally.drivers.memory import MemoryDriver
from timetally.designators import CustomDesignator

class TestConfiguration(unittest.TestCase):

    def setUp(self):
        self.driver = MemoryDriver()
        return

    def test_defaults(self):
        c = config.Configuration(self.driver)
        self.assertEqual(c.timezone, 'UTC')
        self.assertEqual(c.granularities, ('minute', 'hour', 'day', 'week', 'month', 'quarter', 'year'))
        self.assertEqual(c.week_start, 'monday')
        self.assertFalse(c.precision.enabled)
        self.assertEqual(c.separator, '::')
        self.assertIs(c.storage, self.driver)
        return

    def test_not_a_driver(self):
        with self.assertRaises(config.ConfigurationError):
            config.Configuration(object())
        return

    def test_bad_timezone(self):
        """Unknown timezones fall back to UTC with a warning."""
        with self.assertLogs(level='WARNING'):
            c = config.Configuration(self.driver, timezone='Mars/Olympus_Mons')
        self.assertEqual(c.timezone, 'UTC')
        return

    def test_separator_mismatch(self):
        """The driver's separator is the one which is used."""
        with self.assertLogs(level='WARNING'):
            c = config.Configuration(self.driver, separator='|')
        self.assertEqual(c.separator, '|')
        c = config.Configuration(MemoryDriver.from_config(c), separator='|')
        self.assertEqual(c.driver.separator, '|')
        return

    def test_granularities(self):
        """Junk is dropped, duplicates removed, order kept."""
        with self.assertLogs(level='WARNING'):
            c = config.Configuration(self.driver, granularities=[ 'day', '1h', 'fortnight', 'hour', '15m' ])
        self.assertEqual(c.granularities, ('day', 'hour', '15m'))
        return

    def test_week_start(self):
        self.assertEqual(config.Configuration(self.driver, week_start='Sunday').week_start, 'sunday')
        with self.assertRaises(config.ConfigurationError):
            config.Configuration(self.driver, week_start='someday')
        return

    def test_immutable(self):
        c = config.Configuration(self.driver)
        with self.assertRaises(AttributeError):
            c.timezone = 'Europe/Paris'
        return

    def test_replace(self):
        c = config.Configuration(self.driver)
        d = c.replace(timezone='Europe/Paris', precision_enabled=True)
        self.assertEqual(c.timezone, 'UTC')
        self.assertEqual(d.timezone, 'Europe/Paris')
        self.assertTrue(d.precision.enabled)
        self.assertIs(d.driver, self.driver)
        with self.assertRaises(TypeError):
            c.replace(colour='blue')
        return

    def test_buffer(self):
        c = config.Configuration(self.driver, buffer_enabled=True, buffer_size=10)
        self.assertIsInstance(c.storage, Buffer)
        self.assertIs(c.storage.driver, self.driver)
        self.assertEqual(c.storage.size, 10)
        return

class TestFromModule(unittest.TestCase):

    def tearDown(self):
        sys.modules.pop('timetally_test_config', None)
        return

    def install(self, **settings):
        module = types.ModuleType('timetally_test_config')
        for k, v in settings.items():
            setattr(module, k, v)
        sys.modules['timetally_test_config'] = module
        return

    def test_load(self):
        driver = MemoryDriver()
        designator = CustomDesignator([ 1, 10 ])
        self.install(DRIVER=driver, TIMEZONE='Europe/Paris', GRANULARITIES=[ 'hour' ], PRECISION=True,
                     DESIGNATOR=designator, LOG_LEVEL=None
                    )
        c = config.Configuration.from_module('timetally_test_config')
        self.assertIs(c.driver, driver)
        self.assertEqual(c.timezone, 'Europe/Paris')
        self.assertEqual(c.granularities, ('hour',))
        self.assertTrue(c.precision.enabled)
        self.assertIs(c.designator, designator)
        return

    def test_no_driver(self):
        self.install(TIMEZONE='UTC')
        with self.assertRaises(config.ConfigurationError):
            config.Configuration.from_module('timetally_test_config')
        return

    def test_no_module(self):
        with self.assertRaises(config.ConfigurationError):
            config.Configuration.from_module('timetally_no_such_config')
        return

class TestDefault(unittest.TestCase):

    def tearDown(self):
        config.clear_default()
        return

    def test_resolve(self):
        c = config.Configuration(MemoryDriver())
        self.assertIs(config.resolve(c), c)
        config.set_default(c)
        self.assertIs(config.get_default(), c)
        self.assertIs(config.resolve(), c)
        return

    def test_no_default(self):
        config.clear_default()
        with self.assertRaises(config.ConfigurationError):
            config.resolve()
        return

if __name__ == '__main__':
    unittest.main(verbosity=2)
