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

import unittest
from datetime import datetime

import pytz

import timetally
from timetally.config import Configuration, ConfigurationError
from timetally.drivers.memory import MemoryDriver
from timetally.designators import CustomDesignator, DesignatorError

UTC = pytz.utc
T0 = datetime(2024, 8, 17, 10, 42, 13, tzinfo=UTC)

class RecordingDriver(MemoryDriver):
    """Remembers the keys of each write."""

    def __init__(self):
        MemoryDriver.__init__(self)
        self.writes = []
        return

    def inc(self, keys, values):
        self.writes.append(('inc', [ key.join() for key in keys ], values))
        MemoryDriver.inc(self, keys, values)
        return

class TestTrack(unittest.TestCase):

    def setUp(self):
        self.driver = RecordingDriver()
        self.config = Configuration(self.driver, granularities=[ 'hour', 'day' ])
        return

    def test_track_twice(self):
        """Increments at the same time add up."""
        timetally.track('req', T0, { 'count': 1 }, self.config)
        timetally.track('req', T0, { 'count': 2 }, self.config)
        series = timetally.values('req', T0, T0, 'hour', self.config)
        self.assertEqual(series.at, [ datetime(2024, 8, 17, 10, tzinfo=UTC) ])
        self.assertEqual(series.values, [ { 'count': 3 } ])
        return

    def test_one_call_for_all_granularities(self):
        timetally.track('req', T0, { 'count': 1 }, self.config)
        self.assertEqual(
                self.driver.writes,
                [ ('inc', [ 'req::hour::1723888800', 'req::day::1723852800' ], { 'count': 1 }) ]
            )
        return

    def test_keys_for(self):
        keys = timetally.keys_for('req', T0, self.config)
        self.assertEqual([ key.granularity for key in keys ], [ 'hour', 'day' ])
        return

    def test_assert(self):
        timetally.track('temp', T0, { 'count': 1, 'level': 10 }, self.config)
        timetally.assert_('temp', T0, { 'level': 12 }, self.config)
        series = timetally.values('temp', T0, T0, 'day', self.config)
        self.assertEqual(series.values, [ { 'count': 1, 'level': 12 } ])
        return

class TestValues(unittest.TestCase):

    def setUp(self):
        self.config = Configuration(MemoryDriver(), granularities=[ 'hour' ])
        timetally.track('req', datetime(2024, 8, 17, 10, 5, tzinfo=UTC), { 'count': 1 }, self.config)
        timetally.track('req', datetime(2024, 8, 17, 12, 5, tzinfo=UTC), { 'count': 1 }, self.config)
        self.start = datetime(2024, 8, 17, 9, tzinfo=UTC)
        self.end = datetime(2024, 8, 17, 13, 30, tzinfo=UTC)
        return

    def test_range(self):
        """One bucket per step, missing buckets are {}."""
        series = timetally.values('req', self.start, self.end, 'hour', self.config)
        self.assertEqual(len(series.at), 5)
        self.assertEqual(len(series.values), 5)
        self.assertEqual(series.values, [ {}, { 'count': 1 }, {}, { 'count': 1 }, {} ])
        return

    def test_skip_blanks(self):
        series = timetally.values('req', self.start, self.end, 'hour', self.config, skip_blanks=True)
        self.assertEqual([ at.hour for at in series.at ], [ 10, 12 ])
        self.assertEqual(series.values, [ { 'count': 1 }, { 'count': 1 } ])
        return

    def test_backwards(self):
        series = timetally.values('req', self.end, self.start, 'hour', self.config)
        self.assertTrue(series.empty)
        return

    def test_untracked_granularity(self):
        """Reading a granularity that isn't tracked finds nothing."""
        series = timetally.values('req', self.start, self.end, 'day', self.config)
        self.assertEqual(series.values, [ {} ])
        return

    def test_bad_granularity(self):
        with self.assertRaises(ValueError):
            timetally.values('req', self.start, self.end, 'fortnight', self.config)
        return

    def test_precision(self):
        config = self.config.replace(precision_enabled=True)
        series = timetally.values('req', self.start, self.end, 'hour', config)
        self.assertTrue(series.precision.enabled)
        return

class TestAssort(unittest.TestCase):

    def setUp(self):
        self.config = Configuration(MemoryDriver(), granularities=[ 'hour' ])
        return

    def test_assort(self):
        designator = CustomDesignator([ 10, 20, 30 ])
        timetally.assort('latency', T0, { 'db': 15, 'web': { 'get': 5 } }, designator, self.config)
        timetally.assort('latency', T0, { 'db': 35 }, designator, self.config)
        timetally.assort('latency', T0, { 'db': 12 }, designator, self.config)
        series = timetally.values('latency', T0, T0, 'hour', self.config)
        self.assertEqual(series.values, [ { 'db': { '20': 2, '30+': 1 }, 'web': { 'get': { '10': 1 } } } ])
        return

    def test_dots_in_labels(self):
        timetally.assort('load', T0, { 'cpu': 0.5 }, config=self.config)
        series = timetally.values('load', T0, T0, 'hour', self.config)
        self.assertEqual(series.values, [ { 'cpu': { '0_5': 1 } } ])
        return

    def test_default_designator(self):
        config = self.config.replace(designator=CustomDesignator([ 1, 2 ]))
        timetally.assort('load', T0, { 'cpu': 1.5 }, config=config)
        self.assertEqual(timetally.values('load', T0, T0, 'hour', config).values, [ { 'cpu': { '2': 1 } } ])
        return

    def test_not_numeric(self):
        with self.assertRaises(DesignatorError):
            timetally.assort('load', T0, { 'cpu': 'high' }, CustomDesignator([ 1 ]), self.config)
        return

class TestStatus(unittest.TestCase):

    def setUp(self):
        self.config = Configuration(MemoryDriver())
        return

    def test_beam_scan(self):
        self.assertEqual(timetally.scan('health', self.config), (None, {}))
        timetally.beam('health', T0, { 'up': 1, 'queue': 4 }, self.config)
        timetally.beam('health', T0, { 'up': 0 }, self.config)
        self.assertEqual(timetally.scan('health', self.config), (T0, { 'up': 0 }))
        return

class TestDefaultConfiguration(unittest.TestCase):

    def tearDown(self):
        timetally.clear_default()
        return

    def test_default(self):
        timetally.set_default(Configuration(MemoryDriver(), granularities=[ 'day' ]))
        timetally.track('req', T0, { 'count': 1 })
        self.assertEqual(timetally.values('req', T0, T0, 'day').values, [ { 'count': 1 } ])
        return

    def test_no_default(self):
        timetally.clear_default()
        with self.assertRaises(ConfigurationError):
            timetally.track('req', T0, { 'count': 1 })
        return

class TestBuffered(unittest.TestCase):

    def test_buffered_writes(self):
        """Writes are queued, reads go to the driver."""
        driver = MemoryDriver()
        config = Configuration(driver, granularities=[ 'hour' ], buffer_enabled=True, buffer_duration=3600)
        timetally.track('req', T0, { 'count': 1 }, config)
        timetally.track('req', T0, { 'count': 1 }, config)
        self.assertEqual(timetally.values('req', T0, T0, 'hour', config).values, [ {} ])
        config.storage.flush()
        self.assertEqual(timetally.values('req', T0, T0, 'hour', config).values, [ { 'count': 2 } ])
        return

class TestEndToEnd(unittest.TestCase):

    def test_report(self):
        """Track, read and format."""
        config = Configuration(MemoryDriver(), timezone='America/Los_Angeles', granularities=[ 'hour', 'day' ])
        for hour, country in ((16, 'us'), (17, 'us'), (17, 'ca'), (20, 'us')):
            timetally.track('views', datetime(2024, 8, 17, hour, tzinfo=UTC), { 'count': 1, 'country': { country: 1 } }, config)
        series = timetally.values('views', datetime(2024, 8, 17, 15, tzinfo=UTC), datetime(2024, 8, 17, 21, tzinfo=UTC), 'hour', config)
        self.assertEqual(len(series), 7)
        self.assertEqual(series.aggregate('sum', 'count'), 4.0)
        self.assertEqual(series.format('category', 'country.*'), { 'country.us': 3.0, 'country.ca': 1.0 })
        day = timetally.values('views', datetime(2024, 8, 17, 15, tzinfo=UTC), datetime(2024, 8, 17, 15, tzinfo=UTC), 'day', config)
        self.assertEqual(day.values, [ { 'count': 4, 'country': { 'us': 3, 'ca': 1 } } ])
        return

if __name__ == '__main__':
    unittest.main(verbosity=2)
