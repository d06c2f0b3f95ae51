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

"""Time Series Metrics.

Numbers are tracked against a name and a time, and added into a bucket for
each of the configured granularities (minute, hour, day and so on). Later they
are read back as a Series for a range of time at one granularity, and reduced
or formatted for reporting.

    from timetally import Configuration, track, values, set_default
    from timetally.drivers.memory import MemoryDriver

    set_default(Configuration(MemoryDriver(), timezone='America/Los_Angeles'))

    track('page_views', time(), { 'count': 1, 'country': { 'us': 1 } })
    series = values('page_views', time() - 86400, time(), 'hour')
    series.aggregate('sum', 'count')

The parts:

 * key:         granularities and time buckets
 * packer:      nested values to and from flat storage
 * drivers:     storage (memory, redis)
 * operations:  what the functions here do
 * series:      what values() returns
 * aggregators, formatters, transponders, designators:
                processing a Series
 * registry:    names for the strategies
 * config:      Configuration and the process-wide default
 * buffer:      write buffering in front of a driver
"""

from .config import Configuration, ConfigurationError, set_default, get_default, clear_default
from .operations import track, assert_, assort, values, beam, scan, keys_for
from .series import Series
from .registry import register, lookup
