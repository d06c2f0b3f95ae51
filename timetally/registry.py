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

"""Named Strategies.

Aggregators, formatters and transponders are looked up by name:

    register('aggregator', 'p95', Percentile(95))
    lookup('aggregator', 'p95').aggregate(series, 'duration')

The built in strategies register themselves in REGISTRY when their modules are
imported (timetally.series imports all of them).

Registering is serialized on a lock and installs a new copy of the table.
Looking up takes whatever table is current without locking, so a lookup which
races with a registration sees either the old or the new table, never one
which is half built.
"""

import threading

CATEGORIES = ('aggregator', 'formatter', 'transponder')

class NotRegisteredError(LookupError):
    pass

class Registry(object):

    def __init__(self):
        self.table = { category:{} for category in CATEGORIES }
        self.lock = threading.Lock()
        return

    @staticmethod
    def check_category(category):
        if category not in CATEGORIES:
            raise ValueError('Unknown category "{}", expected one of: {}'.format(category, ', '.join(CATEGORIES)))
        return

    def register(self, category, name, impl):
        """Register impl as name, replacing any previous registration."""
        self.check_category(category)
        with self.lock:
            table = { k:dict(v) for k,v in self.table.items() }
            table[category][name] = impl
            self.table = table
        return

    def lookup(self, category, name):
        self.check_category(category)
        table = self.table
        if name not in table[category]:
            raise NotRegisteredError('No {} registered as "{}"'.format(category, name))
        return table[category][name]

    def names(self, category):
        self.check_category(category)
        return sorted(self.table[category].keys())

REGISTRY = Registry()

def register(category, name, impl):
    REGISTRY.register(category, name, impl)
    return

def lookup(category, name):
    return REGISTRY.lookup(category, name)
