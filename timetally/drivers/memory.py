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

"""In-Process Storage.

Buckets live in a dict keyed by the joined Key string. Each bucket holds the
packed (flat) form of its values, exactly as a networked backend would.
Incoming values are packed before they are merged, field by field, so that
{ 200: 1 } and { 'country.us': 1 } land on the stored fields "200" and
"country.us".

Every call holds the one lock for its duration, which is what makes the
read-modify-write of inc() and set() safe between threads.
"""

import logging
import threading
from datetime import datetime

import pytz

from . import Driver
from ..key import DEFAULT_SEPARATOR
from ..packer import pack, unpack, deep_sum, deep_merge

class MemoryDriver(Driver):

    def __init__(self, separator=DEFAULT_SEPARATOR):
        self.separator = separator
        self.buckets = {}
        self.status = {}
        self.lock = threading.Lock()
        return

    @classmethod
    def from_config(cls, config):
        """A driver using the separator of the configuration."""
        return cls(separator=config.separator)

    def description(self):
        return '{} ({} buckets)'.format(type(self).__name__, len(self.buckets))

    def update(self, keys, values, merge):
        data = pack(values)
        for key in keys:
            k = key.join(self.separator)
            self.buckets[k] = merge(self.buckets.get(k, {}), data)
            logging.debug('{} {}'.format(merge.__name__, k))
        return

    def inc(self, keys, values):
        with self.lock:
            self.update(keys, values, deep_sum)
        return

    def set(self, keys, values):
        with self.lock:
            self.update(keys, values, deep_merge)
        return

    def get(self, keys):
        with self.lock:
            return [ unpack(self.buckets.get(key.join(self.separator), {})) for key in keys ]

    def ping(self, key, values):
        at = key.at
        if at is None:
            at = datetime.now(pytz.utc)
        with self.lock:
            self.status[key.base] = (at, pack(values))
        return

    def scan(self, key):
        with self.lock:
            if key.base not in self.status:
                return (None, {})
            at, data = self.status[key.base]
        return (at, unpack(data))

    def clear(self):
        with self.lock:
            self.buckets.clear()
            self.status.clear()
        return
