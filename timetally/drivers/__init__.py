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

"""Storage Drivers.

A driver is anything which implements the five methods of Driver. The
operations never look any deeper than that, so a new backend only needs to
satisfy this contract:

    inc(keys, values)   For each Key, add values into the bucket. Numbers are
                        summed, maps merged, anything else replaced. Each
                        key is updated atomically; there is no atomicity
                        across keys.
    set(keys, values)   For each Key, merge values into the bucket, replacing
                        whatever was there at the leaves.
    get(keys)           A list with the nested contents of each bucket, in the
                        order of keys. A missing bucket is {}.
    ping(key, values)   Replace the status of key.base with (key.at, values).
                        If key.at is None the current time is used.
    scan(key)           The status of key.base as (at, values), or (None, {})
                        if it was never pinged.

values is always a nested map; what is actually stored is the flat map
produced by timetally.packer.pack().

Errors from the backend are not caught here.
"""

REQUIRED_METHODS = ('inc', 'set', 'get', 'ping', 'scan')

class Driver(object):
    """Base class for drivers."""

    def inc(self, keys, values):
        raise NotImplementedError('inc() not implemented by {}'.format(type(self).__name__))

    def set(self, keys, values):
        raise NotImplementedError('set() not implemented by {}'.format(type(self).__name__))

    def get(self, keys):
        raise NotImplementedError('get() not implemented by {}'.format(type(self).__name__))

    def ping(self, key, values):
        raise NotImplementedError('ping() not implemented by {}'.format(type(self).__name__))

    def scan(self, key):
        raise NotImplementedError('scan() not implemented by {}'.format(type(self).__name__))

    def description(self):
        return type(self).__name__

def is_driver(thing):
    """Duck typing check for the driver methods."""
    return all( callable(getattr(thing, method, None)) for method in REQUIRED_METHODS )

def describe(driver):
    if hasattr(driver, 'description'):
        return driver.description()
    return type(driver).__name__
