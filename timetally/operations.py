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

"""Operations.

These turn a tracked event or a range query into driver calls.

Writes
------

    track(key, at, values)      Add values into the buckets for at, one for
                                each configured granularity.
    assert_(key, at, values)    Overwrite the leaves of those buckets.
    assort(key, at, values)     Count which designator bucket each value
                                falls in.

Writes go to config.storage, which is a Buffer if buffering is enabled. The
granularities are written with a single call; if the driver fails part way
through nothing is rolled back.

Reads
-----

    values(key, from_, to, granularity)     A Series with a bucket for every
                                            step of the range.

Status
------

    beam(key, at, values)       Record the current status of key.
    scan(key)                   The most recent status of key as (at, values).

Every operation takes an optional config. If it's not supplied the default
Configuration (timetally.config.set_default()) is used.
"""

import logging

from .key import Key, key_for
from .packer import pack, unpack
from .series import Series
from .drivers import describe
from . import config as configuration

LABEL_SEPARATOR = '_'

def keys_for(key, at, config):
    """The Keys written for key at at, one per configured granularity."""
    return [ key_for(key, granularity, at, config.calendar) for granularity in config.granularities ]

def track(key, at, values, config=None):
    config = configuration.resolve(config)
    config.storage.inc(keys_for(key, at, config), values)
    return

def assert_(key, at, values, config=None):
    config = configuration.resolve(config)
    config.storage.set(keys_for(key, at, config), values)
    return

def classify(value, designator):
    if designator is None:
        label = str(value)
    else:
        label = designator.designate(value)
    return { label.replace('.', LABEL_SEPARATOR): 1 }

def assort(key, at, values, designator=None, config=None):
    """Track a count of 1 in the designated bucket of every value.

        assort('response', now, { 'duration': 0.34 }, CustomDesignator([0.5, 1, 5]))

    increments { 'duration': { '0_5': 1 } }: 0.34 falls at or below the 0.5
    boundary, and dots in the labels become underscores, otherwise they would
    turn into paths.
    """
    config = configuration.resolve(config)
    if designator is None:
        designator = config.designator
    classified = {}
    for path, value in pack(values).items():
        classified[path] = classify(value, designator)
    config.storage.inc(keys_for(key, at, config), unpack(pack(classified)))
    return

def values(key, from_, to, granularity, config=None, skip_blanks=False):
    config = configuration.resolve(config)
    timeline = config.calendar.range(from_, to, granularity)
    keys = [ Key(key, granularity, at) for at in timeline ]
    data = keys and config.driver.get(keys) or []
    if len(data) != len(timeline):
        raise ValueError('{} returned {} buckets for {} keys'.format(describe(config.driver), len(data), len(keys)))
    if skip_blanks:
        pairs = [ (at, value) for at, value in zip(timeline, data) if value ]
        timeline = [ at for at, value in pairs ]
        data = [ value for at, value in pairs ]
    logging.debug('values({}, {}): {} buckets'.format(key, granularity, len(timeline)))
    return Series(timeline, data, config.precision)

def beam(key, at=None, values=None, config=None):
    config = configuration.resolve(config)
    config.driver.ping(Key(key, at=at), values or {})
    return

def scan(key, config=None):
    config = configuration.resolve(config)
    return config.driver.scan(Key(key))
