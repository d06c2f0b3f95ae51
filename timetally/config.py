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

"""Configuration.

A Configuration is an immutable snapshot of everything the operations need:

    driver              The storage driver (see timetally.drivers).
    timezone            Name of the timezone buckets are floored in.
    granularities       The granularities tracked on write.
    week_start          The day weeks start on.
    precision           A Precision built from precision_enabled and
                        precision_scale.
    separator           Key separator. The driver joins the keys, so this
                        only takes effect for drivers built with
                        from_config() or given the same separator; a
                        mismatch is logged.
    designator          The default designator for assort().
    storage             Where writes go: a Buffer in front of the driver if
                        buffering is enabled, otherwise the driver.

Every operation takes an optional config; if it's not supplied the
process-wide default (set_default()) is used.

Configurations can also be loaded from a Python module, the same way the
totalizer agent loads agent_config. See stats_config-sample.py.
"""

import logging
import importlib
import threading

import pytz

from .key import UNITS, WEEKDAYS, DEFAULT_SEPARATOR, Calendar, Granularity, GranularityError
from .precision import Precision, DEFAULT_SCALE
from .drivers import is_driver, describe
from .buffer import Buffer, DEFAULT_SIZE, DEFAULT_DURATION

class ConfigurationError(Exception):
    pass

# Module settings and the Configuration parameters they map to.
MODULE_SETTINGS = (
        ('DRIVER',              'driver'),
        ('TIMEZONE',            'timezone'),
        ('GRANULARITIES',       'granularities'),
        ('WEEK_START',          'week_start'),
        ('PRECISION',           'precision_enabled'),
        ('PRECISION_SCALE',     'precision_scale'),
        ('SEPARATOR',           'separator'),
        ('DESIGNATOR',          'designator'),
        ('BUFFER',              'buffer_enabled'),
        ('BUFFER_SIZE',         'buffer_size'),
        ('BUFFER_DURATION',     'buffer_duration'),
        ('BUFFER_AGGREGATE',    'buffer_aggregate')
    )

def normalize_granularities(granularities):
    """Canonical granularity texts, in order, without duplicates or junk."""
    if not granularities:
        return UNITS
    normalized = []
    for granularity in granularities:
        try:
            text = str(Granularity(granularity))
        except GranularityError as e:
            logging.warning('Dropping granularity: {}'.format(e))
            continue
        if text not in normalized:
            normalized.append(text)
    return tuple(normalized)

class Configuration(object):

    def __init__(self, driver, timezone='UTC', granularities=None, week_start='monday',
                       precision_enabled=False, precision_scale=DEFAULT_SCALE, separator=DEFAULT_SEPARATOR,
                       designator=None, buffer_enabled=False, buffer_size=DEFAULT_SIZE,
                       buffer_duration=DEFAULT_DURATION, buffer_aggregate=True
                ):
        if not is_driver(driver):
            raise ConfigurationError('Not a driver: {!r}'.format(driver))
        options = dict(
                driver=driver, timezone=timezone, granularities=granularities, week_start=week_start,
                precision_enabled=precision_enabled, precision_scale=precision_scale, separator=separator,
                designator=designator, buffer_enabled=buffer_enabled, buffer_size=buffer_size,
                buffer_duration=buffer_duration, buffer_aggregate=buffer_aggregate
            )
        assign = lambda k,v: object.__setattr__(self, k, v)
        assign('options', options)

        try:
            if not isinstance(timezone, str):
                raise pytz.UnknownTimeZoneError(timezone)
            tz = pytz.timezone(timezone)
        except pytz.UnknownTimeZoneError:
            logging.warning('Unknown timezone "{}", using UTC'.format(timezone))
            timezone = 'UTC'
            tz = pytz.utc

        if not isinstance(week_start, str) or week_start.lower() not in WEEKDAYS:
            raise ConfigurationError('Not a weekday: {!r}'.format(week_start))
        week_start = week_start.lower()

        assign('driver', driver)
        assign('timezone', timezone)
        assign('calendar', Calendar(tz, week_start))
        assign('granularities', normalize_granularities(granularities))
        assign('week_start', week_start)
        assign('precision', Precision(precision_enabled, precision_scale))
        if getattr(driver, 'separator', separator) != separator:
            logging.warning('{} uses separator "{}", not "{}"; build it with from_config()'.format(
                                describe(driver), driver.separator, separator
                            ))
        assign('separator', separator)
        assign('designator', designator)
        assign('buffer_enabled', bool(buffer_enabled))
        if buffer_enabled:
            assign('storage', Buffer(driver, buffer_size, buffer_duration, buffer_aggregate))
        else:
            assign('storage', driver)
        return

    def __setattr__(self, k, v):
        raise AttributeError('Configuration is immutable, use replace()')

    def __delattr__(self, k):
        raise AttributeError('Configuration is immutable, use replace()')

    def __repr__(self):
        return '<{} driver={} timezone={} granularities={}>'.format(
                type(self).__name__, describe(self.driver), self.timezone, ','.join(self.granularities)
            )

    @property
    def tz(self):
        return self.calendar.tz

    @property
    def precision_enabled(self):
        return self.precision.enabled

    def replace(self, **changes):
        """A new Configuration with some parameters changed."""
        options = dict(self.options)
        for k in changes:
            if k not in options:
                raise TypeError('Unknown configuration parameter: {}'.format(k))
        options.update(changes)
        return type(self)(**options)

    @classmethod
    def from_module(cls, name):
        """Load a Configuration from the (importable) module name."""
        try:
            module = importlib.import_module(name)
        except ImportError as e:
            raise ConfigurationError('Unable to import {}: {}'.format(name, e))
        if not hasattr(module, 'DRIVER'):
            raise ConfigurationError('{} does not define DRIVER'.format(name))
        options = {}
        for setting, parameter in MODULE_SETTINGS:
            if hasattr(module, setting):
                options[parameter] = getattr(module, setting)
        return cls(**options)

DEFAULT = None
DEFAULT_LOCK = threading.Lock()

def set_default(config):
    """Set the process-wide default Configuration."""
    global DEFAULT
    if config is not None and not isinstance(config, Configuration):
        raise ConfigurationError('Not a Configuration: {!r}'.format(config))
    with DEFAULT_LOCK:
        DEFAULT = config
    return

def get_default():
    return DEFAULT

def clear_default():
    set_default(None)
    return

def resolve(config=None):
    """The supplied Configuration, or the default one."""
    if config is not None:
        return config
    config = DEFAULT
    if config is None:
        raise ConfigurationError('No configuration supplied and no default set')
    return config
