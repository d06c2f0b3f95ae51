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

"""Time Buckets and Keys.

A bucket is identified by a base name, a granularity and the starting
timestamp of the bucket:

    page_views::hour::1692266400

The starting timestamp is the instant floored to the granularity in the
configured timezone. Everything which falls within the same bucket floors to
the same timestamp, and so to the same Key.

Granularities
-------------

The granularities are:

    minute hour day week month quarter year

The short forms 1m 1h 1d 1w 1mo 1q 1y are accepted and mean the same thing.
Multiples of minutes and hours are also accepted, e.g. 15m or 6h; these are
aligned within the hour or the day respectively, so that 15m buckets start at
:00, :15, :30 and :45.

Instants
--------

Anywhere an instant is accepted it can be:

  * a timezone aware datetime
  * a naive datetime, which is taken to be UTC
  * a Unix timestamp (int or float) such as returned by time()
"""

import re
from datetime import datetime, timedelta
import calendar

import pytz

DEFAULT_SEPARATOR = '::'

UNITS = ('minute', 'hour', 'day', 'week', 'month', 'quarter', 'year')

UNIT_ABBREVIATIONS = {
        'm'     : 'minute',
        'h'     : 'hour',
        'd'     : 'day',
        'w'     : 'week',
        'mo'    : 'month',
        'q'     : 'quarter',
        'y'     : 'year'
    }
ABBREVIATIONS = { v:k for k,v in UNIT_ABBREVIATIONS.items() }

# Units which can be carved up into multiples, and what contains them.
MULTIPLES = { 'minute': 60, 'hour': 24 }

WEEKDAYS = ('monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday')

GRANULARITY_EXPR = re.compile(r'^(\d+)([a-z]+)$')

class GranularityError(ValueError):
    pass

class Granularity(object):
    """A parsed granularity.

    The canonical text is the unit name for single units ("hour") and the
    abbreviated form for multiples ("15m"). The canonical text is what ends up
    in the Key, so "1h" and "hour" address the same buckets.
    """

    def __init__(self, text):
        if isinstance(text, Granularity):
            text = text.text
        if not isinstance(text, str):
            raise GranularityError('Granularity must be a string: {!r}'.format(text))
        normalized = text.strip().lower()
        if normalized in UNITS:
            offset, unit = 1, normalized
        else:
            matched = GRANULARITY_EXPR.match(normalized)
            if not matched or matched.group(2) not in UNIT_ABBREVIATIONS:
                raise GranularityError('Unrecognized granularity: "{}"'.format(text))
            offset = int(matched.group(1))
            unit = UNIT_ABBREVIATIONS[matched.group(2)]
        if offset < 1:
            raise GranularityError('Granularity must be at least one unit: "{}"'.format(text))
        if offset > 1:
            if unit not in MULTIPLES:
                raise GranularityError('Only minutes and hours can be multiples: "{}"'.format(text))
            if offset >= MULTIPLES[unit]:
                raise GranularityError('Too many {}s: "{}"'.format(unit, text))
        self.offset = offset
        self.unit = unit
        if offset == 1:
            self.text = unit
        else:
            self.text = '{}{}'.format(offset, ABBREVIATIONS[unit])
        return

    def __str__(self):
        return self.text

    def __repr__(self):
        return '<{} {}>'.format(type(self).__name__, self.text)

    def __eq__(self, other):
        if isinstance(other, str):
            try:
                other = Granularity(other)
            except GranularityError:
                return False
        if not isinstance(other, Granularity):
            return NotImplemented
        return self.text == other.text

    def __hash__(self):
        return hash(self.text)

def timezone(name):
    """A pytz timezone. Raises pytz.UnknownTimeZoneError."""
    if hasattr(name, 'localize'):
        return name
    return pytz.timezone(name)

def to_datetime(at):
    """Convert an instant to an aware datetime."""
    if isinstance(at, datetime):
        if at.tzinfo is None or at.tzinfo.utcoffset(at) is None:
            return pytz.utc.localize(at)
        return at
    if isinstance(at, bool) or not isinstance(at, (int, float)):
        raise TypeError('Not an instant: {!r}'.format(at))
    return datetime.fromtimestamp(at, pytz.utc)

def unix_timestamp(at):
    return int(calendar.timegm(to_datetime(at).utctimetuple()))

def add_months(naive, months):
    month0 = naive.month - 1 + months
    return naive.replace(year=naive.year + month0 // 12, month=month0 % 12 + 1)

class Calendar(object):
    """Floors, steps and enumerates buckets in a timezone.

    The week starts on week_start, one of the weekday names.

    Minutes and hours are floored by subtracting from the local time rather
    than by rebuilding the wall clock time, which keeps the UTC offset of the
    instant. During a DST fallback the two 01:00 hours are thus two buckets.
    Days and longer are rebuilt from the wall clock and localized.
    """

    def __init__(self, tz='UTC', week_start='monday'):
        self.tz = timezone(tz)
        week_start = week_start.lower()
        if week_start not in WEEKDAYS:
            raise ValueError('Unrecognized week start: "{}"'.format(week_start))
        self.week_start = WEEKDAYS.index(week_start)
        return

    def local(self, at):
        return to_datetime(at).astimezone(self.tz)

    def localize(self, naive):
        return self.tz.localize(naive)

    def floor(self, at, granularity):
        granularity = Granularity(granularity)
        unit = granularity.unit
        local = self.local(at)

        if   unit == 'minute':
            delta = timedelta(
                        minutes=local.minute % granularity.offset,
                        seconds=local.second, microseconds=local.microsecond
                    )
            return self.tz.normalize(local - delta)
        elif unit == 'hour':
            delta = timedelta(
                        hours=local.hour % granularity.offset,
                        minutes=local.minute, seconds=local.second, microseconds=local.microsecond
                    )
            return self.tz.normalize(local - delta)

        naive = local.replace(tzinfo=None, hour=0, minute=0, second=0, microsecond=0)
        if   unit == 'week':
            naive -= timedelta(days=(naive.weekday() - self.week_start) % 7)
        elif unit == 'month':
            naive = naive.replace(day=1)
        elif unit == 'quarter':
            naive = naive.replace(month=naive.month - (naive.month - 1) % 3, day=1)
        elif unit == 'year':
            naive = naive.replace(month=1, day=1)
        return self.localize(naive)

    def next(self, at, granularity):
        """The start of the bucket following the one at falls in."""
        granularity = Granularity(granularity)
        unit = granularity.unit
        at = self.floor(at, granularity)

        if unit in MULTIPLES:
            step = timedelta(**{ unit + 's': granularity.offset })
            return self.floor(at.astimezone(pytz.utc) + step, granularity)

        naive = at.replace(tzinfo=None)
        if   unit == 'day':
            naive += timedelta(days=1)
        elif unit == 'week':
            naive += timedelta(days=7)
        elif unit == 'month':
            naive = add_months(naive, 1)
        elif unit == 'quarter':
            naive = add_months(naive, 3)
        elif unit == 'year':
            naive = naive.replace(year=naive.year + 1)
        return self.floor(self.localize(naive), granularity)

    def range(self, from_, to, granularity):
        """The bucket starts from from_ to to, inclusive.

        Empty if from_ is later than to.
        """
        granularity = Granularity(granularity)
        if to_datetime(from_) > to_datetime(to):
            return []
        at = self.floor(from_, granularity)
        last = self.floor(to, granularity)
        timeline = []
        while at <= last:
            timeline.append(at)
            at = self.next(at, granularity)
        return timeline

class Key(object):
    """A storage bucket identifier.

    Attributes:

        base            The metric name supplied by the caller.
        granularity     The canonical granularity text, or None.
        at              The (floored) start of the bucket, or None.
        prefix          A namespace, set by drivers which want one.

    Keys without a granularity are used for status (beam / scan), where only
    the base matters.
    """

    def __init__(self, base, granularity=None, at=None, prefix=None):
        if not isinstance(base, str) or not base:
            raise ValueError('Key base must be a non-empty string: {!r}'.format(base))
        self.base = base
        self.granularity = granularity is not None and str(Granularity(granularity)) or None
        self.at = at is not None and to_datetime(at) or None
        self.prefix = prefix
        return

    def __repr__(self):
        return '<{} {}>'.format(type(self).__name__, self.join())

    def __eq__(self, other):
        if not isinstance(other, Key):
            return NotImplemented
        return self.components() == other.components()

    def __hash__(self):
        return hash(self.components())

    def components(self):
        """The non-None components, with the timestamp as Unix seconds."""
        parts = ( self.prefix, self.base, self.granularity,
                  self.at is not None and str(unix_timestamp(self.at)) or None
                )
        return tuple( part for part in parts if part is not None )

    def join(self, separator=DEFAULT_SEPARATOR):
        return separator.join(self.components())

    def with_prefix(self, prefix):
        """Returns a copy of the key with the prefix set."""
        return Key(self.base, self.granularity, self.at, prefix)

def key_for(base, granularity, at, cal):
    """Build the Key for the bucket at falls in."""
    return Key(base, granularity, cal.floor(at, granularity))
