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

"""A Series of Buckets.

What values() returns: the start of each bucket in at, and the (nested)
contents of each bucket in the parallel list values.

    series = values('page_views', start, end, 'hour')
    series.aggregate('sum', 'count')
    series.format('timeline', 'country.*')
    series.transpond('ratio', 'conversions,visits', 'rate').format('category', 'rate')

The strategies are looked up by name in timetally.registry. A Series is never
modified by them; transpond() returns a new Series.
"""

from .precision import DEFAULT as DEFAULT_PRECISION
from .packer import split_path, fetch_path
from . import registry

# These register the built in strategies.
from . import aggregators, formatters, transponders

class Series(object):

    def __init__(self, at=None, values=None, precision=None):
        at = list(at or [])
        values = list(values or [])
        if len(at) != len(values):
            raise ValueError('Length mismatch: {} timestamps and {} values'.format(len(at), len(values)))
        self.at = at
        self.values = values
        self.precision = precision or DEFAULT_PRECISION
        return

    def __len__(self):
        return len(self.at)

    def __iter__(self):
        return iter(zip(self.at, self.values))

    def __eq__(self, other):
        if not isinstance(other, Series):
            return NotImplemented
        return self.at == other.at and self.values == other.values

    def __repr__(self):
        return '<{} {} buckets>'.format(type(self).__name__, len(self))

    @property
    def empty(self):
        return not self.at

    def dig(self, path):
        """The value at path in each bucket, None where it's missing."""
        segments = split_path(path)
        return [ fetch_path(entry, segments) for entry in self.values ]

    def aggregate(self, name, path, slices=1):
        return registry.lookup('aggregator', name).aggregate(self, path, slices)

    def format(self, name, path, slices=1, transform=None):
        return registry.lookup('formatter', name).format(self, path, slices, transform)

    def transpond(self, name, source, target, slices=1):
        return registry.lookup('transponder', name).transform(self, source, target, slices)
