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

"""Formatters.

A formatter turns a Series into something for display:

    format(series, path, slices=1, transform=None)

The path is resolved to concrete leaf paths first (see
timetally.packer.resolve_paths), so given buckets like

    { 'country': { 'us': 3, 'ca': 1 } }

formatting 'country' or 'country.*' produces entries for 'country.us' and
'country.ca'. The result is a dict keyed by the dotted concrete paths.

category    The total for each path. With slices > 1, a list of the totals
            of each slice. transform(path, total) returns the (key, value) to
            use in place of (path, total).

timeline    The bucket by bucket values for each path, as a list of records

                { 'at': <datetime>, 'value': <float> }

            where missing values are 0.0. With slices > 1, a list of such
            lists. transform(at, value) returns the record to use instead.

Slicing works the same way as for aggregators.
"""

from .packer import split_path, fetch_path, join_path, resolve_paths
from .precision import Precision
from .aggregators import slice_values
from .registry import register

class Formatter(object):
    """Base class. Subclasses implement format_path()."""

    def format_path(self, series, path, segments, slices, transform):
        raise NotImplementedError('format_path() not implemented by {}'.format(type(self).__name__))

    def format(self, series, path, slices=1, transform=None):
        if not series.at:
            return {}
        formatted = {}
        for segments in resolve_paths(series.values, split_path(path)):
            k, v = self.format_path(series, join_path(segments), segments, slices, transform)
            formatted[k] = v
        return formatted

class Category(Formatter):

    def format_path(self, series, path, segments, slices, transform):
        precision = series.precision
        extracted = [ fetch_path(entry, segments) for entry in series.values ]
        totals = [ precision.result(precision.sum(chunk)) for chunk in slice_values(extracted, slices) ]
        if slices == 1:
            totals = totals[0]
        if transform is not None:
            return transform(path, totals)
        return (path, totals)

class Timeline(Formatter):

    @staticmethod
    def record(at, value):
        return { 'at': at, 'value': Precision.is_numeric(value) and float(value) or 0.0 }

    def format_path(self, series, path, segments, slices, transform):
        shape = transform or self.record
        pairs = [ (at, fetch_path(entry, segments)) for at, entry in zip(series.at, series.values) ]
        chunks = [ [ shape(at, value) for at, value in chunk ] for chunk in slice_values(pairs, slices) ]
        if slices == 1:
            return (path, chunks[0])
        return (path, chunks)

register('formatter', 'category', Category())
register('formatter', 'timeline', Timeline())
