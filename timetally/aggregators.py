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

"""Aggregators.

An aggregator reduces the value at one path across a Series:

    aggregate(series, path, slices=1)

With slices > 1 the values are split into that many contiguous chunks and
each chunk is reduced separately. The chunks are all the same size; if the
number of buckets doesn't divide evenly the oldest buckets are dropped, so
that the most recent data is always represented:

    10 buckets, 3 slices -> drop 1, then 3 chunks of 3

If there are fewer buckets than slices everything is reduced as one chunk.

Values which are missing or not numbers are ignored. A chunk with nothing
left in it reduces to 0 for sum and to None for the others.

Registered as: sum mean avg max min
"""

from .packer import split_path, fetch_path
from .registry import register

def slice_values(values, slices):
    """Split values into slices chunks of equal size, dropping the oldest."""
    slices = max(int(slices), 1)
    count = len(values)
    chunk_size = count // slices
    if chunk_size == 0:
        return [ values ]
    start = count - chunk_size * slices
    return [ values[i:i + chunk_size] for i in range(start, count, chunk_size) ]

class Aggregator(object):
    """Base class. Subclasses implement reduce()."""

    def reduce(self, chunk, precision):
        raise NotImplementedError('reduce() not implemented by {}'.format(type(self).__name__))

    def aggregate(self, series, path, slices=1):
        if not series.at:
            return []
        segments = split_path(path)
        extracted = [ fetch_path(entry, segments) for entry in series.values ]
        precision = series.precision
        results = [ precision.result(self.reduce(precision.numbers(chunk), precision))
                    for chunk in slice_values(extracted, slices)
                  ]
        if slices == 1:
            return results[0]
        return results

class Sum(Aggregator):
    def reduce(self, chunk, precision):
        return precision.sum(chunk)

class Mean(Aggregator):
    def reduce(self, chunk, precision):
        return precision.average(chunk)

class Max(Aggregator):
    def reduce(self, chunk, precision):
        return precision.max(chunk)

class Min(Aggregator):
    def reduce(self, chunk, precision):
        return precision.min(chunk)

register('aggregator', 'sum', Sum())
register('aggregator', 'mean', Mean())
register('aggregator', 'avg', Mean())
register('aggregator', 'max', Max())
register('aggregator', 'min', Min())
