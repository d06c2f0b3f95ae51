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

"""Transponders.

A transponder derives a new value in every bucket of a Series from one or
more values already there:

    transform(series, source, target, slices=1)

source is a path, a comma separated list of paths, or a list of paths. The
derived value is written at target in each bucket; everything else in the
bucket is kept. A new Series is returned. slices is accepted for symmetry
with the other strategies and ignored.

Registered as:

    mean sum min max    Any number of sources. Lists are flattened, things
                        which aren't numbers are ignored. None if nothing is
                        left.
    add subtract        Exactly two sources. None if either one isn't a
    multiply            number.
    divide              Exactly two sources. None if the divisor is zero.
    ratio               sample, total: sample / total * 100. None unless
                        total is positive.
    average             sum, count: sum / count. None unless count is
                        positive.
    stddev              sum, count, square: the sample standard deviation
                        computed from running totals. 0 if it can't be
                        computed.
"""

from .packer import split_path, fetch_path, put_path
from .registry import register

def source_paths(source):
    if isinstance(source, str):
        source = [ path.strip() for path in source.split(',') ]
    return [ split_path(path) for path in source ]

def flatten(values):
    flattened = []
    for value in values:
        if isinstance(value, (list, tuple)):
            flattened.extend(flatten(value))
        else:
            flattened.append(value)
    return flattened

class Transponder(object):
    """Base class. Subclasses implement derive().

    OPERANDS is the exact number of sources required, or None for any number.
    """

    OPERANDS = None

    def derive(self, operands, precision):
        raise NotImplementedError('derive() not implemented by {}'.format(type(self).__name__))

    def transform(self, series, source, target, slices=1):
        sources = source_paths(source)
        if self.OPERANDS is not None and len(sources) != self.OPERANDS:
            raise ValueError('{} takes {} sources, got {}'.format(type(self).__name__, self.OPERANDS, len(sources)))
        if not sources:
            raise ValueError('{} requires at least one source'.format(type(self).__name__))
        target = split_path(target)
        precision = series.precision
        values = []
        for entry in series.values:
            operands = [ fetch_path(entry, path) for path in sources ]
            values.append(put_path(entry, target, precision.result(self.derive(operands, precision))))
        return type(series)(series.at, values, series.precision)

class Mean(Transponder):
    def derive(self, operands, precision):
        return precision.average(flatten(operands))

class Sum(Transponder):
    def derive(self, operands, precision):
        numbers = precision.numbers(flatten(operands))
        if not numbers:
            return None
        return precision.sum(numbers)

class Min(Transponder):
    def derive(self, operands, precision):
        return precision.min(flatten(operands))

class Max(Transponder):
    def derive(self, operands, precision):
        return precision.max(flatten(operands))

class Binary(Transponder):
    """Two sources, both of which have to be numbers."""

    OPERANDS = 2

    def derive(self, operands, precision):
        left, right = operands
        if not (precision.is_numeric(left) and precision.is_numeric(right)):
            return None
        return self.apply(left, right, precision)

class Add(Binary):
    def apply(self, left, right, precision):
        return precision.add(left, right)

class Subtract(Binary):
    def apply(self, left, right, precision):
        return precision.sub(left, right)

class Multiply(Binary):
    def apply(self, left, right, precision):
        return precision.mult(left, right)

class Divide(Binary):
    def apply(self, left, right, precision):
        return precision.divide(left, right)

class Ratio(Binary):
    def apply(self, sample, total, precision):
        return precision.percentage(sample, total)

class Average(Binary):
    def apply(self, total, count, precision):
        if count <= 0:
            return None
        return precision.divide(total, count)

class StandardDeviation(Transponder):
    """sqrt((count * square - sum^2) / (count * (count - 1)))"""

    OPERANDS = 3

    def derive(self, operands, precision):
        total, count, square = operands
        if not all( precision.is_numeric(operand) for operand in operands ) or count <= 1:
            return 0
        numerator = precision.sub(precision.mult(count, square), precision.mult(total, total))
        variance = precision.divide(numerator, precision.mult(count, precision.sub(count, 1)))
        if variance is None or variance < 0:
            return 0
        return precision.sqrt(variance)

register('transponder', 'mean', Mean())
register('transponder', 'sum', Sum())
register('transponder', 'min', Min())
register('transponder', 'max', Max())
register('transponder', 'add', Add())
register('transponder', 'subtract', Subtract())
register('transponder', 'multiply', Multiply())
register('transponder', 'divide', Divide())
register('transponder', 'ratio', Ratio())
register('transponder', 'average', Average())
register('transponder', 'stddev', StandardDeviation())
