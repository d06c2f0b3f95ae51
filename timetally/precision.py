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

"""Numeric Primitives.

Everything which reduces or derives numbers in a Series (aggregators,
formatters and transponders) goes through a Precision instance.

There are two modes:

    float       The default. Results are coerced to float.
    decimal     Operands are converted to decimal.Decimal and rounded to
                scale places. Results are left as Decimal.

The point of decimal mode is to keep drift out of sums of many increments
which were stored as floats. The mode is picked once, in the Configuration,
and rides along with each Series.
"""

import math
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

DEFAULT_SCALE = 10

class Precision(object):
    """A precision mode.

    Anything which is not a number (bool included) is not a number for the
    purposes of this class. Methods taking lists silently skip such members.
    """

    def __init__(self, enabled=False, scale=DEFAULT_SCALE, rounding=ROUND_HALF_UP):
        self.enabled = bool(enabled)
        self.scale = int(scale)
        self.rounding = rounding
        self.quantum = Decimal(1).scaleb(-self.scale)
        return

    def __repr__(self):
        return '<{} enabled={} scale={}>'.format(type(self).__name__, self.enabled, self.scale)

    def __eq__(self, other):
        if not isinstance(other, Precision):
            return NotImplemented
        return (self.enabled, self.scale, self.rounding) == (other.enabled, other.scale, other.rounding)

    def __hash__(self):
        return hash((self.enabled, self.scale, self.rounding))

    @staticmethod
    def is_numeric(value):
        if isinstance(value, bool):
            return False
        if isinstance(value, Decimal):
            return value.is_finite()
        if isinstance(value, float):
            return not (math.isnan(value) or math.isinf(value))
        return isinstance(value, int)

    def numbers(self, values):
        return [ v for v in values if self.is_numeric(v) ]

    def to_decimal(self, value):
        if isinstance(value, Decimal):
            d = value
        elif isinstance(value, float):
            # repr() is the shortest string which round trips.
            d = Decimal(repr(value))
        else:
            d = Decimal(value)
        try:
            return d.quantize(self.quantum, rounding=self.rounding)
        except InvalidOperation:
            # Too many digits to quantize at this scale, keep what we have.
            return d

    @staticmethod
    def to_float(value):
        if isinstance(value, bool) or value is None:
            return 0.0
        try:
            return float(value)
        except (TypeError, ValueError):
            return 0.0

    def coerce(self, value):
        """Convert an operand to the working type of the mode."""
        if self.enabled:
            return self.to_decimal(value)
        if isinstance(value, Decimal):
            return float(value)
        return value

    def result(self, value):
        """Convert a finished result to the public type of the mode.

        None passes through.
        """
        if value is None:
            return None
        if self.enabled:
            return self.to_decimal(value)
        return float(value)

    def add(self, a, b):
        return self.coerce(a) + self.coerce(b)

    def sub(self, a, b):
        return self.coerce(a) - self.coerce(b)

    def mult(self, a, b):
        return self.coerce(a) * self.coerce(b)

    def divide(self, a, b):
        """Division. Returns None if the divisor is zero."""
        b = self.coerce(b)
        if b == 0:
            return None
        return self.coerce(a) / b

    def percentage(self, value, total):
        """(value / total) * 100, None unless total is positive."""
        if self.coerce(total) <= 0:
            return None
        return self.mult(self.divide(value, total), 100)

    def sum(self, values):
        """Sum of the numeric members. Zero if there are none."""
        total = self.coerce(0)
        for v in self.numbers(values):
            total += self.coerce(v)
        return total

    def average(self, values):
        """Mean of the numeric members. None if there are none."""
        values = self.numbers(values)
        if not values:
            return None
        return self.divide(self.sum(values), len(values))

    def max(self, values):
        values = self.numbers(values)
        if not values:
            return None
        return max( self.coerce(v) for v in values )

    def min(self, values):
        values = self.numbers(values)
        if not values:
            return None
        return min( self.coerce(v) for v in values )

    def sqrt(self, value):
        """Square root. None for negative or non numeric input."""
        if not self.is_numeric(value) or value < 0:
            return None
        if self.enabled:
            return self.to_decimal(value).sqrt()
        return math.sqrt(value)

DEFAULT = Precision()
