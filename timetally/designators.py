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

"""Designators.

A designator puts a number in a labeled bucket for assort(), which then
counts how many values landed in each bucket. Designators are constructed
with their parameters rather than registered by name.

CustomDesignator([10, 20, 30])

    5 -> "10"   10 -> "10"   15 -> "20"   30 -> "30"   35 -> "30+"

LinearDesignator(0, 100, 10)

    -3 -> "0"   7 -> "10"   10 -> "10"   11 -> "20"   101 -> "100+"

GeometricDesignator(0, 1000)

    0.005 -> "0.01"   0.5 -> "1.0"   5 -> "10.0"   50 -> "100.0"   5000 -> "1000.0+"

Fractions are rounded up before they are compared to the boundaries (except
by the geometric designator, which works on the order of magnitude). Anything
which isn't a number raises DesignatorError.
"""

import math

from .precision import Precision

class DesignatorError(TypeError):
    pass

def check_numeric(value):
    if not Precision.is_numeric(value):
        raise DesignatorError('Can only designate numbers, not {!r}'.format(value))
    return

class Designator(object):

    def designate(self, value):
        raise NotImplementedError('designate() not implemented by {}'.format(type(self).__name__))

class CustomDesignator(Designator):
    """Explicitly supplied boundaries."""

    def __init__(self, boundaries):
        if not boundaries:
            raise ValueError('At least one boundary is required')
        self.boundaries = sorted(boundaries)
        return

    def designate(self, value):
        check_numeric(value)
        lowest = self.boundaries[0]
        highest = self.boundaries[-1]
        if value <= lowest:
            return str(lowest)
        if value > highest:
            return '{}+'.format(highest)
        ceiled = math.ceil(value)
        for boundary in self.boundaries:
            if ceiled < boundary:
                return str(boundary)
        return str(highest)

class LinearDesignator(Designator):
    """Boundaries every step from min to max."""

    def __init__(self, min, max, step):
        if step <= 0:
            raise ValueError('Step must be positive: {}'.format(step))
        self.min = min
        self.max = max
        self.step = int(step)
        return

    def designate(self, value):
        check_numeric(value)
        if value <= self.min:
            return str(self.min)
        if value > self.max:
            return '{}+'.format(self.max)
        ceiled = math.ceil(value)
        multiplier, remainder = divmod(ceiled, self.step)
        return str((multiplier + (remainder and 1 or 0)) * self.step)

class GeometricDesignator(Designator):
    """Powers of ten."""

    def __init__(self, min, max):
        if min < 0:
            min = 0
        self.min = min
        self.max = max
        return

    def designate(self, value):
        check_numeric(value)
        if value <= self.min:
            return str(float(self.min))
        if value > self.max:
            return '{}+'.format(float(self.max))
        if value > 1:
            return str(float(10 ** len(str(math.floor(value)))))
        if value > 0.1:
            return '1.0'
        # 0.0034 -> 2 leading zeros after the point -> 0.01
        leading_zeros = -math.floor(math.log10(value)) - 1
        return str(1.0 / 10 ** leading_zeros)
