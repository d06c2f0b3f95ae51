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

"""Write Buffering.

A Buffer sits in front of a driver and queues inc() and set() calls. The queue
is written to the driver when:

  * the number of queued calls reaches size
  * the oldest queued call is more than duration seconds old when another one
    is queued
  * flush() or close() is called, or the with block is exited

With aggregate (the default) the queue is kept per key as a list of steps.
Consecutive calls of the same operation on a key are folded into one step:
increments are summed and overwrites are merged. A different operation starts
a new step, so inc / set / inc is written in that order. Keys which end up
with the same steps are written together. This is what makes buffering
worthwhile for hot counters, at the cost of losing whatever is queued if the
process dies.

There is no background thread, the flush happens on the thread which triggered
it. Errors from the driver propagate to that caller; whatever was drained from
the queue is not requeued.

    with Buffer(driver, size=100) as buffer:
        buffer.inc(keys, { 'count': 1 })
"""

import logging
import threading
from time import time

from .packer import pack, deep_sum, deep_merge
from .drivers import describe

DEFAULT_SIZE = 256
DEFAULT_DURATION = 1.0

class Buffer(object):

    def __init__(self, driver, size=DEFAULT_SIZE, duration=DEFAULT_DURATION, aggregate=True, clock=time):
        self.driver = driver
        self.size = max(int(size), 1)
        self.duration = max(float(duration), 0.0)
        self.aggregate = aggregate
        self.clock = clock
        self.lock = threading.Lock()
        self.closed = False
        self.reset()
        return

    def reset(self):
        if self.aggregate:
            self.queue = dict()
        else:
            self.queue = list()
        self.operations = 0
        self.oldest = None
        return

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False

    def description(self):
        return 'Buffer({})'.format(describe(self.driver))

    @property
    def pending(self):
        """The number of queued calls not yet flushed."""
        return self.operations

    def store(self, operation, keys, values):
        if not self.aggregate:
            self.queue.append((operation, keys, values))
            return
        values = pack(values)
        if operation == 'inc':
            merge = deep_sum
        else:
            merge = deep_merge
        for key in keys:
            steps = self.queue.setdefault(key, [])
            if steps and steps[-1][0] == operation:
                steps[-1] = (operation, merge(steps[-1][1], values))
            else:
                steps.append((operation, values))
        return

    def batches(self):
        """Keys with identical steps, so they can be written together."""
        batches = []
        for key, steps in self.queue.items():
            for keys, batched in batches:
                if batched == steps:
                    keys.append(key)
                    break
            else:
                batches.append(([ key ], steps))
        return batches

    def enqueue(self, operation, keys, values):
        if self.closed:
            getattr(self.driver, operation)(keys, values)
            return
        with self.lock:
            now = self.clock()
            if self.oldest is None:
                self.oldest = now
            self.store(operation, keys, values)
            self.operations += 1
            if self.operations >= self.size or now - self.oldest > self.duration:
                self.drain()
        return

    def inc(self, keys, values):
        self.enqueue('inc', keys, values)
        return

    def set(self, keys, values):
        self.enqueue('set', keys, values)
        return

    def drain(self):
        """Write out the queue. The lock must be held."""
        if not self.operations:
            return
        if self.aggregate:
            actions = [ (operation, keys, values)
                        for keys, steps in self.batches()
                        for operation, values in steps
                      ]
        else:
            actions = self.queue
        operations = self.operations
        self.reset()
        logging.debug('Flushing {} queued calls as {} writes to {}'.format(
                        operations, len(actions), describe(self.driver)
                    ))
        for operation, keys, values in actions:
            getattr(self.driver, operation)(keys, values)
        return

    def flush(self):
        with self.lock:
            self.drain()
        return

    def close(self):
        with self.lock:
            self.drain()
            self.closed = True
        return
