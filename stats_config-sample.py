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

"""Sample Configuration.

Copy this to stats_config.py (or some other name, and pass +config=<name> to
report.py) and edit to taste. Load it with:

    config = timetally.Configuration.from_module('stats_config')

Only DRIVER is required.
"""

import logging
import redis

from timetally.drivers.redis import RedisDriver
from timetally.designators import CustomDesignator

REDIS_SERVER = '127.0.0.1'
# Buckets are kept for this long after they were last written. None keeps
# them forever.
EXPIRE_AFTER = 86400 * 90

# The driver joins the keys, so it has to be given the separator.
SEPARATOR = '::'

DRIVER = RedisDriver(
            redis.client.Redis(REDIS_SERVER, decode_responses=False, socket_connect_timeout=5),
            prefix =        'trfl',
            separator =     SEPARATOR,
            expire_after =  EXPIRE_AFTER
        )

# Buckets are floored in this timezone. Unknown names fall back to UTC.
TIMEZONE = 'UTC'

# What track() writes. Also accepts 1h, 15m and so forth.
GRANULARITIES = [ 'minute', 'hour', 'day', 'week', 'month' ]

WEEK_START = 'monday'

# Set True to do arithmetic with decimal.Decimal.
PRECISION = False
PRECISION_SCALE = 10

# The default designator for assort().
DESIGNATOR = CustomDesignator([ 10, 50, 100, 500, 1000 ])

# Write buffering. Queued writes are lost if the process dies.
BUFFER = False
BUFFER_SIZE = 256
BUFFER_DURATION = 1.0
BUFFER_AGGREGATE = True

# Determines the logging level if not None
LOG_LEVEL = logging.INFO
# LOG_LEVEL = None
