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

"""Redis Storage.

Each bucket is a Redis hash named by the prefixed Key:

    trfl::page_views::hour::1692266400

The hash fields are the packed paths ("country.us") and the values are the
leaves. Increments use HINCRBYFLOAT inside MULTI/EXEC so that a bucket is
never partially updated. HINCRBY is not used even for ints because Redis
refuses it on a field which already holds a float; HINCRBYFLOAT leaves whole
numbers as "3", which parse_value reads back as an int. Overwrites read the
hash under WATCH, merge field by field and rewrite it; redis-py retries the
transaction if someone else touched the hash in the meantime.

If expire_after is set every write (re)sets the TTL of the bucket, in the same
way as the totalizer agent sets the TTL of its counters.

Status lives in a hash named by the prefix and the base only:

    trfl::page_views

with the fields "at" (Unix timestamp) and "data.*" (the packed values).

Create one with a redis.Redis client:

    driver = RedisDriver(redis.client.Redis('127.0.0.1'), expire_after=86400*30)
"""

import logging
from datetime import datetime

import pytz
import redis

from . import Driver
from ..key import DEFAULT_SEPARATOR, Key, unix_timestamp
from ..packer import pack, unpack, deep_merge
from ..precision import Precision

DEFAULT_PREFIX = 'trfl'

def decode(thing):
    if isinstance(thing, bytes):
        return thing.decode()
    return thing

def parse_value(value):
    """Convert a stored value back to int or float if it looks like one."""
    value = decode(value)
    if not isinstance(value, str):
        return value
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return value

def parse_hash(payload):
    return { decode(k):parse_value(v) for k,v in payload.items() }

def storable(value):
    """Redis only takes numbers and strings."""
    if Precision.is_numeric(value):
        if isinstance(value, int):
            return value
        return float(value)
    return str(value)

class RedisDriver(Driver):

    def __init__(self, client, prefix=DEFAULT_PREFIX, separator=DEFAULT_SEPARATOR, expire_after=None):
        self.client = client
        self.prefix = prefix
        self.separator = separator
        self.expire_after = expire_after
        return

    @classmethod
    def from_config(cls, client, config, **options):
        """A driver using the separator of the configuration."""
        return cls(client, separator=config.separator, **options)

    def description(self):
        return '{} (prefix={})'.format(type(self).__name__, self.prefix)

    def bucket_name(self, key):
        return key.with_prefix(self.prefix).join(self.separator)

    def status_name(self, key):
        return Key(key.base, prefix=self.prefix).join(self.separator)

    def inc(self, keys, values):
        data = pack(values)
        for key in keys:
            name = self.bucket_name(key)
            pipe = self.client.pipeline(transaction=True)
            for field, value in data.items():
                if Precision.is_numeric(value):
                    pipe.hincrbyfloat(name, field, float(value))
                else:
                    pipe.hset(name, field, storable(value))
            if self.expire_after:
                pipe.expire(name, self.expire_after)
            pipe.execute()
            logging.debug('HINCRBYFLOAT {} ({} fields)'.format(name, len(data)))
        return

    def set(self, keys, values):
        data = pack(values)
        for key in keys:
            name = self.bucket_name(key)

            def overwrite(pipe):
                merged = deep_merge(parse_hash(pipe.hgetall(name)), data)
                pipe.multi()
                pipe.delete(name)
                if merged:
                    pipe.hset(name, mapping={ k:storable(v) for k,v in merged.items() })
                if self.expire_after:
                    pipe.expire(name, self.expire_after)
                return

            self.client.transaction(overwrite, name)
            logging.debug('HSET {}'.format(name))
        return

    def get(self, keys):
        pipe = self.client.pipeline(transaction=False)
        for key in keys:
            pipe.hgetall(self.bucket_name(key))
        return [ unpack(parse_hash(payload or {})) for payload in pipe.execute() ]

    def ping(self, key, values):
        at = key.at
        if at is None:
            at = datetime.now(pytz.utc)
        name = self.status_name(key)
        data = pack({ 'at': unix_timestamp(at), 'data': values })
        pipe = self.client.pipeline(transaction=True)
        pipe.delete(name)
        pipe.hset(name, mapping={ k:storable(v) for k,v in data.items() })
        pipe.execute()
        return

    def scan(self, key):
        status = unpack(parse_hash(self.client.hgetall(self.status_name(key)) or {}))
        if 'at' not in status:
            return (None, {})
        at = datetime.fromtimestamp(status['at'], pytz.utc)
        data = status.get('data', {})
        if not isinstance(data, dict):
            data = {}
        return (at, data)

def connect(server, prefix=DEFAULT_PREFIX, separator=DEFAULT_SEPARATOR, expire_after=None, **kwargs):
    """Create a RedisDriver with a new client for server."""
    client = redis.client.Redis(server, **kwargs)
    return RedisDriver(client, prefix, separator, expire_after)
