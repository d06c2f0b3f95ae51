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

"""Nested Values in Flat Storage.

Metric payloads are nested maps:

    { 'count': 1, 'country': { 'us': 1 } }

Storage is flat, so they are packed into dotted paths:

    { 'count': 1, 'country.us': 1 }

and unpacked on the way back out. Keys are converted to str when packing; no
other part of the system deals with non-string keys.

Paths
-----

A path addresses a value in a nested map with the same dotted notation. A
segment of "*" is a wildcard matching any key observed at that level in any
entry of a Series. Resolving a path also expands paths which land on a map
down to the leaves underneath it.
"""

import logging

from .precision import Precision

SEPARATOR = '.'
WILDCARD = '*'

class InvalidPathError(ValueError):
    pass

def pack(nested, prefix=None):
    """Flatten a nested map. Later keys win on collision."""
    flat = {}
    for k, v in nested.items():
        k = str(k)
        if prefix is not None:
            k = prefix + SEPARATOR + k
        if isinstance(v, dict):
            flat.update(pack(v, k))
        else:
            flat[k] = v
    return flat

def unpack(flat):
    """Inflate a flat map. Later entries win on terminal conflicts."""
    nested = {}
    for k, v in flat.items():
        entry = v
        for segment in reversed(str(k).split(SEPARATOR)):
            entry = { segment: entry }
        nested = deep_merge(nested, entry)
    return nested

def deep_sum(old, new):
    """Additive merge.

    Numbers are added, maps are merged recursively, anything else is replaced
    by the new value. Neither argument is modified.
    """
    if isinstance(old, dict) and isinstance(new, dict):
        merged = dict(old)
        for k, v in new.items():
            if k in merged:
                merged[k] = deep_sum(merged[k], v)
            else:
                merged[k] = v
        return merged
    if Precision.is_numeric(old) and Precision.is_numeric(new):
        return old + new
    logging.warning('Additive merge replaced {!r} with {!r}'.format(old, new))
    return new

def deep_merge(old, new):
    """Overwrite merge. Maps merge recursively, otherwise new wins."""
    if isinstance(old, dict) and isinstance(new, dict):
        merged = dict(old)
        for k, v in new.items():
            if k in merged:
                merged[k] = deep_merge(merged[k], v)
            else:
                merged[k] = v
        return merged
    return new

def split_path(path):
    """Split a dotted path into segments.

    Raises InvalidPathError for an empty path or an empty segment, which
    includes a leading or trailing separator.
    """
    if isinstance(path, (list, tuple)):
        segments = list(path)
    else:
        if not isinstance(path, str) or not path:
            raise InvalidPathError('Empty path: {!r}'.format(path))
        segments = path.split(SEPARATOR)
    if not segments or any( not segment for segment in segments ):
        raise InvalidPathError('Empty segment in path: {!r}'.format(path))
    return segments

def join_path(segments):
    return SEPARATOR.join(segments)

def fetch_path(nested, segments):
    """Value at segments, or None."""
    value = nested
    for segment in segments:
        if not isinstance(value, dict) or segment not in value:
            return None
        value = value[segment]
    return value

def put_path(nested, segments, value):
    """Returns a copy of nested with value written at segments.

    Intermediate maps are created as needed. If an intermediate segment holds
    something which is not a map the input is returned as is.
    """
    if not segments:
        return nested
    head = segments[0]
    updated = dict(nested)
    if len(segments) == 1:
        updated[head] = value
        return updated
    child = updated.get(head, {})
    if not isinstance(child, dict):
        return nested
    written = put_path(child, segments[1:], value)
    if written is child and head in updated:
        return nested
    updated[head] = written
    return updated

class PathResolver(object):
    """Resolves a path with wildcards against a list of nested maps.

    Resolution produces concrete leaf paths (as segment lists) in the order
    they were first observed, without duplicates.
    """
    def __init__(self, values):
        self.values = values
        self.seen = set()
        self.paths = []
        return

    def add(self, segments):
        key = tuple(segments)
        if key in self.seen:
            return
        self.seen.add(key)
        self.paths.append(list(segments))
        return

    def expand(self, prefix, remaining):
        if not remaining:
            self.leaves(prefix)
            return
        segment = remaining[0]
        if segment != WILDCARD:
            self.expand(prefix + [segment], remaining[1:])
            return
        for key in self.keys_at(prefix):
            self.expand(prefix + [key], remaining[1:])
        return

    def keys_at(self, prefix):
        keys = []
        for entry in self.values:
            target = fetch_path(entry, prefix)
            if not isinstance(target, dict):
                continue
            for k in target.keys():
                if k not in keys:
                    keys.append(k)
        return keys

    def leaves(self, prefix):
        """Expand prefix down to leaves, or keep it if it's never a map."""
        children = []
        is_map = False
        for entry in self.values:
            target = fetch_path(entry, prefix)
            if isinstance(target, dict):
                is_map = True
                for k in target.keys():
                    if k not in children:
                        children.append(k)
        if not is_map:
            self.add(prefix)
            return
        for k in children:
            self.leaves(prefix + [k])
        return

    def resolve(self, segments):
        self.expand([], list(segments))
        return self.paths

def resolve_paths(values, segments):
    """Concrete leaf paths for segments against values."""
    return PathResolver(values).resolve(segments)
