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

import unittest

import timetally.packer as packer

NESTED = { 'count': 4, 'country': { 'us': 3, 'ca': { 'on': 1 } } }
FLAT = { 'count': 4, 'country.us': 3, 'country.ca.on': 1 }

class TestPack(unittest.TestCase):

    def test_pack(self):
        self.assertEqual(packer.pack(NESTED), FLAT)
        return

    def test_unpack(self):
        self.assertEqual(packer.unpack(FLAT), NESTED)
        return

    def test_round_trip(self):
        self.assertEqual(packer.unpack(packer.pack(NESTED)), NESTED)
        return

    def test_keys_are_strings(self):
        self.assertEqual(packer.pack({ 1: { 2: 3 } }), { '1.2': 3 })
        return

    def test_empty(self):
        self.assertEqual(packer.pack({}), {})
        self.assertEqual(packer.unpack({}), {})
        return

    def test_later_wins(self):
        """A leaf and a map at the same path: the later entry wins."""
        self.assertEqual(packer.unpack({ 'a': 1, 'a.b': 2 }), { 'a': { 'b': 2 } })
        self.assertEqual(packer.unpack({ 'a.b': 2, 'a': 1 }), { 'a': 1 })
        return

class TestMerge(unittest.TestCase):

    def test_sum(self):
        self.assertEqual(packer.deep_sum({ 'a': 1 }, { 'a': 2 }), { 'a': 3 })
        return

    def test_sum_nested(self):
        self.assertEqual(
                packer.deep_sum({ 'a': { 'b': 1, 'c': 1.5 } }, { 'a': { 'b': 2, 'd': 1 }, 'e': 1 }),
                { 'a': { 'b': 3, 'c': 1.5, 'd': 1 }, 'e': 1 }
            )
        return

    def test_sum_replaces_non_numbers(self):
        """Non numbers are replaced, with a warning."""
        with self.assertLogs(level='WARNING'):
            self.assertEqual(packer.deep_sum({ 'a': 'x' }, { 'a': 2 }), { 'a': 2 })
        with self.assertLogs(level='WARNING'):
            self.assertEqual(packer.deep_sum({ 'a': 1 }, { 'a': [ 1 ] }), { 'a': [ 1 ] })
        return

    def test_sum_does_not_modify(self):
        old = { 'a': { 'b': 1 } }
        packer.deep_sum(old, { 'a': { 'b': 1 } })
        self.assertEqual(old, { 'a': { 'b': 1 } })
        return

    def test_merge(self):
        self.assertEqual(
                packer.deep_merge({ 'a': { 'b': 1, 'c': 1 } }, { 'a': { 'b': 5 } }),
                { 'a': { 'b': 5, 'c': 1 } }
            )
        return

class TestPaths(unittest.TestCase):

    def test_split(self):
        self.assertEqual(packer.split_path('a.b.c'), [ 'a', 'b', 'c' ])
        self.assertEqual(packer.split_path('a'), [ 'a' ])
        return

    def test_split_bad(self):
        for path in ('', '.a', 'a.', 'a..b', None):
            with self.assertRaises(packer.InvalidPathError):
                packer.split_path(path)
        return

    def test_fetch(self):
        self.assertEqual(packer.fetch_path(NESTED, [ 'country', 'us' ]), 3)
        self.assertEqual(packer.fetch_path(NESTED, [ 'country', 'ca' ]), { 'on': 1 })
        self.assertIsNone(packer.fetch_path(NESTED, [ 'country', 'mx' ]))
        self.assertIsNone(packer.fetch_path(NESTED, [ 'count', 'x' ]))
        return

    def test_put(self):
        updated = packer.put_path(NESTED, [ 'country', 'mx' ], 2)
        self.assertEqual(updated['country']['mx'], 2)
        self.assertNotIn('mx', NESTED['country'])
        return

    def test_put_creates(self):
        self.assertEqual(packer.put_path({}, [ 'a', 'b' ], 1), { 'a': { 'b': 1 } })
        return

    def test_put_through_leaf(self):
        """Writing through a leaf leaves things alone."""
        self.assertEqual(packer.put_path({ 'a': 1 }, [ 'a', 'b' ], 2), { 'a': 1 })
        return

    def test_resolve_wildcard(self):
        values = [ { 'country': { 'us': 1 } }, { 'country': { 'ca': 1, 'us': 2 } } ]
        self.assertEqual(
                packer.resolve_paths(values, [ 'country', '*' ]),
                [ [ 'country', 'us' ], [ 'country', 'ca' ] ]
            )
        return

    def test_resolve_map_to_leaves(self):
        values = [ { 'country': { 'us': 1, 'ca': { 'on': 1 } } } ]
        self.assertEqual(
                packer.resolve_paths(values, [ 'country' ]),
                [ [ 'country', 'us' ], [ 'country', 'ca', 'on' ] ]
            )
        return

    def test_resolve_missing(self):
        """A concrete path which isn't there is still a path."""
        self.assertEqual(packer.resolve_paths([ {} ], [ 'count' ]), [ [ 'count' ] ])
        self.assertEqual(packer.resolve_paths([ {} ], [ 'country', '*' ]), [])
        return

if __name__ == '__main__':
    unittest.main(verbosity=2)
