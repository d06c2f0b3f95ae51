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

"""Report Tracked Values.

Command line:

    report.py <key> <granularity> <from> <to> <path> {+timeline} {+skip} {+config=<module>}

Prints the totals over the range for every path matched by path.

    key          The tracked key, e.g. page_views
    granularity  minute, hour, day, week, month, quarter, year (or 1h, 15m...)
    from, to     The range. Unix timestamps or ISO 8601 (2024-08-17T10:00:00).
                 Without a timezone, ISO 8601 times are UTC.
    path         A dotted path, "*" matches anything at that level:
                 count, country.*, country
    timeline     If passed, prints the value in each bucket instead of the
                 totals.
    skip         If passed, empty buckets are omitted from the timeline.
    config       The configuration module, by default stats_config. See
                 stats_config-sample.py.

The configuration module can also set LOG_LEVEL.
"""

import sys
import logging
from datetime import datetime

import timetally
from timetally.config import Configuration
from timetally.drivers import describe

LOG_LEVEL = None

def lart(msg=None, help='report.py <key> <granularity> <from> <to> <path> {+timeline} {+skip} {+config=<module>}'):
    if msg:
        print(msg, file=sys.stderr)
    if help:
        print(help, file=sys.stderr)
    sys.exit(1)

def parse_instant(text):
    try:
        return float(text)
    except ValueError:
        pass
    return datetime.fromisoformat(text)

def print_totals(totals):
    if not totals:
        print('No data.')
        return
    width = max(len(k) for k in totals.keys())
    for k in sorted(totals.keys()):
        print('{:<{width}s} {:>14.2f}'.format(k, float(totals[k] or 0), width=width))
    return

def print_timeline(timelines):
    if not timelines:
        print('No data.')
        return
    for k in sorted(timelines.keys()):
        print(k)
        for record in timelines[k]:
            print('  {}  {:>14.2f}'.format(record['at'].isoformat(), record['value']))
    return

def main(key, granularity, start, end, path, config, timeline, skip_blanks):
    series = timetally.values(key, start, end, granularity, config=config, skip_blanks=skip_blanks)
    logging.info('{} buckets from {}'.format(len(series), describe(config.driver)))
    if timeline:
        print_timeline(series.format('timeline', path))
    else:
        print_totals(series.format('category', path))
    return

if __name__ == '__main__':
    argv = sys.argv.copy()

    timeline = False
    skip_blanks = False
    config_name = 'stats_config'
    while len(argv) > 1 and argv[-1].startswith('+'):
        arg = argv.pop()[1:]
        if   arg.startswith('config='):
            config_name = arg.split('=', 1)[1]
        elif arg == 'timeline'[:len(arg)]:
            timeline = True
        elif arg == 'skip'[:len(arg)]:
            skip_blanks = True
        else:
            lart('Unrecognized option "{}"'.format(arg))

    if len(argv) != 6:
        lart('Wrong number of arguments')
    key, granularity, start, end, path = argv[1:]

    try:
        start = parse_instant(start)
        end = parse_instant(end)
    except ValueError as e:
        lart('Invalid time: {}'.format(e))

    try:
        config = Configuration.from_module(config_name)
        LOG_LEVEL = getattr(sys.modules[config_name], 'LOG_LEVEL', None)
    except Exception as e:
        lart('Config load for {} failed: {}'.format(config_name, e))

    if LOG_LEVEL is not None:
        logging.basicConfig(level=LOG_LEVEL)

    try:
        main(key, granularity, start, end, path, config, timeline, skip_blanks)
    except ValueError as e:
        lart('{}: {}'.format(type(e).__name__, e))
