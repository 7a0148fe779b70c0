#  pubsuffix - Public Suffix and Organizational Domain Lookup
#  Copyright (C) 2023 Dominick C. Pastore
#
#  This program is free software: you can redistribute it and/or modify
#  it under the terms of the GNU General Public License as published by
#  the Free Software Foundation, either version 3 of the License, or
#  (at your option) any later version.
#
#  This program is distributed in the hope that it will be useful,
#  but WITHOUT ANY WARRANTY; without even the implied warranty of
#  MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
#  GNU General Public License for more details.
#
#  You should have received a copy of the GNU General Public License
#  along with this program.  If not, see <https://www.gnu.org/licenses/>.

import threading
from typing import List

import pytest

import pubsuffix
import pubsuffix.loader


TEST_PUBLIC_SUFFIX_LIST = """\
// Test rules, a small slice of the real list
// ===BEGIN ICANN DOMAINS===
com
biz
uk
co.uk
ac.uk
*.sch.uk
jp
ac.jp
*.kobe.jp
!city.kobe.jp
*.ck
!www.ck
*.mm
us
ak.us
k12.ak.us
cn
com.cn
公司.cn
中国
// ===BEGIN PRIVATE DOMAINS===
uk.com
"""

TEST_TOP_LEVEL_TLDS = """\
# Test TLDs
com
uk
au
us
"""

TEST_TWO_LEVEL_TLDS = """\
co.uk
ac.uk
edu.au
ak.us
"""

TEST_THREE_LEVEL_TLDS = """\
act.edu.au
"""

TEST_EXTRA_TLDS = """\
uk.com
k12.ak.us
"""


class VirtualTimer:
    """Stand-in for :class:`threading.Timer` driven by a virtual clock. Runs
    its function synchronously when :meth:`start` or :meth:`advance` finds
    the interval has elapsed."""

    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self._function = function
        self._args = args if args is not None else []
        self._kwargs = kwargs if kwargs is not None else {}
        self._lock = threading.Lock()
        self._complete = False
        self._elapsed = 0.0
        self._started = False
        self.daemon = False

    def cancel(self):
        with self._lock:
            self._complete = True

    def advance(self, seconds):
        with self._lock:
            self._elapsed += seconds
            self._try_run()

    @property
    def remaining(self):
        """Seconds until the timer fires, or None if it fired or was
        canceled"""
        with self._lock:
            if self._complete:
                return None
            return max(self.interval - self._elapsed, 0)

    def _try_run(self):
        if self._complete or not self._started:
            return
        if self._elapsed < self.interval:
            return
        self._complete = True
        self._function(*self._args, **self._kwargs)

    def start(self):
        with self._lock:
            if self._started:
                raise RuntimeError("Already started")
            self._started = True
            self._try_run()


@pytest.fixture
def advance():
    """Patch threading.Timer so tests control the passage of time"""

    class Advancer:
        def __init__(self):
            self.timers: List[VirtualTimer] = []

        def new_timer(self, *args, **kwargs):
            timer = VirtualTimer(*args, **kwargs)
            self.timers.append(timer)
            return timer

        def by_minimum_or(self, seconds: float):
            """Advance until the next timer fires or by the given number of
            seconds, whichever is less. Return the seconds left over."""
            remaining_times = [seconds] + [t.remaining for t in self.timers
                                           if t.remaining is not None]
            to_advance = min(remaining_times)
            # Timers created while advancing start from zero
            for timer in list(self.timers):
                timer.advance(to_advance)
            return seconds - to_advance

        def by(self, seconds: float):
            while seconds > 0:
                seconds = self.by_minimum_or(seconds)

        def pending(self):
            """Timers that have not fired or been canceled"""
            return [t for t in self.timers if t.remaining is not None]

    advancer = Advancer()

    orig_timer = threading.Timer
    threading.Timer = advancer.new_timer

    yield advancer

    threading.Timer = orig_timer


@pytest.fixture
def rules_dir_factory(tmp_path):
    """Fixture creating a factory for directories of rule files. Files not
    named get the test defaults; files given as ``None`` are left out."""
    count = 0

    def factory(**contents):
        nonlocal count
        count += 1
        path = tmp_path / f"rules_{count}"
        path.mkdir()

        defaults = {
            pubsuffix.loader.PUBLIC_SUFFIX_LIST: TEST_PUBLIC_SUFFIX_LIST,
            pubsuffix.loader.TOP_LEVEL_TLDS: TEST_TOP_LEVEL_TLDS,
            pubsuffix.loader.TWO_LEVEL_TLDS: TEST_TWO_LEVEL_TLDS,
            pubsuffix.loader.THREE_LEVEL_TLDS: TEST_THREE_LEVEL_TLDS,
            pubsuffix.loader.EXTRA_TLDS: TEST_EXTRA_TLDS,
        }
        for name, default in defaults.items():
            text = contents.get(name.replace('-', '_'), default)
            if text is None:
                continue
            with open(path / name, 'w', encoding='utf-8') as f:
                f.write(text)
        return str(path)
    return factory


@pytest.fixture
def rules_dir(rules_dir_factory):
    """Fixture creating a directory with the test rule files"""
    return rules_dir_factory()


@pytest.fixture
def suffix_table():
    """Fixture creating a :class:`~pubsuffix.SuffixTable` from the test
    rules"""
    return pubsuffix.SuffixTable.from_lines(
        TEST_PUBLIC_SUFFIX_LIST.splitlines()
    )


@pytest.fixture
def tld_tables():
    """Fixture creating :class:`~pubsuffix.TldLevelTables` from the test
    TLD files"""
    return pubsuffix.TldLevelTables.from_lines(
        TEST_TOP_LEVEL_TLDS.splitlines(),
        TEST_TWO_LEVEL_TLDS.splitlines(),
        TEST_THREE_LEVEL_TLDS.splitlines(),
        TEST_EXTRA_TLDS.splitlines(),
    )


@pytest.fixture
def registry(suffix_table, tld_tables):
    """Fixture creating a :class:`~pubsuffix.SuffixRegistry` with the test
    rules"""
    return pubsuffix.SuffixRegistry(
        pubsuffix.Snapshot(suffix_table, tld_tables)
    )
