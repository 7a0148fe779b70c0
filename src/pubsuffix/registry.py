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

"""Suffix registry: owns the rule tables currently in use and swaps them out
as a single unit on reload"""

import logging
import threading
from typing import Iterable, Optional, Sequence, Tuple

from . import loader
from . import matching
from .rules import SuffixTable, TldLevelTables

log = logging.getLogger('pubsuffix')


class Snapshot:
    """All the rule tables from a single load. Never modified after it is
    built, so readers holding a reference always see a complete set.

    :param suffix_table: The public suffix rules
    :param tld_tables: The TLD level tables
    :param warnings: Diagnostics from loading. Defaults to the suffix table's
                     own warnings.
    """

    def __init__(self,
                 suffix_table: SuffixTable,
                 tld_tables: TldLevelTables,
                 warnings: Optional[Iterable[str]] = None):
        self.suffix_table: SuffixTable = suffix_table
        self.tld_tables: TldLevelTables = tld_tables
        if warnings is None:
            warnings = suffix_table.warnings
        self.warnings: Tuple[str, ...] = tuple(warnings)

    @classmethod
    def empty(cls) -> 'Snapshot':
        """A snapshot with no rules at all"""
        return cls(SuffixTable({}, {}), TldLevelTables())


class SuffixRegistry:
    """Single owner of the current :class:`Snapshot`. Lookups may be called
    from any number of threads at once and never block. :meth:`reload`
    replaces every table at once by swapping a single reference.

    :param snapshot: The initial snapshot. If ``None``, start with no rules.
    """

    def __init__(self, snapshot: Optional[Snapshot] = None):
        if snapshot is None:
            snapshot = Snapshot.empty()
        self._snapshot: Snapshot = snapshot

        # Serializes writers only. Readers never take it.
        self._reload_lock = threading.Lock()

    @classmethod
    def from_directories(cls, search_path: Sequence[str]) -> 'SuffixRegistry':
        """Create a registry with tables loaded from the given directories
        (see :func:`pubsuffix.loader.load_snapshot`)

        :raises RuleFileError: if a rule file is missing or unreadable
        """
        return cls(loader.load_snapshot(search_path))

    @property
    def snapshot(self) -> Snapshot:
        """The snapshot currently in use"""
        return self._snapshot

    def reload(self, snapshot: Snapshot) -> None:
        """Replace all tables with those in the given snapshot

        :param snapshot: The new snapshot
        """
        with self._reload_lock:
            self._snapshot = snapshot
        suffix_table = snapshot.suffix_table
        log.info("Reloaded tables: %d public suffixes, %d exceptions",
                 suffix_table.suffix_count, suffix_table.exception_count)

    def reload_from_directories(self, search_path: Sequence[str]) -> None:
        """Load new tables from disk and swap them in. If loading fails, the
        current tables stay in use.

        :param search_path: Directories to search for rule files
        :raises RuleFileError: if a rule file is missing or unreadable
        """
        with self._reload_lock:
            snapshot = loader.load_snapshot(search_path)
            self._snapshot = snapshot
        log.info("Reloaded tables from %s", ', '.join(search_path))

    def is_public_suffix(self, host: Optional[str]) -> bool:
        """See :func:`pubsuffix.matching.is_public_suffix`"""
        return matching.is_public_suffix(self._snapshot.suffix_table, host)

    def get_organizational_domain(self, host: Optional[str]) -> Optional[str]:
        """See :func:`pubsuffix.matching.get_organizational_domain`"""
        return matching.get_organizational_domain(
            self._snapshot.suffix_table, host
        )

    def split_hostname(self,
                       host: Optional[str],
                       level: Optional[int] = 2) -> Tuple[str, str]:
        """See :func:`pubsuffix.matching.split_hostname`"""
        return matching.split_hostname(self._snapshot.tld_tables, host, level)


_default_registry: Optional[SuffixRegistry] = None
_default_lock = threading.Lock()


def default_registry() -> SuffixRegistry:
    """Get the process-wide registry, loading it from the bundled rule files
    on first use

    :raises RuleFileError: if the bundled rule files cannot be read
    """
    global _default_registry
    registry = _default_registry
    if registry is not None:
        return registry
    with _default_lock:
        if _default_registry is None:
            _default_registry = SuffixRegistry.from_directories(
                [loader.BUNDLED_DATA_DIR]
            )
        return _default_registry
