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

"""pubsuffix: public suffix and organizational domain lookup

Top-level module. The functions here use a process-wide
:class:`SuffixRegistry` loaded from the bundled rule files on first use.
Create a :class:`SuffixRegistry` directly to use other rule files or to
refresh them with a :class:`RefreshScheduler`.
"""

from typing import Optional, Tuple

from .configuration import Config, read_file, read_file_from_path
from .exceptions import (PubSuffixException, ConfigError, RuleFileError,
                         FetchError)
from .refresh import RefreshScheduler, fetch_public_suffix_list
from .registry import Snapshot, SuffixRegistry, default_registry
from .rules import RuleKind, SuffixRule, SuffixTable, TldLevelTables
from .util import normalize_host


def is_public_suffix(host: Optional[str]) -> bool:
    """Check whether a hostname is itself a public suffix, e.g. ``co.uk``"""
    return default_registry().is_public_suffix(host)


def get_organizational_domain(host: Optional[str]) -> Optional[str]:
    """Find the registrable domain of a hostname, e.g. ``example.co.uk`` for
    ``www.example.co.uk``. ``None`` if there is none."""
    return default_registry().get_organizational_domain(host)


def split_hostname(host: Optional[str],
                   level: Optional[int] = 2) -> Tuple[str, str]:
    """Split a hostname into ``(subdomain, domain)`` using up to ``level``
    levels of explicit TLD tables"""
    return default_registry().split_hostname(host, level)
