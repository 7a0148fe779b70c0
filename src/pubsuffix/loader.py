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

"""Rule file loader: reads the rule files from disk and builds a
:class:`~pubsuffix.registry.Snapshot`"""

import logging
import os.path
import re
from typing import List, Sequence, TYPE_CHECKING

from .exceptions import RuleFileError
from .rules import SuffixTable, TldLevelTables

if TYPE_CHECKING:
    from .registry import Snapshot

log = logging.getLogger('pubsuffix.loader')

#: Rule files shipped with the package
BUNDLED_DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)),
                                'data')

PUBLIC_SUFFIX_LIST = 'public-suffix-list'
TOP_LEVEL_TLDS = 'top-level-tlds'
TWO_LEVEL_TLDS = 'two-level-tlds'
THREE_LEVEL_TLDS = 'three-level-tlds'
EXTRA_TLDS = 'extra-tlds'

_NEWLINE_RE = re.compile(r'\r\n|\r|\n')


def find_rule_file(name: str, search_path: Sequence[str]) -> str:
    """Find a rule file in the first directory of the search path that has it

    :param name: The rule file name, e.g. ``public-suffix-list``
    :param search_path: Directories to search, in order
    :raises RuleFileError: if no directory has the file
    :return: The path to the file
    """
    for directory in search_path:
        path = os.path.join(directory, name)
        if os.path.isfile(path):
            return path
    raise RuleFileError("Rule file %s not found in %s" %
                        (name, ', '.join(search_path)))


def read_rule_lines(path: str) -> List[str]:
    """Read the raw lines of a rule file

    :param path: Path to the rule file
    :raises RuleFileError: if the file cannot be read
    :return: The lines, without line endings
    """
    try:
        with open(path, 'r', encoding='utf-8', newline='') as f:
            contents = f.read()
    except OSError as e:
        log.error("Could not read rule file %s: %s", path, e.strerror)
        raise RuleFileError("Could not read rule file %s: %s" %
                            (path, e.strerror)) from e
    except UnicodeDecodeError as e:
        log.error("Rule file %s is not valid UTF-8: %s", path, e)
        raise RuleFileError("Rule file %s is not valid UTF-8" % path) from e
    return _NEWLINE_RE.split(contents)


def load_suffix_table(search_path: Sequence[str]) -> SuffixTable:
    """Load the public suffix list

    :param search_path: Directories to search for the rule file
    :raises RuleFileError: if the file is missing or unreadable
    """
    path = find_rule_file(PUBLIC_SUFFIX_LIST, search_path)
    table = SuffixTable.from_lines(read_rule_lines(path))
    log.info("Loaded %d public suffixes from %s", len(table), path)
    return table


def load_tld_tables(search_path: Sequence[str]) -> TldLevelTables:
    """Load the TLD level tables

    :param search_path: Directories to search for the rule files
    :raises RuleFileError: if a file is missing or unreadable
    """
    def lines(name):
        return read_rule_lines(find_rule_file(name, search_path))

    tables = TldLevelTables.from_lines(
        lines(TOP_LEVEL_TLDS),
        lines(TWO_LEVEL_TLDS),
        lines(THREE_LEVEL_TLDS),
        lines(EXTRA_TLDS),
    )
    log.info("Loaded TLD files: 1=%d 2=%d 3=%d", *tables.sizes())
    return tables


def load_snapshot(search_path: Sequence[str]) -> 'Snapshot':
    """Load all the rule files and build a new snapshot from them. Each file
    comes from the first directory in the search path that has it, so a
    downloaded list in a cache directory can shadow the bundled one.

    :param search_path: Directories to search for rule files
    :raises RuleFileError: if a rule file is missing or unreadable
    :return: The new snapshot
    """
    # Imported here since registry imports this module
    from .registry import Snapshot

    tld_tables = load_tld_tables(search_path)
    suffix_table = load_suffix_table(search_path)
    return Snapshot(suffix_table, tld_tables)
