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

"""Rule tables: the parsed public suffix list and the per-level TLD tables"""

# Public suffix list rules (https://publicsuffix.org/list/) come in three
# kinds:
#
#     co.uk           plain: "co.uk" is a public suffix
#     *.ck            wildcard: every label directly under "ck" is a public
#                     suffix
#     !www.ck         exception: "www.ck" is carved out of "*.ck" and is
#                     registrable after all
#
# Exceptions are stored once, keyed by their full name, and each remembers
# the rule it was carved out of.

import enum
import logging
import re
from dataclasses import dataclass
from typing import (Dict, FrozenSet, Iterable, Iterator, List, Mapping,
                    Optional, Tuple)

log = logging.getLogger('pubsuffix.rules')

_COMMENT_RE = re.compile(r'^\s*[;#].*$')
_BLANK_RE = re.compile(r'^\s*$')


class RuleKind(enum.Enum):
    PLAIN = 'plain'
    WILDCARD = 'wildcard'
    EXCEPTION = 'exception'


@dataclass(frozen=True)
class SuffixRule:
    """A single public suffix rule

    :param name: Lowercase rule text without any ``!``. Wildcards keep their
                 ``*.`` prefix.
    :param kind: Which kind of rule this is
    :param parent: For exceptions, the key of the plain or wildcard rule this
                   exception carves out of. ``None`` otherwise.
    """
    name: str
    kind: RuleKind
    parent: Optional[str] = None


def filter_rule_lines(lines: Iterable[str]) -> Iterator[str]:
    """Drop comment (``;`` or ``#``) and blank lines, and strip and lowercase
    the rest. Applies to every rule file.

    :param lines: Raw lines, with or without line endings
    :return: An iterator over the remaining lines
    """
    for line in lines:
        if _COMMENT_RE.match(line) or _BLANK_RE.match(line):
            continue
        yield line.strip().lower()


def _up_one_level(name: str) -> str:
    """Remove the leftmost label: ``bbc.co.uk`` -> ``co.uk``"""
    return name.partition('.')[2]


class SuffixTable:
    """The parsed public suffix list. Immutable once built; use
    :meth:`from_lines` to build one.

    :param suffixes: Plain and wildcard rules, keyed by rule text
    :param exceptions: Exception rules, keyed by the full exact name they
                       exempt (no ``!``)
    :param warnings: Diagnostics produced while building
    """

    def __init__(self,
                 suffixes: Mapping[str, SuffixRule],
                 exceptions: Mapping[str, SuffixRule],
                 warnings: Iterable[str] = ()):
        self._suffixes: Dict[str, SuffixRule] = dict(suffixes)
        self._exceptions: Dict[str, SuffixRule] = dict(exceptions)
        #: Diagnostics from building the table (e.g. orphaned exceptions)
        self.warnings: Tuple[str, ...] = tuple(warnings)

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> 'SuffixTable':
        """Build a table from the lines of a public suffix list file.

        Comment and blank lines are dropped, then only the first
        whitespace-separated token of each line is used. Tokens beginning with
        ``/`` (the ``//`` comments of the official list) are also dropped.

        An exception whose parent rule has not been seen yet is dropped with a
        warning.

        :param lines: Raw lines of the file
        :return: The new table
        """
        suffixes: Dict[str, SuffixRule] = dict()
        exceptions: Dict[str, SuffixRule] = dict()
        warnings: List[str] = []

        for line in filter_rule_lines(lines):
            tokens = line.split()
            if not tokens:
                continue
            token = tokens[0]
            if token.startswith('/'):
                continue

            if token.startswith('!'):
                name = token[1:]
                up_one = _up_one_level(name)
                if up_one in suffixes:
                    parent = up_one
                elif f'*.{up_one}' in suffixes:
                    parent = f'*.{up_one}'
                else:
                    msg = f"unable to find parent for exception: {name}"
                    log.warning(msg)
                    warnings.append(msg)
                    continue
                if name not in exceptions:
                    exceptions[name] = SuffixRule(name, RuleKind.EXCEPTION,
                                                  parent)
                continue

            if token not in suffixes:
                if token.startswith('*.'):
                    suffixes[token] = SuffixRule(token, RuleKind.WILDCARD)
                else:
                    suffixes[token] = SuffixRule(token, RuleKind.PLAIN)

        log.debug("Built suffix table: %d rules, %d exceptions",
                  len(suffixes), len(exceptions))
        return cls(suffixes, exceptions, warnings)

    def __len__(self) -> int:
        return len(self._suffixes) + len(self._exceptions)

    def has_suffix(self, key: str) -> bool:
        """Check for a plain (``co.uk``) or wildcard (``*.ck``) rule"""
        return key in self._suffixes

    def is_exception(self, name: str) -> bool:
        """Check whether an exception rule exempts exactly this name"""
        return name in self._exceptions

    def get(self, key: str) -> Optional[SuffixRule]:
        """Look up a rule by key. Exceptions are looked up by the name they
        exempt, without ``!``.

        :return: The rule, or ``None`` if there is none
        """
        try:
            return self._suffixes[key]
        except KeyError:
            return self._exceptions.get(key)

    def exceptions_of(self, key: str) -> List[str]:
        """Names exempted from the given plain or wildcard rule, in the order
        they were declared"""
        return [name for name, rule in self._exceptions.items()
                if rule.parent == key]

    @property
    def suffix_count(self) -> int:
        return len(self._suffixes)

    @property
    def exception_count(self) -> int:
        return len(self._exceptions)


class TldLevelTables:
    """Explicit one-, two- and three-label TLD sets used to split hostnames.
    Unrelated to the exception semantics of :class:`SuffixTable`.

    :param level1: Single-label TLDs (``uk``)
    :param level2: Two-label TLDs (``co.uk``)
    :param level3: Three-label TLDs (``act.edu.au``)
    """

    def __init__(self,
                 level1: Iterable[str] = (),
                 level2: Iterable[str] = (),
                 level3: Iterable[str] = ()):
        self.level1: FrozenSet[str] = frozenset(level1)
        self.level2: FrozenSet[str] = frozenset(level2)
        self.level3: FrozenSet[str] = frozenset(level3)

    @classmethod
    def from_lines(cls,
                   top_level: Iterable[str],
                   two_level: Iterable[str],
                   three_level: Iterable[str],
                   extra: Iterable[str] = ()) -> 'TldLevelTables':
        """Build the tables from the lines of the TLD files.

        Each ``extra`` entry goes into the level-2 or level-3 table depending
        on how many labels it has. Entries of any other length are ignored.
        """
        level1 = set(filter_rule_lines(top_level))
        level2 = set(filter_rule_lines(two_level))
        level3 = set(filter_rule_lines(three_level))

        for tld in filter_rule_lines(extra):
            count = len(tld.split('.'))
            if count == 2:
                level2.add(tld)
            elif count == 3:
                level3.add(tld)

        return cls(level1, level2, level3)

    def sizes(self) -> Tuple[int, int, int]:
        return len(self.level1), len(self.level2), len(self.level3)
