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

"""Lookups against the rule tables

These are pure functions of a table and a hostname. None of them raise for
malformed hostnames; they return ``False``, ``None``, or a partial split
instead.
"""

from typing import Optional, Tuple

from .rules import SuffixTable, TldLevelTables
from .util import normalize_host


def is_public_suffix(table: SuffixTable, host: Optional[str]) -> bool:
    """Check whether a hostname is itself a public suffix

    :param table: The public suffix rules
    :param host: The hostname to check. ``None`` and ``""`` are never public
                 suffixes.
    :return: ``True`` if so, ``False`` if not
    """
    if not host:
        return False
    host = normalize_host(host)

    if table.has_suffix(host):
        return True

    # co.uk -> uk
    up_one_level = host.partition('.')[2]
    if not up_one_level:
        return False

    if table.has_suffix(f'*.{up_one_level}'):
        # Matched a wildcard like *.ck, unless exempted like !www.ck
        return not table.is_exception(host)

    return False


def get_organizational_domain(table: SuffixTable,
                              host: Optional[str]) -> Optional[str]:
    """Find the organizational domain of a hostname: the domain that was
    registered with a domain name registrar. That is the longest matching
    public suffix plus one more label.

    See section 3.2 of the DMARC base draft
    (https://datatracker.ietf.org/doc/draft-kucherawy-dmarc-base/).

    :param table: The public suffix rules
    :param host: The hostname
    :return: The normalized organizational domain, or ``None`` if the host is
             empty, has an empty label, matches no public suffix, or is itself
             a public suffix
    """
    if not host:
        return None
    host = normalize_host(host)

    # www.example.com -> [com, example, www]
    labels = host.split('.')[::-1]

    # Search the public suffix list for the name that matches the largest
    # number of labels in the host
    greatest = 0
    for i in range(1, len(labels) + 1):
        if not labels[i - 1]:
            # Dot without a label
            return None
        tld = '.'.join(labels[i - 1::-1])
        if is_public_suffix(table, tld):
            greatest = i + 1
        elif table.is_exception(tld):
            greatest = i

    # Take the matched suffix and the label in front of it
    if greatest == 0:
        # No valid TLD
        return None
    if greatest > len(labels):
        # Not enough labels
        return None
    if greatest == len(labels):
        return host

    return '.'.join(labels[greatest - 1::-1])


def split_hostname(tables: TldLevelTables,
                   host: Optional[str],
                   level: Optional[int] = 2) -> Tuple[str, str]:
    """Split a hostname into subdomain part and domain part using the
    explicit TLD tables, up to the given TLD depth

    The hostname is lowercased but ACE labels are not decoded. If the TLD
    is not in any table, the domain part is just the last label.

    :param tables: The TLD level tables
    :param host: The hostname to split. ``None`` and ``""`` split into
                 two empty strings.
    :param level: How many TLD levels to consider: 1, 2 or 3. Anything else
                  means 2.
    :return: A tuple ``(subdomain, domain)``. Either may be empty.
    """
    if not host:
        return '', ''
    if level not in (1, 2, 3) or isinstance(level, bool):
        level = 2

    # Consume labels from the end of the list, TLD first
    remaining = host.lower().split('.')
    domain = ''

    if level >= 1 and remaining[-1] and remaining[-1] in tables.level1:
        domain = remaining.pop()
    if (level >= 2 and domain and remaining and remaining[-1] and
            f'{remaining[-1]}.{domain}' in tables.level2):
        domain = f'{remaining.pop()}.{domain}'
    if (level >= 3 and domain and remaining and remaining[-1] and
            f'{remaining[-1]}.{domain}' in tables.level3):
        domain = f'{remaining.pop()}.{domain}'

    # The registrable name
    if remaining and remaining[-1]:
        label = remaining.pop()
        # Unknown TLD: the label alone, with no trailing dot
        domain = f'{label}.{domain}' if domain else label

    return '.'.join(remaining), domain
