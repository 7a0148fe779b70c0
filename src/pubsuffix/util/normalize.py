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

"""Hostname normalization: lowercasing and ACE (punycode) decoding"""

import re

ACE_PREFIX = 'xn--'

_ACE_RE = re.compile(r'^xn--|\.xn--')


def _decode_ace_label(label: str) -> str:
    """Decode the RFC 3492 punycode after the ``xn--`` prefix. No IDNA
    validity checks are done on the result.

    :raises UnicodeError: if the label is not valid punycode
    """
    encoded = label[len(ACE_PREFIX):]
    if not encoded:
        raise UnicodeError(f"Empty ACE label: {label}")
    return encoded.encode('ascii').decode('punycode')


def normalize_host(host: str) -> str:
    """Lowercase a hostname and decode any ACE-encoded labels to Unicode

    Only labels beginning with ``xn--`` are decoded; other labels are passed
    through as they are. If any ACE label fails to decode, the lowercase
    hostname is returned with no labels decoded.

    :param host: The hostname to normalize
    :return: The normalized hostname
    """
    host = host.lower()

    if not _ACE_RE.search(host):
        return host

    try:
        return '.'.join(_decode_ace_label(label)
                        if label.startswith(ACE_PREFIX) else label
                        for label in host.split('.'))
    except UnicodeError:
        return host
