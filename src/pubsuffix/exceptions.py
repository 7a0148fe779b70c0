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

"""All pubsuffix exceptions"""


class PubSuffixException(Exception):
    """Base class for all pubsuffix exceptions"""


class ConfigError(PubSuffixException):
    """Raised when the configuration is malformed or has other errors"""


class RuleFileError(PubSuffixException):
    """Raised when a rule file is missing or cannot be read. Lookups never
    raise this; it only comes out of loading."""


class FetchError(PubSuffixException):
    """Raised when downloading an updated public suffix list fails. The
    refresh scheduler catches this and retries later, leaving the tables
    already in use untouched."""
