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

"""pubsuffix configuration parsing"""

import configparser
import os.path
import pathlib
import sys
from typing import Dict, List, Optional, TextIO, Union

if sys.version_info < (3, 10):
    from importlib_metadata import version, PackageNotFoundError
else:
    from importlib.metadata import version, PackageNotFoundError

from .exceptions import ConfigError
from .loader import BUNDLED_DATA_DIR

try:
    __version__ = version('pubsuffix')
except PackageNotFoundError:
    __version__ = 'unknown'

USER_AGENT = f"pubsuffix/{__version__}"

DEFAULT_URL = 'https://publicsuffix.org/list/public_suffix_list.dat'

DEFAULT_CACHE_DIR = '/var/lib/pubsuffix'

_INT_OPTIONS = {
    # Seconds between successful refreshes (15 days)
    'interval': 15 * 86400,
    'retry_min_interval': 300,
    'retry_max_interval': 86400,
    'timeout': 30,
}


class Config:
    """pubsuffix configuration data

    :param main: Options from the ``[pubsuffix]`` section. Missing options
                 take their defaults.
    :raises ConfigError: if the configuration is invalid
    """

    def __init__(self, main: Optional[Dict[str, str]] = None):
        main = dict(main) if main is not None else dict()

        #: Directory holding the rule files
        self.datadir: str = main.pop('datadir', BUNDLED_DATA_DIR)

        #: Directory refreshed lists are written to. Searched before datadir.
        self.cachedir: str = main.pop('cachedir', DEFAULT_CACHE_DIR)
        if not os.path.isabs(self.cachedir):
            raise ConfigError("Config option 'cachedir' cannot be a relative "
                              "path")

        #: Where to download the public suffix list from
        self.url: str = main.pop('url', DEFAULT_URL)

        #: Logging destination: "syslog", "stderr", or a file path
        self.logfile: str = main.pop('log', 'stderr')

        refresh = main.pop('refresh', 'true').lower()
        if refresh in ('true', 'on', 'yes', '1'):
            #: Whether to refresh the public suffix list periodically
            self.refresh: bool = True
        elif refresh in ('false', 'off', 'no', '0'):
            self.refresh = False
        else:
            raise ConfigError("Config option 'refresh' must be boolean "
                              "(true/yes/on/1/false/no/off/0)")

        ints: Dict[str, int] = dict()
        for key, default in _INT_OPTIONS.items():
            try:
                ints[key] = int(main.pop(key, default))
            except ValueError:
                raise ConfigError(f"Config option '{key}' must be an "
                                  "integer > 0") from None
            if ints[key] <= 0:
                raise ConfigError(f"Config option '{key}' must be an "
                                  "integer > 0")

        #: Seconds between successful refreshes
        self.interval: int = ints['interval']
        #: First retry delay after a failed refresh, in seconds
        self.retry_min_interval: int = ints['retry_min_interval']
        #: Longest retry delay after failed refreshes, in seconds
        self.retry_max_interval: int = ints['retry_max_interval']
        #: HTTP timeout for downloads, in seconds
        self.timeout: int = ints['timeout']

        if self.retry_min_interval > self.retry_max_interval:
            raise ConfigError("Config option 'retry_min_interval' cannot be "
                              "greater than 'retry_max_interval'")

        if main:
            raise ConfigError("Unknown config option(s): %s" %
                              ', '.join(sorted(main)))

    @property
    def search_path(self) -> List[str]:
        """Directories to search for rule files, in order"""
        return [self.cachedir, self.datadir]


def _process_config(config: configparser.ConfigParser) -> Config:
    """Process the given :class:`~configparser.ConfigParser` into a
    :class:`Config`

    :param config: The configuration to process
    :raises ConfigError: if the configuration is invalid
    :returns: the processed and validated configuration
    """
    # Note: ConfigParser already handles catching duplicate sections and
    #   duplicate keys

    main: Dict[str, str] = dict()

    for section in config.sections():
        if section == 'pubsuffix':
            main.update(config[section])
        else:
            raise ConfigError("Config section %s is not a pubsuffix "
                              "section" % section)

    return Config(main)


def read_file_from_path(filename: Union[str, pathlib.Path]) -> Config:
    """Read configuration from the named file or :class:`~pathlib.Path`

    :param filename: Filename or path to read from
    :raises ConfigError: if the config file cannot be read or is invalid
    :return: A :class:`Config`
    """
    try:
        with open(filename, 'r') as f:
            return read_file(f)
    except OSError as e:
        raise ConfigError("Could not read config file %s: %s" %
                          (filename, e.strerror)) from e


def read_file(configfile: TextIO) -> Config:
    """Read configuration in from the named file

    :param configfile: Filelike object to read the config from
    :raises ConfigError: if the config file cannot be read or is invalid
    :return: A :class:`Config`
    """
    config = configparser.ConfigParser()
    try:
        config.read_file(configfile)
    except configparser.Error as e:
        raise ConfigError("Error in config file: %s" % e) from e
    except OSError as e:
        raise ConfigError("Could not read config file: %s" %
                          e.strerror) from e

    return _process_config(config)
