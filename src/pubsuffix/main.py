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

import argparse
import logging
import logging.handlers
import sys

from . import configuration
from .exceptions import ConfigError, FetchError, RuleFileError
from .refresh import RefreshScheduler
from .registry import SuffixRegistry


def parse_args(argv):
    """Parse command line arguments

    :param argv: Either ``None`` or a list of arguments
    :returns: a :class:`argparse.Namespace` containing the parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="Public suffix and organizational domain lookup",
        epilog="If no hosts are given, hosts are read from stdin, one per "
               "line, and the public suffix list is refreshed in the "
               "background while reading",
    )
    parser.add_argument("-c", "--configfile", default=None,
                        help="Path to the config file")
    parser.add_argument("-d", "--debug-logs", action="store_true",
                        help="Increase verbosity of logging significantly")
    parser.add_argument("-s", "--stderr", action="store_true",
                        help="Log to stderr instead of syslog or file")

    subparsers = parser.add_subparsers(dest="command", required=True)
    suffix = subparsers.add_parser(
        "suffix", help="Check whether hosts are public suffixes")
    suffix.add_argument("hosts", nargs="*", metavar="HOST")
    org = subparsers.add_parser(
        "org", help="Find the organizational domain of hosts")
    org.add_argument("hosts", nargs="*", metavar="HOST")
    split = subparsers.add_parser(
        "split", help="Split hosts into subdomain and domain")
    split.add_argument("-l", "--level", type=int, default=2,
                       choices=(1, 2, 3), help="Number of TLD levels to use")
    split.add_argument("hosts", nargs="*", metavar="HOST")
    subparsers.add_parser(
        "refresh", help="Download the public suffix list once if it changed")

    return parser.parse_args(argv)


def setup_logging(conf: configuration.Config, debug: bool) -> None:
    """Attach a handler to the ``pubsuffix`` logger as configured"""
    if conf.logfile == 'syslog':
        log_handler = logging.handlers.SysLogHandler()
    elif conf.logfile == 'stderr':
        log_handler = logging.StreamHandler()
    else:
        log_handler = logging.FileHandler(conf.logfile)
    log = logging.getLogger('pubsuffix')
    log.addHandler(log_handler)

    if debug:
        log.setLevel(logging.DEBUG)
    else:
        log.setLevel(logging.INFO)


def lookup(registry: SuffixRegistry, args, host: str) -> str:
    """Do the lookup named by the command for a single host and format the
    output line"""
    if args.command == 'suffix':
        result = 'yes' if registry.is_public_suffix(host) else 'no'
        return f"{host} {result}"
    if args.command == 'org':
        org_domain = registry.get_organizational_domain(host)
        return f"{host} {org_domain or '-'}"
    subdomain, domain = registry.split_hostname(host, args.level)
    return f"{host} {subdomain or '-'} {domain or '-'}"


def main(argv=None):
    """Main entry point when run as a standalone program

    :param argv: List of arguments. If ``None``, read :data:`sys.argv`.
    """
    args = parse_args(argv)
    try:
        if args.configfile is None:
            conf = configuration.Config()
        else:
            conf = configuration.read_file_from_path(args.configfile)
    except ConfigError as e:
        print("Config error:", e, file=sys.stderr)
        sys.exit(2)

    if args.stderr:
        conf.logfile = 'stderr'
    setup_logging(conf, args.debug_logs)
    log = logging.getLogger('pubsuffix')

    try:
        registry = SuffixRegistry.from_directories(conf.search_path)
    except RuleFileError as e:
        log.critical("Could not load rule files: %s", e)
        sys.exit(1)

    scheduler = RefreshScheduler(registry, conf)

    if args.command == 'refresh':
        try:
            updated = scheduler.refresh_once()
        except (FetchError, RuleFileError, OSError) as e:
            print("Refresh failed:", e, file=sys.stderr)
            sys.exit(1)
        if updated:
            print("Public suffix list updated")
        else:
            print("Public suffix list not updated")
        return

    if args.hosts:
        for host in args.hosts:
            print(lookup(registry, args, host))
        return

    if conf.refresh:
        scheduler.start()
    try:
        for line in sys.stdin:
            host = line.strip()
            if host:
                print(lookup(registry, args, host), flush=True)
    finally:
        scheduler.stop()
