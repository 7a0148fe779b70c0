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

"""Periodic refresh of the public suffix list from publicsuffix.org"""

import email.utils
import logging
import os
import os.path
import threading
from typing import Optional

import requests

from .configuration import Config, USER_AGENT
from .exceptions import FetchError, RuleFileError
from .loader import PUBLIC_SUFFIX_LIST
from .registry import SuffixRegistry
from .rules import SuffixTable

log = logging.getLogger('pubsuffix.refresh')


def fetch_public_suffix_list(url: str, path: str, timeout: float = 30) -> bool:
    """Download the public suffix list to the given path if it has changed.

    The download is checked for at least one rule before anything is written,
    and the file is replaced atomically, so a failed download never leaves a
    partial file behind.

    :param url: Where to download the list from
    :param path: Where the list is kept
    :param timeout: HTTP timeout in seconds
    :raises FetchError: if the download fails or does not look like a public
                        suffix list
    :raises OSError: if the file cannot be written
    :return: ``True`` if the file was updated, ``False`` if it was already
             current
    """
    headers = {'User-Agent': USER_AGENT}
    try:
        mtime = os.path.getmtime(path)
    except OSError:
        pass
    else:
        headers['If-Modified-Since'] = email.utils.formatdate(mtime,
                                                              usegmt=True)

    try:
        r = requests.get(url, timeout=timeout, headers=headers)
    except requests.exceptions.RequestException as e:
        log.error("Could not fetch %s: %s", url, e)
        raise FetchError(f"Could not fetch {url}: {e}") from e

    if r.status_code == 304:
        log.info("Public suffix list at %s not modified", url)
        return False
    try:
        r.raise_for_status()
    except requests.exceptions.HTTPError as e:
        log.error("Received HTTP %d from %s", r.status_code, url)
        raise FetchError(f"HTTP {r.status_code} from {url}") from e

    try:
        text = r.content.decode('utf-8')
    except UnicodeDecodeError as e:
        raise FetchError(f"Response from {url} is not valid UTF-8") from e
    if len(SuffixTable.from_lines(text.splitlines())) == 0:
        raise FetchError(f"Response from {url} contained no rules")

    try:
        with open(path, 'rb') as f:
            if f.read() == r.content:
                log.info("Public suffix list at %s unchanged", url)
                return False
    except FileNotFoundError:
        pass

    tmp_path = path + '.tmp'
    try:
        with open(tmp_path, 'wb') as f:
            f.write(r.content)
        os.replace(tmp_path, path)
    except OSError:
        log.error("Could not write public suffix list to %s", path)
        try:
            os.remove(tmp_path)
        except FileNotFoundError:
            pass
        raise
    log.info("Downloaded updated public suffix list to %s", path)
    return True


class RefreshScheduler:
    """Keeps a registry's public suffix list up to date by downloading it on
    a schedule and reloading the registry when it changes.

    Refreshes run on a :class:`threading.Timer`. A failed refresh is logged
    and retried with exponential backoff, starting at
    ``config.retry_min_interval`` and growing to ``config.retry_max_interval``.
    The registry keeps its current tables until a refresh succeeds.

    :param registry: The registry to reload
    :param config: Configuration (URL, directories, intervals, timeout)
    """

    def __init__(self, registry: SuffixRegistry, config: Config):
        self.registry = registry
        self.config = config

        self._lock: threading.RLock = threading.RLock()

        # Must lock to access
        self._started: bool = False
        self._timer: Optional[threading.Timer] = None
        self._seq: int = 0
        self._retries: int = 0

    @property
    def list_path(self) -> str:
        """Where downloaded lists are written"""
        return os.path.join(self.config.cachedir, PUBLIC_SUFFIX_LIST)

    def start(self) -> None:
        """Schedule the first refresh for one interval from now. Returns
        immediately."""
        with self._lock:
            if self._started:
                log.warning("Not starting refresh: Already started")
                return
            self._started = True
            self._seq += 1
            self._retries = 0
            log.info("Refreshing public suffix list every %d secs",
                     self.config.interval)
            self._schedule(self.config.interval, self._seq)

    def stop(self) -> None:
        """Cancel any pending refresh. Does not raise any exceptions, even if
        not yet started."""
        with self._lock:
            if not self._started:
                log.debug("Not stopping refresh: Not started")
                return
            log.debug("Canceling pending refresh")
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._started = False

    def refresh(self) -> bool:
        """Refresh once right now. If the scheduler is running, the next
        refresh is rescheduled from now (or a retry is scheduled on failure).

        Does not raise any exceptions.

        :return: ``True`` if the registry was reloaded with a new list,
                 ``False`` if the list was unchanged or the refresh failed
        """
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._seq += 1
            self._retries = 0
            return self._refresh_and_schedule(self._seq)

    def _schedule(self, delay: int, seq: int) -> None:
        """Schedule a refresh. Do not call without holding the lock."""
        self._timer = threading.Timer(delay, self._scheduled_refresh,
                                      args=(seq,))
        self._timer.daemon = True
        self._timer.start()

    def _scheduled_refresh(self, seq: int) -> None:
        """Do a scheduled refresh (retry or regular), verifying that no other
        refresh has happened meanwhile"""
        with self._lock:
            if not self._started:
                log.debug("(refresh for seq %d aborted: scheduler stopped)",
                          seq)
            elif self._seq != seq:
                log.debug("(refresh for seq %d aborted: newer refresh)", seq)
            else:
                self._refresh_and_schedule(seq)

    def _refresh_and_schedule(self, seq: int) -> bool:
        """Do a refresh, scheduling the next one after if the scheduler is
        running. Do not call without holding the lock."""
        try:
            reloaded = self.refresh_once()
        except (FetchError, RuleFileError, OSError) as e:
            # Minimum retry interval the first time, doubling each retry after
            retry_delay = self.config.retry_min_interval * (2 ** self._retries)
            if retry_delay > self.config.retry_max_interval:
                retry_delay = self.config.retry_max_interval
            self._retries += 1
            log.error("Refresh failed, keeping current tables: %s", e)
            if self._started:
                log.info("Retrying refresh in %d secs. (seq %d)",
                         retry_delay, seq)
                self._schedule(retry_delay, seq)
            return False

        self._retries = 0
        if self._started:
            log.debug("(refresh seq %d complete, next in %d secs)",
                      seq, self.config.interval)
            self._schedule(self.config.interval, seq)
        return reloaded

    def refresh_once(self) -> bool:
        """Download the list and reload the registry if it changed

        :raises FetchError: if the download failed
        :raises RuleFileError: if the rule files could not be loaded
        :raises OSError: if the cache directory or list could not be written
        """
        os.makedirs(self.config.cachedir, exist_ok=True)
        updated = fetch_public_suffix_list(self.config.url, self.list_path,
                                           self.config.timeout)
        if not updated:
            return False
        self.registry.reload_from_directories(self.config.search_path)
        return True
