# Copyright Red Hat
#
# apicompat/compare/suppression.py - API compatibility suppressions
#
# This file is part of the apicompat project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Suppression records and the thread-safe suppression engine.

A suppression marks a difference as accepted. The ``SuppressionEngine``
answers whether a difference is suppressed, records new suppressions when
generating a baseline, and persists the suppression set as JSON.
"""
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Set, Union
from os.path import dirname, abspath
import threading
import tempfile
import logging
import json
import os

from apicompat import (
    APICOMPAT_SUBSYSTEM_SUPPRESSION,
    ApiCompatConfigError,
    ApiCompatSuppressionError,
    ApiCompatSystemError,
    is_compat_diagnostic,
)

from .engine import CompatDifference

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_suppression(msg, *args, **kwargs):
    """A wrapper for suppression subsystem debug logs."""
    _log.debug(
        msg, *args, extra={"subsystem": APICOMPAT_SUBSYSTEM_SUPPRESSION}, **kwargs
    )


#: Top level key of the suppression file.
SUPPRESSIONS_KEY = "suppressions"

_SUPPRESSION_FILE_MODE = 0o644


@dataclass(frozen=True)
class Suppression:
    """
    An accepted difference.

    Only ``diagnostic_id`` is required: a suppression without a target
    matches by assembly pair and one without left/right matches by target.
    """

    #: The suppressed diagnostic id
    diagnostic_id: str
    #: The member id the suppression applies to
    target: Optional[str] = None
    #: The left assembly id
    left: Optional[str] = None
    #: The right assembly id
    right: Optional[str] = None
    #: ``True`` for suppressions recorded while generating a baseline
    is_baseline_suppression: bool = False

    @classmethod
    def from_difference(
        cls, difference: CompatDifference, is_baseline: bool = False
    ) -> "Suppression":
        """
        Build the ``Suppression`` that exactly matches ``difference``.

        :param difference: The difference to suppress.
        :type difference: ``CompatDifference``
        :param is_baseline: Mark the suppression as a baseline suppression.
        :type is_baseline: ``bool``
        :rtype: ``Suppression``
        """
        return cls(
            difference.diagnostic_id,
            target=difference.member_id,
            left=str(difference.left) if difference.left else None,
            right=str(difference.right) if difference.right else None,
            is_baseline_suppression=is_baseline,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Suppression":
        """
        Build a ``Suppression`` from its JSON dictionary form.

        :param data: A dictionary as produced by ``to_dict()``.
        :type data: ``Dict[str, Any]``
        :rtype: ``Suppression``
        :raises: ``ApiCompatSuppressionError`` if ``data`` is malformed.
        """
        if not isinstance(data, dict):
            raise ApiCompatSuppressionError(f"Invalid suppression record: {data!r}")
        diagnostic_id = data.get("diagnostic_id")
        if not isinstance(diagnostic_id, str) or not diagnostic_id:
            raise ApiCompatSuppressionError(
                f"Suppression record without diagnostic_id: {data!r}"
            )
        for key in ("target", "left", "right"):
            if data.get(key) is not None and not isinstance(data[key], str):
                raise ApiCompatSuppressionError(
                    f"Invalid suppression {key} value: {data[key]!r}"
                )
        baseline = data.get("is_baseline_suppression", False)
        if not isinstance(baseline, bool):
            raise ApiCompatSuppressionError(
                f"Invalid is_baseline_suppression value: {baseline!r}"
            )
        return cls(
            diagnostic_id,
            target=data.get("target"),
            left=data.get("left"),
            right=data.get("right"),
            is_baseline_suppression=baseline,
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert this ``Suppression`` into a dictionary suitable for encoding
        as JSON. Unset fields are omitted.

        :rtype: ``Dict[str, Any]``
        """
        data: Dict[str, Any] = {"diagnostic_id": self.diagnostic_id}
        for key in ("target", "left", "right"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        data["is_baseline_suppression"] = self.is_baseline_suppression
        return data

    def sort_key(self):
        """Return a key giving suppressions a stable file order."""
        return (
            self.diagnostic_id,
            self.target or "",
            self.left or "",
            self.right or "",
            self.is_baseline_suppression,
        )


class ReaderWriterLock:
    """
    A reader/writer lock with an upgradeable read mode.

    Any number of readers may hold the lock together. One upgradeable
    reader may hold it alongside plain readers and may then take the write
    lock once the readers have drained. The write lock is exclusive. Waiting
    writers block new readers. None of the modes are re-entrant.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0
        self._upgrader = None

    def acquire_read(self):
        """Acquire the lock in shared read mode."""
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self):
        """Release a shared read lock."""
        with self._cond:
            if self._readers <= 0:
                raise RuntimeError("Read lock released without being held")
            self._readers -= 1
            if not self._readers:
                self._cond.notify_all()

    def acquire_upgradeable(self):
        """Acquire the lock in upgradeable read mode."""
        with self._cond:
            while self._writer or self._upgrader is not None:
                self._cond.wait()
            self._upgrader = threading.get_ident()

    def release_upgradeable(self):
        """Release an upgradeable read lock."""
        with self._cond:
            if self._upgrader != threading.get_ident():
                raise RuntimeError("Upgradeable lock not held by this thread")
            self._upgrader = None
            self._cond.notify_all()

    def acquire_write(self):
        """
        Acquire the lock in exclusive write mode. A thread holding the
        upgradeable read lock may call this to escalate.
        """
        me = threading.get_ident()
        with self._cond:
            self._writers_waiting += 1
            try:
                while (
                    self._writer
                    or self._readers
                    or (self._upgrader is not None and self._upgrader != me)
                ):
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self):
        """Release an exclusive write lock."""
        with self._cond:
            if not self._writer:
                raise RuntimeError("Write lock released without being held")
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_lock(self):
        """Context manager holding the lock in read mode."""
        self.acquire_read()
        try:
            yield self
        finally:
            self.release_read()

    @contextmanager
    def upgradeable_read_lock(self):
        """Context manager holding the lock in upgradeable read mode."""
        self.acquire_upgradeable()
        try:
            yield self
        finally:
            self.release_upgradeable()

    @contextmanager
    def write_lock(self):
        """Context manager holding the lock in write mode."""
        self.acquire_write()
        try:
            yield self
        finally:
            self.release_write()


def _parse_no_warn(no_warn: Union[None, str, Iterable[str]]) -> Set[str]:
    if not no_warn:
        return set()
    if isinstance(no_warn, str):
        return set(no_warn.split(";"))
    ids = set()
    for value in no_warn:
        ids.update(value.split(";"))
    return ids


class SuppressionEngine:
    """
    Collection of suppressions that can check whether a difference is
    suppressed, add suppressions and write them to a file. The engine may
    be shared between threads.
    """

    def __init__(
        self,
        suppression_file: Optional[str] = None,
        no_warn: Union[None, str, Iterable[str]] = None,
        baseline_all_errors: bool = False,
    ):
        """
        Initialise a new ``SuppressionEngine``.

        :param suppression_file: Optional path to a suppression file to load.
        :type suppression_file: ``Optional[str]``
        :param no_warn: Diagnostic ids that are always suppressed, either a
                        semicolon separated string or an iterable of ids.
        :type no_warn: ``Union[None, str, Iterable[str]]``
        :param baseline_all_errors: Record and suppress every difference that
                                    is not already suppressed.
        :type baseline_all_errors: ``bool``
        :raises: ``ApiCompatSuppressionError`` if the suppression file cannot
                 be read or parsed.
        """
        self._lock = ReaderWriterLock()
        self._suppressions: Set[Suppression] = self._parse_suppression_file(
            suppression_file
        )
        self._no_warn = _parse_no_warn(no_warn)
        self.baseline_all_errors = baseline_all_errors

    def __len__(self):
        with self._lock.read_lock():
            return len(self._suppressions)

    @property
    def no_warn(self):
        """The diagnostic ids that are never reported."""
        return frozenset(self._no_warn)

    @property
    def suppressions(self) -> Set[Suppression]:
        """A snapshot of the current suppression set."""
        with self._lock.read_lock():
            return set(self._suppressions)

    @staticmethod
    def _coerce(
        error: Union[CompatDifference, Suppression], is_baseline: bool
    ) -> Suppression:
        if isinstance(error, CompatDifference):
            return Suppression.from_difference(error, is_baseline=is_baseline)
        return error

    def is_suppressed(
        self,
        error: Union[CompatDifference, Suppression],
        is_baseline: bool = False,
    ) -> bool:
        """
        Return ``True`` if ``error`` is suppressed.

        Compatibility diagnostics (ids beginning with ``CP``) also match a
        suppression that names only the target, or only the assembly pair.
        When ``baseline_all_errors`` is set every unsuppressed error is
        recorded and reported as suppressed.

        :param error: The difference, or its suppression form, to check.
        :type error: ``Union[CompatDifference, Suppression]``
        :param is_baseline: Match baseline suppressions when ``error`` is a
                            ``CompatDifference``.
        :type is_baseline: ``bool``
        :rtype: ``bool``
        """
        suppression = self._coerce(error, is_baseline)

        if suppression.diagnostic_id in self._no_warn:
            return True

        with self._lock.read_lock():
            if suppression in self._suppressions:
                return True
            if is_compat_diagnostic(suppression.diagnostic_id) and (
                Suppression(
                    suppression.diagnostic_id,
                    target=suppression.target,
                    is_baseline_suppression=suppression.is_baseline_suppression,
                )
                in self._suppressions
                or Suppression(
                    suppression.diagnostic_id,
                    left=suppression.left,
                    right=suppression.right,
                    is_baseline_suppression=suppression.is_baseline_suppression,
                )
                in self._suppressions
            ):
                return True

        if self.baseline_all_errors:
            _log_debug_suppression("Baselining %s", suppression)
            self.add_suppression(suppression)
            return True

        return False

    def add_suppression(
        self,
        suppression: Union[CompatDifference, Suppression],
        is_baseline: bool = False,
    ):
        """
        Add ``suppression`` to the suppression set if it is not already
        present.

        :param suppression: The suppression, or the difference to suppress.
        :type suppression: ``Union[CompatDifference, Suppression]``
        :param is_baseline: Mark the suppression as a baseline suppression
                            when ``suppression`` is a ``CompatDifference``.
        :type is_baseline: ``bool``
        """
        suppression = self._coerce(suppression, is_baseline)
        with self._lock.upgradeable_read_lock():
            if suppression in self._suppressions:
                return
            with self._lock.write_lock():
                self._suppressions.add(suppression)
        _log_debug_suppression("Added suppression %s", suppression)

    def _serialise(self) -> str:
        with self._lock.read_lock():
            records = sorted(self._suppressions, key=Suppression.sort_key)
            return json.dumps(
                {SUPPRESSIONS_KEY: [record.to_dict() for record in records]},
                indent=4,
            )

    def write_suppressions_to_file(self, suppression_file: str) -> bool:
        """
        Write the suppression set to ``suppression_file``.

        The file is replaced atomically. Nothing is written if the
        suppression set is empty.

        :param suppression_file: The path to write.
        :type suppression_file: ``str``
        :returns: ``True`` if the file was written or ``False`` if there were
                  no suppressions to write.
        :rtype: ``bool``
        :raises: ``ApiCompatSystemError`` if the file cannot be written.
        """
        if not len(self):
            return False

        data = self._serialise()
        file_dir = dirname(abspath(suppression_file))
        try:
            # Write the suppression file atomically
            fd, tmp_path = tempfile.mkstemp(dir=file_dir, prefix=".tmp_", text=True)
            try:
                with os.fdopen(fd, "w", encoding="utf8") as f:
                    f.write(data)
                    f.write("\n")
                    f.flush()
                    os.fsync(f.fileno())
                os.rename(tmp_path, suppression_file)
                os.chmod(suppression_file, _SUPPRESSION_FILE_MODE)
            except OSError as err:
                os.unlink(tmp_path)
                raise ApiCompatSystemError(
                    f"Filesystem error writing suppression file "
                    f"'{suppression_file}': {err}"
                ) from err
        except OSError as err:
            raise ApiCompatSystemError(
                f"Filesystem error writing suppression temporary file for "
                f"'{suppression_file}': {err}"
            ) from err
        _log_info("Wrote %d suppressions to '%s'", len(self), suppression_file)
        return True

    @staticmethod
    def _parse_suppression_file(suppression_file: Optional[str]) -> Set[Suppression]:
        if suppression_file is None or not suppression_file.strip():
            return set()

        try:
            with open(suppression_file, "r", encoding="utf8") as fp:
                data = json.load(fp)
        except (OSError, UnicodeDecodeError) as err:
            raise ApiCompatSuppressionError(
                f"Failed to read suppression file '{suppression_file}': {err}"
            ) from err
        except json.JSONDecodeError as err:
            raise ApiCompatSuppressionError(
                f"Malformed suppression file '{suppression_file}': {err}"
            ) from err

        if not isinstance(data, dict) or not isinstance(
            data.get(SUPPRESSIONS_KEY, []), list
        ):
            raise ApiCompatSuppressionError(
                f"Malformed suppression file '{suppression_file}': expected an "
                f"object with a '{SUPPRESSIONS_KEY}' list"
            )

        suppressions = {
            Suppression.from_dict(record) for record in data.get(SUPPRESSIONS_KEY, [])
        }
        _log_debug_suppression(
            "Loaded %d suppressions from '%s'", len(suppressions), suppression_file
        )
        return suppressions


def generate_suppression_file(
    engine: SuppressionEngine, suppression_file: Optional[str]
) -> bool:
    """
    Write the suppressions recorded by ``engine`` to ``suppression_file``
    and log the outcome.

    :param engine: The suppression engine holding the baseline.
    :type engine: ``SuppressionEngine``
    :param suppression_file: The path to write.
    :type suppression_file: ``Optional[str]``
    :returns: ``True`` if a file was written.
    :rtype: ``bool``
    :raises: ``ApiCompatConfigError`` if ``suppression_file`` is not set, or
             ``ApiCompatSystemError`` if the file cannot be written.
    """
    if not suppression_file:
        raise ApiCompatConfigError(
            "A suppression file path is required to generate suppressions"
        )
    if engine.write_suppressions_to_file(suppression_file):
        _log_info("Successfully wrote suppression file '%s'", suppression_file)
        return True
    _log_info("No suppressions to write to '%s'", suppression_file)
    return False


__all__ = [
    "ReaderWriterLock",
    "Suppression",
    "SuppressionEngine",
    "SUPPRESSIONS_KEY",
    "generate_suppression_file",
]
