"""The event log recorded alongside runtime measurement extensions."""

from __future__ import annotations

import abc
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from aael.attester import Attester, AttesterError
from aael.event import AAEventlog, HashAlgorithm

EVENTLOG_PARENT_DIR_PATH = "/run/attestation-agent"
EVENTLOG_PATH = f"{EVENTLOG_PARENT_DIR_PATH}/eventlog"

log = logging.getLogger(__name__)


class EventLogError(Exception):
    """Raised when the event log cannot be read, written or replayed."""


class LogEntry(abc.ABC):
    """One line of the event log."""

    @abc.abstractmethod
    def __str__(self) -> str:
        """Return the line as it is written to the log."""

    def digest_with(self, hash_alg: HashAlgorithm) -> bytes:
        """Return the digest of the entry's line."""
        return hash_alg.digest(str(self).encode())


@dataclass(frozen=True)
class EventEntry(LogEntry):
    """A ``<domain> <operation> <content>`` event record."""

    domain: str
    operation: str
    content: str

    def __post_init__(self) -> None:
        if "\n" in self.content:
            raise ValueError("content contains newline")

    def __str__(self) -> str:
        return f"{self.domain} {self.operation} {self.content}"


@dataclass(frozen=True)
class InitEntry(LogEntry):
    """The ``INIT <algorithm>/<value>`` record that starts a log."""

    hash_alg: HashAlgorithm
    value: str

    def __str__(self) -> str:
        return f"INIT {self.hash_alg}/{self.value}"


class FileWriter:
    """Appends entries to an open text file, flushing after each."""

    def __init__(self, file: TextIO) -> None:
        self.file = file

    def append(self, entry: LogEntry) -> None:
        try:
            self.file.write(f"{entry}\n")
        except OSError as err:
            raise EventLogError(f"failed to write log: {err}") from err
        try:
            self.file.flush()
        except OSError as err:
            raise EventLogError(f"failed to flush log to I/O media: {err}") from err


def _open(path: Path, mode: str, what: str) -> FileWriter:
    try:
        return FileWriter(open(path, mode, encoding="utf-8", newline=""))
    except OSError as err:
        raise EventLogError(f"{what}: {err}") from err


class EventLog:
    """An event log whose entries are mirrored into a measurement register."""

    def __init__(
        self,
        writer: FileWriter,
        rtmr_extender: Attester,
        alg: HashAlgorithm,
        pcr: int,
    ) -> None:
        self._writer = writer
        self._rtmr_extender = rtmr_extender
        self._alg = alg
        self._pcr = pcr

    @classmethod
    async def create(
        cls,
        rtmr_extender: Attester,
        alg: HashAlgorithm,
        pcr: int,
        path: str | Path = EVENTLOG_PATH,
    ) -> EventLog:
        """Open the log at ``path``, starting or repairing it as needed."""
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as err:
            raise EventLogError(f"create eventlog parent dir: {err}") from err

        if not path.exists():
            log.debug(
                "No AA eventlog exists, creating a new one and do INIT entry recording..."
            )
            eventlog = cls(_open(path, "w", "create eventlog"), rtmr_extender, alg, pcr)
            await eventlog._record_init()
            return eventlog

        log.debug("Previous AAEL found. Skip INIT entry recording...")
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as err:
            raise EventLogError(f"Read AAEL: {err}") from err

        # A previous run may have created the file without writing to it.
        if not content:
            eventlog = cls(_open(path, "a", "open eventlog"), rtmr_extender, alg, pcr)
            await eventlog._record_init()
            return eventlog

        try:
            aael = AAEventlog.parse(content)
        except ValueError as err:
            raise EventLogError(f"Parse AAEL: {err}") from err
        try:
            rtmr = await rtmr_extender.get_runtime_measurement(pcr)
        except AttesterError as err:
            raise EventLogError(f"Get RTMR failed: {err}") from err

        # A previous run may have written an entry but failed to extend the
        # register; finish that extension here.
        if aael.integrity_check(rtmr):
            log.debug("Existing RTMR is consistent with current AAEL")
        else:
            log.debug(
                "Existing RTMR is not consistent with current AAEL, do a RTMR extending..."
            )
            if aael.events:
                record = aael.events[0]
            else:
                width = aael.hash_algorithm.digest_len()
                record = (
                    f"INIT {aael.hash_algorithm}/{aael.init_state.hex().rjust(width, '0')}"
                )
            try:
                await rtmr_extender.extend_runtime_measurement(
                    alg.digest(record.encode()), pcr
                )
            except AttesterError as err:
                raise EventLogError(f"Extend RTMR failed: {err}") from err

        return cls(_open(path, "a", "open eventlog"), rtmr_extender, alg, pcr)

    async def _record_init(self) -> None:
        try:
            await self.extend_init_entry()
        except (EventLogError, AttesterError) as err:
            raise EventLogError(f"extend INIT entry: {err}") from err

    async def extend_entry(self, log_entry: LogEntry, pcr: int) -> None:
        """Write ``log_entry`` to the log, then extend register ``pcr`` with it."""
        digest = log_entry.digest_with(self._alg)
        # The log is written first so that a failed extension can be repaired.
        try:
            self._writer.append(log_entry)
        except EventLogError as err:
            raise EventLogError(f"write log entry: {err}") from err
        await self._rtmr_extender.extend_runtime_measurement(digest, pcr)

    async def extend_init_entry(self) -> None:
        """Record the register's current value as the INIT entry."""
        register = await self._rtmr_extender.get_runtime_measurement(self._pcr)
        value = register.hex().rjust(self._alg.digest_len(), "0")
        init_entry = InitEntry(self._alg, value)
        digest = init_entry.digest_with(self._alg)
        try:
            self._writer.append(init_entry)
        except EventLogError as err:
            raise EventLogError(f"write INIT log entry: {err}") from err
        try:
            await self._rtmr_extender.extend_runtime_measurement(digest, self._pcr)
        except AttesterError as err:
            raise EventLogError(f"write INIT entry: {err}") from err