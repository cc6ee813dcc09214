"""Parsing and integrity checking of the attestation agent event log."""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass, field
from enum import Enum

_ASCII_WHITESPACE = re.compile(r"[ \t\n\x0c\r]+")
_HEX = re.compile(r"(?:[0-9a-fA-F]{2})*")


class HashAlgorithm(Enum):
    """Hash algorithms an event log can be accumulated with."""

    SHA256 = "sha256"
    SHA384 = "sha384"
    SHA512 = "sha512"

    @classmethod
    def parse(cls, name: str) -> HashAlgorithm:
        """Return the algorithm called ``name`` (for example ``sha384``)."""
        for algorithm in cls:
            if algorithm.value == name:
                return algorithm
        raise ValueError(f"unknown hash algorithm: {name!r}")

    def digest(self, data: bytes) -> bytes:
        """Return the digest of ``data``."""
        return hashlib.new(self.value, bytes(data)).digest()

    def digest_len(self) -> int:
        """Return the digest size in bytes."""
        return hashlib.new(self.value).digest_size

    def __str__(self) -> str:
        return self.value


def _lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


@dataclass
class AAEventlog:
    """An event log: its INIT record followed by the event lines."""

    hash_algorithm: HashAlgorithm
    init_state: bytes
    events: list[str] = field(default_factory=list)

    @classmethod
    def parse(cls, text: str) -> AAEventlog:
        """Parse the text of an event log; raise ValueError if it is malformed."""
        lines = _lines(text)
        if not lines:
            raise ValueError("at least one line should be included in AAEL")
        init_line, *event_lines = lines

        items = [item for item in _ASCII_WHITESPACE.split(init_line) if item]
        if len(items) != 2:
            raise ValueError("Illegal INIT event record.")
        keyword, content = items
        if keyword != "INIT":
            raise ValueError("INIT event should start with `INIT` key word")
        if "/" not in content:
            raise ValueError(
                "INIT event should have `<sha-algorithm>/<init-PCR-value>` "
                "as content after `INIT`"
            )
        algorithm_name, init_hex = content.split("/", 1)

        try:
            hash_algorithm = HashAlgorithm.parse(algorithm_name)
        except ValueError as err:
            raise ValueError(f"parse Hash Algorithm in INIT entry: {err}") from err
        if not _HEX.fullmatch(init_hex):
            raise ValueError("parse init state in INIT entry: invalid hex string")

        return cls(
            hash_algorithm=hash_algorithm,
            init_state=bytes.fromhex(init_hex),
            events=[line.rstrip() for line in event_lines],
        )

    def _accumulate(self) -> bytes:
        alg = self.hash_algorithm
        init_event = f"INIT {alg}/{self.init_state.hex()}"
        state = alg.digest(self.init_state + alg.digest(init_event.encode()))
        for event in self.events:
            state = alg.digest(state + alg.digest(event.encode()))
        return state

    def integrity_check(self, rtmr: bytes) -> bool:
        """Whether replaying the log yields exactly ``rtmr``."""
        return bytes(rtmr) == self._accumulate()