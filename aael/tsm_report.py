"""Quote generation through the configfs TSM report interface."""

from __future__ import annotations

import contextlib
import logging
import re
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterator

TSM_REPORT_PATH = "/sys/kernel/config/tsm/report"

log = logging.getLogger(__name__)

_U32_MAX = 2**32 - 1


class TsmReportError(Exception):
    """Raised when a TSM report cannot be opened or generated."""


class TsmReportProvider(Enum):
    """TEE providers that can back a TSM report."""

    CCA = "arm_cca_guest"
    TDX = "tdx_guest"
    SEV = "sev_guest"

    @property
    def label(self) -> str:
        return self.name.capitalize()


@dataclass(frozen=True)
class TsmReportData:
    """Request data for one provider; ``privlevel`` is for SEV only."""

    provider: TsmReportProvider
    inblob: bytes
    privlevel: int | None = None

    def __post_init__(self) -> None:
        if self.provider is TsmReportProvider.SEV:
            if self.privlevel is None:
                raise ValueError("SEV report data needs a privlevel")
            if not 0 <= self.privlevel <= 0xFF:
                raise ValueError("privlevel must fit in one byte")
        elif self.privlevel is not None:
            raise ValueError("privlevel is only used by SEV report data")


@contextlib.contextmanager
def _attribute(name: str) -> Iterator[None]:
    try:
        yield
    except (OSError, UnicodeDecodeError) as err:
        raise TsmReportError(
            f"Failed to access TSM Report attribute: {name} ({err})"
        ) from err


def _parse_u32(text: str) -> int:
    if not text:
        raise ValueError("cannot parse integer from empty string")
    if not re.fullmatch(r"\+?[0-9]+", text):
        raise ValueError("invalid digit found in string")
    value = int(text)
    if value > _U32_MAX:
        raise ValueError("number too large to fit in target type")
    return value


def check_inblob_write_race(report_path: str | Path) -> None:
    """Fail if someone else generated a quote in the same report directory."""
    with _attribute("generation"):
        text = (Path(report_path) / "generation").read_text(encoding="utf-8")
    try:
        generation = _parse_u32(text.strip("\n"))
    except ValueError as err:
        raise TsmReportError(
            f"Failed to parse TSM Report attribute 'generation': {err}"
        ) from err
    if generation > 1:
        raise TsmReportError(
            "Failed to generate TSM Report: inblob write conflict "
            f"(generation={generation}, expected 1)"
        )


def check_tsm_report_provider(
    report_path: str | Path, wanted: TsmReportProvider
) -> None:
    """Fail unless the report directory is served by the ``wanted`` provider."""
    with _attribute("provider"):
        text = (Path(report_path) / "provider").read_text(encoding="utf-8")
    provider = next((p for p in TsmReportProvider if text == f"{p.value}\n"), None)
    if provider is None:
        raise TsmReportError(
            "Failed to open TSM Report path: unknown provider "
            "(Matching variant not found)"
        )
    if provider is not wanted:
        raise TsmReportError(
            f"Failed to open TSM Report path: missing provider {wanted.label} "
            f"(provider={provider.label})"
        )


class TsmReportPath:
    """A one-shot report request directory, removed again on close."""

    def __init__(
        self, wanted: TsmReportProvider, root: str | Path = TSM_REPORT_PATH
    ) -> None:
        self._closed = True
        root = Path(root)
        if not root.exists():
            raise TsmReportError("Failed to access TSM Report path")
        try:
            path = Path(tempfile.mkdtemp(dir=root))
        except OSError as err:
            raise TsmReportError(
                f"Failed to create TSM Report path instance: {err}"
            ) from err
        try:
            check_tsm_report_provider(path, wanted)
        except TsmReportError:
            with contextlib.suppress(OSError):
                path.rmdir()
            raise
        self.path = path
        self._closed = False

    def attestation_report(self, provider_data: TsmReportData) -> bytes:
        """Write the request, read back the quote and check for races."""
        if provider_data.privlevel is not None:
            with _attribute("privlevel"):
                (self.path / "privlevel").write_bytes(bytes([provider_data.privlevel]))
        if not provider_data.inblob:
            raise TsmReportError("Failed to generate TSM Report: missing inblob (len=0)")
        with _attribute("inblob"):
            (self.path / "inblob").write_bytes(bytes(provider_data.inblob))
        with _attribute("outblob"):
            quote = (self.path / "outblob").read_bytes()
        check_inblob_write_race(self.path)
        return quote

    def close(self) -> None:
        """Remove the report directory; failures are logged, not raised."""
        if self._closed:
            return
        self._closed = True
        try:
            self.path.rmdir()
        except OSError as err:
            log.error("Failed to remove TSM Report directory: %s", err)

    def __enter__(self) -> TsmReportPath:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def __del__(self) -> None:
        if not getattr(self, "_closed", True):
            self.close()