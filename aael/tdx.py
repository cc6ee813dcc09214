"""Evidence collection inside an Intel TDX guest."""

from __future__ import annotations

import base64
import json
import logging
from pathlib import Path

from aael.attester import Attester, AttesterError
from aael.tsm_report import (
    TSM_REPORT_PATH,
    TsmReportData,
    TsmReportError,
    TsmReportPath,
    TsmReportProvider,
)
from aael.utils import pad

TDX_REPORT_DATA_SIZE = 64
CCEL_PATH = "/sys/firmware/acpi/tables/data/CCEL"
DEFAULT_EVENTLOG_PATH = "/run/attestation-agent/eventlog"
TDX_GUEST_DEVICE = "/dev/tdx_guest"

log = logging.getLogger(__name__)


def detect_platform() -> bool:
    """Whether TSM reports for TDX or the TDX guest device are present."""
    try:
        TsmReportPath(TsmReportProvider.TDX, TSM_REPORT_PATH).close()
        return True
    except TsmReportError:
        return Path(TDX_GUEST_DEVICE).exists()


def runtime_measurement_extend_available() -> bool:
    """Whether RTMRs can be extended; not where TSM reports are in use."""
    return not Path(TSM_REPORT_PATH).exists()


def pcr_to_rtmr(register_index: int) -> int:
    """Map a PCR index to the TDX RTMR that stands for it."""
    if register_index in (1, 7):
        return 0
    if 2 <= register_index <= 6:
        return 1
    if 8 <= register_index <= 15:
        return 2
    return 3


class TdxAttester(Attester):
    """Attester producing a TD quote plus the available event logs."""

    def __init__(
        self,
        tsm_root: str | Path = TSM_REPORT_PATH,
        ccel_path: str | Path = CCEL_PATH,
        eventlog_path: str | Path = DEFAULT_EVENTLOG_PATH,
    ) -> None:
        self.tsm_root = Path(tsm_root)
        self.ccel_path = Path(ccel_path)
        self.eventlog_path = Path(eventlog_path)

    def _get_quote(self, report_data: bytes) -> bytes:
        try:
            tsm = TsmReportPath(TsmReportProvider.TDX, self.tsm_root)
        except TsmReportError as notsm:
            raise AttesterError(
                "TDX Attester: quote generation using ioctl() fallback failed "
                f"after a TSM report error ({notsm}): "
                "the ioctl quote interface is not available"
            ) from notsm
        with tsm:
            try:
                return tsm.attestation_report(
                    TsmReportData(TsmReportProvider.TDX, report_data)
                )
            except TsmReportError as err:
                raise AttesterError(
                    "TDX Attester: quote generation using TSM reports failed: "
                    f"{err}"
                ) from err

    async def get_evidence(self, report_data: bytes) -> str:
        report_data = bytes(report_data)
        if len(report_data) > TDX_REPORT_DATA_SIZE:
            raise AttesterError(
                "TDX Attester: Report data must be no more than "
                f"{TDX_REPORT_DATA_SIZE} bytes"
            )
        quote = self._get_quote(pad(report_data, TDX_REPORT_DATA_SIZE))

        try:
            cc_eventlog = base64.b64encode(self.ccel_path.read_bytes()).decode("ascii")
        except OSError as err:
            log.warning("Read CC Eventlog failed: %r", err)
            cc_eventlog = None

        try:
            aa_eventlog = self.eventlog_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as err:
            log.warning("Read AA Eventlog failed: %r", err)
            aa_eventlog = None

        evidence = {
            "cc_eventlog": cc_eventlog,
            "quote": base64.b64encode(quote).decode("ascii"),
            "aa_eventlog": aa_eventlog,
        }
        return json.dumps(evidence, separators=(",", ":"), ensure_ascii=False)