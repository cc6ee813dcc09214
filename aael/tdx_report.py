"""Parsing of the TDX guest report (TDREPORT_STRUCT)."""

from __future__ import annotations

import struct
from dataclasses import dataclass

TD_REPORT_SIZE = 1024
RTMR_COUNT = 4
_RTMR_WORDS = 6

_REPORT_MAC = struct.Struct("<4s12s16s48s48s64s32s32s")
_TCB_INFO = struct.Struct("<239s17s")
_TD_INFO = struct.Struct("<8sQ6Q48s6Q6Q24Q14Q")
_RTMR = struct.Struct(f"<{_RTMR_WORDS}Q")


@dataclass(frozen=True)
class TdTransportType:
    """Type header of a TD report."""

    type_: int
    sub_type: int
    version: int
    reserved: int


@dataclass(frozen=True)
class ReportMac:
    """MAC-protected header: report data, MAC and TEE hashes."""

    type_: TdTransportType
    reserved1: bytes
    cpu_svn: bytes
    tee_tcb_info_hash: bytes
    tee_td_info_hash: bytes
    reportdata: bytes
    reserved2: bytes
    mac: bytes


@dataclass(frozen=True)
class TdInfo:
    """Measurements and configuration of the TD guest."""

    attr: bytes
    xfam: int
    mrtd: tuple[int, ...]
    mrconfigid: bytes
    mrowner: tuple[int, ...]
    mrownerconfig: tuple[int, ...]
    rtmr: tuple[int, ...]
    reserved: tuple[int, ...]


@dataclass(frozen=True)
class TdReport:
    """Output of TDG.MR.REPORT."""

    report_mac: ReportMac
    tee_tcb_info: bytes
    reserved: bytes
    tdinfo: TdInfo

    @classmethod
    def from_bytes(cls, data: bytes) -> TdReport:
        """Parse a report from the first 1024 bytes of ``data``."""
        data = bytes(data)
        if len(data) < TD_REPORT_SIZE:
            raise ValueError(
                f"TD report needs {TD_REPORT_SIZE} bytes, got {len(data)}"
            )
        header, *mac_fields = _REPORT_MAC.unpack_from(data, 0)
        report_mac = ReportMac(TdTransportType(*header), *mac_fields)
        tee_tcb_info, reserved = _TCB_INFO.unpack_from(data, _REPORT_MAC.size)
        v = _TD_INFO.unpack_from(data, _REPORT_MAC.size + _TCB_INFO.size)
        tdinfo = TdInfo(
            attr=v[0],
            xfam=v[1],
            mrtd=tuple(v[2:8]),
            mrconfigid=v[8],
            mrowner=tuple(v[9:15]),
            mrownerconfig=tuple(v[15:21]),
            rtmr=tuple(v[21:45]),
            reserved=tuple(v[45:59]),
        )
        return cls(report_mac, tee_tcb_info, reserved, tdinfo)

    def get_rtmr(self, rtmr_index: int) -> bytes:
        """Return the 48-byte value of one runtime measurement register."""
        if not 0 <= rtmr_index < RTMR_COUNT:
            raise IndexError(f"RTMR index {rtmr_index} out of range")
        start = rtmr_index * _RTMR_WORDS
        return _RTMR.pack(*self.tdinfo.rtmr[start:start + _RTMR_WORDS])