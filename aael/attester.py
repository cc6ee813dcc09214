"""The attester interface and the TEE kinds it is chosen by."""

from __future__ import annotations

import abc
from enum import Enum


class AttesterError(Exception):
    """Raised when an attester cannot carry out a request."""


class Tee(Enum):
    """Kinds of trusted execution environment."""

    AZ_SNP_VTPM = "azsnpvtpm"
    AZ_TDX_VTPM = "aztdxvtpm"
    SEV = "sev"
    SGX = "sgx"
    SNP = "snp"
    TDX = "tdx"
    CCA = "cca"
    CSV = "csv"
    SE = "se"
    SAMPLE = "sample"


class InitDataResult(Enum):
    """Outcome of binding init data to the TEE evidence."""

    OK = "ok"
    UNSUPPORTED = "unsupported"


class Attester(abc.ABC):
    """Source of hardware evidence for one kind of TEE."""

    @abc.abstractmethod
    async def get_evidence(self, report_data: bytes) -> str:
        """Return evidence whose user input is ``report_data``."""

    async def extend_runtime_measurement(
        self, event_digest: bytes, register_index: int
    ) -> None:
        """Extend a runtime measurement register with ``event_digest``."""
        raise AttesterError("Unimplemented")

    async def bind_init_data(self, init_data_digest: bytes) -> InitDataResult:
        """Check ``init_data_digest`` against the TEE's init data."""
        return InitDataResult.UNSUPPORTED

    async def get_runtime_measurement(self, pcr_index: int) -> bytes:
        """Return the runtime measurement register mapped to ``pcr_index``."""
        raise AttesterError("Unimplemented")