"""Choosing an attester for the TEE at hand."""

from __future__ import annotations

import logging

from aael import tdx
from aael.attester import Attester, AttesterError, Tee
from aael.sample import SampleAttester

log = logging.getLogger(__name__)


def attester_for(tee: Tee) -> Attester:
    """Return a fresh attester for ``tee``."""
    if tee is Tee.SAMPLE:
        return SampleAttester()
    if tee is Tee.TDX:
        return tdx.TdxAttester()
    raise AttesterError("TEE is not supported!")


def detect_tee_type() -> Tee:
    """Return the TEE this machine runs in, falling back to the sample one."""
    if tdx.detect_platform():
        return Tee.TDX
    log.warning("No TEE platform detected. Sample Attester will be used.")
    return Tee.SAMPLE