"""An attester that produces fake evidence where no TEE is present."""

from __future__ import annotations

import base64
import json

from aael.attester import Attester


def detect_platform() -> bool:
    """The sample platform is always available."""
    return True


class SampleAttester(Attester):
    """Attester that returns a fixed, unsigned quote."""

    async def get_evidence(self, report_data: bytes) -> str:
        evidence = {
            "svn": "1",
            "report_data": base64.b64encode(bytes(report_data)).decode("ascii"),
        }
        return json.dumps(evidence, separators=(",", ":"))