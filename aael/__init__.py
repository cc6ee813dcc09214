"""TEE attesters, TSM report quotes and the attestation agent event log."""

__version__ = "0.1.0"