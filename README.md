# aael

Attesters for trusted execution environments. The package also provides the
attestation agent event log (AAEL), which records events and extends a
runtime measurement register for each one. It has no dependencies outside the
standard library.

## Modules

- `aael.attester`
  - `Attester` is the asynchronous interface with four methods:
    `get_evidence`, `extend_runtime_measurement`, `bind_init_data` and
    `get_runtime_measurement`.
  - By default, `extend_runtime_measurement` and `get_runtime_measurement`
    raise `AttesterError("Unimplemented")`.
  - By default, `bind_init_data` returns `InitDataResult.UNSUPPORTED`.
  - The module also defines the `Tee` enum.
- `aael.sample`
  - `SampleAttester` returns JSON evidence of the form
    `{"svn":"1","report_data":"<base64>"}`.
  - `detect_platform()` always returns `True`.
- `aael.tdx`
  - `TdxAttester(tsm_root, ccel_path, eventlog_path)` accepts up to 64 bytes
    of report data and zero-pads it to 64 bytes.
  - It obtains a quote through the configfs TSM report interface.
  - Its evidence is JSON with three fields:
    - `quote`: base64.
    - `cc_eventlog`: base64 of the CCEL table, or `null` if it cannot be read.
    - `aa_eventlog`: the event log text, or `null`.
  - Helpers: `detect_platform()`, `runtime_measurement_extend_available()` and
    `pcr_to_rtmr(register_index)`.
- `aael.tsm_report`
  - `TsmReportPath(wanted, root)` creates a one-shot request directory under
    the TSM report root. It checks the provider and removes the directory on
    `close()` or at the end of a `with` block.
  - `attestation_report(TsmReportData(...))` writes `inblob`, plus
    `privlevel` for SEV. It then reads `outblob` and checks `generation` for
    a write race.
  - Every failure raises `TsmReportError`.
- `aael.tdx_report`
  - `TdReport.from_bytes(data)` parses the 1024-byte TD report.
  - `get_rtmr(index)` returns the 48-byte value of RTMR 0 to 3.
- `aael.rtmr`
  - `TdxRtmrEvent` builds an RTMR extend record with `with_extend_data`,
    `with_rtmr_index` and `to_bytes`.
- `aael.event`
  - `HashAlgorithm` supports sha256, sha384 and sha512.
  - `AAEventlog.parse(text)` reads an event log and raises `ValueError` on
    malformed input.
  - `integrity_check(rtmr)` replays the log and compares the result with a
    register value.
- `aael.eventlog`
  - `EventLog.create(rtmr_extender, alg, pcr, path)` handles an existing log
    file in one of three ways:
    - A missing file is created and gets an `INIT` entry.
    - An empty file gets an `INIT` entry.
    - A non-empty file is checked against the register. If the check fails,
      the pending extension is finished.
  - `extend_entry(entry, pcr)` writes an `EventEntry` or `InitEntry` line and
    then extends the register.
  - Failures raise `EventLogError`.
- `aael.selection`
  - `attester_for(tee)` returns a `SampleAttester` or a `TdxAttester`. It
    raises `AttesterError` for any other `Tee`.
  - `detect_tee_type()` returns `Tee.TDX` when TDX is detected and
    `Tee.SAMPLE` otherwise.
- `aael.utils`
  - `pad(data, size)` truncates or zero-fills bytes to `size`.

## Install

```
pip install .
pip install ".[test]"   # with test dependencies
```

## Usage

```python
import asyncio
from aael.sample import SampleAttester

print(asyncio.run(SampleAttester().get_evidence(bytes(48))))
```

```python
from aael.selection import attester_for, detect_tee_type

attester = attester_for(detect_tee_type())
```

```python
from aael.event import AAEventlog

with open("/run/attestation-agent/eventlog") as f:
    eventlog = AAEventlog.parse(f.read())
print(eventlog.integrity_check(register_value))  # register_value: bytes
```

## Command line

```
aael [--tsm-root PATH] [--ccel-path PATH] [--eventlog-path PATH]
```

The command asks `TdxAttester` for evidence with 48 zero bytes of report data.

- On success it prints `evidence: <json>`.
- On failure it prints `get evidence error: <message>` to standard error.
- It exits with status 0 in both cases.

## What it does not do

- `TdxAttester` produces quotes only through the TSM report interface. If
  that interface is absent, `get_evidence` raises `AttesterError`; there is no
  fallback to the TDX guest device.
- `TdxAttester` does not read TD reports, extend RTMRs or bind init data:
  - `get_runtime_measurement` and `extend_runtime_measurement` raise
    `AttesterError("Unimplemented")`.
  - `bind_init_data` returns `InitDataResult.UNSUPPORTED`.
- No attester in the package can serve as the register extender for
  `EventLog`. You must supply an `Attester` that implements
  `get_runtime_measurement` and `extend_runtime_measurement`.

## Tests

```
pytest
```