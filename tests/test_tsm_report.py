import logging
from unittest import mock

import pytest

from aael.tsm_report import (
    TsmReportData,
    TsmReportError,
    TsmReportPath,
    TsmReportProvider,
    check_inblob_write_race,
    check_tsm_report_provider,
)


@pytest.fixture
def report_root(tmp_path):
    root = tmp_path / "report"
    root.mkdir()
    return root


@pytest.fixture
def request_dir(report_root):
    req = report_root / "req"
    req.mkdir()
    (req / "provider").write_text("tdx_guest\n")
    return req


def _open(report_root, request_dir, wanted=TsmReportProvider.TDX):
    with mock.patch("tempfile.mkdtemp", return_value=str(request_dir)):
        return TsmReportPath(wanted, report_root)


def test_missing_root_raises(tmp_path):
    with pytest.raises(TsmReportError, match="Failed to access TSM Report path"):
        TsmReportPath(TsmReportProvider.TDX, tmp_path / "absent")


def test_provider_matches(request_dir):
    check_tsm_report_provider(request_dir, TsmReportProvider.TDX)
    assert (request_dir / "provider").read_text() == "tdx_guest\n"


def test_provider_without_newline_is_unknown(tmp_path):
    (tmp_path / "provider").write_text("tdx_guest")
    with pytest.raises(TsmReportError, match="unknown provider"):
        check_tsm_report_provider(tmp_path, TsmReportProvider.TDX)


def test_other_provider_is_missing_provider(tmp_path):
    (tmp_path / "provider").write_text("sev_guest\n")
    with pytest.raises(TsmReportError, match=r"missing provider Tdx \(provider=Sev\)"):
        check_tsm_report_provider(tmp_path, TsmReportProvider.TDX)


def test_provider_file_absent(tmp_path):
    with pytest.raises(TsmReportError, match="attribute: provider"):
        check_tsm_report_provider(tmp_path, TsmReportProvider.CCA)


@pytest.mark.parametrize("text", ["1\n", "0", "1", "+1\n"])
def test_generation_accepted(tmp_path, text):
    (tmp_path / "generation").write_text(text)
    assert check_inblob_write_race(tmp_path) is None


def test_generation_conflict(tmp_path):
    (tmp_path / "generation").write_text("2\n")
    with pytest.raises(TsmReportError, match=r"generation=2, expected 1"):
        check_inblob_write_race(tmp_path)


@pytest.mark.parametrize("text", ["abc\n", "", " 1", "-1", "99999999999"])
def test_generation_unparsable(tmp_path, text):
    (tmp_path / "generation").write_text(text)
    with pytest.raises(TsmReportError, match="attribute 'generation'"):
        check_inblob_write_race(tmp_path)


def test_generation_absent(tmp_path):
    with pytest.raises(TsmReportError, match="attribute: generation"):
        check_inblob_write_race(tmp_path)


def test_wrong_provider_removes_request_dir(report_root):
    with pytest.raises(TsmReportError, match="attribute: provider"):
        TsmReportPath(TsmReportProvider.TDX, report_root)
    assert list(report_root.iterdir()) == []


def test_attestation_report_reads_quote(report_root, request_dir):
    (request_dir / "outblob").write_bytes(b"quote-bytes")
    (request_dir / "generation").write_text("1\n")
    with _open(report_root, request_dir) as report:
        quote = report.attestation_report(
            TsmReportData(TsmReportProvider.TDX, b"\x00" * 64)
        )
    assert quote == b"quote-bytes"
    assert (request_dir / "inblob").read_bytes() == b"\x00" * 64


def test_attestation_report_detects_race(report_root, request_dir):
    (request_dir / "outblob").write_bytes(b"q")
    (request_dir / "generation").write_text("3\n")
    with _open(report_root, request_dir) as report:
        with pytest.raises(TsmReportError, match="inblob write conflict"):
            report.attestation_report(TsmReportData(TsmReportProvider.TDX, b"data"))


def test_sev_writes_privlevel_before_empty_check(report_root, request_dir):
    (request_dir / "provider").write_text("sev_guest\n")
    with _open(report_root, request_dir, TsmReportProvider.SEV) as report:
        with pytest.raises(TsmReportError, match=r"missing inblob \(len=0\)"):
            report.attestation_report(TsmReportData(TsmReportProvider.SEV, b"", 2))
    assert (request_dir / "privlevel").read_bytes() == b"\x02"
    assert not (request_dir / "inblob").exists()


def test_missing_outblob(report_root, request_dir):
    with _open(report_root, request_dir) as report:
        with pytest.raises(TsmReportError, match="attribute: outblob"):
            report.attestation_report(TsmReportData(TsmReportProvider.TDX, b"x"))


def test_close_logs_failure_and_is_idempotent(report_root, request_dir, caplog):
    report = _open(report_root, request_dir)
    with caplog.at_level(logging.ERROR, logger="aael.tsm_report"):
        report.close()
        report.close()
    messages = [r.getMessage() for r in caplog.records]
    assert len(messages) == 1
    assert messages[0].startswith("Failed to remove TSM Report directory")
    assert request_dir.exists()


def test_close_removes_empty_dir(report_root, request_dir):
    report = _open(report_root, request_dir)
    (request_dir / "provider").unlink()
    report.close()
    assert not request_dir.exists()


def test_report_data_validation():
    with pytest.raises(ValueError):
        TsmReportData(TsmReportProvider.SEV, b"x")
    with pytest.raises(ValueError):
        TsmReportData(TsmReportProvider.TDX, b"x", 1)
    with pytest.raises(ValueError):
        TsmReportData(TsmReportProvider.SEV, b"x", 256)
    assert TsmReportData(TsmReportProvider.SEV, b"x", 0).privlevel == 0