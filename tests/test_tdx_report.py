import pytest

from aael.tdx_report import TdReport


def _sample() -> bytearray:
    return bytearray(i % 256 for i in range(1024))


def test_header_fields_come_from_first_bytes():
    data = _sample()
    report = TdReport.from_bytes(bytes(data))
    header = report.report_mac.type_
    assert (header.type_, header.sub_type, header.version, header.reserved) == (
        data[0],
        data[1],
        data[2],
        data[3],
    )


def test_report_mac_layout():
    data = bytes(_sample())
    mac = TdReport.from_bytes(data).report_mac
    assert mac.cpu_svn == data[16:32]
    assert mac.reportdata == data[128:192]
    assert mac.mac == data[224:256]


def test_tcb_info_and_reserved():
    data = bytes(_sample())
    report = TdReport.from_bytes(data)
    assert report.tee_tcb_info == data[256:495]
    assert report.reserved == data[495:512]


def test_tdinfo_fields():
    data = _sample()
    data[520:528] = (5).to_bytes(8, "little")
    report = TdReport.from_bytes(bytes(data))
    assert report.tdinfo.xfam == 5
    assert report.tdinfo.attr == bytes(data[512:520])
    assert report.tdinfo.mrconfigid == bytes(data[576:624])
    assert len(report.tdinfo.rtmr) == 24


@pytest.mark.parametrize("index", [0, 1, 2, 3])
def test_get_rtmr_returns_raw_register_bytes(index):
    data = bytes(_sample())
    report = TdReport.from_bytes(data)
    start = 720 + 48 * index
    assert report.get_rtmr(index) == data[start:start + 48]


def test_get_rtmr_out_of_range():
    report = TdReport.from_bytes(bytes(1024))
    with pytest.raises(IndexError):
        report.get_rtmr(4)


def test_short_report_is_rejected():
    with pytest.raises(ValueError):
        TdReport.from_bytes(bytes(1023))


def test_longer_buffer_uses_prefix():
    data = bytes(_sample())
    assert TdReport.from_bytes(data + b"extra") == TdReport.from_bytes(data)