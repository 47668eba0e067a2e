import pytest

from ertdec.bits import BitRow
from ertdec.char.channel import flip_bit
from ertdec.config import DecoderConfig
from ertdec.crc import crc16
from ertdec.decoder import ScmPlusDecoder
from ertdec.framepack import pack_scmplus_frame
from ertdec.types import DecodeStatus


def _scenario_frame() -> bytes:
    body = bytes.fromhex("16A31E020000012C000004D20000")
    c = crc16(body[2:14], 0x1021, 0xFFFF) ^ 0xFFFF
    return body + c.to_bytes(2, "big")


def test_concrete_frame_decodes():
    frame = _scenario_frame()
    out = ScmPlusDecoder().decode(BitRow.from_bytes(frame))
    assert out.status is DecodeStatus.SUCCESS
    rec = out.record
    assert rec["id"] == 0x0000012C
    assert rec["consumption_data"] == 0x000004D2
    assert rec["tamper"] == 0
    assert rec["protocol"] == 0x1E
    assert rec["scm_type"] == 0x02
    assert rec["calc_crc"] == rec["crc"] == int.from_bytes(frame[14:16], "big")


def test_record_order_and_tags():
    frame = _scenario_frame()
    rec = ScmPlusDecoder().decode(BitRow.from_bytes(frame)).record
    assert list(rec.keys()) == [
        "model",
        "protocol",
        "scm_type",
        "id",
        "consumption_data",
        "tamper",
        "crc",
        "calc_crc",
        "codes",
        "mic",
    ]
    assert rec["model"] == "SCMplus"
    assert rec["codes"] == frame.hex()
    assert rec["codes"] == rec["codes"].lower()
    assert len(rec["codes"]) == 32
    assert rec["mic"] == "CRC"


def test_record_is_immutable():
    rec = ScmPlusDecoder().decode(BitRow.from_bytes(_scenario_frame())).record
    with pytest.raises(TypeError):
        rec["id"] = 1


def test_packed_frame_roundtrip_fields():
    frame = pack_scmplus_frame(endpoint_id=0xDEADBEEF, consumption=123456789, tamper=0x0102, scm_type=0x07)
    out = ScmPlusDecoder().decode(BitRow.from_bytes(frame))
    assert out.ok
    assert out.record["id"] == 0xDEADBEEF
    assert out.record["consumption_data"] == 123456789
    assert out.record["tamper"] == 0x0102
    assert out.record["scm_type"] == 0x07
    assert out.record["calc_crc"] == out.record["crc"]


def test_wrong_length_is_length_mismatch():
    frame = _scenario_frame()
    out = ScmPlusDecoder().decode(BitRow.from_bytes(frame[:15]))
    assert out.status is DecodeStatus.LENGTH_MISMATCH
    assert out.record is None
    out = ScmPlusDecoder().decode(BitRow.from_bytes(frame + b"\x00"))
    assert out.status is DecodeStatus.LENGTH_MISMATCH
    # one bit short of a full frame
    out = ScmPlusDecoder().decode(BitRow.from_bytes(frame, bit_length=127))
    assert out.status is DecodeStatus.LENGTH_MISMATCH


def test_fifteen_byte_buffer_is_length_mismatch_regardless_of_content():
    for fill in (0x00, 0xFF, 0x16):
        out = ScmPlusDecoder().decode(BitRow.from_bytes(bytes([fill]) * 15))
        assert out.status is DecodeStatus.LENGTH_MISMATCH


def test_bad_preamble():
    frame = bytearray(_scenario_frame())
    frame[1] = 0xA2
    out = ScmPlusDecoder().decode(BitRow.from_bytes(bytes(frame)))
    assert out.status is DecodeStatus.PREAMBLE_MISMATCH
    assert out.record is None


def test_protocol_byte_is_not_part_of_preamble():
    frame = pack_scmplus_frame(endpoint_id=1, consumption=2, protocol=0x1F)
    out = ScmPlusDecoder().decode(BitRow.from_bytes(frame))
    assert out.ok
    assert out.record["protocol"] == 0x1F


@pytest.mark.parametrize("bit", range(14 * 8, 16 * 8))
def test_corrupted_checksum_field_is_integrity_failure(bit):
    frame = flip_bit(_scenario_frame(), bit)
    out = ScmPlusDecoder().decode(BitRow.from_bytes(frame))
    assert out.status is DecodeStatus.INTEGRITY_FAILURE
    assert out.record is None
    (res,) = out.crc_results
    assert res.received != res.calculated


def test_corrupted_payload_is_integrity_failure():
    frame = flip_bit(_scenario_frame(), 9 * 8 + 3)
    out = ScmPlusDecoder().decode(BitRow.from_bytes(frame))
    assert out.status is DecodeStatus.INTEGRITY_FAILURE


def test_no_crc_mode_reports_without_mic():
    frame = flip_bit(_scenario_frame(), 15 * 8)
    out = ScmPlusDecoder().decode(BitRow.from_bytes(frame), DecoderConfig(verify_crc=False))
    assert out.ok
    assert "mic" not in out.record
    assert out.record["crc"] != out.record["calc_crc"]


def test_integrity_failure_logged_with_both_values(caplog):
    frame = flip_bit(_scenario_frame(), 15 * 8 + 7)
    with caplog.at_level("DEBUG", logger="ertdec.decoder"):
        ScmPlusDecoder().decode(BitRow.from_bytes(frame))
    received = int.from_bytes(frame[14:16], "big")
    assert f"0x{received:04X}" in caplog.text
    assert "SCMplus" in caplog.text
