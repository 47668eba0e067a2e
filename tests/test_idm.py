import pytest

from ertdec.bits import BitRow
from ertdec.char.channel import flip_bit
from ertdec.crc import crc16, residue_ok
from ertdec.decoder import IdmDecoder
from ertdec.framepack import pack_idm_frame, pack_intervals
from ertdec.types import DecodeStatus

INTERVALS = [(i * 613 + 17) % (1 << 14) for i in range(27)]


def _frame(**overrides) -> bytes:
    kw = dict(
        endpoint_id=0x01F2E3D4,
        consumption=0x0A0B0C,
        generation=0x010203,
        net=0x11223344,
        version=4,
        idm_type=0x8,
        consumption_interval=0x33,
        programming_state=0x5A,
        intervals=INTERVALS,
        transmit_time_offset=0x0123,
    )
    kw.update(overrides)
    return pack_idm_frame(**kw)


def test_valid_frame_decodes_all_fields():
    frame = _frame()
    assert frame[:7] == bytes.fromhex("555516A31C5CC6")
    out = IdmDecoder().decode(BitRow.from_bytes(frame))
    assert out.status is DecodeStatus.SUCCESS
    rec = out.record
    assert rec["model"] == "IDM"
    assert rec["id"] == 0x01F2E3D4
    assert rec["version"] == 4
    assert rec["idm_type"] == 0x8
    assert rec["consumption_interval"] == 0x33
    assert rec["programming_state"] == 0x5A
    assert rec["consumption"] == 0x0A0B0C
    assert rec["generation"] == 0x010203
    assert rec["net"] == 0x11223344
    assert rec["sn_crc"] == int.from_bytes(frame[88:90], "big")
    assert rec["packet_crc"] == int.from_bytes(frame[90:92], "big")
    assert rec["codes"] == frame.hex()
    assert rec["mic"] == "CRC"


def test_record_key_order():
    rec = IdmDecoder().decode(BitRow.from_bytes(_frame())).record
    assert list(rec.keys()) == [
        "model",
        "id",
        "version",
        "idm_type",
        "consumption_interval",
        "programming_state",
        "generation",
        "consumption",
        "net",
        "sn_crc",
        "packet_crc",
        "codes",
        "mic",
    ]


def test_intervals_and_transmit_offset_in_fields():
    out = IdmDecoder().decode(BitRow.from_bytes(_frame()))
    assert out.fields["intervals"] == tuple(INTERVALS)
    assert out.fields["transmit_time_offset"] == 0x0123
    assert "intervals" not in out.record


def test_generation_and_consumption_not_swapped():
    frame = _frame(consumption=0x000001, generation=0xFFFFFE)
    rec = IdmDecoder().decode(BitRow.from_bytes(frame)).record
    assert frame[25:28] == b"\x00\x00\x01"
    assert frame[28:31] == b"\xff\xff\xfe"
    assert rec["consumption"] == 1
    assert rec["generation"] == 0xFFFFFE


def test_endpoint_type_high_nibble_masked():
    frame = _frame(idm_type=0x3, type_high_nibble=0xA)
    assert frame[8] == 0xA3
    rec = IdmDecoder().decode(BitRow.from_bytes(frame)).record
    assert rec["idm_type"] == 0x3


def test_serial_number_crc_matches_residue_form():
    frame = _frame()
    assert residue_ok(frame[9:13] + frame[88:90])
    assert residue_ok(frame[4:92])
    assert crc16(frame[9:13]) ^ 0xFFFF == int.from_bytes(frame[88:90], "big")


def test_both_crcs_reported():
    out = IdmDecoder().decode(BitRow.from_bytes(_frame()))
    names = [r.name for r in out.crc_results]
    assert names == ["packet_crc", "sn_crc"]
    assert all(r.ok for r in out.crc_results)


def test_bad_serial_number_crc_rejected_even_with_good_packet_crc():
    frame = bytearray(_frame())
    frame[88] ^= 0x01
    # re-seal the packet CRC so only the serial-number check fails
    c = crc16(bytes(frame[4:90])) ^ 0xFFFF
    frame[90:92] = c.to_bytes(2, "big")
    out = IdmDecoder().decode(BitRow.from_bytes(bytes(frame)))
    assert out.status is DecodeStatus.INTEGRITY_FAILURE
    bad = [r.name for r in out.crc_results if not r.ok]
    assert bad == ["sn_crc"]


def test_bad_packet_crc_rejected():
    frame = flip_bit(_frame(), 91 * 8 + 5)
    out = IdmDecoder().decode(BitRow.from_bytes(frame))
    assert out.status is DecodeStatus.INTEGRITY_FAILURE
    assert out.record is None


def test_payload_corruption_rejected():
    frame = flip_bit(_frame(), 50 * 8)
    out = IdmDecoder().decode(BitRow.from_bytes(frame))
    assert out.status is DecodeStatus.INTEGRITY_FAILURE


@pytest.mark.parametrize("index", range(7))
def test_preamble_mismatch(index):
    frame = bytearray(_frame())
    frame[index] ^= 0xFF
    out = IdmDecoder().decode(BitRow.from_bytes(bytes(frame)))
    assert out.status is DecodeStatus.PREAMBLE_MISMATCH


def test_length_mismatch():
    frame = _frame()
    assert IdmDecoder().decode(BitRow.from_bytes(frame[:91])).status is DecodeStatus.LENGTH_MISMATCH
    assert IdmDecoder().decode(BitRow.from_bytes(frame[:16])).status is DecodeStatus.LENGTH_MISMATCH


def test_pack_intervals_layout():
    region = pack_intervals([0x3FFF] + [0] * 26)
    assert len(region) == 48
    assert region[0] == 0xFF
    assert region[1] == 0xFC
    assert region[2:] == bytes(46)


def test_pack_intervals_rejects_bad_input():
    with pytest.raises(ValueError):
        pack_intervals([0] * 26)
    with pytest.raises(ValueError):
        pack_intervals([1 << 14] + [0] * 26)
