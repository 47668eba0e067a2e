import sys

from ertdec.bits import BitRow
from ertdec.config import DecoderConfig
from ertdec.decoder import DECODERS
from ertdec.framepack import pack_scmplus_frame

# default: SCM+ endpoint 0x12C, consumption 0x4D2
code = sys.argv[1] if len(sys.argv) > 1 else pack_scmplus_frame(0x12C, 0x4D2, scm_type=2).hex()
row = BitRow.from_code(code)
print("bits", row.bit_length, "bytes", row.to_bytes().hex())
cfg = DecoderConfig(verify_crc=False)
for d in DECODERS:
    out = d.decode(row, cfg)
    print(d.model, out.status.value)
    if out.fields is None:
        continue
    for r in out.crc_results:
        print("  crc", r.name, hex(r.received), hex(r.calculated), r.ok)
    for k, v in out.fields.items():
        print("  ", k, v)
