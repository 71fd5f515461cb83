"""
BCS Codec Module

Hex conversion, the schema-free sequence number reader and the adapter over
the ``aptos-sdk`` multi-agent transaction codec.

Key components:
- hexcodec.py: hex text <-> bytes, ``0x`` prefix aware
- prefix.py: sequence number at a fixed offset, no schema needed
- transaction_codec.py: codec interface and the aptos-sdk backed implementation
"""

from .hexcodec import decode_hex, encode_hex, has_hex_prefix
from .prefix import MIN_PREFIX_LENGTH, read_sequence_number, sequence_number_from_hex
from .transaction_codec import BcsMultiAgentCodec, MultiAgentRecord, TransactionCodec, reserialize

__all__ = [
    "decode_hex",
    "encode_hex",
    "has_hex_prefix",
    "MIN_PREFIX_LENGTH",
    "read_sequence_number",
    "sequence_number_from_hex",
    "BcsMultiAgentCodec",
    "MultiAgentRecord",
    "TransactionCodec",
    "reserialize",
]
