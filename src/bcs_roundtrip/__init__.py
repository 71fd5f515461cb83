"""
BCS Round-Trip Harness

Stores serialized multi-agent transactions and hands them back either
exactly as stored or after a decode/re-encode round-trip through a BCS
codec, reporting any byte-level divergence the round-trip introduced.
"""

__version__ = "0.1.0"

# Error model
from .runtime.errors import (
    ErrorCode,
    HarnessError,
    DecodeError,
    CodecError,
    TransactionNotFoundError,
    ClientError,
)

# Codec
from .codec import (
    BcsMultiAgentCodec,
    MultiAgentRecord,
    TransactionCodec,
    decode_hex,
    encode_hex,
    read_sequence_number,
)

# Store and retrieval
from .store import StoredTransaction, TransactionStore
from .retrieval import (
    DiagnosticsRecorder,
    Observation,
    Outcome,
    RetrievalMode,
    RetrievalPolicy,
    round_trip,
)
from .config import HarnessConfig

__all__ = [
    "__version__",
    "ErrorCode",
    "HarnessError",
    "DecodeError",
    "CodecError",
    "TransactionNotFoundError",
    "ClientError",
    "BcsMultiAgentCodec",
    "MultiAgentRecord",
    "TransactionCodec",
    "decode_hex",
    "encode_hex",
    "read_sequence_number",
    "StoredTransaction",
    "TransactionStore",
    "DiagnosticsRecorder",
    "Observation",
    "Outcome",
    "RetrievalMode",
    "RetrievalPolicy",
    "round_trip",
    "HarnessConfig",
]
