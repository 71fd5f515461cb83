"""
Retrieval policy.

Decides, per process-wide mode, whether a stored transaction is returned
exactly as stored or first pushed through a decode/re-encode round-trip.
Divergence introduced by the round-trip is observed and reported, never
corrected and never turned into a failure: a broken round-trip falls back
to the stored bytes.
"""

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Callable, Deque, Dict, List, Optional

from .codec.hexcodec import decode_hex, encode_hex, has_hex_prefix
from .codec.prefix import read_sequence_number
from .codec.transaction_codec import TransactionCodec
from .monitoring.metrics import MetricsRegistry
from .runtime.errors import DecodeError
from .store import StoredTransaction

logger = logging.getLogger(__name__)

# Number of hex characters shown when logging a payload
LOG_PREVIEW_CHARS = 60


class RetrievalMode(Enum):
    """How stored bytes are handed back."""
    PASS_THROUGH = "pass-through"
    RESERIALIZE = "reserialize"

    @classmethod
    def from_flag(cls, reserialize: bool) -> "RetrievalMode":
        return cls.RESERIALIZE if reserialize else cls.PASS_THROUGH


class Outcome(Enum):
    """Result of one retrieval as seen by diagnostics."""
    PASS_THROUGH = "pass-through"
    UNCHANGED = "unchanged"
    DIVERGED = "diverged"
    FAILED = "failed"


@dataclass(frozen=True)
class Observation:
    """
    Diagnostic record of one retrieval.

    Lengths are in bytes. ``text_changed`` is True whenever the returned hex
    text differs from the stored text, which includes case-only differences
    where the bytes are identical.
    """
    outcome: Outcome
    mode: RetrievalMode
    transaction_id: Optional[str] = None
    codec: Optional[str] = None
    original_length: Optional[int] = None
    reserialized_length: Optional[int] = None
    first_difference_offset: Optional[int] = None
    sequence_number_before: Optional[int] = None
    sequence_number_after: Optional[int] = None
    text_changed: bool = False
    error: Optional[str] = None
    decoded: Optional[Dict[str, Any]] = None
    observed_at: float = 0.0

    @property
    def length_changed(self) -> bool:
        return (
            self.reserialized_length is not None
            and self.reserialized_length != self.original_length
        )

    @property
    def content_changed(self) -> bool:
        return self.outcome == Outcome.DIVERGED

    @property
    def sequence_number_changed(self) -> bool:
        return (
            self.outcome == Outcome.DIVERGED
            and self.sequence_number_before != self.sequence_number_after
        )

    @property
    def fell_back(self) -> bool:
        return self.outcome == Outcome.FAILED

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result["outcome"] = self.outcome.value
        result["mode"] = self.mode.value
        result["length_changed"] = self.length_changed
        result["content_changed"] = self.content_changed
        result["sequence_number_changed"] = self.sequence_number_changed
        return result


@dataclass(frozen=True)
class Retrieval:
    """Hex to hand back to the caller plus what was observed producing it."""
    hex: str
    observation: Observation


def first_difference(a: bytes, b: bytes) -> Optional[int]:
    """Index of the first differing byte, or None if the buffers are equal."""
    for index, (x, y) in enumerate(zip(a, b)):
        if x != y:
            return index
    if len(a) != len(b):
        return min(len(a), len(b))
    return None


def _preview(text: str) -> str:
    return text[:LOG_PREVIEW_CHARS] + ("..." if len(text) > LOG_PREVIEW_CHARS else "")


def round_trip(raw_hex: str, codec: TransactionCodec,
               transaction_id: Optional[str] = None,
               clock: Callable[[], float] = time.time) -> Retrieval:
    """
    Round-trip stored hex through ``codec`` and compare the result.

    The re-encoded hex mirrors the stored text's ``0x`` convention. On any
    hex or codec failure the stored hex is returned unchanged.

    Args:
        raw_hex: Hex exactly as stored
        codec: Codec to decode and re-encode with
        transaction_id: Identifier for logs and diagnostics
        clock: Source of the observation timestamp

    Returns:
        Hex to return and the observation describing it
    """
    label = transaction_id or "<inline>"
    base = dict(mode=RetrievalMode.RESERIALIZE, transaction_id=transaction_id,
                codec=codec.name, observed_at=clock())

    try:
        original = decode_hex(raw_hex)
    except DecodeError as e:
        logger.warning(f"Failed to re-serialize {label}: hex decode error: {e}")
        logger.warning("Falling back to original bytes")
        return Retrieval(raw_hex, Observation(Outcome.FAILED, error=str(e), **base))

    base.update(original_length=len(original),
                sequence_number_before=read_sequence_number(original))

    try:
        record = codec.decode(original)
        reserialized = codec.encode(record)
    # plugged-in codecs are not bound to raise CodecError
    except Exception as e:
        logger.warning(f"Failed to re-serialize {label}: {e}")
        logger.warning("Falling back to original bytes")
        return Retrieval(raw_hex, Observation(Outcome.FAILED, error=str(e), **base))

    summary = getattr(record, "summary", None)
    decoded = summary() if callable(summary) else None
    logger.debug(f"Decoded {label}: {decoded}")

    reserialized_hex = encode_hex(reserialized, with_prefix=has_hex_prefix(raw_hex))
    offset = first_difference(original, reserialized)
    observation = Observation(
        Outcome.UNCHANGED if offset is None else Outcome.DIVERGED,
        reserialized_length=len(reserialized),
        first_difference_offset=offset,
        sequence_number_after=read_sequence_number(reserialized),
        text_changed=reserialized_hex != raw_hex,
        decoded=decoded,
        **base,
    )

    if observation.length_changed:
        logger.warning(f"BCS length changed after re-serialization of {label}!")
        logger.warning(
            f"  Original: {observation.original_length} bytes,"
            f" Reserialized: {observation.reserialized_length} bytes"
        )
    if observation.content_changed:
        logger.warning(f"BCS content changed after re-serialization of {label} (first difference at byte {offset})!")
        logger.warning(f"  Original:     {_preview(raw_hex)}")
        logger.warning(f"  Reserialized: {_preview(reserialized_hex)}")
        if observation.sequence_number_changed:
            logger.warning(
                f"  Sequence number changed: {observation.sequence_number_before}"
                f" -> {observation.sequence_number_after}"
            )
    else:
        logger.info(f"BCS unchanged after re-serialization of {label}")

    return Retrieval(reserialized_hex, observation)


class DiagnosticsRecorder:
    """Bounded, thread-safe history of retrieval observations."""

    def __init__(self, capacity: int = 100):
        if capacity < 1:
            raise ValueError("Diagnostics capacity must be at least 1")
        self.capacity = capacity
        self._lock = threading.Lock()
        self._observations: Deque[Observation] = deque(maxlen=capacity)

    def record(self, observation: Observation) -> None:
        with self._lock:
            self._observations.append(observation)

    def recent(self, limit: Optional[int] = None) -> List[Observation]:
        """Observations oldest first; ``limit`` keeps only the newest entries."""
        with self._lock:
            items = list(self._observations)
        if limit is not None:
            items = items[-limit:] if limit > 0 else []
        return items

    def latest(self) -> Optional[Observation]:
        with self._lock:
            return self._observations[-1] if self._observations else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._observations)


class RetrievalPolicy:
    """
    Applies the configured retrieval mode to stored records.

    The mode is fixed at construction. Retrieval never mutates the record
    and never raises for hex or codec problems.
    """

    def __init__(self, mode: RetrievalMode, codec: TransactionCodec,
                 recorder: Optional[DiagnosticsRecorder] = None,
                 metrics: Optional[MetricsRegistry] = None,
                 clock: Callable[[], float] = time.time):
        """
        Initialize the policy.

        Args:
            mode: Pass-through or reserialize
            codec: Codec used in reserialize mode
            recorder: Where observations go (a private one if omitted)
            metrics: Registry receiving the ``retrievals`` counter
            clock: Source of observation timestamps
        """
        self._mode = mode
        self.codec = codec
        self.recorder = recorder if recorder is not None else DiagnosticsRecorder()
        self._clock = clock
        self._retrievals = (metrics if metrics is not None else MetricsRegistry()).counter(
            "retrievals", "Transaction retrievals by mode and outcome"
        )

    @property
    def mode(self) -> RetrievalMode:
        return self._mode

    def retrieve(self, record: StoredTransaction) -> Retrieval:
        """
        Produce the hex to return for ``record``.

        Args:
            record: Stored transaction snapshot

        Returns:
            Hex for the caller and the observation recorded for it
        """
        if self._mode == RetrievalMode.PASS_THROUGH:
            retrieval = Retrieval(
                record.raw_bytes_hex,
                Observation(
                    Outcome.PASS_THROUGH,
                    mode=self._mode,
                    transaction_id=record.transaction_id,
                    sequence_number_before=record.sequence_number,
                    observed_at=self._clock(),
                ),
            )
        else:
            retrieval = round_trip(record.raw_bytes_hex, self.codec,
                                   transaction_id=record.transaction_id, clock=self._clock)

        self.recorder.record(retrieval.observation)
        self._retrievals.increment(labels={
            "mode": self._mode.value,
            "outcome": retrieval.observation.outcome.value,
        })
        return retrieval
