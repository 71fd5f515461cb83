"""
Harness HTTP client.

Talks to a running harness server the way the multi-agent repro workflow
does: store a serialized transaction, fetch it back, attach the secondary
signer's signature, fetch again. ``check_roundtrip`` performs the
store/fetch pair and reports whether the bytes came back altered.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Type, TypeVar
from urllib.parse import quote

import requests
from pydantic import BaseModel, ValidationError

from .codec.hexcodec import decode_hex
from .codec.prefix import read_sequence_number
from .retrieval import first_difference
from .runtime.errors import ClientError, DecodeError, ErrorCode
from .schemas import (
    DiagnosticsResponse,
    GetTransactionResponse,
    StoreSignatureResponse,
    StoreTransactionResponse,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# 404 carries a well-formed "not found" body, everything else non-2xx is an error
_ACCEPTED_STATUS = (200, 404)


@dataclass
class ClientConfig:
    """Configuration for the harness client."""

    base_url: str = "http://localhost:3001"
    timeout: float = 10.0


@dataclass(frozen=True)
class RoundTripCheck:
    """What came back from the server compared with what was sent."""
    transaction_id: str
    sent_hex: str
    returned_hex: Optional[str]
    stored_sequence_number: Optional[int]
    returned_sequence_number: Optional[int]
    sent_length: Optional[int]
    returned_length: Optional[int]
    first_difference_offset: Optional[int]

    @property
    def text_changed(self) -> bool:
        return self.returned_hex != self.sent_hex

    @property
    def bytes_changed(self) -> bool:
        if self.sent_length is None or self.returned_length is None:
            return self.text_changed
        return self.first_difference_offset is not None

    @property
    def length_changed(self) -> bool:
        return self.sent_length != self.returned_length

    @property
    def sequence_number_changed(self) -> bool:
        return self.stored_sequence_number != self.returned_sequence_number


class HarnessClient:
    """
    Client for the harness HTTP interface.

    Args:
        config: Base URL string or ClientConfig
        session: requests session to use (a new one if omitted)
    """

    def __init__(self, config: ClientConfig | str = None, session: Optional[requests.Session] = None):
        if isinstance(config, str):
            config = ClientConfig(base_url=config)
        self.config = config or ClientConfig()
        self._base_url = self.config.base_url.rstrip("/")
        self._session = session if session is not None else requests.Session()

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def _request(self, method: str, path: str, model: Type[ModelT],
                 payload: Optional[Dict[str, Any]] = None) -> ModelT:
        try:
            if method == "GET":
                response = self._session.get(self._url(path), timeout=self.config.timeout)
            else:
                response = self._session.post(
                    self._url(path),
                    json=payload,
                    headers={"Content-Type": "application/json"},
                    timeout=self.config.timeout,
                )
        except requests.RequestException as e:
            raise ClientError(f"{method} {path} failed: {e}", cause=e) from e

        if response.status_code not in _ACCEPTED_STATUS:
            raise ClientError(
                f"{method} {path} returned HTTP {response.status_code}",
                code=ErrorCode.INVALID_RESPONSE,
                details={"status_code": response.status_code},
            )

        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ClientError(
                f"{method} {path} returned an unexpected body",
                code=ErrorCode.INVALID_RESPONSE,
                cause=e,
            ) from e

    def health(self) -> bool:
        """True if the server answers its health check."""
        try:
            response = self._session.get(self._url("/health"), timeout=self.config.timeout)
        except requests.RequestException as e:
            logger.debug(f"Health check failed: {e}")
            return False
        return response.status_code == 200

    def store_transaction(self, transaction_id: str, bcs_hex: str) -> StoreTransactionResponse:
        return self._request("POST", "/transaction", StoreTransactionResponse,
                             {"transaction_id": transaction_id, "bcs_hex": bcs_hex})

    def store_signature(self, transaction_id: str, signature_hex: str) -> StoreSignatureResponse:
        return self._request("POST", "/signature", StoreSignatureResponse,
                             {"transaction_id": transaction_id, "signature_hex": signature_hex})

    def get_transaction(self, transaction_id: str) -> GetTransactionResponse:
        return self._request("GET", f"/transaction/{quote(transaction_id, safe='')}",
                             GetTransactionResponse)

    def diagnostics(self) -> DiagnosticsResponse:
        return self._request("GET", "/diagnostics", DiagnosticsResponse)

    def check_roundtrip(self, transaction_id: str, bcs_hex: str) -> RoundTripCheck:
        """
        Store ``bcs_hex`` then fetch it back and compare.

        Raises:
            ClientError: If the store is rejected or the fetch finds nothing
        """
        stored = self.store_transaction(transaction_id, bcs_hex)
        if not stored.success:
            raise ClientError(f"Store failed: {stored.message}", code=ErrorCode.INVALID_RESPONSE)

        fetched = self.get_transaction(transaction_id)
        if not fetched.success or fetched.bcs_hex is None:
            raise ClientError(f"Fetch failed: {fetched.message}", code=ErrorCode.INVALID_RESPONSE)

        sent = _try_decode(bcs_hex)
        returned = _try_decode(fetched.bcs_hex)
        check = RoundTripCheck(
            transaction_id=transaction_id,
            sent_hex=bcs_hex,
            returned_hex=fetched.bcs_hex,
            stored_sequence_number=stored.sequence_number,
            returned_sequence_number=read_sequence_number(returned) if returned is not None else None,
            sent_length=len(sent) if sent is not None else None,
            returned_length=len(returned) if returned is not None else None,
            first_difference_offset=(
                first_difference(sent, returned) if sent is not None and returned is not None else None
            ),
        )

        if check.bytes_changed:
            logger.warning(f"BCS hex changed after storage/retrieval of {transaction_id}!")
            logger.warning(f"  Original length: {check.sent_length}, Retrieved length: {check.returned_length}")
        return check


def _try_decode(text: str) -> Optional[bytes]:
    try:
        return decode_hex(text)
    except DecodeError:
        return None
