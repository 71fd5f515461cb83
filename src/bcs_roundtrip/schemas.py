"""Request and response models for the harness HTTP interface."""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class StoreTransactionRequest(BaseModel):
    transaction_id: str
    bcs_hex: str


class StoreTransactionResponse(BaseModel):
    success: bool
    transaction_id: str
    sequence_number: Optional[int] = None
    message: str


class StoreSignatureRequest(BaseModel):
    transaction_id: str
    signature_hex: str


class StoreSignatureResponse(BaseModel):
    success: bool
    transaction_id: str
    message: str


class GetTransactionResponse(BaseModel):
    success: bool
    bcs_hex: Optional[str] = None
    secondary_signature_hex: Optional[str] = None
    sequence_number: Optional[int] = None
    stored_at: Optional[int] = None
    message: str


class DiagnosticsResponse(BaseModel):
    mode: str
    codec: str
    stored_transactions: int
    observations: List[Dict[str, Any]] = Field(default_factory=list)
    metrics: Dict[str, Any] = Field(default_factory=dict)
