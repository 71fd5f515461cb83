"""HTTP routes. Handlers delegate to the TransactionService on app.state."""

from typing import Optional
from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import PlainTextResponse

from ..runtime.errors import TransactionNotFoundError
from ..schemas import (
    DiagnosticsResponse,
    GetTransactionResponse,
    StoreSignatureRequest,
    StoreSignatureResponse,
    StoreTransactionRequest,
    StoreTransactionResponse,
)
from ..service import TransactionService

router = APIRouter()


def get_service(request: Request) -> TransactionService:
    return request.app.state.service


@router.get("/health", response_class=PlainTextResponse)
def health():
    return "OK"


@router.post("/transaction", response_model=StoreTransactionResponse)
def store_transaction(
    body: StoreTransactionRequest,
    service: TransactionService = Depends(get_service),
):
    return service.store_transaction(body)


@router.post("/signature", response_model=StoreSignatureResponse)
def store_signature(
    body: StoreSignatureRequest,
    response: Response,
    service: TransactionService = Depends(get_service),
):
    try:
        return service.store_signature(body)
    except TransactionNotFoundError as e:
        response.status_code = 404
        return StoreSignatureResponse(success=False, transaction_id=body.transaction_id, message=e.message)


@router.get("/transaction/{transaction_id:path}", response_model=GetTransactionResponse)
def get_transaction(
    transaction_id: str,
    response: Response,
    service: TransactionService = Depends(get_service),
):
    try:
        return service.get_transaction(transaction_id)
    except TransactionNotFoundError as e:
        response.status_code = 404
        return GetTransactionResponse(success=False, message=e.message)


@router.get("/diagnostics", response_model=DiagnosticsResponse)
def diagnostics(
    limit: Optional[int] = Query(None, ge=0),
    service: TransactionService = Depends(get_service),
):
    return service.diagnostics(limit)
