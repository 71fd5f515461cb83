"""
HTTP application for the round-trip harness.

Wires configuration, store, retrieval policy and service into a FastAPI app.
Endpoint handlers are plain functions, so FastAPI runs them on its worker
thread pool and the store lock is what serializes access.
"""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..codec.transaction_codec import BcsMultiAgentCodec, TransactionCodec
from ..config import HarnessConfig
from ..monitoring.metrics import MetricsRegistry
from ..retrieval import DiagnosticsRecorder, RetrievalMode, RetrievalPolicy
from ..service import TransactionService
from ..store import TransactionStore
from .routes import router

logger = logging.getLogger(__name__)

ENDPOINTS = (
    ("POST", "/transaction", "Store a serialized transaction"),
    ("POST", "/signature", "Store secondary signer's signature"),
    ("GET", "/transaction/{transaction_id}", "Retrieve transaction and signature"),
    ("GET", "/diagnostics", "Recent round-trip observations and counters"),
    ("GET", "/health", "Health check"),
)


def build_service(config: HarnessConfig,
                  store: Optional[TransactionStore] = None,
                  codec: Optional[TransactionCodec] = None) -> TransactionService:
    """Assemble the service graph for ``config``; store and codec may be injected."""
    metrics = MetricsRegistry()
    policy = RetrievalPolicy(
        RetrievalMode.from_flag(config.reserialize),
        codec if codec is not None else BcsMultiAgentCodec(include_fee_payer=config.fee_payer_field),
        recorder=DiagnosticsRecorder(config.diagnostics_capacity),
        metrics=metrics,
    )
    return TransactionService(store if store is not None else TransactionStore(), policy, metrics)


def log_banner(config: HarnessConfig, service: TransactionService) -> None:
    logger.info("Multi-Agent Transaction Round-Trip Harness")
    logger.info(f"MODE: {config.mode_description}")
    logger.info(f"Codec: {service.policy.codec.name}")
    logger.info("To enable reserialize mode: RESERIALIZE=1")
    logger.info("Endpoints:")
    for method, path, description in ENDPOINTS:
        logger.info(f"  {method:<4} {path:<31} - {description}")


def create_app(config: Optional[HarnessConfig] = None,
               store: Optional[TransactionStore] = None,
               codec: Optional[TransactionCodec] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        config: Harness configuration (read from the environment if omitted)
        store: Store to serve from (a fresh one if omitted)
        codec: Codec for reserialize mode (strict BCS codec if omitted)

    Returns:
        Configured application
    """
    config = config or HarnessConfig.from_env()
    service = build_service(config, store, codec)

    app = FastAPI(title="BCS Round-Trip Harness", version=__version__)
    app.state.config = config
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)

    log_banner(config, service)
    return app
