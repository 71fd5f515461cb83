"""
Command line entry point.

    bcs-roundtrip serve [--reserialize] [--port N]
    bcs-roundtrip inspect HEX [--no-fee-payer] [--json]
    bcs-roundtrip check HEX [--url URL] [--id ID]
"""

import argparse
import dataclasses
import json
import logging
import sys
import time
from typing import List, Optional

from .client import HarnessClient
from .codec.hexcodec import decode_hex
from .codec.prefix import read_sequence_number
from .codec.transaction_codec import BcsMultiAgentCodec
from .config import HarnessConfig
from .retrieval import Outcome, round_trip
from .runtime.errors import ClientError, DecodeError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn
    from .server.app import create_app

    config = HarnessConfig.from_env()
    overrides = {}
    if args.reserialize:
        overrides["reserialize"] = True
    if args.no_fee_payer:
        overrides["fee_payer_field"] = False
    if args.host:
        overrides["host"] = args.host
    if args.port:
        overrides["port"] = args.port
    config = dataclasses.replace(config, **overrides)

    configure_logging(config.log_level)
    app = create_app(config)
    logger.info(f"Starting server on {config.host}:{config.port}...")
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())
    return 0


def cmd_inspect(args: argparse.Namespace) -> int:
    configure_logging("WARNING" if not args.verbose else "DEBUG")
    try:
        data = decode_hex(args.hex)
    except DecodeError as e:
        print(f"Invalid hex: {e}", file=sys.stderr)
        return 2

    codec = BcsMultiAgentCodec(include_fee_payer=not args.no_fee_payer)
    retrieval = round_trip(args.hex, codec)
    observation = retrieval.observation

    if args.json:
        report = observation.to_dict()
        report["prefix_sequence_number"] = read_sequence_number(data)
        report["returned_hex"] = retrieval.hex
        print(json.dumps(report, indent=2))
    else:
        print(f"Length:                 {len(data)} bytes")
        print(f"Prefix sequence number: {read_sequence_number(data)}")
        print(f"Codec:                  {codec.name}")
        print(f"Outcome:                {observation.outcome.value}")
        if observation.error:
            print(f"Error:                  {observation.error}")
        for key, value in (observation.decoded or {}).items():
            print(f"  {key}: {value}")
        if observation.outcome == Outcome.DIVERGED:
            print(f"Reserialized length:    {observation.reserialized_length} bytes")
            print(f"First difference at:    byte {observation.first_difference_offset}")
            print(f"Sequence number after:  {observation.sequence_number_after}")

    return 1 if observation.outcome == Outcome.DIVERGED else 0


def cmd_check(args: argparse.Namespace) -> int:
    configure_logging("INFO" if not args.verbose else "DEBUG")
    client = HarnessClient(args.url)
    if not client.health():
        print(f"Harness not reachable at {args.url}", file=sys.stderr)
        return 2

    transaction_id = args.id or f"check_{int(time.time() * 1000)}"
    try:
        check = client.check_roundtrip(transaction_id, args.hex)
    except ClientError as e:
        print(f"Round-trip check failed: {e}", file=sys.stderr)
        return 2

    print(f"Transaction id:          {check.transaction_id}")
    print(f"Stored sequence number:  {check.stored_sequence_number}")
    print(f"Returned sequence number: {check.returned_sequence_number}")
    print(f"Sent length:             {check.sent_length}")
    print(f"Returned length:         {check.returned_length}")
    print(f"Bytes changed:           {'YES' if check.bytes_changed else 'no'}")
    if check.bytes_changed:
        print(f"First difference at:     byte {check.first_difference_offset}")
    return 1 if check.bytes_changed else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bcs-roundtrip",
        description="Detect byte-level changes introduced by decoding and re-encoding multi-agent transactions",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the harness HTTP server")
    serve.add_argument("--reserialize", action="store_true", help="Force reserialize mode")
    serve.add_argument("--no-fee-payer", action="store_true", help="Decode without the fee payer slot")
    serve.add_argument("--host", help="Listen address (default from HOST or 0.0.0.0)")
    serve.add_argument("--port", type=int, help="Listen port (default from PORT or 3001)")
    serve.set_defaults(func=cmd_serve)

    inspect = sub.add_parser("inspect", help="Round-trip a transaction locally")
    inspect.add_argument("hex", help="BCS-encoded multi-agent transaction as hex")
    inspect.add_argument("--no-fee-payer", action="store_true", help="Decode without the fee payer slot")
    inspect.add_argument("--json", action="store_true", help="Emit a JSON report")
    inspect.add_argument("-v", "--verbose", action="store_true")
    inspect.set_defaults(func=cmd_inspect)

    check = sub.add_parser("check", help="Store and fetch a transaction through a running harness")
    check.add_argument("hex", help="BCS-encoded multi-agent transaction as hex")
    check.add_argument("--url", default="http://localhost:3001", help="Harness base URL")
    check.add_argument("--id", help="Transaction id (generated if omitted)")
    check.add_argument("-v", "--verbose", action="store_true")
    check.set_defaults(func=cmd_check)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
