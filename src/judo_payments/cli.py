"""
Command-line interface for running a single gateway transaction.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Iterable, Optional, Sequence, Tuple

from .api import create_payment_client, send_transaction
from .core.config import load_gateway_config
from .core.errors import ConfigError, DeviceIntegrityError, PaymentError
from .core.models import (
    Amount,
    CardDetails,
    PaymentToken,
    Reference,
    Response,
    TransactionKind,
)
from .core.payloads import CardInput

_COMMANDS = {
    "payment": TransactionKind.PAYMENT,
    "preauth": TransactionKind.PRE_AUTH,
    "register-card": TransactionKind.REGISTER_CARD,
    "token-payment": TransactionKind.TOKEN_PAYMENT,
    "token-preauth": TransactionKind.TOKEN_PRE_AUTH,
}


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )


def _env_override(value: str) -> Tuple[str, str]:
    if "=" not in value:
        raise argparse.ArgumentTypeError("Overrides must look like KEY=VALUE")
    key, val = value.split("=", 1)
    key = key.strip()
    if not key:
        raise argparse.ArgumentTypeError("Override key must not be empty")
    return key, val


def _expiry(value: str) -> Tuple[int, int]:
    month, sep, year = value.partition("/")
    if not sep or not month.isdigit() or not year.isdigit() or len(year) != 2:
        raise argparse.ArgumentTypeError("Expiry must look like MM/YY")
    if not 1 <= int(month) <= 12:
        raise argparse.ArgumentTypeError("Expiry month must be between 01 and 12")
    return int(month), 2000 + int(year)


def _collect_overrides(pairs: Iterable[Tuple[str, str]]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for key, value in pairs:
        overrides[key] = value
    return overrides


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="judo-payments",
        description="Run a single transaction against the payment gateway",
    )
    parser.add_argument("command", choices=sorted(_COMMANDS), help="Transaction to run")
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing JUDO_* settings (default: .env)",
    )
    parser.add_argument(
        "--set",
        action="append",
        type=_env_override,
        metavar="KEY=VALUE",
        default=None,
        help="Override an environment variable without editing the .env file",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )
    parser.add_argument("--amount", default="1", help="Amount to charge (default: 1)")
    parser.add_argument("--currency", default="GBP", help="ISO currency code (default: GBP)")
    parser.add_argument("--merchant-id", help="Override JUDO_ID for this transaction")
    parser.add_argument("--consumer-reference", required=True, help="Your consumer reference")
    parser.add_argument(
        "--payment-reference",
        help="Your payment reference (a random one is generated when omitted)",
    )
    parser.add_argument("--card-number", help="Card number to charge")
    parser.add_argument("--expiry", type=_expiry, help="Card expiry as MM/YY")
    parser.add_argument("--cv2", help="Card security code, sent once and never stored")
    parser.add_argument("--consumer-token", help="Consumer token from a registered card")
    parser.add_argument("--card-token", help="Card token from a registered card")
    return parser


def _card_input(args: argparse.Namespace) -> Optional[CardInput]:
    if not (args.card_number or args.expiry or args.consumer_token):
        return None
    month, year = args.expiry if args.expiry else (None, None)
    details = CardDetails(card_number=args.card_number, expiry_month=month, expiry_year=year)
    return CardInput(card_details=details, security_code=args.cv2)


def _payment_token(args: argparse.Namespace) -> Optional[PaymentToken]:
    if not (args.consumer_token and args.card_token):
        return None
    return PaymentToken(consumer_token=args.consumer_token, card_token=args.card_token)


def run_cli(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)
    overrides = _collect_overrides(args.set or ())

    try:
        config = load_gateway_config(
            env_file=args.env_file,
            overrides=overrides,
            merchant_id=args.merchant_id,
        )
        amount = Amount(args.amount, args.currency)
        if args.payment_reference:
            reference = Reference(args.consumer_reference, args.payment_reference)
        else:
            reference = Reference.generate(args.consumer_reference)
        client = create_payment_client(config=config)
    except DeviceIntegrityError as exc:
        logging.error("Refusing to run: %s", exc)
        return 1
    except (ConfigError, ValueError) as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    response, error = send_transaction(
        client,
        _COMMANDS[args.command],
        config.merchant_id,
        amount,
        reference,
        source=_card_input(args),
        payment_token=_payment_token(args),
    )
    return _handle_outcome(response, error)


def _handle_outcome(response: Optional[Response], error: Optional[PaymentError]) -> int:
    if error is not None:
        if error.is_cancellation:
            logging.info("Transaction cancelled")
            return 1
        logging.error("%s: %s", error.category or error.code.value, error.message)
        return 1

    first = response.first if response is not None else None
    if first is None:
        logging.info("Gateway returned no transaction records")
        return 0

    logging.info("Receipt %s: %s", first.receipt_id, first.status)
    token = response.payment_token
    if token is not None:
        logging.info(
            "Reusable token: consumer=%s card=%s",
            token.consumer_token,
            token.card_token,
        )
    return 0 if first.succeeded else 1


def main() -> None:
    sys.exit(run_cli())


if __name__ == "__main__":
    main()
