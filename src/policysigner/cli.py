"""Command-line entry point.

Usage:
    policy-signer --key 0x... --to 0x... --amount 1000 --nonce 0 --chain 1 --policy policy.json

The key may also be supplied through SIGNER_PRIVATE_KEY. On success the raw
signed transaction is printed to stdout as lowercase hex. On failure a single
line naming the stage and reason goes to stderr and the exit code identifies
the error class.
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

from pydantic import ValidationError

from policysigner.config import Settings, load_settings
from policysigner.errors import SignerError
from policysigner.pipeline import SignRequest, SigningPipeline

logger = logging.getLogger(__name__)

EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="policy-signer",
        description="Sign an Ethereum value transfer after checking it against a policy.",
    )
    parser.add_argument("--key", default=None, help="Private key in hex (or set SIGNER_PRIVATE_KEY)")
    parser.add_argument("--to", required=True, help="Recipient address")
    parser.add_argument("--amount", default="0", help="Amount in wei")
    parser.add_argument("--nonce", default="0", help="Account nonce")
    parser.add_argument("--chain", type=int, default=None, help="Chain ID (default 1, Ethereum mainnet)")
    parser.add_argument("--policy", default=None, help="Path to policy JSON file (default policy.json)")
    parser.add_argument("--debug", action="store_true", default=None, help="Enable debug logging")
    return parser


def configure_logging(settings: Settings) -> None:
    log_level = logging.DEBUG if settings.debug else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the signer. Returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(
            chain_id=args.chain,
            policy_file=args.policy,
            debug=args.debug,
        )
    except ValidationError as e:
        print(f"error [config]: {e.errors()[0].get('msg', 'invalid settings')}", file=sys.stderr)
        return EXIT_USAGE

    configure_logging(settings)
    logger.debug(f"Settings: {settings.get_safe_dict()}")

    key = args.key
    if not key and settings.has_private_key:
        key = settings.private_key.get_secret_value()
    if not key:
        parser.print_usage(sys.stderr)
        print("error: key and to are required", file=sys.stderr)
        return EXIT_USAGE

    request = SignRequest(
        private_key=key,
        recipient=args.to,
        amount=args.amount,
        nonce=args.nonce,
    )

    try:
        result = SigningPipeline(settings).run(request)
    except SignerError as e:
        print(f"error [{e.stage or 'start'}]: {e}", file=sys.stderr)
        return e.exit_code

    print(result.hex)
    return 0


if __name__ == "__main__":
    sys.exit(main())
