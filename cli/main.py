"""Command line entry point.

Usage:
    vm-passwords provision --key-vault-name kv-prod --vm-name-prefix vm \\
        --environment-name prod --index 1 --number-of-instances 3 --pad-left-int 3
    vm-passwords generate --length 20
    vm-passwords issue-token --subject release-pipeline
"""

import argparse
import sys
from datetime import timedelta
from typing import Optional, Sequence

from core import configure_logging
from core.config import JWT_ACCESS_TOKEN_EXPIRE_MINUTES
from core.jwt_auth import MissingSecretKeyError, create_access_token
from core.provisioning import EXIT_OK, EXIT_SETUP_FAILURE

from cli.generator import add_generate_arguments, generate_command
from cli.provision import add_provision_arguments, provision_command


def issue_token_command(args: argparse.Namespace) -> int:
    """Print an API access token for the given subject."""
    try:
        token = create_access_token(args.subject, timedelta(minutes=args.minutes))
    except MissingSecretKeyError as e:
        print(f"Error: {e}")
        return EXIT_SETUP_FAILURE

    print(token)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vm-passwords",
        description="Provision unique VM passwords into a secret vault",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    provision_parser = subparsers.add_parser(
        "provision", help="Create passwords for VMs that don't have one yet"
    )
    add_provision_arguments(provision_parser)
    provision_parser.set_defaults(handler=provision_command)

    generate_parser = subparsers.add_parser("generate", help="Print random passwords")
    add_generate_arguments(generate_parser)
    generate_parser.set_defaults(handler=generate_command)

    token_parser = subparsers.add_parser("issue-token", help="Print an API access token")
    token_parser.add_argument("--subject", required=True, help="Caller identity")
    token_parser.add_argument("--minutes", type=int, default=JWT_ACCESS_TOKEN_EXPIRE_MINUTES,
                              help=f"Lifetime (default: {JWT_ACCESS_TOKEN_EXPIRE_MINUTES})")
    token_parser.set_defaults(handler=issue_token_command)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "provision":
        configure_logging()
    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())
