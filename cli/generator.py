"""Password generation CLI flow."""

import argparse

from core import GenerationSpec, ValidationError, EntropyError, generate_password
from core.config import DEFAULT_PASSWORD_LENGTH, DIGITS, LOWERCASE, SYMBOLS, UPPERCASE
from core.provisioning import EXIT_OK, EXIT_SETUP_FAILURE

from cli.prompts import mask_password


def build_spec(args: argparse.Namespace) -> GenerationSpec:
    """Build a generation spec from parsed arguments.

    Each enabled class contributes its --min-* count.
    """
    alphabets = []
    counts = []
    for chars, enabled, count in (
        (LOWERCASE, not args.no_lower, args.min_lower),
        (UPPERCASE, not args.no_upper, args.min_upper),
        (DIGITS, not args.no_digits, args.min_digits),
        (SYMBOLS, not args.no_symbols, args.min_symbols),
    ):
        if enabled:
            alphabets.append(chars)
            counts.append(count)

    return GenerationSpec.from_lists(args.length, alphabets, counts)


def add_generate_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--length", type=int, default=DEFAULT_PASSWORD_LENGTH,
                        help=f"Password length (default: {DEFAULT_PASSWORD_LENGTH})")
    parser.add_argument("--count", type=int, default=1, help="Number of passwords to print")
    for name in ("lower", "upper", "digits", "symbols"):
        parser.add_argument(f"--no-{name}", action="store_true", help=f"Exclude {name}")
        parser.add_argument(f"--min-{name}", type=int, default=1,
                            help=f"Minimum {name} characters (default: 1)")
    parser.add_argument("--masked", action="store_true",
                        help="Show only the first and last characters")


def generate_command(args: argparse.Namespace) -> int:
    """Print freshly generated passwords, one per line."""
    try:
        spec = build_spec(args)
        for _ in range(args.count):
            password = generate_password(spec)
            print(mask_password(password) if args.masked else password)
    except (ValidationError, EntropyError) as e:
        print(f"Error: {e}")
        return EXIT_SETUP_FAILURE

    return EXIT_OK
