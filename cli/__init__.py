"""CLI package for the VM password provisioner.

Provides the argparse entry point and its subcommand flows.
"""

from cli.generator import generate_command
from cli.main import build_parser, main
from cli.provision import provision_command

__all__ = [
    "build_parser",
    "generate_command",
    "main",
    "provision_command",
]
