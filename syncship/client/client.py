"""
SyncShip Client - Main Entry Point

Runs a single operation when one is given on the command line, otherwise
the interactive command loop.

Author: SyncShip Project
"""

import sys
import argparse

from syncship.client.cli import run_cli_operation


def main(argv=None):
    """
    Main entry point for the SyncShip client.

    Parses command-line arguments and runs either:
    - A single operation (list, sync)
    - The interactive command loop (default when no operation is given)
    """
    parser = argparse.ArgumentParser(
        description='SyncShip - File Synchronization Client',
        epilog='Run without an operation to start the interactive command loop'
    )

    parser.add_argument('operation', nargs='?', choices=['list', 'sync'],
                        help='Operation to perform: list or sync')

    parser.add_argument('--config', help='Path to the client configuration file')

    args = parser.parse_args(argv)

    return run_cli_operation(args.operation, args.config)


if __name__ == '__main__':
    sys.exit(main())
