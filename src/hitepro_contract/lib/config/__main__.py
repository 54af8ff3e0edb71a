"""Show the resolved contract-suite settings.

Usage:
    python -m hitepro_contract.lib.config [--env-file PATH] [--config PATH]

Prints the settings as JSON with the password masked and exits non-zero when
required values are missing or invalid.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from . import ConfigurationError, load_settings


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Check HitePro contract-suite configuration"
    )
    parser.add_argument("--env-file", type=Path, help="Load variables from this .env file")
    parser.add_argument("--config", type=Path, help="YAML settings file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = create_parser().parse_args(argv)

    try:
        settings = load_settings(env_file=args.env_file, config_path=args.config)
    except ConfigurationError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 2

    print(json.dumps(settings.describe(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
