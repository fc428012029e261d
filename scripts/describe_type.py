#!/usr/bin/env python3
"""
Print how the client classifies the properties of one or more IGC asset types.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dotenv import load_dotenv

from igc_client.client import IGCRestClient
from igc_client.config import config_from_env, load_client_config


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def main() -> int:
    parser = argparse.ArgumentParser(description="Describe IGC asset types as cached by the client")
    parser.add_argument("types", nargs="+", help="IGC type names, e.g. term category")
    parser.add_argument("--config", type=Path, default=None, help="Path to igc_client.yml (default: IGC_* environment variables)")
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args()

    load_dotenv()
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    cfg = load_client_config(args.config) if args.config else config_from_env()
    client = IGCRestClient.from_config(cfg)
    if not client.successfully_initialised:
        logger.error("Unable to open a session with %s", cfg.base_url)
        return 1

    failed = 0
    try:
        for type_name in args.types:
            metadata = client.get_type_metadata(type_name)
            if metadata is None:
                logger.error("Unable to retrieve details for type %s", type_name)
                failed += 1
                continue
            print(f"{type_name} ({metadata.display_name})")
            print(f"  creatable:                 {metadata.creatable}")
            print(f"  modification details:      {metadata.has_modification_details}")
            print(f"  all properties:            {', '.join(metadata.all_properties)}")
            print(f"  string properties:         {', '.join(metadata.string_properties)}")
            print(f"  non-relationship:          {', '.join(metadata.non_relationship_properties)}")
            print(f"  paged relationships:       {', '.join(metadata.paged_relationship_properties)}")
    finally:
        client.disconnect()

    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
