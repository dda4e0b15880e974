"""CLI job that runs a nearby-company lookup for an address and prints the JSON result."""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from company_proximity.core.config import ConfigError, get_settings
from company_proximity.core.pipeline import InvalidRequestError, ReferenceLocationError, main as run_lookup
from company_proximity.vendors.hubspot import HubSpotError

logger = logging.getLogger(__name__)


def build_context(args: argparse.Namespace) -> Dict[str, Any]:
    properties = {
        "hs_object_id": args.object_id,
        "city": args.city,
        "state": args.state,
        "address": args.address,
    }
    return {"propertiesToSend": properties, "event": {"payload": {"batchSize": args.batch_size}}}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Find HubSpot companies near a reference address")
    parser.add_argument("--object-id", dest="object_id", help="hs_object_id of the reference company")
    parser.add_argument("--city", dest="city", default="", help="Reference city")
    parser.add_argument("--state", dest="state", default="", help="Reference state")
    parser.add_argument("--address", dest="address", default="", help="Reference street address")
    parser.add_argument(
        "--batch-size",
        dest="batch_size",
        type=int,
        default=get_settings().default_batch_size,
        help="Number of companies to fetch from HubSpot",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    args = build_parser().parse_args(argv)

    try:
        result = run_lookup(build_context(args), settings=get_settings())
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        return 2
    except InvalidRequestError as exc:
        logger.error("Invalid request: %s", exc)
        return 2
    except ReferenceLocationError as exc:
        logger.error("%s", exc)
        return 1
    except HubSpotError as exc:
        logger.error("HubSpot lookup failed: %s", exc)
        return 1

    json.dump(result, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
