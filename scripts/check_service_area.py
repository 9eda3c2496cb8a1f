#!/usr/bin/env python3
"""Manual service area and mention check script.

This script runs the same checks the API uses, from the command line,
to answer support questions like "why was this family turned away?".

Usage:
    # Check a zip code
    python scripts/check_service_area.py --zip 67401

    # Check an IP address
    python scripts/check_service_area.py --ip 203.0.113.5

    # Check coordinates with a reported state
    python scripts/check_service_area.py --coords 37.6872 -97.3301 --region KS

    # Preview who a post would notify (reads the user directory)
    python scripts/check_service_area.py --mentions "Great game @jsmith" --author u1

    # Evict expired password reset tokens now
    python scripts/check_service_area.py --sweep-tokens

Environment:
    CONFIG_PATH: Path to config file (default: config/config.yaml)
    GCP_PROJECT: GCP project ID for Firestore and Secret Manager access
"""

import argparse
import json
import logging
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.core.formatter import format_notification_summary, round_distance
from src.core.geo import distance_from_center, is_in_region, is_location_allowed
from src.core.mentions import extract_mentions, plan_mention_notifications
from src.orchestrator import LocationVerifier
from src.shell.config_loader import load_config
from src.shell.firestore_client import FirestoreClient, FirestoreConfig
from src.shell.token_store import FirestoreTokenStore

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def check_coordinates(config, latitude: float, longitude: float, region: str | None) -> dict:
    """Apply the access rule to raw coordinates."""
    area = config.service_area
    return {
        "distance": round_distance(distance_from_center(latitude, longitude, area)),
        "radius": area.radius_miles,
        "in_region": is_in_region(region, area.allowed_regions),
        "allowed": is_location_allowed(latitude, longitude, region, area),
    }


def preview_mentions(config, text: str, author_id: str) -> None:
    """Print who would be notified for a post, without writing anything."""
    tokens = extract_mentions(text)
    print(f"Handles: {', '.join(sorted(tokens)) or '(none)'}")
    if not tokens:
        return

    client = FirestoreClient(FirestoreConfig(settings=config.firestore))
    directory = client.get_mention_directory(config.mention_roles)
    records = plan_mention_notifications("preview", None, text, author_id, directory)

    print(format_notification_summary(records))


def main():
    parser = argparse.ArgumentParser(
        description="Run service area and mention checks by hand",
    )
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument(
        "--zip",
        dest="zip_code",
        help="Zip code to verify",
    )
    group.add_argument(
        "--ip",
        help="Client IP address to verify",
    )
    group.add_argument(
        "--coords",
        nargs=2,
        type=float,
        metavar=("LAT", "LON"),
        help="Coordinates to check against the radius",
    )
    group.add_argument(
        "--mentions",
        metavar="TEXT",
        help="Post text to resolve mentions for",
    )
    group.add_argument(
        "--sweep-tokens",
        action="store_true",
        help="Delete expired password reset tokens",
    )
    parser.add_argument(
        "--region",
        help="Reported state/region for --coords",
    )
    parser.add_argument(
        "--author",
        default="",
        help="Author user id for --mentions (excluded from notifications)",
    )

    args = parser.parse_args()
    config = load_config()

    if args.zip_code:
        result = LocationVerifier(config).verify_zip(args.zip_code)
        print(json.dumps(result.to_dict(), indent=2))

    elif args.ip:
        decision = LocationVerifier(config).verify_ip(args.ip)
        print(json.dumps(decision.to_dict(), indent=2))

    elif args.coords:
        latitude, longitude = args.coords
        print(json.dumps(check_coordinates(config, latitude, longitude, args.region), indent=2))

    elif args.mentions:
        preview_mentions(config, args.mentions, args.author)

    elif args.sweep_tokens:
        client = FirestoreClient(FirestoreConfig(settings=config.firestore))
        store = FirestoreTokenStore(
            client.client,
            collection=config.firestore.reset_tokens_collection,
        )
        removed = store.sweep()
        logger.info("Removed %d expired tokens", removed)


if __name__ == "__main__":
    main()
