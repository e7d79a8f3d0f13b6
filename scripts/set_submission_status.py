"""
Move a quiz submission forward in the review process (pending -> matched -> contacted).
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.db import InvalidStatusTransition, SubmissionNotFound
from backend.dependencies import get_db_client
from shared.types import ProfileStatus

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Update a quiz submission's status")
    parser.add_argument("email", nargs="?", help="Email of the submission to update")
    parser.add_argument(
        "-s",
        "--status",
        type=ProfileStatus,
        choices=list(ProfileStatus),
        help="New status",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List submissions (optionally filtered by --status) and exit",
    )
    parser.add_argument(
        "-n",
        "--limit",
        type=int,
        default=100,
        help="Max submissions to list",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    db = get_db_client()

    if args.list:
        for record in db.list_submissions(status=args.status, limit=args.limit):
            print(f"{record.email}\t{record.status.value}\t{record.as_dict()['createdAt']}")
        return 0

    if not args.email or not args.status:
        parser.error("email and --status are required unless --list is given")

    try:
        record = db.update_status(args.email, args.status)
    except SubmissionNotFound:
        logger.error("No submission found for %s", args.email)
        return 1
    except InvalidStatusTransition as exc:
        logger.error("%s", exc)
        return 1

    logger.info("Submission for %s is now %s", record.email, record.status.value)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
