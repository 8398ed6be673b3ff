#!/usr/bin/env python3
"""
Issue a bearer token for local development.

Tokens are normally minted by the auth service at login. This script signs one
with the same secret and claim layout so the task API can be exercised locally:

    TASK_SERVICE_JWT_SECRET_KEY=dev-secret python scripts/issue_dev_token.py u1
"""

import argparse
import os
import sys
from datetime import timedelta

from task_service.security import DEFAULT_TOKEN_LIFETIME, create_access_token


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Issue a development bearer token")
    parser.add_argument("subject_id", help="Subject identifier to put in the 'sub' claim")
    parser.add_argument(
        "--secret",
        default=os.environ.get("TASK_SERVICE_JWT_SECRET_KEY"),
        help="Signing secret (defaults to TASK_SERVICE_JWT_SECRET_KEY)",
    )
    parser.add_argument(
        "--algorithm",
        default=os.environ.get("TASK_SERVICE_JWT_ALGORITHM", "HS256"),
        choices=["HS256", "HS384", "HS512"],
    )
    parser.add_argument(
        "--expires-minutes",
        type=int,
        default=int(DEFAULT_TOKEN_LIFETIME.total_seconds() // 60),
        help="Token lifetime in minutes (default: 7 days)",
    )
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    if not args.secret:
        print("A signing secret is required (--secret or TASK_SERVICE_JWT_SECRET_KEY)", file=sys.stderr)
        return 1

    token = create_access_token(
        subject_id=args.subject_id,
        secret=args.secret,
        algorithm=args.algorithm,
        expires_delta=timedelta(minutes=args.expires_minutes),
    )
    print(token)
    return 0


if __name__ == "__main__":
    sys.exit(main())
