"""Recompute denormalized counters from the stored relationship rows."""
from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from blogger.core.errors import NotFoundError
from blogger.core.log import configure_logging
from blogger.db.session import SessionLocal
from blogger.services import reconcile
from blogger.services.reconcile import Repair


def _print_repairs(repairs: Sequence[Repair]) -> None:
    for repair in repairs:
        print(
            f"[reconcile] {repair.entity} {repair.record_id} {repair.field}: "
            f"{repair.stored} -> {repair.actual}"
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Repair engagement counters that drifted")
    target = parser.add_mutually_exclusive_group()
    target.add_argument("--user", type=int, metavar="ID", help="Reconcile one user")
    target.add_argument("--post", type=int, metavar="ID", help="Reconcile one post")
    target.add_argument("--comment", type=int, metavar="ID", help="Reconcile one comment")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    with SessionLocal() as db:
        try:
            if args.user is not None:
                repairs = reconcile.reconcile_user(db, args.user)
            elif args.post is not None:
                repairs = reconcile.reconcile_post(db, args.post)
            elif args.comment is not None:
                repairs = reconcile.reconcile_comment(db, args.comment)
            else:
                report = reconcile.reconcile_all(db)
                repairs = report.repairs
                print(
                    f"[reconcile] checked {report.users} users, {report.posts} posts, "
                    f"{report.comments} comments"
                )
        except NotFoundError as exc:
            print(f"[reconcile] ERROR: {exc.message}", file=sys.stderr)
            return 1

    _print_repairs(repairs)
    if not repairs:
        print("[reconcile] all counters consistent")
    return 0


if __name__ == "__main__":
    sys.exit(main())
