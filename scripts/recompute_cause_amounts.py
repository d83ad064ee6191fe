#!/usr/bin/env python3
"""
Recompute every cause's currentAmount from its approved sponsorships and
bring numberOfTotes back in line with toteQuantity.

Usage:
    python scripts/recompute_cause_amounts.py [--dry-run]
"""

import sys

# Add parent directory to path for imports
sys.path.insert(0, ".")

from changebag import create_app, db
from changebag.models import Cause, Sponsorship
from changebag.services import CauseService


def recompute(dry_run: bool = False) -> int:
    app = create_app()

    with app.app_context():
        synced = (
            Sponsorship.query.filter(
                (Sponsorship.number_of_totes.is_(None))
                | (Sponsorship.number_of_totes != Sponsorship.tote_quantity)
            )
            .update({Sponsorship.number_of_totes: Sponsorship.tote_quantity}, synchronize_session=False)
        )
        print(f"Synced numberOfTotes on {synced} sponsorships")

        changed = 0
        for cause in Cause.query.order_by(Cause.id).all():
            before = float(cause.current_amount or 0)
            after = CauseService.recompute_current_amount(cause.id)
            if before != after:
                changed += 1
                print(f"  Cause {cause.id} ({cause.title}): {before:.2f} -> {after:.2f}")

        if dry_run:
            db.session.rollback()
            print(f"Dry run: {changed} causes would change")
        else:
            db.session.commit()
            print(f"Done! {changed} causes updated")

    return 0


if __name__ == "__main__":
    sys.exit(recompute(dry_run="--dry-run" in sys.argv[1:]))
