#!/usr/bin/env python3
"""
Create PostgreSQL indexes for cause search and the claim/waitlist listings.
Run this once after `flask db upgrade`.
"""

import sys
sys.path.insert(0, ".")

from changebag import create_app, db


def create_indexes():
    app = create_app()

    with app.app_context():
        print("Creating indexes...")

        try:
            # Enable pg_trgm extension
            db.session.execute(db.text("CREATE EXTENSION IF NOT EXISTS pg_trgm"))
            print("  pg_trgm extension enabled")

            # GIN trigram indexes for the ILIKE cause search
            db.session.execute(db.text("""
                CREATE INDEX IF NOT EXISTS idx_causes_title_trgm
                ON causes USING GIN (title gin_trgm_ops)
            """))
            print("  Created trigram index on causes.title")

            db.session.execute(db.text("""
                CREATE INDEX IF NOT EXISTS idx_causes_description_trgm
                ON causes USING GIN (description gin_trgm_ops)
            """))
            print("  Created trigram index on causes.description")

            # Inventory sums only look at approved sponsorships
            db.session.execute(db.text("""
                CREATE INDEX IF NOT EXISTS idx_sponsorships_approved_cause
                ON sponsorships (cause_id)
                WHERE status = 'approved'
            """))
            print("  Created partial index on approved sponsorships")

            # Claim listings sort by created_at desc within a status
            db.session.execute(db.text("""
                CREATE INDEX IF NOT EXISTS idx_claims_cause_status
                ON claims (cause_id, status)
            """))
            print("  Created index on claims (cause_id, status)")

            # Notification and expiry sweeps walk waiting/notified entries
            db.session.execute(db.text("""
                CREATE INDEX IF NOT EXISTS idx_waitlist_notified_expiry
                ON waitlist_entries (magic_link_expires)
                WHERE status = 'notified'
            """))
            print("  Created partial index on notified waitlist entries")

            for table in ("causes", "sponsorships", "claims", "waitlist_entries"):
                db.session.execute(db.text(f"ANALYZE {table}"))
            print("  Analyzed tables")

            db.session.commit()
            print("Done! Indexes created successfully.")

        except Exception as e:
            print(f"Error: {e}")
            db.session.rollback()
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(create_indexes())
