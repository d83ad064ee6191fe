#!/usr/bin/env python3
"""
Create an admin account, or promote an existing user to admin.

Usage:
    python scripts/create_admin.py admin@example.org "Full Name" password
"""

import sys

sys.path.insert(0, ".")

from changebag import create_app, db
from changebag.models import User, UserRole
from changebag.utils import normalize_email


def create_admin(email: str, name: str, password: str) -> int:
    app = create_app()

    with app.app_context():
        email = normalize_email(email)
        user = User.query.filter_by(email=email).first()
        if user:
            user.role = UserRole.ADMIN
            print(f"Promoted {email} to admin")
        else:
            user = User(email=email, name=name, role=UserRole.ADMIN)
            db.session.add(user)
            print(f"Created admin {email}")
        if password:
            user.set_password(password)
        db.session.commit()

    return 0


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print(__doc__)
        sys.exit(1)
    sys.exit(create_admin(sys.argv[1], sys.argv[2], sys.argv[3] if len(sys.argv) > 3 else ""))
