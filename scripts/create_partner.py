#!/usr/bin/env python3
"""
Register an API partner and print its key. Prints the existing key if the
business is already registered.

Usage:
    python scripts/create_partner.py "Business Name" business@example.org "Contact Name"
"""

import sys

sys.path.insert(0, ".")

from changebag import create_app
from changebag.models import ApiPartner
from changebag.services import PartnerService


def create_partner(business_name: str, business_email: str, contact_name: str) -> int:
    app = create_app()

    with app.app_context():
        partner = ApiPartner.query.filter_by(business_name=business_name.strip()).first()
        if partner:
            print(f"Partner '{partner.business_name}' already exists")
        else:
            partner = PartnerService.create_partner({
                "businessName": business_name,
                "businessEmail": business_email,
                "contactName": contact_name,
            })
            print(f"Created partner '{partner.business_name}'")

        print(f"API key: {partner.api_key}")
        print(f"Status:  {'active' if partner.is_active else 'inactive'}")

    return 0


if __name__ == "__main__":
    if len(sys.argv) < 4:
        print(__doc__)
        sys.exit(1)
    sys.exit(create_partner(sys.argv[1], sys.argv[2], sys.argv[3]))
