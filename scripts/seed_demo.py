#!/usr/bin/env python3
# =============================================================================
# scripts/seed_demo.py - Seed a Development Database
# =============================================================================
# Creates a handful of leads at different pipeline stages, marks payments
# for the paying ones (which also creates their training sessions), so the
# dashboard and reports have something to show.
#
# Usage:
#   python scripts/seed_demo.py
#
# Requires SUPABASE_URL and SUPABASE_SERVICE_KEY in .env. Never run this
# against production.
# =============================================================================

import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from app.config import settings
from core.models.accounting import PaymentType
from core.models.lead import LeadCreate, LeadUpdate
from core.services.accounting_service import AccountingService
from core.services.lead_service import LeadService

DEMO_LEADS = [
    # (first, last, formation, source, status, price_fixed, price_deposit, payment)
    ("Lina", "Martin", "beatmaking", "instagram", "new", None, None, None),
    ("Hugo", "Bernard", "sound_engineering", "tiktok", "called", None, None, None),
    ("Sarah", "Petit", "beatmaking", "youtube", "closing", 1500, 300, None),
    ("Yanis", "Robert", "sound_engineering", "instagram", "closing", 1200, 300, PaymentType.DEPOSIT),
    ("Emma", "Richard", "beatmaking", None, "closing", 990, None, PaymentType.FULL),
]

TRAINING = {
    "beatmaking": {"formation_format": "monthly", "formation_day": "sat"},
    "sound_engineering": {"formation_format": "weekly", "formation_day": "mon"},
}


def seed():
    if settings.is_production:
        print("Refusing to seed a production database.")
        return

    print("=" * 60)
    print("SEEDING DEMO DATA")
    print("=" * 60)

    for first, last, formation, source, status, price, deposit, payment in DEMO_LEADS:
        lead = LeadService.create_lead(LeadCreate(
            first_name=first,
            last_name=last,
            phone="0600000000",
            formation=formation,
            source=source,
        ))

        LeadService.update_lead(lead["id"], LeadUpdate(
            status=status,
            price_fixed=price,
            price_deposit=deposit,
            formation_start_date="2025-09-01",
            **TRAINING[formation],
        ))
        print(f"  {first} {last}: {status}")

        if payment:
            result = AccountingService.mark_payment(lead["id"], payment)
            print(f"    -> {result.entry_type.value} marked, session: {result.planning_id or 'none'}")

    print("\nDone.")


if __name__ == "__main__":
    seed()
