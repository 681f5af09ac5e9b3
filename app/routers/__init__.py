# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - leads.py: Lead capture, CRM table, favorites and activity history
# - accounting.py: Accounting entries, inline edits and payments
# - planning.py: Training session calendar and date calculator
# - trainers.py: Trainer dashboard
# - reports.py: AI-written dashboard reports
# - users.py: Account administration (admin only)
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import leads
from . import accounting
from . import planning
from . import trainers
from . import reports
from . import users

__all__ = [
    "health",
    "leads",
    "accounting",
    "planning",
    "trainers",
    "reports",
    "users",
]
