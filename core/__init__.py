# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains framework-agnostic business logic:
# - models/: Canonical pydantic models and state snapshots
# - services/: Auth session store and swipe session engine
#
# Code in this package talks to the backend only through lib/.
# =============================================================================
