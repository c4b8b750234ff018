# =============================================================================
# app/ - Client Application Package
# =============================================================================
# This package holds the client's application-level plumbing:
# - main.py: Composition root (create_client) and logging setup
# - config.py: Environment variable loading and settings
# - exceptions.py: Error types surfaced by the client core
#
# Business logic lives in core/, transport and decoding in lib/.
# =============================================================================
