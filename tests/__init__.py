# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the NEXO client core:
# - test_models.py: Canonical model defaults and snapshot properties
# - test_normalizer.py: Response shape variants -> canonical models
# - test_gateway.py: HTTP gateway and endpoint clients (httpx.MockTransport)
# - test_token_store.py / test_observable.py: Building blocks
# - test_auth_store.py: Auth session state machine
# - test_swipe_engine.py: Swipe queue, pagination, matches
#
# Run tests with: pytest
# =============================================================================
