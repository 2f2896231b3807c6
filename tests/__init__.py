# Storefront Client Test Suite
#
# API-backed tests run against the in-process fake API in tests/fake_api.py.
#
# Run with: pytest [-m smoke|auth|cart|comments|reports]
