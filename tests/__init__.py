"""
Obligation Discovery Test Suite
===============================

Test organization:
- tests/services/obligation_discovery/  - Service tests (no browser required)
- tests/services/obligation_discovery/fixtures/  - Recorded ABLIS result pages

Run tests:
    pytest                                       # All tests
    pytest tests/services/obligation_discovery   # Service tests only
"""
