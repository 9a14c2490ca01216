"""
Obligation Discovery Services
=============================

Services:
- obligation_discovery: ABLIS-backed discovery of licences, permits and
  registrations by postcode and business activity
"""

__all__ = [
    "obligation_discovery",
]
