"""
Obligation Discovery Routes
===========================

API route handlers for the Obligation Discovery Service.

Routes:
- discovery: run an obligation discovery for a postcode and activity
"""

from services.obligation_discovery.routes import discovery


__all__ = ["discovery"]
