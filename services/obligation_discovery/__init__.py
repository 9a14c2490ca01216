"""
Obligation Discovery Service
============================

Finds the licences, permits and registrations that apply to a business
from its postcode and activity, by searching ABLIS and normalising the
results into local, state and federal groups.

Features:
- Postcode to state resolution
- Browser-driven ABLIS searches tolerant of markup changes
- Heuristic extraction of obligations from result pages
- Supplemental searches for alcohol, medicines and chemicals
- Jurisdiction grouping and LGA inference

Port: 8787
"""

__version__ = "0.1.0"
