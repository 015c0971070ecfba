"""
Athletix API Service
====================

Backend for the Athletix platform:
- Accounts backed by the hosted auth service
- Athlete profiles and stats
- Events with categories, sponsors and participants
- News drafts and articles
- Follows, reviews and search
"""

__version__ = "1.0.0"
