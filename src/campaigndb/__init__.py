"""
campaigndb - database lifecycle toolkit for the campaign manager.

Migrations, seeds, backups, monitoring and analysis for the SQLite store
that backs the multi-tenant campaign manager.
"""

__version__ = "1.0.0"
