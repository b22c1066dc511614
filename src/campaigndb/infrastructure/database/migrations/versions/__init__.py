"""
Migration version modules.

Each ``vNNN_<slug>.py`` module defines a module-level ``MIGRATION``.
The registry discovers them by name; ``campaigndb migrate create`` writes
new ones here.
"""
