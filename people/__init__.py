"""
People app package for the membership purchase backend.

Stores members, their paper publication add-ons and the one-time login
keys members use to reach their own records.  The purchase orchestrator
in ``payments`` creates and upgrades people through ``people.services``
and issues keys through ``people.keys``.
"""
