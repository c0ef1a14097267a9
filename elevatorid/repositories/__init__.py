"""Repositories package — the only layer that builds SQLAlchemy queries.

Files:
  base.py           — generic tenant-scoped BaseRepository
  parts.py          — parts, feature values, ownership event log
  transfers.py      — part transfers and the status compare-and-set
  installations.py  — elevator_part install/remove rows
  directory.py      — companies, elevators, categories, features, audit trail
"""
