"""Services package — all business logic lives here, never in routers.

Files:
  part_registry.py  — part identity and the single owner writer (set_owner)
  transfers.py      — transfer state machine (create / approve / reject)
  installations.py  — install, remove, replace, return to stock
  provenance.py     — read-only history and chain of custody
  directory.py      — companies, elevators, categories, features
  events.py         — domain events and the audit-trail sink

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in services. No FastAPI imports in services.
"""
