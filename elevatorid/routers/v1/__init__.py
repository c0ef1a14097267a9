"""v1 router package — all /api/v1/* endpoints live here.

Files:
  parts.py      — registry, transfer shortcut, return to stock, provenance
  transfers.py  — transfer list / create / approve / reject
  elevators.py  — elevators and installed parts (install / remove / replace)
  directory.py  — companies, categories, features

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to elevatorid/services/.
"""
