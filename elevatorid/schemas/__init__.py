"""Pydantic schemas package.

Folder intent:
  common.py        — CamelModel base + HealthResponse (all schemas inherit CamelModel)
  part.py          — part registration / update / read models
  transfer.py      — transfer requests, approval variants, transfer read model
  installation.py  — install / remove / replace, ownership log, chain of custody
  directory.py     — companies, elevators, categories, features
"""
