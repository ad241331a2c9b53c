"""Video provider implementations.

Each provider module implements the async generation pattern:
  POST create job → poll status → download result
"""
from __future__ import annotations
