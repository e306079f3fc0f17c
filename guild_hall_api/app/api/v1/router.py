"""
Top‑level router for version 1 of the API.

This router aggregates domain‑specific routers (groups, hall, users,
members, audit) under a unified prefix.  When new domains are
introduced, update this file to include their routers.
"""

from fastapi import APIRouter

from .endpoints import audit, groups, hall, members, users

router = APIRouter()

router.include_router(groups.router, prefix="/groups", tags=["groups"])
router.include_router(hall.router, prefix="/hall", tags=["hall"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(members.router, prefix="/members", tags=["members"])
router.include_router(audit.router, prefix="/audit", tags=["audit"])
