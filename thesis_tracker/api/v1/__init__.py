"""
API v1 routes.
"""

from fastapi import APIRouter

from thesis_tracker.api.v1 import theses, submissions, comments

router = APIRouter()

# Submission and comment routes before /thesis/{thesis_id} catch-alls
router.include_router(submissions.router, tags=["Submissions"])
router.include_router(comments.router, tags=["Comments"])
router.include_router(theses.router, prefix="/thesis", tags=["Theses"])
