"""
Admin dashboard endpoints.
"""

from fastapi import APIRouter, Depends

from shared.models import AdminPrincipal
from modules.students.models import StudentStats
from modules.students.service import StudentService

from ..dependencies import get_student_service
from ..middleware.auth import get_current_admin

router = APIRouter()


@router.get("/stats", response_model=StudentStats)
async def get_stats(
    admin: AdminPrincipal = Depends(get_current_admin),
    service: StudentService = Depends(get_student_service),
) -> StudentStats:
    """Student counts by status and tier, plus the latest signups."""
    return await service.get_stats()
