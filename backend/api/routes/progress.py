"""
Course progress endpoints for the student dashboard.
"""

from fastapi import APIRouter, Depends

from shared.models import StudentPrincipal
from modules.students.models import ModuleProgress, ProgressSummary, ProgressUpdateRequest
from modules.students.service import ProgressService

from ..dependencies import get_progress_service
from ..middleware.auth import get_current_student

router = APIRouter()


@router.get("", response_model=ProgressSummary)
async def get_progress(
    student: StudentPrincipal = Depends(get_current_student),
    service: ProgressService = Depends(get_progress_service),
) -> ProgressSummary:
    """Get the current student's per-module progress."""
    return await service.get_progress(student)


@router.patch("", response_model=ModuleProgress)
async def update_progress(
    request: ProgressUpdateRequest,
    student: StudentPrincipal = Depends(get_current_student),
    service: ProgressService = Depends(get_progress_service),
) -> ModuleProgress:
    """
    Mark a module complete or incomplete and add time spent.

    Only active students can record progress.
    """
    return await service.update_progress(
        student,
        module_number=request.module_number,
        completed=request.completed,
        time_spent=request.time_spent,
    )
