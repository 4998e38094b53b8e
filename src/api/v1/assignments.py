# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Assignment API endpoints.

This module provides endpoints for homework assignments:
- POST / - Publish an assignment with a PDF (teacher)
- GET / - List active assignments
- GET /teacher - List the caller's assignments (teacher)
- GET /student - Multi-subject feed for a grade level (student)
- GET /{assignment_id} - Get assignment details
- GET /{assignment_id}/download - Redirect to the document
- PATCH /{assignment_id} - Partial update (teacher)
- DELETE /{assignment_id} - Retire an assignment (teacher)
"""

import logging
from typing import Annotated

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    HTTPException,
    Query,
    Response,
    UploadFile,
    status,
)
from fastapi.responses import RedirectResponse

from src.api.dependencies import (
    CurrentUser,
    get_assignment_feed,
    get_assignment_service,
    get_current_user,
    require_student,
    require_teacher,
)
from src.domains.assignment import (
    AssignmentNotFoundError,
    AssignmentService,
    AssignmentValidationError,
    StudentAssignmentFeed,
)
from src.infrastructure.database.connection import DatabaseError
from src.infrastructure.storage import StorageError, UploadedFile
from src.models.assignment import (
    AssignmentDTO,
    AssignmentListResponse,
    AssignmentResponse,
    StudentAssignmentFeedResponse,
    UpdateAssignmentRequest,
)
from src.models.common import PagedResult

logger = logging.getLogger(__name__)

router = APIRouter()


def _list_response(result: PagedResult[AssignmentDTO]) -> AssignmentListResponse:
    return AssignmentListResponse(
        assignments=[AssignmentResponse.from_dto(a) for a in result.items],
        current_page=result.page,
        page_size=result.page_size,
        total_pages=result.total_pages,
        total_elements=result.total_elements,
        has_next=result.has_next,
        has_previous=result.has_previous,
    )


def _split_ids(values: list[str]) -> list[str]:
    """Accept repeated and comma separated query values."""
    return [part.strip() for value in values for part in value.split(",") if part.strip()]


@router.post(
    "",
    response_model=AssignmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create assignment",
    description="Publish an assignment with an attached PDF. Requires teacher access.",
)
async def create_assignment(
    title: Annotated[str, Form()],
    subject_id: Annotated[str, Form()],
    grade_level: Annotated[int, Form()],
    file: Annotated[UploadFile, File(description="Assignment document (PDF)")],
    description: Annotated[str | None, Form()] = None,
    due_date: Annotated[str | None, Form(description="YYYY-MM-DD or ISO datetime")] = None,
    current_user: CurrentUser = Depends(require_teacher),
    service: AssignmentService = Depends(get_assignment_service),
) -> AssignmentResponse:
    """Publish a new assignment.

    Args:
        title: Assignment title.
        subject_id: Subject identifier.
        grade_level: Target grade level.
        file: Uploaded PDF.
        description: Optional description.
        due_date: Optional due date.
        current_user: Authenticated teacher.
        service: Assignment service.

    Returns:
        Created assignment.

    Raises:
        HTTPException: 400 on invalid input, 502 if the upload fails.
    """
    content = await file.read()
    logger.info(
        "Creating assignment %r for subject %s grade %d by %s (%s, %d bytes)",
        title,
        subject_id,
        grade_level,
        current_user.id,
        file.filename,
        len(content),
    )

    try:
        assignment = await service.create_assignment(
            teacher_id=current_user.id,
            subject_id=subject_id,
            grade_level=grade_level,
            title=title,
            file=UploadedFile(
                filename=file.filename or "",
                content_type=file.content_type or "",
                content=content,
            ),
            description=description,
            due_date=due_date,
        )
    except AssignmentValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    except StorageError as e:
        logger.error("Document upload failed: %s", e.message)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="File upload failed",
        )
    except DatabaseError as e:
        logger.error("Assignment could not be saved: %s", str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save assignment",
        )

    return AssignmentResponse.from_dto(assignment)


@router.get(
    "",
    response_model=AssignmentListResponse,
    summary="List assignments",
    description="List all active assignments, newest first.",
)
async def list_assignments(
    page: Annotated[int, Query(description="1-based page number")] = 1,
    current_user: CurrentUser = Depends(get_current_user),
    service: AssignmentService = Depends(get_assignment_service),
) -> AssignmentListResponse:
    """List active assignments."""
    try:
        result = await service.find_active(page)
    except AssignmentValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return _list_response(result)


@router.get(
    "/teacher",
    response_model=AssignmentListResponse,
    summary="List my assignments",
    description="List the calling teacher's active assignments. Requires teacher access.",
)
async def list_teacher_assignments(
    grade_level: Annotated[int | None, Query(description="Filter by grade level")] = None,
    page: Annotated[int, Query(description="1-based page number")] = 1,
    current_user: CurrentUser = Depends(require_teacher),
    service: AssignmentService = Depends(get_assignment_service),
) -> AssignmentListResponse:
    """List the teacher's own active assignments.

    Args:
        grade_level: Optional grade filter.
        page: Page number.
        current_user: Authenticated teacher.
        service: Assignment service.

    Returns:
        Page of assignments.
    """
    try:
        result = await service.find_by_teacher(
            current_user.id,
            page=page,
            grade_level=grade_level,
        )
    except AssignmentValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return _list_response(result)


@router.get(
    "/student",
    response_model=StudentAssignmentFeedResponse,
    summary="Student assignment feed",
    description="Active assignments of several subjects for a grade level. Requires student access.",
)
async def student_feed(
    grade_level: Annotated[int, Query(description="Student grade level")],
    subject_ids: Annotated[list[str], Query(description="Subject IDs, repeated or comma separated")],
    page: Annotated[int, Query(description="1-based page number")] = 1,
    current_user: CurrentUser = Depends(require_student),
    feed: StudentAssignmentFeed = Depends(get_assignment_feed),
) -> StudentAssignmentFeedResponse:
    """Return one page of the student feed.

    Args:
        grade_level: Grade level.
        subject_ids: Subjects to include.
        page: Page number.
        current_user: Authenticated student.
        feed: Feed builder.

    Returns:
        Merged feed page.
    """
    subjects = _split_ids(subject_ids)

    try:
        result = await feed.fetch(subjects, grade_level, page)
    except AssignmentValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    listing = _list_response(result)
    return StudentAssignmentFeedResponse(
        **listing.model_dump(),
        grade_level=grade_level,
        requested_subjects=subjects,
    )


@router.get(
    "/{assignment_id}",
    response_model=AssignmentResponse,
    summary="Get assignment",
    description="Get an active assignment by ID.",
)
async def get_assignment(
    assignment_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: AssignmentService = Depends(get_assignment_service),
) -> AssignmentResponse:
    """Get assignment details.

    Raises:
        HTTPException: 404 if missing or retired.
    """
    try:
        assignment = await service.get_assignment(assignment_id)
    except AssignmentNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Assignment not found",
        )

    return AssignmentResponse.from_dto(assignment)


@router.get(
    "/{assignment_id}/download",
    status_code=status.HTTP_302_FOUND,
    summary="Download assignment",
    description="Redirect to the assignment document.",
    response_class=RedirectResponse,
)
async def download_assignment(
    assignment_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: AssignmentService = Depends(get_assignment_service),
) -> RedirectResponse:
    """Redirect to the stored document.

    Raises:
        HTTPException: 404 if missing or retired, 502 if no URL can be generated.
    """
    try:
        url = await service.generate_download_url(assignment_id)
    except AssignmentNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Assignment not found",
        )
    except StorageError as e:
        logger.error("Download URL for %s failed: %s", assignment_id, e.message)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Download link unavailable",
        )

    return RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)


@router.patch(
    "/{assignment_id}",
    response_model=AssignmentResponse,
    summary="Update assignment",
    description="Update title, description or due date. Requires teacher access.",
)
async def update_assignment(
    assignment_id: str,
    data: UpdateAssignmentRequest,
    current_user: CurrentUser = Depends(require_teacher),
    service: AssignmentService = Depends(get_assignment_service),
) -> AssignmentResponse:
    """Apply a partial update.

    Args:
        assignment_id: Assignment identifier.
        data: Fields to change.
        current_user: Authenticated teacher.
        service: Assignment service.

    Returns:
        Updated assignment.

    Raises:
        HTTPException: 404 if missing or retired, 400 on invalid values.
    """
    logger.info("Updating assignment %s by %s", assignment_id, current_user.id)

    try:
        assignment = await service.update_assignment(
            assignment_id,
            title=data.title,
            description=data.description,
            due_date=data.due_date,
        )
    except AssignmentNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Assignment not found",
        )
    except AssignmentValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return AssignmentResponse.from_dto(assignment)


@router.delete(
    "/{assignment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete assignment",
    description="Retire an assignment. The record and document are kept. Requires teacher access.",
)
async def delete_assignment(
    assignment_id: str,
    current_user: CurrentUser = Depends(require_teacher),
    service: AssignmentService = Depends(get_assignment_service),
) -> Response:
    """Retire an assignment.

    Raises:
        HTTPException: 404 if missing or already retired.
    """
    logger.info("Retiring assignment %s by %s", assignment_id, current_user.id)

    try:
        await service.soft_delete(assignment_id)
    except AssignmentNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Assignment not found",
        )

    return Response(status_code=status.HTTP_204_NO_CONTENT)
