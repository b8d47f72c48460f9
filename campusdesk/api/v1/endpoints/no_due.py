"""
No Due certificate endpoints.

Realtime: WS /api/v1/no-due/students/{student_id}/ws?token=<jwt>
Sends a ``snapshot`` message on connect, then one message per change.
"""
from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import asyncio
import json

from campusdesk.core.database import get_db, get_session_local
from campusdesk.core.events import EventBus, get_event_bus, no_due_topic
from campusdesk.core.exceptions import AuthorizationError
from campusdesk.core.logging_config import logger
from campusdesk.models.user import User, UserRole
from campusdesk.modules.auth.dependencies import (
    NO_DUE_APPROVER_ROLES,
    get_current_user,
    get_no_due_approver,
    get_user_from_token,
)
from campusdesk.schemas.no_due import NoDueApprove, NoDueCreate, NoDueListResponse, NoDueResponse
from campusdesk.services.certificate_service import NoDueCertificateService
from campusdesk.services.no_due_service import NoDueService, no_due_to_dict, resolve_approver_role

router = APIRouter()

# Besides the student, these roles can see any student's request
NO_DUE_VIEWER_ROLES = NO_DUE_APPROVER_ROLES | {UserRole.CR}


def can_view_student(user: User, student_id: str) -> bool:
    return str(user.id) == str(student_id) or user.role in NO_DUE_VIEWER_ROLES


def ensure_can_view(user: User, student_id: str) -> None:
    if not can_view_student(user, student_id):
        raise AuthorizationError("You can only view your own no-due request")


@router.post("", response_model=NoDueResponse, status_code=status.HTTP_201_CREATED)
async def apply_for_no_due(
    data: NoDueCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    bus: EventBus = Depends(get_event_bus)
):
    """File a no-due request (students for themselves, CR/admin for any student)"""
    student_id = data.student_id or str(current_user.id)
    request = await NoDueService(db, bus).create(student_id, current_user)
    return NoDueResponse(**no_due_to_dict(request))


@router.get("", response_model=NoDueListResponse)
async def list_no_due_requests(
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(get_no_due_approver),
    db: AsyncSession = Depends(get_db)
):
    """Most recent requests, for approvers"""
    rows = await NoDueService(db).list_recent(limit)
    requests = [NoDueResponse(**no_due_to_dict(r, student_name=name)) for r, name in rows]
    return NoDueListResponse(requests=requests, total=len(requests))


@router.get("/students/{student_id}", response_model=Optional[NoDueResponse])
async def get_student_no_due(
    student_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Latest request for a student; null when they have not applied"""
    ensure_can_view(current_user, student_id)
    request = await NoDueService(db).get_by_student(student_id)
    if not request:
        return None
    return NoDueResponse(**no_due_to_dict(request))


@router.post("/{request_id}/approve", response_model=NoDueResponse)
async def approve_no_due(
    request_id: str,
    data: Optional[NoDueApprove] = None,
    current_user: User = Depends(get_no_due_approver),
    db: AsyncSession = Depends(get_db),
    bus: EventBus = Depends(get_event_bus)
):
    """Set the caller's approval flag; repeating it is harmless"""
    role = resolve_approver_role(current_user, data.role if data else None)
    request = await NoDueService(db, bus).approve(request_id, role, str(current_user.id))
    return NoDueResponse(**no_due_to_dict(request))


@router.get("/{request_id}/certificate", response_class=HTMLResponse)
async def generate_no_due_certificate(
    request_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Printable certificate; 409 until all four approvals are in"""
    request = await NoDueService(db).get(request_id)
    if str(current_user.id) != str(request.student_id) and current_user.role not in {UserRole.CR, UserRole.ADMIN}:
        raise AuthorizationError("Only the student can generate their no-due certificate")

    certificate = await NoDueCertificateService(db).generate(request_id)
    return HTMLResponse(
        content=certificate["html"],
        headers={"X-Certificate-Ref": certificate["reference_number"]},
    )


@router.websocket("/students/{student_id}/ws")
async def no_due_websocket(
    websocket: WebSocket,
    student_id: str,
    token: str = Query(...)
):
    """Push every change to the student's no-due request"""
    async with get_session_local()() as db:
        user = await get_user_from_token(token, db)
        if not user:
            await websocket.close(code=4001, reason="Invalid or expired token")
            return
        if not can_view_student(user, student_id):
            await websocket.close(code=4003, reason="Not allowed to watch this student")
            return
        current = await NoDueService(db).get_by_student(student_id)
        snapshot = no_due_to_dict(current) if current else None

    await websocket.accept()
    queue, unsubscribe = get_event_bus().open_queue(no_due_topic(student_id))
    logger.info(f"[NoDue WS] {user.email} watching student {student_id}")

    try:
        await websocket.send_text(json.dumps({"type": "snapshot", "data": snapshot}, default=str))

        receive_task = asyncio.create_task(websocket.receive_text())
        event_task = asyncio.create_task(queue.get())
        try:
            while True:
                done, _ = await asyncio.wait(
                    {receive_task, event_task}, return_when=asyncio.FIRST_COMPLETED
                )
                if receive_task in done:
                    message = receive_task.result()
                    if message == "ping":
                        await websocket.send_text(json.dumps({"type": "pong"}))
                    receive_task = asyncio.create_task(websocket.receive_text())
                if event_task in done:
                    await websocket.send_text(event_task.result().to_json())
                    event_task = asyncio.create_task(queue.get())
        finally:
            receive_task.cancel()
            event_task.cancel()
    except WebSocketDisconnect:
        logger.info(f"[NoDue WS] {user.email} disconnected from student {student_id}")
    except Exception as e:
        logger.error(f"[NoDue WS] error for student {student_id}: {e}", exc_info=True)
    finally:
        unsubscribe()
