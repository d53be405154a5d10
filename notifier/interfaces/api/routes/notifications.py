"""Endpoints exposing the realtime notification session."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from notifier.application.session import NotificationSession
from notifier.infrastructure.api_client import NotificationApiError
from notifier.interfaces.api.dependencies import get_notification_session
from notifier.interfaces.api.schemas import (
    CredentialUpdate,
    NotificationRead,
    NotificationTargetRead,
    SessionRead,
    UnreadCountRead,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _session_to_schema(session: NotificationSession) -> SessionRead:
    identity = session.identity
    return SessionRead(
        state=session.state.value,
        user_id=identity.user_id if identity else None,
        user_role=identity.user_role if identity else None,
    )


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found"
    )


@router.get("/", response_model=list[NotificationRead])
async def list_notifications(
    session: NotificationSession = Depends(get_notification_session),
) -> list[NotificationRead]:
    """Return live notifications followed by the historical ones."""

    notifications = await session.notifications()
    return [
        NotificationRead.from_entity(notification, session.route(notification))
        for notification in notifications
    ]


@router.get("/unread/count", response_model=UnreadCountRead)
def read_unread_count(
    session: NotificationSession = Depends(get_notification_session),
) -> UnreadCountRead:
    return UnreadCountRead(count=session.unread_count())


@router.get("/session", response_model=SessionRead)
def read_session(
    session: NotificationSession = Depends(get_notification_session),
) -> SessionRead:
    return _session_to_schema(session)


@router.put("/session/credential", response_model=SessionRead)
async def update_credential(
    payload: CredentialUpdate,
    session: NotificationSession = Depends(get_notification_session),
) -> SessionRead:
    """Store new tokens; the live stream follows the identity they carry."""

    session.credentials.set(payload.access_token, payload.refresh_token)
    await session.settle()
    return _session_to_schema(session)


@router.delete("/session/credential", response_model=SessionRead)
async def clear_credential(
    session: NotificationSession = Depends(get_notification_session),
) -> SessionRead:
    """Forget the tokens and close the live stream (logout)."""

    session.credentials.clear()
    await session.settle()
    return _session_to_schema(session)


@router.get("/{notification_id}/target", response_model=NotificationTargetRead)
def read_target(
    notification_id: int,
    session: NotificationSession = Depends(get_notification_session),
) -> NotificationTargetRead:
    target = session.target_for(notification_id)
    if target is None:
        raise _not_found()
    return NotificationTargetRead(id=notification_id, target=target)


@router.patch("/{notification_id}/read", response_model=NotificationRead)
async def mark_notification_read(
    notification_id: int,
    session: NotificationSession = Depends(get_notification_session),
) -> NotificationRead:
    """Mark a notification as read upstream and in the session store."""

    try:
        notification = await session.mark_read(notification_id)
    except NotificationApiError as exc:
        logger.warning("Could not mark notification %s as read: %s", notification_id, exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Notification service rejected the request",
        ) from exc
    if notification is None:
        raise _not_found()
    return NotificationRead.from_entity(notification, session.route(notification))
