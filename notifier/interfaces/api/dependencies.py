"""FastAPI dependency utilities."""

from fastapi import HTTPException, Request, status

from notifier.application.session import NotificationSession


def get_notification_session(request: Request) -> NotificationSession:
    """Return the session created by the application lifespan."""

    session = getattr(request.app.state, "notification_session", None)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Notification session is not running",
        )
    return session
