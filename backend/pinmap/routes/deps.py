from fastapi import HTTPException

from pinmap.runtime import get_session
from pinmap.session import PinMapSession


def require_ready() -> PinMapSession:
    session = get_session()
    if not session.ready:
        raise HTTPException(status_code=503, detail="Map is not hydrated yet")
    return session
