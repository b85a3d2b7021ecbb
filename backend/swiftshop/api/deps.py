from typing import Optional

from fastapi import Header, HTTPException

from swiftshop.errors import ShopError

_DETAIL_FIELDS = ("sku", "requested", "available", "delta")


def current_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """User id set by the upstream auth layer; the token itself is verified there."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id.strip()


def http_error(e: ShopError) -> HTTPException:
    detail = {"error": type(e).__name__, "message": e.message}
    for name in _DETAIL_FIELDS:
        if hasattr(e, name):
            detail[name] = getattr(e, name)
    return HTTPException(status_code=e.status_code, detail=detail)
