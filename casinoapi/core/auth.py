from typing import Optional

from fastapi import Header

from casinoapi.core.exceptions import AuthenticationError


def get_current_user_id(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
) -> str:
    """상위 인증 계층이 설정한 사용자 ID 헤더"""
    user_id = (x_user_id or "").strip()
    if not user_id or len(user_id) > 64:
        raise AuthenticationError("Missing or invalid X-User-Id header")
    return user_id


def get_current_admin_id(
    x_admin_id: Optional[str] = Header(None, alias="X-Admin-Id"),
) -> str:
    """관리자 엔드포인트용 관리자 ID 헤더

    헤더 값만으로 관리자 권한을 인정한다. 상위 게이트웨이는 관리자 인증을
    마친 요청에만 X-Admin-Id 를 설정하고, 클라이언트가 보낸 X-Admin-Id 는
    반드시 제거해야 한다.
    """
    admin_id = (x_admin_id or "").strip()
    if not admin_id or len(admin_id) > 64:
        raise AuthenticationError("Admin privileges required")
    return admin_id
