from fastapi import APIRouter, Depends

from db import get_conn
from deps.auth import get_current_user, CurrentUser
from services import roles

router = APIRouter(prefix="/api", tags=["roles"])


@router.get("/roles")
def list_roles(user: CurrentUser = Depends(get_current_user)):
    with get_conn() as conn:
        rows = roles.list_roles_with_counts(conn)

    return {
        "roles": [
            {
                "id": str(r["id"]),
                "name": r["name"],
                "description": r.get("description"),
                "userCount": int(r.get("user_count") or 0),
                "createdAt": r["created_at"].isoformat() if r.get("created_at") else None,
                "updatedAt": r["updated_at"].isoformat() if r.get("updated_at") else None,
            }
            for r in rows
        ]
    }


@router.get("/roles-permissions")
def roles_permissions(user: CurrentUser = Depends(get_current_user)):
    return {
        "permissionsMatrix": roles.PERMISSIONS_MATRIX,
        "notes": roles.PERMISSION_NOTES,
    }
