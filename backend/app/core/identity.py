from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException, status


@dataclass(frozen=True)
class Identity:
    employee_id: str
    is_admin: bool = False


def get_identity(
    x_employee_id: str = Header(..., min_length=1),
    x_employee_role: str = Header(default="employee"),
) -> Identity:
    return Identity(employee_id=x_employee_id.strip(), is_admin=x_employee_role.strip().lower() == "admin")


def require_admin(identity: Identity = Depends(get_identity)) -> Identity:
    if not identity.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return identity


def ensure_can_access(identity: Identity, employee_id: str) -> None:
    """Employees may only see and edit their own timesheet."""
    if not identity.is_admin and identity.employee_id != employee_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed for this employee")
