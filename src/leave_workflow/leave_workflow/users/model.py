from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: User (employee, supervisor, HOD or HR).

    Note: Plain data object (no DB access). Reporting lines are weak references
    to other users, resolved by lookup.
    """

    user_id: str
    full_name: str
    email: str
    role: Role
    department: str
    supervisor_id: Optional[str] = None
    hod_id: Optional[str] = None
    hr_id: Optional[str] = None
    is_active: bool = True
