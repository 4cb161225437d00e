from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Submitted:
    application_id: str
    employee_id: str


@dataclass(frozen=True)
class SupervisorDecided:
    application_id: str
    approved: bool


@dataclass(frozen=True)
class HodDecided:
    application_id: str
    approved: bool


@dataclass(frozen=True)
class Recorded:
    application_id: str


WorkflowEvent = Union[Submitted, SupervisorDecided, HodDecided, Recorded]
