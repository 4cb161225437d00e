from __future__ import annotations

import logging
from typing import Protocol

from .events import HodDecided, Recorded, Submitted, SupervisorDecided, WorkflowEvent

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Receives workflow events (e-mail sending lives behind this interface)."""

    def notify(self, event: WorkflowEvent) -> None:
        raise NotImplementedError


class LoggingNotifier(Notifier):
    """Default notifier: records who should be told what, without sending anything."""

    def notify(self, event: WorkflowEvent) -> None:
        if isinstance(event, Submitted):
            logger.info("Leave %s submitted by %s; awaiting supervisor", event.application_id, event.employee_id)
        elif isinstance(event, SupervisorDecided):
            if event.approved:
                logger.info("Leave %s approved by supervisor; awaiting HOD", event.application_id)
            else:
                logger.info("Leave %s rejected by supervisor; notify applicant", event.application_id)
        elif isinstance(event, HodDecided):
            if event.approved:
                logger.info("Leave %s approved by HOD; ready for HR to record", event.application_id)
            else:
                logger.info("Leave %s rejected by HOD; notify applicant", event.application_id)
        elif isinstance(event, Recorded):
            logger.info("Leave %s recorded by HR", event.application_id)
        else:
            logger.warning("Unhandled workflow event %r", event)
