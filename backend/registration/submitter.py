"""Registration submit use case.

Why:
    Keep the "validate, then store" rule out of the web adapter. Validation
    always finishes before a backend client is even connected, and a form
    instance can only have one submission outstanding at a time.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Set

from .backend import BackendFactory, backend_session
from .domain import Registrant, SubmissionInFlightError
from .validation import validate_registration

logger = logging.getLogger("inscricoes.registration")

# Form instances with a request outstanding (single event loop; no lock needed).
_IN_FLIGHT: Set[str] = set()


class RegistrationSubmitter:
    def __init__(self, backend_factory: BackendFactory) -> None:
        # Anonymous client: visitors register without signing in.
        self._backend_factory = backend_factory

    async def submit(self, name: str | None, phone: str | None, *, submission_id: Optional[str] = None) -> Registrant:
        """Validate and persist one registrant.

        Raises:
            RegistrationValidationError: invalid input; backend untouched.
            SubmissionInFlightError: same `submission_id` already outstanding.
            StorageError: backend failure; nothing was committed.
        """
        valid = validate_registration(name, phone)
        if submission_id:
            if submission_id in _IN_FLIGHT:
                raise SubmissionInFlightError(submission_id)
            _IN_FLIGHT.add(submission_id)
        try:
            async with backend_session(self._backend_factory) as backend:
                registrant = await asyncio.to_thread(
                    lambda: backend.insert_registrant(name=valid.name, phone=valid.phone)
                )
        finally:
            if submission_id:
                _IN_FLIGHT.discard(submission_id)
        logger.info("Registrant stored")
        return registrant


def in_flight_count() -> int:
    return len(_IN_FLIGHT)


__all__ = ["RegistrationSubmitter", "in_flight_count"]
