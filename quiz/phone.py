"""
Simulated phone number verification.

No SMS is sent; each step completes after a fixed delay so the flow behaves
like a real round trip. Pending steps are cancelled on teardown.
"""

from __future__ import annotations

import logging
import re
import threading
from enum import StrEnum
from typing import Callable, Optional

from quiz.scheduler import ScheduledTask, Scheduler

logger = logging.getLogger(__name__)

SIMULATED_DELAY_SECONDS = 1.0
CODE_PATTERN = re.compile(r"\d{6}")


class VerificationStep(StrEnum):
    INPUT = "input"
    CODE = "code"
    COMPLETE = "complete"


class PhoneVerification:
    def __init__(
        self,
        scheduler: Scheduler,
        *,
        delay: float = SIMULATED_DELAY_SECONDS,
        on_verified: Optional[Callable[[str], None]] = None,
    ):
        self.scheduler = scheduler
        self.delay = delay
        self.on_verified = on_verified
        self.step = VerificationStep.INPUT
        self.phone_number = ""
        self.verified_number: Optional[str] = None
        self.skipped = False
        self._pending: Optional[ScheduledTask] = None
        self._lock = threading.RLock()

    @property
    def is_busy(self) -> bool:
        return self._pending is not None and not (
            self._pending.done or self._pending.cancelled
        )

    @property
    def is_complete(self) -> bool:
        return self.step == VerificationStep.COMPLETE

    def start(self, phone_number: str) -> None:
        """Opens the flow at the input step, pre-filled with ``phone_number``."""
        with self._lock:
            self.cancel()
            self.step = VerificationStep.INPUT
            self.phone_number = phone_number or ""
            self.skipped = False

    def send_code(self, phone_number: Optional[str] = None) -> None:
        with self._lock:
            if phone_number is not None:
                self.phone_number = phone_number
            if self.step != VerificationStep.INPUT:
                raise RuntimeError(f"Cannot send a code from step {self.step}")
            if not self.phone_number:
                raise ValueError("A phone number is required")
            if self.is_busy:
                return
            logger.info("Sending simulated verification code to %s", self.phone_number)
            self._pending = self.scheduler.call_later(self.delay, self._code_sent)

    def _code_sent(self) -> None:
        with self._lock:
            self._pending = None
            self.step = VerificationStep.CODE

    def verify_code(self, code: str) -> None:
        with self._lock:
            if self.step != VerificationStep.CODE:
                raise RuntimeError(f"Cannot verify a code from step {self.step}")
            if not CODE_PATTERN.fullmatch(code or ""):
                raise ValueError("The verification code must be 6 digits")
            if self.is_busy:
                return
            self._pending = self.scheduler.call_later(self.delay, self._code_verified)

    def _code_verified(self) -> None:
        with self._lock:
            self._pending = None
            self.step = VerificationStep.COMPLETE
            self.verified_number = self.phone_number
            number = self.verified_number
        logger.info("Phone number %s verified", number)
        if self.on_verified:
            self.on_verified(number)

    def skip(self) -> None:
        with self._lock:
            self.cancel()
            self.step = VerificationStep.COMPLETE
            self.skipped = True

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Blocks until the in-flight step (if any) finishes."""
        pending = self._pending
        if pending is None:
            return True
        return pending.wait(timeout)

    def cancel(self) -> None:
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None
