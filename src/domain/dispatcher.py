"""
Notification dispatcher - Out-of-band challenge delivery.

Delivery runs on a worker pool after the issuing request has already
returned. Policy per challenge:

    primary attempt 1 --fail--> sleep 1 x backoff
    primary attempt 2 --fail--> sleep 2 x backoff
    primary attempt 3 --fail--> fallback attempt (once, if configured)
    fallback         --fail--> log and stop

A failed delivery leaves the challenge in its store untouched. Re-issuing
the challenge is the recovery path. Nothing here raises to the caller.
"""

import logging
import time
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor

from .exceptions import ProviderConfigurationError
from .messages import RenderedMessage, render_challenge_message
from .models import DeliveryResult, Purpose
from .ports import EmailProvider

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """
    Implements NotificationQueue with retry and provider fallback.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(
        self,
        primary: EmailProvider,
        fallback: EmailProvider | None = None,
        *,
        retries: int = 2,
        backoff_seconds: float = 1.0,
        brand: str = "Estate",
        ttl_minutes: int = 5,
        reveal_codes: bool = False,
        max_workers: int = 4,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Args:
            primary: Provider tried first, 1 + retries times
            fallback: Provider tried once after the primary is exhausted
            retries: Extra primary attempts after the first failure
            backoff_seconds: Base delay; the n-th retry waits n x base
            brand: Name shown in subjects and signatures
            ttl_minutes: Code lifetime quoted in the message body
            reveal_codes: Include the code in the final-failure log
                (non-production diagnostics only)
            max_workers: Size of the delivery thread pool
            sleep: Backoff sleep function, replaceable in tests
        """
        self._primary = primary
        self._fallback = fallback
        self._retries = retries
        self._backoff_seconds = backoff_seconds
        self._brand = brand
        self._ttl_minutes = ttl_minutes
        self._reveal_codes = reveal_codes
        self._sleep = sleep
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="challenge-delivery"
        )

    def submit(self, recipient: str, code: str, purpose: Purpose) -> Future:
        """Schedule delivery on the worker pool and return without waiting."""
        future = self._executor.submit(self.deliver, recipient, code, purpose)
        future.add_done_callback(self._report_crash)
        return future

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def deliver(self, recipient: str, code: str, purpose: Purpose) -> bool:
        """
        Deliver a challenge code, retrying and falling back as configured.

        Returns:
            True if any provider accepted the message, False otherwise
        """
        message = render_challenge_message(code, purpose, self._brand, self._ttl_minutes)
        total = self._retries + 1

        for attempt in range(1, total + 1):
            result = self._attempt(self._primary, recipient, purpose, message, attempt, total)
            if result is None:
                # Configuration errors do not improve with retries
                break
            if result.ok:
                return True
            if attempt < total:
                self._sleep(self._backoff_seconds * attempt)

        if self._fallback is not None:
            result = self._attempt(self._fallback, recipient, purpose, message, 1, 1)
            if result is not None and result.ok:
                return True

        logger.error(
            "Challenge delivery failed on every provider, challenge kept for manual "
            "recovery: recipient=%s purpose=%s code=%s",
            recipient,
            purpose.value,
            code if self._reveal_codes else "***",
        )
        return False

    def _attempt(
        self,
        provider: EmailProvider,
        recipient: str,
        purpose: Purpose,
        message: RenderedMessage,
        attempt: int,
        total: int,
    ) -> DeliveryResult | None:
        """Run one send; None means the provider is unusable as configured."""
        try:
            result = provider.send(
                recipient, message.subject, message.html_body, message.text_body
            )
        except ProviderConfigurationError as exc:
            logger.critical(
                "Email provider %s is not configured: %s (recipient=%s purpose=%s)",
                provider.name,
                exc,
                recipient,
                purpose.value,
            )
            return None
        except Exception as exc:
            result = DeliveryResult.failure(provider.name, str(exc), type(exc).__name__)

        if result.ok:
            logger.info(
                "Challenge delivered: provider=%s recipient=%s purpose=%s attempt=%d/%d",
                provider.name,
                recipient,
                purpose.value,
                attempt,
                total,
            )
        else:
            logger.warning(
                "Challenge delivery attempt failed: provider=%s recipient=%s purpose=%s "
                "attempt=%d/%d error=%s error_code=%s response_code=%s",
                provider.name,
                recipient,
                purpose.value,
                attempt,
                total,
                result.error,
                result.error_code,
                result.response_code,
            )
        return result

    @staticmethod
    def _report_crash(future: Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("Challenge delivery task crashed", exc_info=exc)
