"""SMTP delivery of verification codes with bounded retry."""

from __future__ import annotations

import logging
import random
import smtplib
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass
from email.message import EmailMessage

from portal_auth.services._shared.ports import Notifier

logger = logging.getLogger(__name__)

# Transient failures worth another attempt; auth/recipient refusals are not.
RETRYABLE_ERRORS: tuple[type[BaseException], ...] = (
    smtplib.SMTPServerDisconnected,
    smtplib.SMTPConnectError,
    smtplib.SMTPHeloError,
    smtplib.SMTPDataError,
    ConnectionError,
    TimeoutError,
)


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Configuration for retry behavior."""

    max_retries: int = 2  # Attempts after the first one
    base_delay: float = 0.5  # Base delay in seconds
    max_delay: float = 5.0  # Maximum delay in seconds
    exponential_base: float = 2.0
    jitter: bool = True

    def delay_for(self, attempt: int) -> float:
        """Backoff before retry number ``attempt`` (0-based)."""
        delay = min(self.base_delay * (self.exponential_base**attempt), self.max_delay)
        if self.jitter:
            delay = delay * (0.5 + random.random())
        return delay


class SmtpEmailNotifier(Notifier):
    """
    Send codes as plain-text emails over SMTP.

    Attempts and backoff run on a worker thread, so the caller never sleeps
    between retries. :meth:`send` still has to report whether the code went
    out, so it blocks for at most ``timeout`` seconds waiting on the worker.
    Past that deadline the worker is cancelled (a pending backoff wakes up at
    once) and the send is reported as failed. Call :meth:`close` on shutdown
    to stop the workers.

    :param host: SMTP server host.
    :param port: SMTP server port.
    :param sender: ``From`` address.
    :param username: Login user, if the server requires auth.
    :param password: Login password.
    :param use_tls: Upgrade the connection with STARTTLS.
    :param retry: Backoff settings for transient failures.
    :param timeout: Overall deadline in seconds for one :meth:`send`.
    """

    def __init__(
        self,
        *,
        host: str,
        port: int,
        sender: str,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        retry: RetryPolicy | None = None,
        timeout: float = 10.0,
        smtp_factory: Callable[..., smtplib.SMTP] = smtplib.SMTP,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.retry = retry or RetryPolicy()
        self.timeout = timeout
        self._smtp_factory = smtp_factory
        self._sleep = sleep
        self._executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="smtp-notifier")

    # -------------------- message --------------------

    def compose(self, recipient: str, code: str, purpose: str, ttl_minutes: int) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = recipient
        msg["Subject"] = f"{purpose} verification code"
        msg.set_content(
            f"Your {purpose.lower()} verification code is: {code}\n\n"
            f"It expires in {ttl_minutes} minute{'s' if ttl_minutes != 1 else ''}. "
            "If you did not request it, you can ignore this email.\n"
        )
        return msg

    # -------------------- delivery -------------------

    def _deliver_once(self, msg: EmailMessage) -> None:
        with self._smtp_factory(self.host, self.port, timeout=self.timeout) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.username:
                smtp.login(self.username, self.password or "")
            smtp.send_message(msg)

    def _deliver_with_retry(self, msg: EmailMessage, cancelled: threading.Event) -> None:
        attempts = self.retry.max_retries + 1
        for attempt in range(attempts):
            try:
                self._deliver_once(msg)
                return
            except RETRYABLE_ERRORS as exc:
                if attempt + 1 >= attempts or cancelled.is_set():
                    raise
                delay = self.retry.delay_for(attempt)
                logger.warning(
                    "SMTP attempt %d/%d failed (%s); retrying in %.2fs",
                    attempt + 1,
                    attempts,
                    type(exc).__name__,
                    delay,
                )
                if self._sleep is not None:
                    self._sleep(delay)
                else:
                    cancelled.wait(delay)
                if cancelled.is_set():
                    raise

    def send(self, recipient: str, code: str, purpose: str, ttl_minutes: int) -> bool:
        msg = self.compose(recipient, code, purpose, ttl_minutes)
        cancelled = threading.Event()
        future: Future[None] = self._executor.submit(self._deliver_with_retry, msg, cancelled)
        try:
            future.result(timeout=self.timeout)
        except FutureTimeout:
            cancelled.set()
            logger.error("SMTP delivery exceeded %.1fs deadline", self.timeout)
            return False
        except (smtplib.SMTPException, OSError):
            logger.error("SMTP delivery failed", exc_info=True)
            return False
        return True

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
