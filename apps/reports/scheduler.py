"""
Scheduled report dispatch.

A ReportScheduler evaluates every active scheduled report on each tick:

    Idle → Due → Generating → Sending → Sent
    Generating | Sending → Failed → Idle

A report is due when the first cron fire instant strictly after its lastSent
(or the Unix epoch if it was never sent) is at or before the tick time.
lastSent only advances after the mail collaborator confirms delivery, so a
failed generation or send is retried on the next tick.

Overlapping ticks are skipped: a per-instance lock covers one process and a
cache lock covers workers that share a cache backend. Each report is
isolated: an error while dispatching one marks it failed and the tick moves
on to the next.
"""

import json
import logging
import threading
import uuid
from datetime import datetime, timezone as dt_timezone

from croniter import croniter
from django.conf import settings
from django.core.cache import cache
from django.core.serializers.json import DjangoJSONEncoder
from django.db import connections, models
from django.utils import timezone

from .models import ScheduledReport
from .services import generate_custom_report
from apps.notifications.services import send_report_email

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=dt_timezone.utc)
TICK_LOCK_KEY = 'reports:scheduler:tick'


class DispatchState(models.TextChoices):
    IDLE = 'idle', 'Idle'
    DUE = 'due', 'Due'
    GENERATING = 'generating', 'Generating'
    SENDING = 'sending', 'Sending'
    SENT = 'sent', 'Sent'
    FAILED = 'failed', 'Failed'


def next_fire_after(cron_expression, anchor):
    """First fire instant of a cron expression strictly after anchor, in local time."""
    base = timezone.localtime(anchor)
    return croniter(cron_expression, base).get_next(datetime)


def is_due(report, now):
    """Check whether a scheduled report should be dispatched at now."""
    if not report.is_active or not report.cron_expression:
        return False

    anchor = report.last_sent_at or EPOCH
    try:
        fire_at = next_fire_after(report.cron_expression, anchor)
    except (ValueError, KeyError) as e:
        logger.error(f'Report {report.pk} has an invalid cron "{report.cron_expression}": {e}')
        return False
    return fire_at <= now


def format_report_body(report, data):
    """Plain-text mail body: report name, type and JSON-rendered data."""
    rendered = json.dumps(data, indent=2, cls=DjangoJSONEncoder, ensure_ascii=False)
    return f'Report: {report.name}\nType: {report.report_type}\n\nData:\n{rendered}'


class DispatchTimeout(Exception):
    """A generate or send call did not return within the report timeout."""


class ReportScheduler:
    """
    Evaluates and dispatches scheduled reports.

    Args:
        generate: callable(report_id) -> {'report', 'data'}
        send_mail: callable(to, subject, body) -> bool
        clock: callable() -> aware datetime
        report_timeout: Seconds allowed for generating or sending one
            report; falsy runs inline without a timeout. Defaults to
            REPORT_DISPATCH_TIMEOUT.
    """

    def __init__(self, generate=None, send_mail=None, clock=None, report_timeout=None):
        self.generate = generate or generate_custom_report
        self.send_mail = send_mail or send_report_email
        self.clock = clock or timezone.now
        self.report_timeout = (
            report_timeout if report_timeout is not None
            else settings.REPORT_DISPATCH_TIMEOUT
        )
        self._tick_lock = threading.Lock()

    def tick(self):
        """
        Evaluate every active scheduled report once.

        Returns:
            dict of report id -> DispatchState, or None if the tick was
            skipped because another one is still running
        """
        if not self._tick_lock.acquire(blocking=False):
            logger.warning('Report tick skipped: previous tick still running')
            return None
        try:
            token = uuid.uuid4().hex
            if not cache.add(TICK_LOCK_KEY, token, timeout=settings.REPORT_TICK_LOCK_TIMEOUT):
                logger.warning('Report tick skipped: another worker holds the tick lock')
                return None
            try:
                return self._run_tick()
            finally:
                # Only release our own lock; it may have expired and been re-taken
                if cache.get(TICK_LOCK_KEY) == token:
                    cache.delete(TICK_LOCK_KEY)
                else:
                    logger.warning('Report tick lock expired before the tick finished')
        finally:
            self._tick_lock.release()

    def _run_tick(self):
        now = self.clock()
        reports = ScheduledReport.objects.scheduled().select_related('owner').order_by('pk')

        results = {}
        for report in reports:
            try:
                results[report.pk] = self.evaluate(report, now)
            except Exception:
                logger.exception(f'Unexpected error while dispatching report {report.pk}')
                results[report.pk] = DispatchState.FAILED

        sent = sum(1 for state in results.values() if state == DispatchState.SENT)
        failed = sum(1 for state in results.values() if state == DispatchState.FAILED)
        logger.info(
            f'Report tick at {now.isoformat()}: {len(results)} evaluated, '
            f'{sent} sent, {failed} failed'
        )
        return results

    def evaluate(self, report, now):
        """Dispatch a report if it is due; return its final state."""
        try:
            due = is_due(report, now)
        except ValueError as e:
            logger.error(f'Report {report.pk} skipped: {e}')
            return DispatchState.IDLE
        if not due:
            return DispatchState.IDLE
        return self.dispatch(report, now)

    def dispatch(self, report, now):
        """
        Generate and mail one due report.

        lastSent is set to now only after the mail is accepted.
        """
        logger.debug(f'Report {report.pk}: {DispatchState.DUE} → {DispatchState.GENERATING}')
        try:
            result = self._run(self.generate, report.pk)
            recipient = report.recipient_email
            subject = f'Scheduled Report: {report.name}'
            body = format_report_body(report, result['data'])
        except DispatchTimeout:
            logger.error(f'Generating report {report.pk} timed out after {self.report_timeout}s')
            return DispatchState.FAILED
        except Exception:
            logger.exception(f'Failed to generate report {report.pk}')
            return DispatchState.FAILED

        logger.debug(f'Report {report.pk}: {DispatchState.GENERATING} → {DispatchState.SENDING}')
        try:
            sent = self._run(self.send_mail, recipient, subject, body)
        except DispatchTimeout:
            logger.error(f'Sending report {report.pk} timed out after {self.report_timeout}s')
            return DispatchState.FAILED
        except Exception:
            logger.exception(f'Failed to send report {report.pk} to {recipient}')
            return DispatchState.FAILED

        if not sent:
            logger.error(f'Mail transport did not accept report {report.pk} for {recipient}')
            return DispatchState.FAILED

        try:
            report.mark_sent(now)
        except Exception:
            logger.exception(
                f'Report {report.pk} was mailed to {recipient} but lastSent was not saved'
            )
            return DispatchState.FAILED

        logger.info(f'Sent report {report.pk} to {recipient}')
        return DispatchState.SENT

    def _run(self, func, *args):
        if not self.report_timeout:
            return func(*args)

        outcome = {}

        def target():
            try:
                outcome['value'] = func(*args)
            except Exception as e:
                outcome['error'] = e
            finally:
                connections.close_all()

        # Daemon thread: a hung call is abandoned and never blocks shutdown
        worker = threading.Thread(target=target, name='report-dispatch', daemon=True)
        worker.start()
        worker.join(self.report_timeout)
        if worker.is_alive():
            raise DispatchTimeout(f'{getattr(func, "__name__", func)} still running')
        if 'error' in outcome:
            raise outcome['error']
        return outcome['value']


_default_scheduler = None
_default_scheduler_lock = threading.Lock()


def get_scheduler():
    """The process-wide scheduler used by the Django-Q2 job."""
    global _default_scheduler
    with _default_scheduler_lock:
        if _default_scheduler is None:
            _default_scheduler = ReportScheduler()
        return _default_scheduler
