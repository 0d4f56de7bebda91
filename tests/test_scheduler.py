"""
Tests for scheduled report dispatch.
"""

import threading
from unittest import mock

from django.core import mail
from django.core.cache import cache
from django.db import DatabaseError
from django.test import TestCase

from apps.accounts.models import User
from apps.reports.models import ScheduledReport
from apps.reports.scheduler import (
    DispatchState, ReportScheduler, TICK_LOCK_KEY,
    format_report_body, is_due, next_fire_after,
)
from tests.utils import local_datetime, make_user

MONDAY_0805 = local_datetime(2024, 6, 3, 8, 5)


class FakeClock:

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


class FakeMailer:

    def __init__(self, result=True):
        self.result = result
        self.sent = []

    def __call__(self, to, subject, body):
        self.sent.append((to, subject, body))
        return self.result


class FakeGenerator:

    def __init__(self, failures=0):
        self.failures = failures
        self.calls = []

    def __call__(self, report_id):
        self.calls.append(report_id)
        if len(self.calls) <= self.failures:
            raise RuntimeError('report store unavailable')
        return {'report': None, 'data': {'report_id': report_id, 'total': 3}}


class SchedulerTestCase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.owner = make_user(role=User.Role.ADMIN, email='owner@example.com')

    def setUp(self):
        cache.clear()
        self.clock = FakeClock(MONDAY_0805)
        self.mailer = FakeMailer()
        self.generator = FakeGenerator()

    def make_report(self, cron='0 8 * * 1', last_sent=None, recipient='ops@example.com', **kwargs):
        schedule = {'cron': cron, 'lastSent': last_sent}
        if recipient:
            schedule['recipientEmail'] = recipient
        kwargs.setdefault('name', 'Weekly summary')
        return ScheduledReport.objects.create(
            report_type=ScheduledReport.ReportType.CUSTOM,
            owner=self.owner,
            schedule=schedule,
            **kwargs,
        )

    def make_scheduler(self, **kwargs):
        kwargs.setdefault('generate', self.generator)
        kwargs.setdefault('send_mail', self.mailer)
        kwargs.setdefault('clock', self.clock)
        return ReportScheduler(**kwargs)


class DueRuleTests(SchedulerTestCase):

    def test_next_fire_after_is_strict(self):
        monday_0800 = local_datetime(2024, 6, 3, 8)
        self.assertEqual(next_fire_after('0 8 * * 1', monday_0800), local_datetime(2024, 6, 10, 8))

    def test_never_sent_report_is_due(self):
        self.assertTrue(is_due(self.make_report(), MONDAY_0805))

    def test_due_once_cron_fires_after_last_sent(self):
        report = self.make_report(last_sent=local_datetime(2024, 5, 27, 8, 5).isoformat())

        self.assertFalse(is_due(report, local_datetime(2024, 6, 3, 7, 59)))
        self.assertTrue(is_due(report, local_datetime(2024, 6, 3, 8, 0)))

    def test_invalid_cron_is_never_due(self):
        self.assertFalse(is_due(self.make_report(cron='61 25 * * *'), MONDAY_0805))

    def test_inactive_report_is_never_due(self):
        self.assertFalse(is_due(self.make_report(is_active=False), MONDAY_0805))


class TickTests(SchedulerTestCase):

    def test_due_report_is_sent_once_per_fire(self):
        report = self.make_report()
        scheduler = self.make_scheduler()

        self.assertEqual(scheduler.tick(), {report.pk: DispatchState.SENT})
        report.refresh_from_db()
        self.assertEqual(report.schedule['lastSent'], MONDAY_0805.isoformat())
        self.assertEqual(report.last_sent_at, MONDAY_0805)

        self.clock.now = local_datetime(2024, 6, 3, 9)
        self.assertEqual(scheduler.tick(), {report.pk: DispatchState.IDLE})
        self.assertEqual(len(self.mailer.sent), 1)

    def test_mail_content(self):
        self.make_report()
        self.make_scheduler().tick()

        to, subject, body = self.mailer.sent[0]
        self.assertEqual(to, 'ops@example.com')
        self.assertEqual(subject, 'Scheduled Report: Weekly summary')
        self.assertTrue(body.startswith('Report: Weekly summary\nType: custom\n\nData:\n{'))
        self.assertIn('"total": 3', body)

    def test_recipient_defaults_to_owner(self):
        self.make_report(recipient=None)
        self.make_scheduler().tick()
        self.assertEqual(self.mailer.sent[0][0], 'owner@example.com')

    def test_generation_failure_is_retried_next_tick(self):
        report = self.make_report()
        self.generator.failures = 1
        scheduler = self.make_scheduler()

        self.assertEqual(scheduler.tick(), {report.pk: DispatchState.FAILED})
        report.refresh_from_db()
        self.assertIsNone(report.last_sent_at)
        self.assertEqual(self.mailer.sent, [])

        self.clock.now = local_datetime(2024, 6, 3, 9)
        self.assertEqual(scheduler.tick(), {report.pk: DispatchState.SENT})
        self.assertEqual(self.generator.calls, [report.pk, report.pk])

    def test_rejected_mail_keeps_last_sent(self):
        previous = local_datetime(2024, 5, 27, 8, 5).isoformat()
        report = self.make_report(last_sent=previous)
        self.mailer.result = False

        self.assertEqual(self.make_scheduler().tick(), {report.pk: DispatchState.FAILED})
        report.refresh_from_db()
        self.assertEqual(report.schedule['lastSent'], previous)

    def test_mail_exception_keeps_last_sent(self):
        report = self.make_report()

        def broken_mailer(to, subject, body):
            raise ConnectionError('smtp down')

        result = self.make_scheduler(send_mail=broken_mailer).tick()

        self.assertEqual(result, {report.pk: DispatchState.FAILED})
        report.refresh_from_db()
        self.assertIsNone(report.schedule['lastSent'])

    def test_one_failure_does_not_block_other_reports(self):
        broken = self.make_report(name='Broken', cron='not a cron')
        malformed = self.make_report(name='Malformed', last_sent='yesterday')
        healthy = self.make_report(name='Healthy')

        result = self.make_scheduler().tick()

        self.assertEqual(result, {
            broken.pk: DispatchState.IDLE,
            malformed.pk: DispatchState.IDLE,
            healthy.pk: DispatchState.SENT,
        })

    def test_unserializable_data_fails_only_that_report(self):
        first = self.make_report(name='Sets')
        second = self.make_report(name='Lists')

        def generate(report_id):
            if report_id == first.pk:
                return {'report': None, 'data': {'ids': {1, 2}}}
            return {'report': None, 'data': {'ids': [1, 2]}}

        result = self.make_scheduler(generate=generate).tick()

        self.assertEqual(result, {first.pk: DispatchState.FAILED, second.pk: DispatchState.SENT})
        self.assertEqual(len(self.mailer.sent), 1)
        self.assertEqual(self.mailer.sent[0][1], 'Scheduled Report: Lists')
        first.refresh_from_db()
        self.assertIsNone(first.last_sent_at)

    def test_non_object_schedule_does_not_block_other_reports(self):
        malformed = ScheduledReport.objects.create(
            name='String schedule',
            report_type=ScheduledReport.ReportType.CUSTOM,
            owner=self.owner,
            schedule='0 8 * * 1',
        )
        healthy = self.make_report(name='Healthy')

        result = self.make_scheduler().tick()

        self.assertEqual(result, {malformed.pk: DispatchState.IDLE, healthy.pk: DispatchState.SENT})
        self.assertEqual(self.generator.calls, [healthy.pk])

    def test_failed_last_sent_save_is_reported_as_failure(self):
        report = self.make_report()

        with mock.patch.object(ScheduledReport, 'mark_sent', side_effect=DatabaseError('locked')):
            result = self.make_scheduler().tick()

        self.assertEqual(result, {report.pk: DispatchState.FAILED})
        self.assertEqual(len(self.mailer.sent), 1)
        report.refresh_from_db()
        self.assertIsNone(report.last_sent_at)

    def test_unexpected_error_is_isolated_per_report(self):
        first = self.make_report(name='First')
        second = self.make_report(name='Second')
        real_is_due = is_due

        def flaky_is_due(report, now):
            if report.pk == first.pk:
                raise RuntimeError('cron library crashed')
            return real_is_due(report, now)

        with mock.patch('apps.reports.scheduler.is_due', side_effect=flaky_is_due):
            result = self.make_scheduler().tick()

        self.assertEqual(result, {first.pk: DispatchState.FAILED, second.pk: DispatchState.SENT})
        self.assertIsNone(cache.get(TICK_LOCK_KEY))

    def test_only_active_scheduled_reports_are_evaluated(self):
        self.make_report(is_active=False)
        unscheduled = ScheduledReport.objects.create(
            name='Ad hoc', report_type=ScheduledReport.ReportType.CUSTOM, owner=self.owner,
        )

        result = self.make_scheduler().tick()

        self.assertEqual(result, {})
        self.assertNotIn(unscheduled.pk, result)


class TickGuardTests(SchedulerTestCase):

    def test_tick_skipped_while_cache_lock_is_held(self):
        self.make_report()
        cache.add(TICK_LOCK_KEY, True)

        self.assertIsNone(self.make_scheduler().tick())
        self.assertEqual(self.mailer.sent, [])

    def test_tick_releases_cache_lock(self):
        self.make_scheduler().tick()
        self.assertIsNone(cache.get(TICK_LOCK_KEY))

    def test_expired_lock_taken_by_newer_tick_is_not_released(self):
        self.make_report()

        def generate(report_id):
            # Our lock expired mid-tick and another worker took it over
            cache.set(TICK_LOCK_KEY, 'newer-tick')
            return {'report': None, 'data': {}}

        self.make_scheduler(generate=generate).tick()

        self.assertEqual(cache.get(TICK_LOCK_KEY), 'newer-tick')

    def test_overlapping_tick_on_same_scheduler_is_skipped(self):
        self.make_report()
        scheduler = self.make_scheduler()

        scheduler._tick_lock.acquire()
        try:
            self.assertIsNone(scheduler.tick())
        finally:
            scheduler._tick_lock.release()
        self.assertEqual(self.mailer.sent, [])

    def test_hung_generation_times_out(self):
        release = threading.Event()
        slow = self.make_report(name='Slow')
        fast = self.make_report(name='Fast')

        def generate(report_id):
            if report_id == slow.pk:
                release.wait(5)
            return {'report': None, 'data': {}}

        scheduler = self.make_scheduler(generate=generate, report_timeout=0.05)
        try:
            result = scheduler.tick()
            abandoned = [t for t in threading.enumerate() if t.name == 'report-dispatch']
            self.assertTrue(abandoned)
            self.assertTrue(all(t.daemon for t in abandoned))
        finally:
            release.set()

        self.assertEqual(result[slow.pk], DispatchState.FAILED)
        self.assertEqual(result[fast.pk], DispatchState.SENT)
        slow.refresh_from_db()
        self.assertIsNone(slow.last_sent_at)


class DefaultCollaboratorTests(SchedulerTestCase):

    def test_generates_and_mails_with_defaults(self):
        report = self.make_report(name='Summary')

        result = ReportScheduler(clock=self.clock).tick()

        self.assertEqual(result, {report.pk: DispatchState.SENT})
        self.assertEqual(len(mail.outbox), 1)
        message = mail.outbox[0]
        self.assertEqual(message.to, ['ops@example.com'])
        self.assertEqual(message.subject, 'Scheduled Report: Summary')
        self.assertIn('"by_status"', message.body)

    def test_format_report_body(self):
        report = self.make_report(name='Ops')
        body = format_report_body(report, {'when': local_datetime(2024, 6, 3, 8)})
        self.assertEqual(
            body,
            'Report: Ops\nType: custom\n\nData:\n{\n  "when": "2024-06-03T08:00:00+05:30"\n}',
        )
