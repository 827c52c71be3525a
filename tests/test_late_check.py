from datetime import datetime, timedelta

from circulation.extensions import db, mail
from circulation.models.borrow import Borrow
from circulation.models.member import Member
from circulation.models.notification_log import NotificationLog
from circulation.models.payment import Payment
from circulation.services.circulation_service import CirculationService
from circulation.services.reservation_service import ReservationService
from circulation.tasks.late_check import run_late_check_job, send_reminders
from circulation.tasks import scheduler as scheduler_module

NOW = datetime(2025, 4, 1, 10, 0)


def test_reminders_sent_once_per_borrow(library):
    overdue = CirculationService.borrow_book(1001, 1, 2005, now=NOW - timedelta(days=20))
    due_soon = CirculationService.borrow_book(1030, 3, 2005, now=NOW - timedelta(days=10))

    with mail.record_messages() as outbox:
        stats = send_reminders(NOW)

    assert stats == {"overdue": 1, "due_soon": 1, "mail_overdue_sent": 1, "mail_due_soon_sent": 1}
    assert sorted(m.recipients[0] for m in outbox) == ["mostafa@example.com", "sara@example.com"]
    assert NotificationLog.query.filter_by(borrow_id=overdue.id, type="overdue_mail").count() == 1
    assert NotificationLog.query.filter_by(borrow_id=due_soon.id, type="due_soon_mail").count() == 1

    stats = send_reminders(NOW + timedelta(hours=1))
    assert stats["mail_overdue_sent"] == 0
    assert stats["mail_due_soon_sent"] == 0


def test_reminders_never_bill(library):
    CirculationService.borrow_book(1001, 1, 2005, now=NOW - timedelta(days=40))
    send_reminders(NOW)
    assert Payment.query.count() == 0


def test_member_without_email_is_logged_as_failure(library):
    db.session.get(Member, 1037).email = None
    db.session.commit()
    b = CirculationService.borrow_book(1037, 1, 2005, now=NOW - timedelta(days=20))

    stats = send_reminders(NOW)

    assert stats["mail_overdue_sent"] == 0
    log = NotificationLog.query.filter_by(borrow_id=b.id).one()
    assert log.success is False
    assert log.error_message == "missing_email"


def test_job_runs_reminders_and_reservation_sweep(library):
    ReservationService.enqueue(117, 1037, now=NOW)
    # the job opens its own app context and session
    db.session.close()

    stats, fulfilled = run_late_check_job(library)

    assert stats["overdue"] == 0
    assert len(fulfilled) == 1
    assert Borrow.query.filter_by(member_id=1037).count() == 1


def test_scheduler_disabled_by_config(library):
    assert scheduler_module.start_scheduler(library) is None


def test_scheduler_registers_interval_job(library, monkeypatch):
    class FakeScheduler:
        def __init__(self, timezone):
            self.timezone = timezone
            self.jobs = []
            self.started = False

        def add_job(self, **kwargs):
            self.jobs.append(kwargs)

        def start(self):
            self.started = True

    monkeypatch.setattr(scheduler_module, "BackgroundScheduler", FakeScheduler)
    library.config["SCHEDULER_ENABLED"] = True
    library.config["LATE_CHECK_INTERVAL_MINUTES"] = 5

    sch = scheduler_module.start_scheduler(library)

    assert sch.started is True
    assert sch.timezone == "UTC"
    assert [j["id"] for j in sch.jobs] == ["late_check_job"]
    assert sch.jobs[0]["max_instances"] == 1
    assert library.extensions["apscheduler"] is sch
