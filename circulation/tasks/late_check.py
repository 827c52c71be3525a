# circulation/tasks/late_check.py
from datetime import timedelta

from flask import current_app

from circulation.extensions import db
from circulation.repositories.borrow_repo import BorrowRepo
from circulation.repositories.notification_repo import NotificationRepo
from circulation.services.mail_service import MailService
from circulation.services.reservation_service import ReservationService
from circulation.utils.clock import utcnow


def send_reminders(now=None) -> dict:
    """
    Mails members about overdue and soon-due open borrows, once per borrow and type.
    Payments are never created here; they only come from late returns.
    """
    now = now or utcnow()
    due_soon_limit = now + timedelta(days=current_app.config.get("DUE_SOON_DAYS", 7))

    overdue_rows = BorrowRepo.find_overdue(now)
    due_soon_rows = BorrowRepo.find_due_between(now, due_soon_limit)

    mail_overdue_sent = 0
    mail_due_soon_sent = 0

    try:
        for b in overdue_rows:
            if NotificationRepo.already_sent(b.id, "overdue_mail"):
                continue
            if MailService.send_overdue_mail(b):
                mail_overdue_sent += 1

        for b in due_soon_rows:
            if NotificationRepo.already_sent(b.id, "due_soon_mail"):
                continue
            if MailService.send_due_soon_mail(b):
                mail_due_soon_sent += 1

        # single commit for the notification log
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    return {
        "overdue": len(overdue_rows),
        "due_soon": len(due_soon_rows),
        "mail_overdue_sent": mail_overdue_sent,
        "mail_due_soon_sent": mail_due_soon_sent,
    }


def run_late_check_job(app):
    """
    Periodic job:
    - overdue / due-soon reminder mails
    - retry of reservation fulfillments that failed during a return
    """
    with app.app_context():
        try:
            now = utcnow()
            stats = send_reminders(now)
            fulfilled = ReservationService.retry_pending_fulfillments(now)

            current_app.logger.info(
                f"[late_check] overdue={stats['overdue']} due_soon={stats['due_soon']} "
                f"mail_overdue_sent={stats['mail_overdue_sent']} "
                f"mail_due_soon_sent={stats['mail_due_soon_sent']} "
                f"reservations_fulfilled={len(fulfilled)}"
            )
            return stats, fulfilled

        except Exception as e:
            current_app.logger.exception(f"[late_check] error: {e}")
            raise
