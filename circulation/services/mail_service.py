# circulation/services/mail_service.py
from __future__ import annotations

from flask import current_app
from flask_mail import Message

from circulation.extensions import db, mail
from circulation.models.notification_log import NotificationLog
from circulation.utils.clock import utcnow


class MailService:
    @staticmethod
    def send_email(to_email: str, subject: str, body: str) -> tuple[bool, str | None]:
        """
        return: (success, error_text)
        """
        try:
            msg = Message(subject=subject, recipients=[to_email], body=body)
            mail.send(msg)
            return True, None
        except Exception as e:
            current_app.logger.warning(f"[MailService] mail not sent to {to_email}: {e}")
            return False, str(e)

    @staticmethod
    def log_notification(
        borrow_id: int | None,
        notif_type: str,
        to_email: str | None,
        message: str,
        success: bool,
        error: str | None = None,
        commit: bool = False,
    ) -> NotificationLog:
        row = NotificationLog(
            borrow_id=borrow_id,
            type=notif_type,
            email=to_email,
            message=message,
            success=bool(success),
            error_message=error,
            sent_at=utcnow(),
        )
        db.session.add(row)
        if commit:
            db.session.commit()
        return row

    @staticmethod
    def _borrow_labels(borrow):
        member = getattr(borrow, "member", None)
        copy = getattr(borrow, "copy", None)
        book = getattr(copy, "book", None) if copy else None

        to_email = getattr(member, "email", None) if member else None
        fullname = getattr(member, "fullname", "Member") if member else "Member"
        book_title = getattr(book, "title", f"Copy #{getattr(borrow, 'copy_id', '-')}")
        due_date = getattr(borrow, "expected_return_date", None)

        return to_email, fullname, book_title, due_date

    @staticmethod
    def _send_and_log(borrow, notif_type: str, subject: str, body: str, commit: bool) -> bool:
        to_email, _fullname, _title, _due = MailService._borrow_labels(borrow)

        if not to_email:
            MailService.log_notification(
                borrow_id=getattr(borrow, "id", None),
                notif_type=notif_type,
                to_email=None,
                message="Member has no email address",
                success=False,
                error="missing_email",
                commit=commit,
            )
            return False

        ok, err = MailService.send_email(to_email, subject, body)

        MailService.log_notification(
            borrow_id=getattr(borrow, "id", None),
            notif_type=notif_type,
            to_email=to_email,
            message=body if ok else "Mail not sent",
            success=ok,
            error=err,
            commit=commit,
        )
        return ok

    @staticmethod
    def send_overdue_mail(borrow, commit: bool = False) -> bool:
        _to, fullname, book_title, due_date = MailService._borrow_labels(borrow)
        body = (
            f"Hello {fullname},\n\n"
            f"The return date for '{book_title}' has passed.\n"
            f"Expected return date: {due_date}\n\n"
            f"You cannot borrow other books until it is returned.\n"
        )
        return MailService._send_and_log(borrow, "overdue_mail", "Library: overdue book", body, commit)

    @staticmethod
    def send_due_soon_mail(borrow, commit: bool = False) -> bool:
        _to, fullname, book_title, due_date = MailService._borrow_labels(borrow)
        body = (
            f"Hello {fullname},\n\n"
            f"'{book_title}' is due back soon.\n"
            f"Expected return date: {due_date}\n"
        )
        return MailService._send_and_log(borrow, "due_soon_mail", "Library: return date approaching", body, commit)

    @staticmethod
    def send_reservation_ready_mail(borrow, commit: bool = False) -> bool:
        _to, fullname, book_title, due_date = MailService._borrow_labels(borrow)
        body = (
            f"Hello {fullname},\n\n"
            f"A copy of '{book_title}' you reserved has been checked out to you.\n"
            f"Serial number: {borrow.serial_number}\n"
            f"Expected return date: {due_date}\n"
        )
        return MailService._send_and_log(
            borrow, "reservation_ready_mail", "Library: your reserved book is ready", body, commit
        )

    @staticmethod
    def notify_reservation_ready(borrow) -> bool:
        """
        Post-commit notice for a fulfilled reservation. The borrow is already durable,
        so a failing mail or log write is rolled back and logged, never raised.
        """
        borrow_id = getattr(borrow, "id", None)
        try:
            return MailService.send_reservation_ready_mail(borrow, commit=True)
        except Exception as e:
            db.session.rollback()
            current_app.logger.warning(
                f"[MailService] reservation-ready notice for borrow={borrow_id} failed: {e}"
            )
            return False
