from circulation.models.notification_log import NotificationLog


class NotificationRepo:
    @staticmethod
    def already_sent(borrow_id: int, notif_type: str) -> bool:
        return NotificationLog.query.filter_by(borrow_id=borrow_id, type=notif_type).first() is not None
