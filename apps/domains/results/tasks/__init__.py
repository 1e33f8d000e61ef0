from .notification_tasks import send_result_ready_emails

__all__ = ["send_result_ready_emails"]
