# marketplace/services/notification_service.py
from kombu.exceptions import OperationalError

from marketplace.celery_worker import celery_app
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Sends buyer notifications.
    Uses Celery so order placement never waits on delivery.
    """

    @staticmethod
    def send_order_notification(buyer_id: str, order_number: str, total_amount: str) -> bool:
        #called after the order is committed, an unreachable broker must not fail the order
        try:
            send_order_notification_task.delay(buyer_id, order_number, total_amount)
        except (OperationalError, ConnectionError) as e:
            logger.error(f"Notification for order {order_number} not queued: {e}")
            return False
        return True


@celery_app.task(name="marketplace.services.notification_service.send_order_notification_task")
def send_order_notification_task(buyer_id: str, order_number: str, total_amount: str):
    """
    Celery task - a real deployment would hand this to an email/SMS provider.
    For now it only logs.
    """
    logger.info(f"[NOTIFICATION] Buyer {buyer_id}: order {order_number} placed, total {total_amount}")

    return {"buyer_id": buyer_id, "order_number": order_number, "status": "sent"}
