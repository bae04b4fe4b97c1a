# storefront/services/notification_service.py
from celery.exceptions import CeleryError
from kombu.exceptions import OperationalError

from storefront.celery_worker import celery_app
from storefront.utils.logging import get_logger
from storefront.utils.settings import NOTIFICATIONS_ENABLED

logger = get_logger(__name__)


class NotificationService:
    """
    Queues customer notifications on Celery.
    Runs after the order is committed, so a broker outage never undoes an order.
    """

    def __init__(self, enabled: bool = NOTIFICATIONS_ENABLED):
        self.enabled = enabled

    def send_order_confirmation(self, subject_id: str, order_id: int) -> bool:
        if not self.enabled:
            logger.debug(f"Notifications disabled, skipping confirmation for order {order_id}")
            return False

        try:
            send_order_confirmation_task.delay(subject_id, order_id)
        except (OperationalError, CeleryError):
            # order is already durable, the customer still sees the confirmation page
            logger.exception(f"Could not queue confirmation for order {order_id}")
            return False
        return True


@celery_app.task(name="storefront.services.notification_service.send_order_confirmation_task")
def send_order_confirmation_task(subject_id: str, order_id: int):
    """
    Worker side of the confirmation. Delivery channels (email, SMS) plug in here.
    """
    logger.info(f"[NOTIFICATION] User {subject_id}: order {order_id} placed, pending payment")
    return {"subject_id": subject_id, "order_id": order_id, "status": "sent"}
