import logging

from celery import shared_task

from .services import PaymentService

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=5, default_retry_delay=60)
def process_webhook_event(self, event_data, event_id=None):
    """
    Applies a verified gateway event. Retried when the database is busy.
    """
    try:
        payment = PaymentService.process_webhook(event_data, event_id)
    except Exception as e:
        logger.error(f"Webhook processing failed for {event_id}: {e}")
        raise self.retry(exc=e)
    return payment.pk if payment is not None else None
