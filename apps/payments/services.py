import logging

import razorpay
from django.db import transaction

from .models import Payment, PaymentStatus, WebhookLog
from .processors import RazorpayProcessor

logger = logging.getLogger(__name__)


class PaymentService:
    """
    Gateway callbacks. Capturing happens in the processors; this is the
    other half, where Razorpay tells us how it went.
    """

    @staticmethod
    def verify_webhook_signature(body: str, signature: str, secret: str) -> bool:
        client = RazorpayProcessor.get_client()
        try:
            client.utility.verify_webhook_signature(body, signature, secret)
            return True
        except razorpay.errors.SignatureVerificationError:
            return False

    @staticmethod
    def event_id_for(event_data: dict) -> str:
        entity = event_data.get("payload", {}).get("payment", {}).get("entity", {})
        return f"{event_data.get('event', '')}_{entity.get('id', '')}"

    @staticmethod
    def process_webhook(event_data: dict, event_id: str = None):
        """
        Idempotent webhook processor.
        Handles: payment.captured, payment.failed
        """
        event_id = event_id or PaymentService.event_id_for(event_data)

        if WebhookLog.objects.filter(event_id=event_id, is_processed=True).exists():
            logger.info(f"Skipping duplicate webhook event: {event_id}")
            return None

        event_type = event_data.get("event")
        entity = event_data.get("payload", {}).get("payment", {}).get("entity", {})
        gateway_order_id = entity.get("order_id")

        logger.info(f"Processing webhook {event_type} for gateway order {gateway_order_id}")

        with transaction.atomic():
            webhook_log, _ = WebhookLog.objects.get_or_create(event_id=event_id, defaults={"payload": event_data})

            payment = (
                Payment.objects.select_for_update()
                .filter(gateway_order_id=gateway_order_id)
                .first()
                if gateway_order_id else None
            )

            if payment is None:
                # Nothing to retry against, mark it done
                logger.error(f"Payment not found for gateway order {gateway_order_id}")
            elif event_type == "payment.captured":
                PaymentService._handle_success(payment, entity)
            elif event_type == "payment.failed":
                PaymentService._handle_failure(payment, entity)
            else:
                logger.info(f"Ignoring webhook event {event_type}")

            webhook_log.is_processed = True
            webhook_log.save(update_fields=["is_processed", "updated_at"])

        return payment

    @staticmethod
    def _handle_success(payment, entity):
        if payment.status == PaymentStatus.SUCCESS:
            return
        payment.status = PaymentStatus.SUCCESS
        payment.transaction_id = entity.get("id", "")
        payment.gateway_response = entity
        payment.save()

    @staticmethod
    def _handle_failure(payment, entity):
        if payment.status == PaymentStatus.SUCCESS:
            logger.warning(
                f"Ignoring failure for already successful payment {payment.pk}",
                extra={"payment_id": payment.pk, "order_id": payment.order_id},
            )
            return
        payment.status = PaymentStatus.FAILURE
        payment.transaction_id = entity.get("id", "")
        payment.gateway_response = entity
        payment.error_message = entity.get("error_description") or "Payment Failed"
        payment.save()
        logger.info(
            f"Payment failed for order {payment.order_id}",
            extra={"payment_id": payment.pk, "order_id": payment.order_id},
        )
