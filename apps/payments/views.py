import logging

from django.conf import settings
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from .services import PaymentService
from .tasks import process_webhook_event

logger = logging.getLogger(__name__)


class RazorpayWebhookView(APIView):
    """
    Handles Razorpay webhooks with strict signature verification.
    Idempotency is handled by the webhook log.
    """
    permission_classes = []  # Allow public access for webhook
    authentication_classes = []

    def post(self, request, *args, **kwargs):
        signature = request.headers.get("X-Razorpay-Signature")
        if not signature:
            logger.warning("Razorpay Webhook: Missing Signature")
            return Response(status=status.HTTP_403_FORBIDDEN)

        # Must use the raw request body for verification
        body = request.body.decode("utf-8")
        if not PaymentService.verify_webhook_signature(body, signature, settings.RAZORPAY_WEBHOOK_SECRET):
            logger.critical("Razorpay Webhook: Invalid Signature detected! Possible attack.")
            return Response(status=status.HTTP_403_FORBIDDEN)

        data = request.data
        entity = data.get("payload", {}).get("payment", {}).get("entity", {})
        if not entity.get("order_id") or not entity.get("id"):
            return Response(status=status.HTTP_400_BAD_REQUEST)

        event_id = request.headers.get("X-Razorpay-Event-Id") or PaymentService.event_id_for(data)
        process_webhook_event.delay(data, event_id)
        return Response({"status": "Webhook Received"}, status=status.HTTP_200_OK)
