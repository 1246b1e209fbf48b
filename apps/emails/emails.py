import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string

logger = logging.getLogger(__name__)


class ProcessedEmail(EmailMultiAlternatives):
    """
    An email with a plain text body and an HTML alternative. The shop CSS
    is embedded in the HTML as a <style> block.
    """
    html_template = None
    text_template = None
    css_template = "css/shop_email.css"

    # Markup that mail clients render badly
    REPLACEMENTS = (
        ("<p>\n<table>", "<table>"),
        ("</table>\n</p>", "</table>"),
        ("&copy ", ""),
    )

    def __init__(self, subject="", from_email=None, to=None, context=None, **kwargs):
        super().__init__(subject=subject, from_email=from_email, to=to, **kwargs)
        self.context = context or {}

    def get_context(self):
        context = dict(self.context)
        context["inline_css"] = f"<style>{render_to_string(self.css_template)}</style>"
        return context

    def clean_html(self, html):
        for old, new in self.REPLACEMENTS:
            html = html.replace(old, new)
        return html

    def render(self):
        context = self.get_context()
        self.body = render_to_string(self.text_template, context)
        html = self.clean_html(render_to_string(self.html_template, context))
        self.alternatives = []
        self.attach_alternative(html, "text/html")

    def send(self, fail_silently=False):
        self.render()
        return super().send(fail_silently=fail_silently)


class ReceiptEmail(ProcessedEmail):
    """Sent to the customer once their order is confirmed."""
    html_template = "emails/order_receipt.html"
    text_template = "emails/order_receipt.txt"

    def __init__(self, customer, order, **kwargs):
        from apps.shop.models import ShopConfig

        shop = ShopConfig.current()
        order = order.as_specific()

        if order.is_standing_order():
            subject = f"Your Standing Order from {settings.SHOP_NAME} - {order.cart_name()}"
        elif shop.receipt_subject:
            subject = f"{shop.receipt_subject} - Order #{order.pk}"
        else:
            subject = f"Order #{order.pk}"

        from_email = shop.receipt_from or settings.SHOP_ADMIN_EMAIL or f"no-reply@{settings.SHOP_DOMAIN}"
        to = [customer.email] if customer.email else []

        context = {
            "message": shop.receipt_body,
            "order": order,
            "customer": customer,
            "signature": shop.email_signature,
            "shop_name": settings.SHOP_NAME,
        }
        super().__init__(subject=subject, from_email=from_email, to=to, context=context, **kwargs)
        self.order = order

    def send(self, fail_silently=False):
        if not self.to:
            logger.warning("Receipt not sent, customer has no email", extra={"order_id": self.order.pk})
            return 0
        sent = super().send(fail_silently=fail_silently)
        logger.info(f"Receipt sent to {self.to[0]}", extra={"order_id": self.order.pk})
        return sent
