"""Order confirmation emails."""
import asyncio
import logging
import smtplib
from email.message import EmailMessage

from app.services.notifications.base import Notifier, OrderConfirmation

logger = logging.getLogger(__name__)

SUBJECT = "Order Confirmation"


def render_confirmation_text(confirmation: OrderConfirmation, business_name: str) -> str:
    """Render the plain-text confirmation body."""
    item_lines = "\n".join(
        f"{index}. {line.quantity} x {line.item_name}"
        for index, line in enumerate(confirmation.items, start=1)
    )
    return (
        f"Hello {confirmation.full_name},\n"
        "\n"
        "Thank you for your order! Here are your order details:\n"
        "\n"
        f"Order ID: {confirmation.order_id}\n"
        f"Total Price: ${confirmation.total_price:.2f}\n"
        f"Delivery Date: {confirmation.delivery_date.date().isoformat()}\n"
        "\n"
        "Items Ordered:\n"
        f"{item_lines}\n"
        "\n"
        "We hope you enjoy your meal!\n"
        "\n"
        "Best regards,\n"
        f"{business_name} Team\n"
    )


class SmtpNotifier(Notifier):
    """Sends confirmations through an SMTP relay with STARTTLS."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        business_name: str,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.business_name = business_name
        self.timeout = timeout

    def build_message(self, confirmation: OrderConfirmation) -> EmailMessage:
        """Build the email for a confirmation."""
        message = EmailMessage()
        message["From"] = self.username
        message["To"] = confirmation.recipient
        message["Subject"] = SUBJECT
        message.set_content(render_confirmation_text(confirmation, self.business_name))
        return message

    def _send(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            smtp.starttls()
            smtp.login(self.username, self.password)
            smtp.send_message(message)

    async def send_order_confirmation(self, confirmation: OrderConfirmation) -> None:
        message = self.build_message(confirmation)
        # smtplib blocks; keep it off the event loop
        await asyncio.to_thread(self._send, message)
        logger.info(
            f"Order confirmation email sent to {confirmation.recipient} "
            f"for order {confirmation.order_id}"
        )


class LoggingNotifier(Notifier):
    """Logs confirmations instead of sending them. Used when mail is not configured."""

    def __init__(self, business_name: str):
        self.business_name = business_name

    async def send_order_confirmation(self, confirmation: OrderConfirmation) -> None:
        logger.info(
            f"Mail not configured, confirmation for order {confirmation.order_id} "
            f"to {confirmation.recipient} not sent"
        )
        logger.debug(render_confirmation_text(confirmation, self.business_name))
