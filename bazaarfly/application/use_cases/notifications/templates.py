"""Email templates rendered for each notification kind.

The catalog maps a :class:`NotificationType` to a payload dataclass and a
render function. Payload dataclasses document which fields a template needs:
fields without a default are required, the rest are optional. Callers hand
over a loose ``{key: value}`` mapping (camelCase or snake_case keys); missing
required fields are rendered as ``"-"`` instead of failing the send.

Kinds without an entry have no bespoke template and ``render`` returns
``None`` for them.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from bazaarfly.domain.entities import NotificationType
from bazaarfly.utils import now_in_app_timezone

logger = logging.getLogger(__name__)

PLACEHOLDER = "-"
BRAND_NAME = "Bazaarfly"
CURRENCY = "BDT"


@dataclass(frozen=True)
class RenderedEmail:
    """Subject and HTML body ready to hand to the mailer."""

    subject: str
    html: str


@dataclass(frozen=True)
class TemplateEntry:
    payload_cls: type
    render: Callable[[Any], RenderedEmail]


class TemplateCatalog:
    """Registry of ``NotificationType -> template`` built once at import."""

    def __init__(self) -> None:
        self._entries: dict[NotificationType, TemplateEntry] = {}

    def register(
        self, *types: NotificationType, payload: type
    ) -> Callable[[Callable[[Any], RenderedEmail]], Callable[[Any], RenderedEmail]]:
        """Decorator registering ``render`` for every kind in ``types``."""

        def decorator(render: Callable[[Any], RenderedEmail]) -> Callable[[Any], RenderedEmail]:
            for notification_type in types:
                if notification_type in self._entries:
                    msg = f"A template is already registered for {notification_type.value}"
                    raise ValueError(msg)
                self._entries[notification_type] = TemplateEntry(payload, render)
            return render

        return decorator

    def has_template(self, notification_type: NotificationType) -> bool:
        return notification_type in self._entries

    def registered_types(self) -> frozenset[NotificationType]:
        return frozenset(self._entries)

    def render(
        self, notification_type: NotificationType, payload: Mapping[str, Any]
    ) -> RenderedEmail | None:
        """Render the template for ``notification_type`` or return ``None``."""

        entry = self._entries.get(notification_type)
        if entry is None:
            return None
        data = build_payload(entry.payload_cls, payload, context=notification_type.value)
        return entry.render(data)


def build_payload(payload_cls: type, values: Mapping[str, Any], *, context: str = "") -> Any:
    """Instantiate ``payload_cls`` from a loose mapping of values.

    Each field is looked up by its snake_case name first, then by its
    camelCase spelling.
    """

    kwargs: dict[str, Any] = {}
    missing: list[str] = []
    for payload_field in dataclasses.fields(payload_cls):
        value = _lookup(values, payload_field.name)
        if value is None:
            if payload_field.default is not dataclasses.MISSING:
                continue
            missing.append(payload_field.name)
            value = PLACEHOLDER
        kwargs[payload_field.name] = value

    if missing:
        logger.warning(
            "Template %s rendered with placeholders for missing fields: %s",
            context or payload_cls.__name__,
            ", ".join(missing),
        )
    return payload_cls(**kwargs)


def _lookup(values: Mapping[str, Any], name: str) -> Any:
    for key in (name, _camel_case(name)):
        value = values.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def format_amount(value: Any) -> str:
    """Render ``value`` as ``BDT 1,250.00`` when it is numeric."""

    if isinstance(value, bool):
        return str(value)
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return str(value)
    if not amount.is_finite():
        return str(value)
    return f"{CURRENCY} {amount:,.2f}"


def base_template(content: str) -> str:
    """Wrap ``content`` in the shared branded layout."""

    year = now_in_app_timezone().year
    return f"""
  <!DOCTYPE html>
  <html lang="en">
  <head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{BRAND_NAME} Notification</title>
    <style>
      body {{ font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; background-color: #f4f4f4; margin: 0; padding: 20px; color: #333; }}
      .container {{ max-width: 600px; margin: 0 auto; background-color: #ffffff; border-radius: 8px; overflow: hidden; }}
      .header {{ background-color: #4f46e5; color: white; padding: 20px 30px; text-align: center; }}
      .content {{ padding: 30px; }}
      .content h2 {{ color: #4f46e5; }}
      .content p {{ line-height: 1.6; }}
      .button {{ display: inline-block; background-color: #4f46e5; color: white; padding: 12px 25px; text-decoration: none; border-radius: 5px; font-weight: bold; margin-top: 20px; }}
      .footer {{ background-color: #f9fafb; padding: 20px; text-align: center; font-size: 12px; color: #6b7280; }}
    </style>
  </head>
  <body>
    <div class="container">
      <div class="header"><h1>{BRAND_NAME}</h1></div>
      <div class="content">
        {content}
      </div>
      <div class="footer">
        <p>&copy; {year} {BRAND_NAME}. All rights reserved.</p>
        <p>This is an automated message, please do not reply to this email.</p>
      </div>
    </div>
  </body>
  </html>
"""


def _email(subject: str, content: str) -> RenderedEmail:
    return RenderedEmail(subject=subject, html=base_template(content))


def _paragraphs(lines: Iterable[str]) -> str:
    return "".join(f"<p>{line}</p>" for line in lines)


default_catalog = TemplateCatalog()


# -------- Account --------


@dataclass(frozen=True)
class WelcomePayload:
    name: str


@default_catalog.register(NotificationType.USER_REGISTERED, payload=WelcomePayload)
def welcome_email(data: WelcomePayload) -> RenderedEmail:
    return _email(
        f"Welcome to {BRAND_NAME}!",
        f"<h2>Welcome, {data.name}!</h2>"
        + _paragraphs(
            (
                f"Thank you for joining {BRAND_NAME}. We are delighted to have you with us.",
                "Your account has been created. You can now browse thousands of "
                "products and start shopping.",
            )
        ),
    )


@dataclass(frozen=True)
class EmailVerificationPayload:
    name: str
    link: str


@default_catalog.register(
    NotificationType.USER_EMAIL_VERIFIED, payload=EmailVerificationPayload
)
def email_verification_email(data: EmailVerificationPayload) -> RenderedEmail:
    return _email(
        "Verify your email address",
        f"<h2>Verify your email address, {data.name}</h2>"
        "<p>To keep your account secure, please confirm your email address "
        "using the button below.</p>"
        f'<a href="{data.link}" class="button">Verify email</a>'
        "<p>If the button does not work, copy this link into your browser:</p>"
        f"<p>{data.link}</p>"
        "<p>This link is valid for 24 hours.</p>",
    )


@dataclass(frozen=True)
class PasswordResetPayload:
    name: str
    reset_link: str


@default_catalog.register(
    NotificationType.USER_PASSWORD_RESET_REQUEST, payload=PasswordResetPayload
)
def password_reset_email(data: PasswordResetPayload) -> RenderedEmail:
    return _email(
        "Reset your password",
        f"<h2>Reset your password, {data.name}</h2>"
        "<p>We received a request to reset your password. Use the button below "
        "to choose a new one.</p>"
        f'<a href="{data.reset_link}" class="button">Reset password</a>'
        "<p>If you did not request a password reset, you can ignore this email.</p>"
        "<p>This link is valid for 1 hour.</p>",
    )


@dataclass(frozen=True)
class PasswordChangedPayload:
    name: str


@default_catalog.register(
    NotificationType.USER_PASSWORD_CHANGED, payload=PasswordChangedPayload
)
def password_changed_email(data: PasswordChangedPayload) -> RenderedEmail:
    return _email(
        "Your password was changed",
        f"<h2>Hello, {data.name}</h2>"
        + _paragraphs(
            (
                "The password for your account was changed successfully.",
                "If you did not make this change, reset your password immediately "
                "and contact our support team.",
            )
        ),
    )


# -------- Orders --------


@dataclass(frozen=True)
class OrderConfirmationPayload:
    name: str
    order_number: str
    order_link: str


@default_catalog.register(
    NotificationType.ORDER_PLACED,
    NotificationType.ORDER_CONFIRMED,
    payload=OrderConfirmationPayload,
)
def order_confirmation_email(data: OrderConfirmationPayload) -> RenderedEmail:
    return _email(
        f"Your order is confirmed - {data.order_number}",
        "<h2>Your order is confirmed!</h2>"
        f"<p>Thank you, {data.name}!</p>"
        "<p>We have received your order and it is being processed. "
        f"Your order number is <strong>{data.order_number}</strong>.</p>"
        "<p>You can follow the status of your order with the button below.</p>"
        f'<a href="{data.order_link}" class="button">Track order</a>',
    )


@dataclass(frozen=True)
class OrderShippedPayload:
    name: str
    order_number: str
    tracking_id: str


@default_catalog.register(NotificationType.ORDER_SHIPPED, payload=OrderShippedPayload)
def order_shipped_email(data: OrderShippedPayload) -> RenderedEmail:
    return _email(
        f"Your order {data.order_number} has shipped",
        "<h2>Your order is on its way!</h2>"
        f"<p>Good news, {data.name}!</p>"
        f"<p>Order <strong>{data.order_number}</strong> has been handed to our "
        "delivery partner.</p>"
        f"<p>Tracking ID: <strong>{data.tracking_id}</strong></p>",
    )


@dataclass(frozen=True)
class OrderDeliveredPayload:
    name: str
    order_number: str


@default_catalog.register(NotificationType.ORDER_DELIVERED, payload=OrderDeliveredPayload)
def order_delivered_email(data: OrderDeliveredPayload) -> RenderedEmail:
    return _email(
        f"Order {data.order_number} delivered",
        "<h2>Your order has been delivered</h2>"
        f"<p>Hi {data.name},</p>"
        f"<p>Order <strong>{data.order_number}</strong> was delivered. "
        "We hope you enjoy your purchase!</p>",
    )


@dataclass(frozen=True)
class OrderCancelledPayload:
    name: str
    order_number: str
    reason: str | None = None


@default_catalog.register(NotificationType.ORDER_CANCELLED, payload=OrderCancelledPayload)
def order_cancelled_email(data: OrderCancelledPayload) -> RenderedEmail:
    reason = f"<p><strong>Reason:</strong> {data.reason}</p>" if data.reason else ""
    return _email(
        f"Order {data.order_number} cancelled",
        "<h2>Your order was cancelled</h2>"
        f"<p>Hi {data.name},</p>"
        f"<p>Order <strong>{data.order_number}</strong> has been cancelled.</p>"
        f"{reason}"
        "<p>If you already paid, the refund will be processed automatically.</p>",
    )


# -------- Payments --------


@dataclass(frozen=True)
class PaymentSuccessPayload:
    name: str
    amount: str | float
    order_number: str


@default_catalog.register(NotificationType.PAYMENT_SUCCESS, payload=PaymentSuccessPayload)
def payment_success_email(data: PaymentSuccessPayload) -> RenderedEmail:
    return _email(
        f"Payment received for order {data.order_number}",
        "<h2>Payment successful</h2>"
        f"<p>Thank you, {data.name}!</p>"
        f"<p>We received your payment of <strong>{format_amount(data.amount)}</strong> "
        f"for order <strong>{data.order_number}</strong>.</p>",
    )


@dataclass(frozen=True)
class PaymentFailedPayload:
    name: str
    amount: str | float


@default_catalog.register(NotificationType.PAYMENT_FAILED, payload=PaymentFailedPayload)
def payment_failed_email(data: PaymentFailedPayload) -> RenderedEmail:
    return _email(
        "Your payment could not be completed",
        "<h2>Payment failed</h2>"
        f"<p>Hi {data.name},</p>"
        f"<p>Your payment of <strong>{format_amount(data.amount)}</strong> could not "
        "be completed. No money was taken from your account.</p>"
        "<p>Please try again or choose another payment method.</p>",
    )


# -------- Affiliates --------


@dataclass(frozen=True)
class AffiliateApplicationReceivedPayload:
    name: str


@default_catalog.register(
    NotificationType.AFFILIATE_APPLICATION_SUBMITTED,
    payload=AffiliateApplicationReceivedPayload,
)
def affiliate_application_received_email(
    data: AffiliateApplicationReceivedPayload,
) -> RenderedEmail:
    return _email(
        "We received your affiliate application",
        "<h2>Your affiliate application has been received!</h2>"
        f"<p>Welcome, {data.name}!</p>"
        + _paragraphs(
            (
                "Our team is reviewing your application to join the affiliate "
                "program and will get back to you shortly.",
                "Once approved you can start earning by promoting our products.",
            )
        ),
    )


@dataclass(frozen=True)
class AffiliateApplicationApprovedPayload:
    name: str
    affiliate_code: str


@default_catalog.register(
    NotificationType.AFFILIATE_APPLICATION_APPROVED,
    payload=AffiliateApplicationApprovedPayload,
)
def affiliate_application_approved_email(
    data: AffiliateApplicationApprovedPayload,
) -> RenderedEmail:
    return _email(
        f"Congratulations! You are now a {BRAND_NAME} affiliate!",
        f"<h2>Congratulations! You are now a {BRAND_NAME} affiliate!</h2>"
        f"<p>Great news, {data.name}!</p>"
        "<p>Your affiliate application was approved.</p>"
        f"<p>Your affiliate code: <strong>{data.affiliate_code}</strong></p>"
        "<p>Log in to your dashboard to create your links and start earning.</p>",
    )


@dataclass(frozen=True)
class AffiliateApplicationRejectedPayload:
    name: str
    reason: str | None = None


@default_catalog.register(
    NotificationType.AFFILIATE_APPLICATION_REJECTED,
    payload=AffiliateApplicationRejectedPayload,
)
def affiliate_application_rejected_email(
    data: AffiliateApplicationRejectedPayload,
) -> RenderedEmail:
    reason = f"<p><strong>Reason:</strong> {data.reason}</p>" if data.reason else ""
    return _email(
        "Update on your affiliate application",
        f"<p>Hi {data.name},</p>"
        "<p>Thank you for your interest in the affiliate program. "
        "Unfortunately we cannot approve your application at this time.</p>"
        f"{reason}",
    )


@dataclass(frozen=True)
class NewAffiliateApplicationPayload:
    name: str
    email: str
    application_id: str


@default_catalog.register(
    NotificationType.ADMIN_NEW_AFFILIATE_APPLICATION,
    payload=NewAffiliateApplicationPayload,
)
def new_affiliate_application_email(data: NewAffiliateApplicationPayload) -> RenderedEmail:
    return _email(
        f"New affiliate application: {data.name}",
        "<h2>New affiliate application</h2>"
        "<p>A user has applied to join the affiliate program.</p>"
        f"<p><strong>Name:</strong> {data.name}</p>"
        f"<p><strong>Email:</strong> {data.email}</p>"
        f"<p><strong>Application ID:</strong> {data.application_id}</p>"
        "<p>Log in to the admin panel to review the application.</p>",
    )


# -------- Wallet --------


@dataclass(frozen=True)
class WalletCommissionPayload:
    name: str
    amount: str | float
    order_id: str


@default_catalog.register(
    NotificationType.WALLET_FUNDS_RELEASED,
    NotificationType.AFFILIATE_COMMISSION_CONFIRMED,
    payload=WalletCommissionPayload,
)
def wallet_commission_email(data: WalletCommissionPayload) -> RenderedEmail:
    amount = format_amount(data.amount)
    return _email(
        f"{amount} added to your wallet",
        "<h2>Commission credited</h2>"
        f"<p>Hi {data.name},</p>"
        f"<p><strong>{amount}</strong> from order <strong>{data.order_id}</strong> "
        "is now available in your wallet.</p>",
    )


@dataclass(frozen=True)
class PayoutSuccessPayload:
    name: str
    amount: str | float
    method: str


@default_catalog.register(
    NotificationType.AFFILIATE_PAYOUT_COMPLETED, payload=PayoutSuccessPayload
)
def payout_success_email(data: PayoutSuccessPayload) -> RenderedEmail:
    amount = format_amount(data.amount)
    return _email(
        "Your payout has been sent",
        "<h2>Payout completed</h2>"
        f"<p>Hi {data.name},</p>"
        f"<p>We sent <strong>{amount}</strong> via <strong>{data.method}</strong>. "
        "It may take a little while to appear in your account.</p>",
    )


# -------- Security --------


@dataclass(frozen=True)
class SecurityAlertPayload:
    name: str
    detail: str | None = None


@default_catalog.register(
    NotificationType.SECURITY_ALERT,
    NotificationType.NEW_LOGIN_DETECTED,
    payload=SecurityAlertPayload,
)
def security_alert_email(data: SecurityAlertPayload) -> RenderedEmail:
    detail = f"<p>{data.detail}</p>" if data.detail else ""
    return _email(
        "Security alert for your account",
        "<h2>Security alert</h2>"
        f"<p>Hi {data.name},</p>"
        "<p>We noticed activity on your account that we want you to know about.</p>"
        f"{detail}"
        "<p>If this was not you, change your password right away.</p>",
    )


# -------- Admin / system --------


@dataclass(frozen=True)
class AdminAlertPayload:
    title: str
    message: str


@default_catalog.register(
    NotificationType.ADMIN_MESSAGE,
    NotificationType.SYSTEM_ANNOUNCEMENT,
    payload=AdminAlertPayload,
)
def admin_alert_email(data: AdminAlertPayload) -> RenderedEmail:
    return _email(
        data.title,
        f"<h2>{data.title}</h2><p>{data.message}</p>",
    )


@dataclass(frozen=True)
class ContactAutoReplyPayload:
    name: str


@default_catalog.register(
    NotificationType.BROADCAST_MESSAGE, payload=ContactAutoReplyPayload
)
def contact_auto_reply_email(data: ContactAutoReplyPayload) -> RenderedEmail:
    return _email(
        f"Thanks for contacting {BRAND_NAME}",
        f"<h2>Hi {data.name},</h2>"
        + _paragraphs(
            (
                "Thank you for reaching out. Our support team has received your "
                "message and will reply as soon as possible.",
            )
        ),
    )


# -------- Marketing --------


@dataclass(frozen=True)
class PromotionalPayload:
    title: str
    description: str
    link: str


@default_catalog.register(NotificationType.PROMOTIONAL_OFFER, payload=PromotionalPayload)
def promotional_email(data: PromotionalPayload) -> RenderedEmail:
    return _email(
        data.title,
        f"<h2>{data.title}</h2>"
        f"<p>{data.description}</p>"
        f'<a href="{data.link}" class="button">Shop now</a>',
    )


__all__ = [
    "PLACEHOLDER",
    "RenderedEmail",
    "TemplateCatalog",
    "TemplateEntry",
    "base_template",
    "build_payload",
    "default_catalog",
    "format_amount",
]
