"""Domain entity representing a persisted notification."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class NotificationType(str, Enum):
    """Closed set of notification kinds emitted across the marketplace."""

    # Order lifecycle
    ORDER_PLACED = "order_placed"
    ORDER_CONFIRMED = "order_confirmed"
    ORDER_PROCESSING = "order_processing"
    ORDER_SHIPPED = "order_shipped"
    ORDER_OUT_FOR_DELIVERY = "order_out_for_delivery"
    ORDER_DELIVERED = "order_delivered"
    ORDER_CANCELLED = "order_cancelled"
    ORDER_RETURN_REQUESTED = "order_return_requested"
    ORDER_RETURNED = "order_returned"
    ORDER_REFUNDED = "order_refunded"

    # Payment
    PAYMENT_SUCCESS = "payment_success"
    PAYMENT_FAILED = "payment_failed"
    PAYMENT_PENDING = "payment_pending"
    REFUND_PROCESSED = "refund_processed"

    # Stock
    PRODUCT_RESTOCKED = "product_restocked"
    PRODUCT_LOW_STOCK = "product_low_stock"
    PRODUCT_OUT_OF_STOCK = "product_out_of_stock"
    PRODUCT_PRICE_DROP = "product_price_drop"

    # Affiliate lifecycle
    AFFILIATE_APPLICATION_SUBMITTED = "affiliate_application_submitted"
    AFFILIATE_APPLICATION_APPROVED = "affiliate_application_approved"
    AFFILIATE_APPLICATION_REJECTED = "affiliate_application_rejected"
    AFFILIATE_ACCOUNT_SUSPENDED = "affiliate_account_suspended"
    AFFILIATE_COMMISSION_PENDING = "affiliate_commission_pending"
    AFFILIATE_COMMISSION_CONFIRMED = "affiliate_commission_confirmed"
    AFFILIATE_COMMISSION_CANCELLED = "affiliate_commission_cancelled"
    AFFILIATE_PAYOUT_REQUESTED = "affiliate_payout_requested"
    AFFILIATE_PAYOUT_COMPLETED = "affiliate_payout_completed"
    AFFILIATE_PAYOUT_FAILED = "affiliate_payout_failed"

    # Wallet
    WALLET_CREDITED = "wallet_credited"
    WALLET_DEBITED = "wallet_debited"
    WALLET_FUNDS_RELEASED = "wallet_funds_released"
    WALLET_FUNDS_ON_HOLD = "wallet_funds_on_hold"

    # Account
    USER_REGISTERED = "user_registered"
    USER_EMAIL_VERIFIED = "user_email_verified"
    USER_PASSWORD_RESET_REQUEST = "user_password_reset_request"
    USER_PASSWORD_CHANGED = "user_password_changed"
    USER_PROFILE_UPDATED = "user_profile_updated"

    # Security
    SECURITY_ALERT = "security_alert"
    NEW_LOGIN_DETECTED = "new_login_detected"
    ACCOUNT_LOCKED = "account_locked"

    # Admin / system
    ADMIN_MESSAGE = "admin_message"
    ADMIN_NEW_ORDER = "admin_new_order"
    ADMIN_NEW_AFFILIATE_APPLICATION = "admin_new_affiliate_application"
    SYSTEM_ANNOUNCEMENT = "system_announcement"
    SYSTEM_MAINTENANCE = "system_maintenance"
    BROADCAST_MESSAGE = "broadcast_message"

    # Marketing
    PROMOTIONAL_OFFER = "promotional_offer"
    NEW_ARRIVAL = "new_arrival"
    COUPON_AVAILABLE = "coupon_available"


class NotificationChannel(str, Enum):
    """Delivery mechanisms a notification can request."""

    IN_APP = "in_app"
    EMAIL = "email"
    PUSH = "push"
    SMS = "sms"


class RelatedEntityModel(str, Enum):
    """Domain objects a notification may point back to."""

    ORDER = "Order"
    PRODUCT = "Product"
    USER = "User"
    AFFILIATE = "Affiliate"
    BOOKING = "Booking"
    CATEGORY = "Category"
    WALLET = "Wallet"
    PAYMENT = "Payment"


@dataclass
class ClickAction:
    """Where the client navigates when the notification is opened."""

    url: str
    external: bool = False


@dataclass
class RelatedEntity:
    """Weak reference (id + model name) to the originating domain object."""

    id: str
    model: RelatedEntityModel


@dataclass
class Notification:
    """Channel-agnostic record of something a user should be told about.

    ``recipient_id`` is ``None`` for broadcasts. Read state is set exactly
    once through :meth:`mark_as_read`.
    """

    id: int | None
    recipient_id: int | None
    type: NotificationType
    title: str
    message: str
    channels: list[NotificationChannel] = field(default_factory=list)
    click_action: ClickAction | None = None
    related_entity: RelatedEntity | None = None
    is_read: bool = False
    read_at: datetime | None = None
    expires_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def mark_as_read(self, now: datetime) -> bool:
        """Flag the notification as read; return ``False`` if it already was."""

        if self.is_read:
            return False
        self.is_read = True
        self.read_at = now
        return True

    def has_channel(self, channel: NotificationChannel) -> bool:
        return channel in self.channels


__all__ = [
    "ClickAction",
    "Notification",
    "NotificationChannel",
    "NotificationType",
    "RelatedEntity",
    "RelatedEntityModel",
]
