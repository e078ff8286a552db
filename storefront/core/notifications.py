"""User-facing notifications (toasts) and localized messages"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


MESSAGES: dict[str, dict[str, str]] = {
    "es": {
        "load_failed": "Error al cargar el carrito",
        "add_failed": "Error al agregar el producto al carrito",
        "update_failed": "Error al actualizar la cantidad",
        "remove_failed": "Error al eliminar el producto",
        "clear_failed": "Error al vaciar el carrito",
        "checkout_failed": "Error al completar la orden. Intenta de nuevo.",
        "no_cart": "No hay un carrito disponible",
        "quantity_min": "La cantidad debe ser al menos 1",
        "coupon_failed": "Error al aplicar el cupón",
        "coupon_remove_failed": "Error al quitar el cupón",
        "coupon_applied": "Cupón aplicado",
        "coupon_removed": "Cupón eliminado",
        "session_failed": "Error al actualizar la sesión de pago",
        "session_closed": "La sesión de pago ya fue cerrada",
        "order_placed": "¡Orden creada exitosamente!",
        "name_required": "Por favor ingresa tu nombre",
        "email_required": "Por favor ingresa tu email",
        "email_invalid": "Por favor ingresa un email válido",
        "address_required": "Por favor ingresa tu dirección de envío",
        "city_required": "Por favor ingresa tu ciudad",
        "state_required": "Por favor ingresa tu estado",
        "postal_code_required": "Por favor ingresa tu código postal",
        "billing_address_required": "Por favor ingresa tu dirección de facturación",
        "billing_city_required": "Por favor ingresa la ciudad de facturación",
        "billing_state_required": "Por favor ingresa el estado de facturación",
        "billing_postal_code_required": "Por favor ingresa el código postal de facturación",
    },
    "en": {
        "load_failed": "Could not load the cart",
        "add_failed": "Could not add the product to the cart",
        "update_failed": "Could not update the quantity",
        "remove_failed": "Could not remove the product",
        "clear_failed": "Could not clear the cart",
        "checkout_failed": "Could not complete the order. Please try again.",
        "no_cart": "No cart available",
        "quantity_min": "Quantity must be at least 1",
        "coupon_failed": "Could not apply the coupon",
        "coupon_remove_failed": "Could not remove the coupon",
        "coupon_applied": "Coupon applied",
        "coupon_removed": "Coupon removed",
        "session_failed": "Could not update the checkout session",
        "session_closed": "This checkout session is already closed",
        "order_placed": "Order placed successfully!",
        "name_required": "Please enter your name",
        "email_required": "Please enter your email",
        "email_invalid": "Please enter a valid email",
        "address_required": "Please enter your shipping address",
        "city_required": "Please enter your city",
        "state_required": "Please enter your state",
        "postal_code_required": "Please enter your postal code",
        "billing_address_required": "Please enter your billing address",
        "billing_city_required": "Please enter your billing city",
        "billing_state_required": "Please enter your billing state",
        "billing_postal_code_required": "Please enter your billing postal code",
    },
}

DEFAULT_LOCALE = "es"


def translate(key: str, locale: str = DEFAULT_LOCALE) -> str:
    """Look up a message, falling back to the default locale and then the key"""
    catalog = MESSAGES.get(locale) or MESSAGES[DEFAULT_LOCALE]
    return catalog.get(key) or MESSAGES[DEFAULT_LOCALE].get(key, key)


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass
class Notification:
    """A toast shown to the user"""
    level: NotificationLevel
    message: str
    key: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)


class Notifier:
    """Collects notifications for the current view"""

    def __init__(self, locale: str = DEFAULT_LOCALE):
        self.locale = locale
        self.notifications: list[Notification] = []

    def _push(self, level: NotificationLevel, key: str) -> Notification:
        notification = Notification(level=level, message=translate(key, self.locale), key=key)
        self.notifications.append(notification)
        return notification

    def success(self, key: str) -> Notification:
        return self._push(NotificationLevel.SUCCESS, key)

    def error(self, key: str) -> Notification:
        logger.debug(f"Error notification: {key}")
        return self._push(NotificationLevel.ERROR, key)

    def message(self, key: str) -> str:
        """Localized text without pushing a notification"""
        return translate(key, self.locale)

    @property
    def errors(self) -> list[Notification]:
        return [n for n in self.notifications if n.level == NotificationLevel.ERROR]

    def drain(self) -> list[Notification]:
        """Return and clear pending notifications"""
        pending, self.notifications = self.notifications, []
        return pending


CURRENCY_SYMBOLS = {
    "MXN": "$",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}


def format_currency(amount: float, currency: str = "MXN") -> str:
    """Format an amount for display; values are shown as returned by the backend"""
    symbol = CURRENCY_SYMBOLS.get(currency.upper())
    if symbol is None:
        return f"{amount:,.2f} {currency.upper()}"
    return f"{symbol}{amount:,.2f}"
