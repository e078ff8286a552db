"""
Checkout session flow.

Creates a session for the current cart and drives it through its status
lifecycle. Transitions are checked locally before any call is issued;
a session in a final status is never written to again.
"""

import logging
from typing import Any, Optional

from ..core.notifications import Notifier
from ..core.state import RequestTracker
from ..models.checkout import CheckoutSession, CheckoutStatus, validate_status_transition
from ..services.api_client import BACKEND_ERRORS, failure_reason
from ..services.checkout_session_service import CheckoutSessionService
from .cart_state import CartState

logger = logging.getLogger(__name__)


class CheckoutSessionFlow:
    """Owns the checkout session of one checkout attempt"""

    CREATE = "create"
    UPDATE = "update"

    def __init__(
        self,
        sessions: CheckoutSessionService,
        cart: CartState,
        notifier: Optional[Notifier] = None,
    ):
        self.sessions = sessions
        self.cart = cart
        self.notifier = notifier or cart.notifier
        self.requests = RequestTracker()
        self.session: Optional[CheckoutSession] = None
        self.last_error: Optional[str] = None

    @property
    def is_creating(self) -> bool:
        return self.requests.is_pending(self.CREATE)

    @property
    def is_updating(self) -> bool:
        return self.requests.is_pending(self.UPDATE)

    @property
    def confirmation_path(self) -> Optional[str]:
        return self.session.confirmation_path if self.session else None

    async def start_checkout(
        self,
        shipping_address_id: Optional[str] = None,
        billing_address_id: Optional[str] = None,
    ) -> Optional[CheckoutSession]:
        """Open a session for the current cart"""
        if self.cart.cart is None:
            self.notifier.error("no_cart")
            return None

        self.requests.start(self.CREATE)
        try:
            session = await self.sessions.create(
                self.cart.cart.id,
                shipping_address_id=shipping_address_id,
                billing_address_id=billing_address_id,
            )
        except BACKEND_ERRORS as e:
            logger.error(f"Error creating checkout session: {e}")
            self.requests.fail(self.CREATE, failure_reason(e))
            self.last_error = failure_reason(e)
            self.notifier.error("session_failed")
            return None

        self.requests.succeed(self.CREATE)
        self.session = session
        self.last_error = None
        return session

    def _reject_if_closed(self) -> bool:
        if self.session is None:
            self.last_error = "No checkout session"
            logger.warning("Checkout session update requested before the session was created")
            return True
        if self.session.is_terminal:
            self.last_error = (
                f"Checkout session is in final state '{self.session.status.value}' "
                f"and cannot be modified"
            )
            logger.warning(f"Rejected update of closed checkout session {self.session.id}")
            self.notifier.error("session_closed")
            return True
        return False

    async def _update(self, **changes: Any) -> Optional[CheckoutSession]:
        if self._reject_if_closed():
            return None

        new_status = changes.get("status")
        if new_status is not None:
            is_valid, error = validate_status_transition(self.session.status, CheckoutStatus(new_status))
            if not is_valid:
                logger.warning(f"Checkout session {self.session.id}: {error}")
                self.last_error = error
                return None
            changes["status"] = CheckoutStatus(new_status).value

        self.requests.start(self.UPDATE)
        try:
            session = await self.sessions.update(self.session.id, **changes)
        except BACKEND_ERRORS as e:
            logger.error(f"Error updating checkout session {self.session.id}: {e}")
            self.requests.fail(self.UPDATE, failure_reason(e))
            self.last_error = failure_reason(e)
            self.notifier.error("session_failed")
            return None

        self.requests.succeed(self.UPDATE)
        self.session = session
        self.last_error = None
        return session

    async def set_shipping_method(self, method: str, amount: float) -> Optional[CheckoutSession]:
        return await self._update(shipping_method=method, shipping_amount=amount)

    async def update_shipping_address(self, address_id: str) -> Optional[CheckoutSession]:
        return await self._update(shipping_address_id=address_id)

    async def update_billing_address(self, address_id: str) -> Optional[CheckoutSession]:
        return await self._update(billing_address_id=address_id)

    async def begin_payment(
        self,
        payment_method: str,
        payment_intent_id: Optional[str] = None,
    ) -> Optional[CheckoutSession]:
        """Move the session to payment_pending"""
        changes: dict[str, Any] = {
            "status": CheckoutStatus.PAYMENT_PENDING,
            "payment_method": payment_method,
        }
        if payment_intent_id is not None:
            changes["payment_intent_id"] = payment_intent_id
        return await self._update(**changes)

    async def cancel(self) -> Optional[CheckoutSession]:
        return await self._update(status=CheckoutStatus.CANCELLED)

    async def mark_failed(self) -> Optional[CheckoutSession]:
        return await self._update(status=CheckoutStatus.FAILED)

    async def refresh(self) -> Optional[CheckoutSession]:
        """Re-read the session; a failed read keeps the last known state"""
        if self.session is None:
            return None

        try:
            self.session = await self.sessions.get_by_id(self.session.id)
        except BACKEND_ERRORS as e:
            logger.error(f"Error loading checkout session {self.session.id}: {e}")
            self.last_error = failure_reason(e)
        return self.session
