"""Checkout step navigation"""

from enum import Enum


class CheckoutStep(str, Enum):
    SHIPPING = "shipping"
    PAYMENT = "payment"
    REVIEW = "review"
    CONFIRMATION = "confirmation"


STEP_ORDER = [
    CheckoutStep.SHIPPING,
    CheckoutStep.PAYMENT,
    CheckoutStep.REVIEW,
    CheckoutStep.CONFIRMATION,
]


class CheckoutStepper:
    """
    Linear stepper: shipping -> payment -> review -> confirmation.

    Going back to a completed step is allowed, skipping ahead is not.
    """

    def __init__(self, current: CheckoutStep = CheckoutStep.SHIPPING):
        self.current = CheckoutStep(current)
        self.completed: set[CheckoutStep] = set()

    @property
    def index(self) -> int:
        return STEP_ORDER.index(self.current)

    def is_completed(self, step: CheckoutStep) -> bool:
        step = CheckoutStep(step)
        return step in self.completed or STEP_ORDER.index(step) < self.index

    def mark_completed(self, step: CheckoutStep) -> None:
        self.completed.add(CheckoutStep(step))

    def can_go_to(self, step: CheckoutStep) -> bool:
        step = CheckoutStep(step)
        return step == self.current or self.is_completed(step)

    def go_to(self, step: CheckoutStep) -> bool:
        """Jump to a completed step (or stay); forward skipping is refused"""
        if not self.can_go_to(step):
            return False
        self.current = CheckoutStep(step)
        return True

    def advance(self) -> bool:
        if self.index == len(STEP_ORDER) - 1:
            return False
        self.completed.add(self.current)
        self.current = STEP_ORDER[self.index + 1]
        return True

    def back(self) -> bool:
        if self.index == 0:
            return False
        self.current = STEP_ORDER[self.index - 1]
        return True

    def steps(self) -> list[dict]:
        """Step list for rendering"""
        return [
            {
                "step": step.value,
                "current": step == self.current,
                "completed": self.is_completed(step),
            }
            for step in STEP_ORDER
        ]
