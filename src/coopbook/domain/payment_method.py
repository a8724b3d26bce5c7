"""Payment method domain service."""

from typing import Optional

from coopbook.database.base import Database
from coopbook.domain.entities import PaymentMethod, PaymentMethodType
from coopbook.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    duplicate_name,
    payment_method_not_found,
)


class PaymentMethodService:
    """Service for managing payment methods."""

    def __init__(self, db: Database):
        self.db = db

    def create_payment_method(self, name: str, method_type: PaymentMethodType) -> int:
        """Create a payment method. Returns its ID.

        Raises:
            ValidationError: If the name is empty
            ConflictError: If the name is taken
        """
        if not name or not name.strip():
            raise ValidationError("Payment method name is required")
        if any(m.name == name.strip() for m in self.db.list_payment_methods()):
            raise ConflictError(duplicate_name("Payment method", name))
        return self.db.create_payment_method(name=name.strip(), method_type=PaymentMethodType(method_type))

    def get_payment_method(self, payment_method_id: int) -> Optional[PaymentMethod]:
        return self.db.get_payment_method(payment_method_id)

    def require_payment_method(self, payment_method_id: int) -> PaymentMethod:
        payment_method = self.db.get_payment_method(payment_method_id)
        if payment_method is None:
            raise NotFoundError(payment_method_not_found(payment_method_id))
        return payment_method

    def list_payment_methods(self) -> list[PaymentMethod]:
        return self.db.list_payment_methods()
