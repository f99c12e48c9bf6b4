"""The authenticated actor behind a request, as supplied by the identity provider."""

from dataclasses import dataclass
from enum import Enum


class ActorRole(Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"
    DELIVERY_AGENT = "delivery-agent"


# Non-human actors recorded as the author of a change
PAYMENT_PROVIDER = "payment-provider"


@dataclass(frozen=True)
class Actor:
    id: str
    role: str
    email: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == ActorRole.ADMIN.value

    @property
    def is_delivery_agent(self) -> bool:
        return self.role == ActorRole.DELIVERY_AGENT.value

    @property
    def is_customer(self) -> bool:
        return self.role == ActorRole.CUSTOMER.value
