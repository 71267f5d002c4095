"""Client aggregate — the tenant that owns quotes, shipments, pickups and purchases."""

from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from logistics.domain import logistics


class ClientType(Enum):
    COMPANY = "COMPANY"
    INDIVIDUAL = "INDIVIDUAL"


@logistics.aggregate
class Client:
    name = String(required=True, max_length=200)
    client_type = String(max_length=20, choices=ClientType, default=ClientType.COMPANY.value)
    company_name = String(max_length=200)
    email = String(max_length=254)
    phone = String(max_length=30)

    @invariant.post
    def companies_need_a_company_name(self):
        if self.client_type == ClientType.COMPANY.value and not (self.company_name or self.name):
            raise ValidationError({"company_name": ["A company client needs a company name"]})

    @property
    def display_name(self) -> str:
        """Name shown to anonymous tracking visitors."""
        if self.client_type == ClientType.COMPANY.value:
            return self.company_name or self.name
        return self.name


@logistics.repository(part_of=Client)
class ClientRepository:
    def display_name_of(self, client_id: str | None) -> str | None:
        if not client_id:
            return None
        client = self._dao.query.filter(id=client_id).all().first
        return client.display_name if client else None
