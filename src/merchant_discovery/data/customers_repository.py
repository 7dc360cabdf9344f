"""Customer and address lookups."""

from __future__ import annotations

from ..models.domain import Address, Customer
from .base import SupabaseRepository, as_float


class CustomerRepository(SupabaseRepository):
    def get_customer(self, customer_id: str) -> Customer | None:
        query = self.client.table("customers").select("id, user_id, active_address_id").eq("id", customer_id).limit(1)
        rows = self._execute(query, f"fetch customer '{customer_id}'").data or []
        if not rows:
            return None
        row = rows[0]
        return Customer(
            customer_id=str(row["id"]),
            user_id=str(row["user_id"]) if row.get("user_id") is not None else None,
            active_address_id=str(row["active_address_id"]) if row.get("active_address_id") is not None else None,
        )

    def get_address(self, address_id: str) -> Address | None:
        query = (
            self.client.table("addresses")
            .select("id, customer_id, latitude, longitude, formatted_address")
            .eq("id", address_id)
            .limit(1)
        )
        rows = self._execute(query, f"fetch address '{address_id}'").data or []
        if not rows:
            return None
        row = rows[0]
        return Address(
            address_id=str(row["id"]),
            customer_id=str(row["customer_id"]) if row.get("customer_id") is not None else None,
            latitude=as_float(row.get("latitude")),
            longitude=as_float(row.get("longitude")),
            formatted_address=row.get("formatted_address"),
        )
