"""Resolve a customer id to the coordinate of their active address."""

from __future__ import annotations

from dataclasses import dataclass

from ...data.customers_repository import CustomerRepository
from ...errors import DiscoveryError, ErrorCode
from ...models.domain import Address, Coordinate, Customer
from ..geospatial import validate_coordinate


@dataclass(slots=True)
class CustomerLocation:
    customer: Customer
    address: Address
    coordinate: Coordinate


class CustomerLocationResolver:
    def __init__(self, repository: CustomerRepository) -> None:
        self.repository = repository

    def resolve(self, customer_id: str) -> CustomerLocation:
        if not customer_id or not str(customer_id).strip():
            raise DiscoveryError(ErrorCode.CUSTOMER_NOT_FOUND, "Customer id is required.")
        customer_id = str(customer_id).strip()

        customer = self.repository.get_customer(customer_id)
        if customer is None:
            raise DiscoveryError(ErrorCode.CUSTOMER_NOT_FOUND, f"Customer '{customer_id}' not found.")
        if not customer.active_address_id:
            raise DiscoveryError(
                ErrorCode.ADDRESS_NOT_FOUND,
                f"Customer '{customer_id}' has no active address.",
            )

        address = self.repository.get_address(customer.active_address_id)
        if address is None:
            raise DiscoveryError(
                ErrorCode.ADDRESS_NOT_FOUND,
                f"Active address '{customer.active_address_id}' for customer '{customer_id}' not found.",
            )
        if address.latitude is None or address.longitude is None:
            raise DiscoveryError(
                ErrorCode.ADDRESS_MISSING_COORDINATES,
                f"Address '{address.address_id}' has not been geocoded.",
            )

        coordinate = validate_coordinate(address.latitude, address.longitude)
        return CustomerLocation(customer=customer, address=address, coordinate=coordinate)
