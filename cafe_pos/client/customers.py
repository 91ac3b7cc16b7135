"""Customer records for the back-office screens.

:class:`CustomerStore` keeps records in memory; :class:`RemoteCustomerStore`
offers the same add/update/delete contract backed by ``/api/customers``.
Screens reach the active store through :func:`use_customers` inside a
:func:`provide_customers` block.
"""

import logging
import random
import string
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Iterator, Optional, Union

from pydantic import BaseModel

from cafe_pos.client.http import ApiClient, unwrap

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits
_ID_LENGTH = 9


class Customer(BaseModel):
    id: str
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    total_sales: float = 0.0
    created_at: str


def _random_id() -> str:
    return "".join(random.choices(_ID_ALPHABET, k=_ID_LENGTH))


class CustomerStore:
    is_loading = False

    def __init__(self, customers: Optional[list[Customer]] = None) -> None:
        self._customers: list[Customer] = list(customers or [])

    @property
    def customers(self) -> list[Customer]:
        return list(self._customers)

    def get(self, customer_id: str) -> Optional[Customer]:
        return next((c for c in self._customers if c.id == customer_id), None)

    def _new_id(self) -> str:
        taken = {c.id for c in self._customers}
        customer_id = _random_id()
        while customer_id in taken:
            customer_id = _random_id()
        return customer_id

    def add(self, name: str, phone: Optional[str] = None, email: Optional[str] = None) -> Customer:
        customer = Customer(
            id=self._new_id(),
            name=name,
            phone=phone,
            email=email,
            total_sales=0.0,
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        self._customers.append(customer)
        return customer

    def update(self, customer_id: str, **changes) -> Optional[Customer]:
        for index, customer in enumerate(self._customers):
            if customer.id == customer_id:
                merged = customer.model_copy(update=changes)
                self._customers[index] = merged
                return merged
        return None

    def delete(self, customer_id: str) -> None:
        self._customers = [c for c in self._customers if c.id != customer_id]


class RemoteCustomerStore:
    """Customer store persisted through the REST API."""

    is_loading = False

    def __init__(self, api: ApiClient) -> None:
        self.api = api
        self._customers: list[Customer] = []

    @property
    def customers(self) -> list[Customer]:
        return list(self._customers)

    def get(self, customer_id: str) -> Optional[Customer]:
        return next((c for c in self._customers if c.id == customer_id), None)

    @staticmethod
    def _to_customer(row: dict) -> Customer:
        return Customer(
            id=str(row["id"]),
            name=row["name"],
            phone=row.get("phone"),
            email=row.get("email"),
            total_sales=float(row.get("total_sales") or 0),
            created_at=row.get("created_at") or "",
        )

    def refresh(self) -> list[Customer]:
        self.is_loading = True
        try:
            response = self.api.request("GET", "/api/customers")
            response.raise_for_status()
            self._customers = [self._to_customer(row) for row in unwrap(response.json(), "customers")]
        finally:
            self.is_loading = False
        return self.customers

    def add(self, name: str, phone: Optional[str] = None, email: Optional[str] = None) -> Customer:
        response = self.api.request("POST", "/api/customers", json={"name": name, "phone": phone, "email": email})
        response.raise_for_status()
        customer = self._to_customer(unwrap(response.json(), "customer"))
        self._customers.append(customer)
        return customer

    def update(self, customer_id: str, **changes) -> Optional[Customer]:
        if self.get(customer_id) is None:
            return None
        response = self.api.request("PUT", f"/api/customers/{customer_id}", json=changes)
        response.raise_for_status()
        updated = self._to_customer(unwrap(response.json(), "customer"))
        self._customers = [updated if c.id == customer_id else c for c in self._customers]
        return updated

    def delete(self, customer_id: str) -> None:
        if self.get(customer_id) is None:
            return
        response = self.api.request("DELETE", f"/api/customers/{customer_id}")
        if response.status_code == 404:
            logger.info("customer %s already removed on the server", customer_id)
        else:
            response.raise_for_status()
        self._customers = [c for c in self._customers if c.id != customer_id]


AnyCustomerStore = Union[CustomerStore, RemoteCustomerStore]

_active_store: ContextVar[Optional[AnyCustomerStore]] = ContextVar("customer_store", default=None)


@contextmanager
def provide_customers(store: AnyCustomerStore) -> Iterator[AnyCustomerStore]:
    token = _active_store.set(store)
    try:
        yield store
    finally:
        _active_store.reset(token)


def use_customers() -> AnyCustomerStore:
    store = _active_store.get()
    if store is None:
        raise RuntimeError("use_customers must be used within provide_customers")
    return store
