"""
Pytest configuration.

Adds the project root to the Python path so that tests can import domain,
repositories, services and api, and provides in-memory stand-ins for the
persistence collaborators so no test touches Supabase.
"""

import sys
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional, Set
from uuid import UUID, uuid4

import pytest

# Add the project root to the Python path
# so tests can import domain, repositories, etc.
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from domain.policy import SaleFilter  # noqa: E402
from domain.principal import Principal, Role  # noqa: E402
from domain.sale import Sale  # noqa: E402
from services.sale_service import SaleService  # noqa: E402

ADMIN_ID = UUID("00000000-0000-0000-0000-0000000000a1")
MANAGER_ID = UUID("00000000-0000-0000-0000-0000000000b1")
SELLER_ID = UUID("00000000-0000-0000-0000-0000000000c1")
OTHER_SELLER_ID = UUID("00000000-0000-0000-0000-0000000000c2")


class InMemorySaleRepository:
    """SaleRepository kept in a dict; records every write for assertions."""

    def __init__(self) -> None:
        self.sales: Dict[UUID, Sale] = {}
        self.writes: List[Sale] = []
        self._clock = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def _tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    def insert(self, sale: Sale) -> Sale:
        now = self._tick()
        stored = replace(sale, sale_id=uuid4(), created_at=now, updated_at=now)
        self.sales[stored.sale_id] = stored
        self.writes.append(stored)
        return stored

    def find_by_id(self, sale_id: UUID) -> Optional[Sale]:
        return self.sales.get(sale_id)

    def find(self, sale_filter: SaleFilter) -> List[Sale]:
        matches = [
            sale
            for sale in self.sales.values()
            if (sale_filter.owner_id is None or sale.owner_id == sale_filter.owner_id)
            and (sale_filter.status is None or sale.status == sale_filter.status)
        ]
        return sorted(matches, key=lambda s: s.sale_date, reverse=True)

    def update(self, sale: Sale) -> Sale:
        stored = replace(sale, updated_at=self._tick())
        self.sales[stored.sale_id] = stored
        self.writes.append(stored)
        return stored


class InMemoryPrincipalDirectory:
    def __init__(self, known: Set[UUID]) -> None:
        self.known = set(known)

    def principal_exists(self, principal_id: UUID) -> bool:
        return principal_id in self.known


@pytest.fixture
def admin() -> Principal:
    return Principal(principal_id=ADMIN_ID, role=Role.ADMIN)


@pytest.fixture
def manager() -> Principal:
    return Principal(principal_id=MANAGER_ID, role=Role.MANAGER)


@pytest.fixture
def seller() -> Principal:
    return Principal(principal_id=SELLER_ID, role=Role.SELLER)


@pytest.fixture
def other_seller() -> Principal:
    return Principal(principal_id=OTHER_SELLER_ID, role=Role.SELLER)


@pytest.fixture
def sale_repository() -> InMemorySaleRepository:
    return InMemorySaleRepository()


@pytest.fixture
def principal_directory() -> InMemoryPrincipalDirectory:
    return InMemoryPrincipalDirectory({ADMIN_ID, MANAGER_ID, SELLER_ID, OTHER_SELLER_ID})


@pytest.fixture
def service(sale_repository, principal_directory) -> SaleService:
    return SaleService(sale_repository, principal_directory)


@pytest.fixture
def widget_items() -> list:
    return [
        {"product_id": 1, "name": "Widget", "price_at_sale": 9.99, "quantity": 2},
        {"product_id": 2, "name": "Gadget", "price_at_sale": 5.50, "quantity": 1},
    ]
