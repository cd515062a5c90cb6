from __future__ import annotations

from datetime import datetime

import pytest

from deal_dashboard.models import Deal

NOW = datetime(2025, 6, 1, 12, 0, 0)


@pytest.fixture()
def now() -> datetime:
    return NOW


@pytest.fixture()
def make_deal():
    counter = iter(range(10_000))

    def _make(**overrides) -> Deal:
        values = {
            "id": str(next(counter)),
            "created_date": NOW,
            "last_contact_date": NOW,
            "next_followup_date": NOW,
        }
        values.update(overrides)
        return Deal(**values)

    return _make
