"""Upload a small CSV and read the headline metrics back."""
from __future__ import annotations

from datetime import datetime

import pytest

from deal_dashboard.analytics import conversion_rate, gross_pipeline, won_deals
from deal_dashboard.state import DealSession
from deal_dashboard.upload import UploadService

CSV_TEXT = """id,firstName,lastName,company,leadSource,dealValue,pipelineStage
1,Jane,Doe,Acme,Website,,Lead
2,John,Smith,Globex,Referral,1000,Closed Won
3,Mary,Major,Initech,Website,500,Closed Lost
"""


def test_three_row_upload_metrics(tmp_path):
    csv_path = tmp_path / "deals.csv"
    csv_path.write_text(CSV_TEXT, encoding="utf-8")
    session = DealSession(clock=lambda: datetime(2025, 6, 1, 9, 30))

    with UploadService(session, clock=lambda: datetime(2025, 6, 1, 9, 30)) as service:
        result = service.import_file(csv_path)

    deals = session.deals
    assert result.deals == deals
    assert len(deals) == 3
    assert gross_pipeline(deals) == 0
    assert conversion_rate(deals) == pytest.approx(0.5)
    assert len(won_deals(deals)) == 1
    assert session.uploaded_at == datetime(2025, 6, 1, 9, 30)
