from __future__ import annotations

from datetime import timedelta

import pytest

from deal_dashboard.analytics import filter_deals, priority_actions, sort_deals, summarize
from deal_dashboard.config import Settings


def test_summarize_collects_home_page_kpis(make_deal, now):
    deals = [
        make_deal(pipeline_stage="Negotiation", deal_value=1000, next_followup_date=now + timedelta(days=5)),
        make_deal(pipeline_stage="Closed Won", deal_value=2000),
        make_deal(pipeline_stage="Closed Lost", deal_value=500),
        make_deal(pipeline_stage="Closed Lost", deal_value=500),
    ]

    summary = summarize(deals, now=now)

    assert summary.total_deals == 4
    assert summary.gross_pipeline == pytest.approx(1000)
    assert summary.weighted_pipeline == pytest.approx(800)
    assert summary.won_count == 1
    assert summary.conversion_rate == pytest.approx(1 / 3)
    assert [point.value for point in summary.forecast] == pytest.approx([800, 800, 800])


def test_summarize_honours_configured_horizons(make_deal, now):
    deal = make_deal(pipeline_stage="Lead", deal_value=1000, next_followup_date=now + timedelta(days=10))

    summary = summarize([deal], settings=Settings(forecast_short=5, forecast_mid=15, forecast_long=25), now=now)

    assert [point.label for point in summary.forecast] == ["5j", "15j", "25j"]
    assert [point.value for point in summary.forecast] == pytest.approx([0, 100, 100])


def test_priority_actions_truncate_lists_but_keep_counts(make_deal, now):
    stale = now - timedelta(days=20)
    cold = [make_deal(pipeline_stage="Discovery", last_contact_date=stale, company=f"Cold {i}") for i in range(5)]
    leads = [make_deal(pipeline_stage="Lead", created_date=now - timedelta(days=3)) for _ in range(2)]
    wins = [make_deal(pipeline_stage="Negotiation", deal_value=10_000) for _ in range(4)]

    actions = priority_actions(cold + leads + wins, now=now)

    assert [deal.company for deal in actions.cold_deals] == ["Cold 0", "Cold 1", "Cold 2"]
    assert actions.cold_count == 5
    assert len(actions.unhandled_leads) == 2
    assert actions.unhandled_count == 2
    assert len(actions.quick_wins) == 3
    assert actions.quick_win_count == 4


def test_priority_actions_use_settings_thresholds(make_deal, now):
    deal = make_deal(pipeline_stage="Lead", created_date=now - timedelta(hours=5), last_contact_date=now - timedelta(days=2))

    actions = priority_actions([deal], settings=Settings(cold_deal_days=1, unhandled_lead_hours=4), now=now)

    assert actions.cold_deals == [deal]
    assert actions.unhandled_leads == [deal]


@pytest.fixture()
def table_deals(make_deal, now):
    return [
        make_deal(first_name="Ada", last_name="Lovelace", company="Engines", owner="Marie", pipeline_stage="Negotiation", deal_value=900, next_followup_date=now + timedelta(days=3)),
        make_deal(first_name="Grace", last_name="Hopper", company="Navy", owner="Paul", pipeline_stage="Lead", deal_value=150, next_followup_date=now + timedelta(days=1)),
        make_deal(first_name="Alan", last_name="Turing", company="bletchley", email="alan@example.com", pipeline_stage="Negotiation", deal_value=400, next_followup_date=now + timedelta(days=9)),
    ]


def test_filter_deals_by_stage_and_query(table_deals):
    assert [deal.first_name for deal in filter_deals(table_deals, stage="Negotiation")] == ["Ada", "Alan"]
    assert filter_deals(table_deals, stage="all") == table_deals
    assert filter_deals(table_deals) == table_deals
    assert [deal.first_name for deal in filter_deals(table_deals, query="EXAMPLE.com")] == ["Alan"]
    assert [deal.first_name for deal in filter_deals(table_deals, stage="Negotiation", query="love")] == ["Ada"]
    assert filter_deals(table_deals, stage="Closed Won") == []


def test_sort_deals(table_deals):
    assert [deal.deal_value for deal in sort_deals(table_deals, "deal_value")] == [150, 400, 900]
    assert [deal.deal_value for deal in sort_deals(table_deals, "deal_value", descending=True)] == [900, 400, 150]
    assert [deal.company for deal in sort_deals(table_deals, "company")] == ["bletchley", "Engines", "Navy"]
    assert [deal.first_name for deal in sort_deals(table_deals, "next_followup_date")] == ["Grace", "Ada", "Alan"]


def test_sort_deals_rejects_unknown_column(table_deals):
    with pytest.raises(ValueError):
        sort_deals(table_deals, "probability")
