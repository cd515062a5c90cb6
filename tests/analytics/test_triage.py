from __future__ import annotations

from datetime import timedelta

from deal_dashboard.analytics import cold_deals, positive_value_median, quick_wins, unhandled_leads


def test_cold_deal_threshold_is_strict(make_deal, now):
    boundary = make_deal(pipeline_stage="Negotiation", last_contact_date=now - timedelta(days=14))
    past = make_deal(pipeline_stage="Negotiation", last_contact_date=now - timedelta(days=14, seconds=1))

    assert cold_deals([boundary, past], now=now) == [past]


def test_cold_deals_skip_terminal_stages_but_keep_unknown(make_deal, now):
    stale = now - timedelta(days=30)
    deals = [
        make_deal(pipeline_stage="Closed Won", last_contact_date=stale),
        make_deal(pipeline_stage="Closed Lost", last_contact_date=stale),
        make_deal(pipeline_stage="Lead", last_contact_date=stale),
        make_deal(pipeline_stage="On hold", last_contact_date=stale),
        make_deal(pipeline_stage="Discovery", last_contact_date=now - timedelta(days=2)),
    ]

    assert [deal.pipeline_stage for deal in cold_deals(deals, now=now)] == ["Lead", "On hold"]


def test_cold_deals_custom_threshold(make_deal, now):
    deal = make_deal(pipeline_stage="Discovery", last_contact_date=now - timedelta(days=8))

    assert cold_deals([deal], days=7, now=now) == [deal]
    assert cold_deals([deal], now=now) == []


def test_unhandled_leads(make_deal, now):
    old_lead = make_deal(pipeline_stage="Lead", created_date=now - timedelta(hours=49))
    boundary_lead = make_deal(pipeline_stage="Lead", created_date=now - timedelta(hours=48))
    fresh_lead = make_deal(pipeline_stage="Lead", created_date=now - timedelta(hours=2))
    progressed = make_deal(pipeline_stage="Qualification", created_date=now - timedelta(days=10))

    assert unhandled_leads([old_lead, boundary_lead, fresh_lead, progressed], now=now) == [old_lead]
    assert unhandled_leads([fresh_lead], hours=1, now=now) == [fresh_lead]


def test_quick_win_median_uses_middle_element(make_deal):
    deals = [make_deal(pipeline_stage="Negotiation", deal_value=value) for value in (300, 100, 200)]

    assert positive_value_median(deals) == 200
    assert [deal.deal_value for deal in quick_wins(deals)] == [300, 200]


def test_quick_win_median_takes_upper_middle_for_even_samples(make_deal):
    deals = [make_deal(pipeline_stage="Proposal Sent", deal_value=value) for value in (100, 200, 300, 400)]

    assert positive_value_median(deals) == 300
    assert [deal.deal_value for deal in quick_wins(deals)] == [300, 400]


def test_quick_win_median_ignores_non_positive_values_and_other_stages(make_deal):
    deals = [
        make_deal(pipeline_stage="Lead", deal_value=1000),
        make_deal(pipeline_stage="Closed Won", deal_value=5000),
        make_deal(pipeline_stage="Negotiation", deal_value=0),
        make_deal(pipeline_stage="Negotiation", deal_value=-50),
        make_deal(pipeline_stage="Negotiation", deal_value=2000),
        make_deal(pipeline_stage="Discovery", deal_value=9000),
    ]

    # Positive sample is [1000, 2000, 5000, 9000]; upper median is 5000.
    assert positive_value_median(deals) == 5000
    assert quick_wins(deals) == []


def test_zero_value_deal_qualifies_when_no_positive_values(make_deal):
    deal = make_deal(pipeline_stage="Negotiation", deal_value=0)

    assert positive_value_median([deal]) == 0
    assert quick_wins([deal]) == [deal]
