"""Tests for candidate scoring."""

import pytest
from datetime import datetime, timedelta

from algorithms.product import ProductConfig
from algorithms.scoring import (
    score_order, parse_priority, urgency_curve, aging_curve, days_between, Priority
)
from settings import SchedulerSettings


@pytest.fixture
def config(line_product):
    return ProductConfig.from_dict(line_product)


class TestParsePriority:
    """Tests for priority normalization."""

    @pytest.mark.parametrize('value', ['Red', 'red', 'Urgent', 'HIGH', '3', 3, '紧急'])
    def test_red(self, value):
        assert parse_priority(value) == Priority.RED

    @pytest.mark.parametrize('value', ['Yellow', 'medium', '2'])
    def test_yellow(self, value):
        assert parse_priority(value) == Priority.YELLOW

    @pytest.mark.parametrize('value', ['', None, 'Normal', 'Green', 'Deferred', '1'])
    def test_other(self, value):
        assert parse_priority(value) == Priority.NORMAL


class TestCurves:
    """Tests for the urgency and aging curves."""

    def test_urgency_decreases_and_floors_at_zero(self):
        assert urgency_curve(1) > urgency_curve(3) > urgency_curve(9)
        assert urgency_curve(10) == 0
        assert urgency_curve(45) == 0

    def test_overdue_keeps_growing(self):
        assert urgency_curve(0) == 100
        assert urgency_curve(-4) == 104

    def test_aging_non_decreasing_and_capped(self):
        assert aging_curve(0) == 0
        assert aging_curve(4) == 20
        assert aging_curve(30) == 100
        assert aging_curve(-3) == 0

    def test_days_between_rounds_up(self):
        start = datetime(2026, 2, 16, 8, 0)
        assert days_between(start, start + timedelta(hours=1)) == 1
        assert days_between(start, start + timedelta(days=3)) == 3


class TestScoreOrder:
    """Tests for combined scores."""

    def test_no_due_date_scores_zero_urgency(self, config, make_order, now):
        score = score_order(make_order('WO1'), config, now=now)
        assert score.urgency_score == 0
        assert score.date_term == 0
        assert score.combined_score == 0

    def test_weighted_terms(self, config, make_order, now):
        score = score_order(make_order('WO1', created_days_ago=4, due_in_days=3), config, now=now)
        # due in 3 days -> 70, weight 30% -> 21; age 4 days -> 20, weight 20% -> 4
        assert score.urgency_score == 70
        assert score.date_term == pytest.approx(21)
        assert score.aging_term == pytest.approx(4)
        assert score.combined_score == pytest.approx(25)

    def test_red_adds_fixed_bonus(self, config, make_order, now):
        normal = score_order(make_order('WO1', created_days_ago=4, due_in_days=3), config, now=now)
        red = score_order(make_order('WO2', created_days_ago=4, due_in_days=3, priority='Red'), config, now=now)
        assert red.priority_bonus == 1000
        assert red.combined_score - normal.combined_score == pytest.approx(1000)

    def test_yellow_doubles_date_and_aging(self, config, make_order, now):
        normal = score_order(make_order('WO1', created_days_ago=4, due_in_days=3), config, now=now)
        yellow = score_order(make_order('WO2', created_days_ago=4, due_in_days=3, priority='Yellow'), config, now=now)
        assert yellow.priority_bonus == 0
        assert yellow.combined_score == pytest.approx(normal.combined_score * 2)

    def test_bonus_and_multiplier_are_configurable(self, config, make_order, now):
        settings = SchedulerSettings(red_priority_bonus=250, yellow_multiplier=3)
        red = score_order(make_order('WO1', priority='Red'), config, settings, now)
        yellow = score_order(make_order('WO2', created_days_ago=4, priority='Yellow'), config, settings, now)
        assert red.combined_score == 250
        assert yellow.combined_score == pytest.approx(4 * 3)

    def test_red_far_future_outranks_normal_due_soon(self, config, make_order, now):
        red = score_order(make_order('WO1', due_in_days=120, priority='Red'), config, now=now)
        soon = score_order(make_order('WO2', due_in_days=3, priority=''), config, now=now)
        assert red.combined_score > soon.combined_score
        assert red.combined_score - soon.combined_score >= red.priority_bonus - soon.date_term

    def test_flow_bonus_after_wip(self, config, make_order, now):
        moving = score_order(make_order('WO1', Cut='WIP'), config, now=now)
        assert moving.step_name == 'Weld'
        assert moving.flow_score == 500

    def test_flow_bonus_after_recent_completion(self, config, make_order, now):
        recent = score_order(make_order('WO1', Cut='2026-02-16 06:30'), config, now=now)
        stale = score_order(make_order('WO2', Cut='2026-01-05 06:30'), config, now=now)
        assert recent.flow_score == 500
        assert stale.flow_score == 0

    def test_no_flow_bonus_at_first_step(self, config, make_order, now):
        fresh = score_order(make_order('WO1'), config, now=now)
        assert fresh.step_name == 'Cut'
        assert fresh.flow_score == 0

    def test_flow_weight_defaults_to_500(self, make_order, now):
        config = ProductConfig.from_dict({'steps': ['A', 'B'], 'schedulingConfig': {'dateWeight': 10}})
        assert config.flow_weight == 500
        assert score_order(make_order('WO1', A='WIP'), config, now=now).flow_score == 500

    def test_excluded_order_has_no_score(self, config, make_order, now):
        assert score_order(make_order('WO1', Cut='Hold'), config, now=now) is None

    def test_score_is_pure(self, config, make_order, now):
        order = make_order('WO1', created_days_ago=6, due_in_days=2, priority='Yellow', Cut='WIP')
        first = score_order(order, config, now=now)
        second = score_order(order, config, now=now)
        assert first == second
