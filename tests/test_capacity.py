"""Tests for the step capacity model."""

import math
import pytest

from algorithms.capacity import build_capacity_model, ConstraintLevel, StepCapacity
from algorithms.product import ProductConfig


def _config(**overrides):
    product = {
        'steps': ['Paint'],
        'stepDurations': {'Paint': 2},
        'shiftConfig': {'standardHours': 8, 'overtimeHours': 2},
    }
    product.update(overrides)
    return ProductConfig.from_dict(product)


class TestBuildCapacityModel:
    """Tests for per-step minute budgets."""

    def test_min_of_staff_and_machines(self):
        config = _config(stepStaffCounts={'Paint': 3}, stepMachineCounts={'Paint': 2})
        model = build_capacity_model(config)
        assert model['Paint'].total_minutes == 2 * 8 * 60
        assert model['Paint'].constraint_level == ConstraintLevel.MACHINE_LIMITED

    def test_staff_limited(self):
        config = _config(stepStaffCounts={'Paint': 1}, stepMachineCounts={'Paint': 4})
        model = build_capacity_model(config)
        assert model['Paint'].total_minutes == 480
        assert model['Paint'].constraint_level == ConstraintLevel.STAFF_LIMITED

    def test_missing_machine_count_is_unconstrained_not_zero(self):
        config = _config(stepStaffCounts={'Paint': 2})
        model = build_capacity_model(config)
        assert model['Paint'].total_minutes == 960
        assert model['Paint'].constraint_level == ConstraintLevel.STAFF_LIMITED

    def test_no_resources_configured_is_unlimited(self):
        model = build_capacity_model(_config())
        assert math.isinf(model['Paint'].total_minutes)
        assert model['Paint'].is_unlimited
        assert model['Paint'].constraint_level == ConstraintLevel.UNCONSTRAINED
        assert model['Paint'].fits(10 ** 9)

    def test_zero_resources_blocks_step(self):
        config = _config(stepStaffCounts={'Paint': 0}, stepMachineCounts={'Paint': 3})
        model = build_capacity_model(config)
        assert model['Paint'].total_minutes == 0
        assert model['Paint'].constraint_level == ConstraintLevel.BLOCKED
        assert not model['Paint'].fits(0)
        assert model['Paint'].order_capacity == 0

    def test_overtime_not_included_by_default(self):
        config = _config(stepStaffCounts={'Paint': 1}, stepMachineCounts={'Paint': 1})
        model = build_capacity_model(config)
        assert model['Paint'].total_minutes == 480
        assert model['Paint'].overtime_minutes == 120

    def test_overtime_included_when_enabled(self):
        config = _config(stepStaffCounts={'Paint': 1}, stepMachineCounts={'Paint': 1})
        model = build_capacity_model(config, include_overtime=True)
        assert model['Paint'].total_minutes == 600

    def test_manual_shift_hours(self):
        config = _config(stepStaffCounts={'Paint': 1}, stepMachineCounts={'Paint': 1})
        model = build_capacity_model(config, shift_hours=10)
        assert model['Paint'].total_minutes == 600

    def test_unset_shift_hours_fall_back_to_defaults(self):
        config = _config(stepStaffCounts={'Paint': 1}, stepMachineCounts={'Paint': 1},
                         shiftConfig={'standardHours': None, 'overtimeHours': None})
        assert config.standard_hours == 8
        assert config.overtime_hours == 0
        model = build_capacity_model(config)
        assert model['Paint'].total_minutes == 480
        assert model['Paint'].constraint_level == ConstraintLevel.MACHINE_LIMITED

    def test_explicit_zero_shift_hours_block_step(self):
        config = _config(stepStaffCounts={'Paint': 1}, stepMachineCounts={'Paint': 1},
                         shiftConfig={'standardHours': 0})
        assert build_capacity_model(config)['Paint'].total_minutes == 0

    def test_capacity_override(self):
        config = _config(stepStaffCounts={'Paint': 1}, stepMachineCounts={'Paint': 1})
        model = build_capacity_model(
            config, capacity_overrides={'Paint': {'capacityMinutes': 240, 'reason': 'Booth maintenance'}}
        )
        assert model['Paint'].total_minutes == 240
        assert model['Paint'].constraint_level == ConstraintLevel.OVERRIDE
        assert model['Paint'].override_reason == 'Booth maintenance'

    def test_model_follows_step_sequence(self):
        config = ProductConfig.from_dict({'steps': ['C', 'A', 'B']})
        assert list(build_capacity_model(config)) == ['C', 'A', 'B']


class TestStepCapacity:
    """Tests for fit checks and order capacity."""

    def test_fits_up_to_budget(self):
        cap = StepCapacity('Paint', total_minutes=480, duration_minutes=120,
                           constraint_level=ConstraintLevel.MACHINE_LIMITED)
        assert cap.fits(360)
        assert not cap.fits(361)
        assert cap.order_capacity == 4

    def test_zero_duration_is_instantaneous(self):
        cap = StepCapacity('Pack', total_minutes=480, duration_minutes=0,
                           constraint_level=ConstraintLevel.MACHINE_LIMITED)
        assert cap.fits(480)
        assert cap.order_capacity is None

    def test_missing_duration_reads_as_zero_minutes(self):
        config = ProductConfig.from_dict({'steps': ['Pack'], 'stepStaffCounts': {'Pack': 1}})
        assert config.duration_minutes('Pack') == 0
        model = build_capacity_model(config)
        assert model['Pack'].duration_minutes == 0
