"""Shared test fixtures for the scheduling recommendation tests."""

import os
import sys
import pytest
from datetime import datetime, timedelta

# Add backend to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))


NOW = datetime(2026, 2, 16, 8, 0)  # A Monday morning


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def paint_product():
    """Single-step product: 1 staff x 1 machine x 8h, 2h per order -> 4 orders."""
    return {
        'id': 'paint-line',
        'name': 'Paint Line',
        'steps': ['Paint'],
        'stepDurations': {'Paint': 2},
        'stepStaffCounts': {'Paint': 1},
        'stepMachineCounts': {'Paint': 1},
        'shiftConfig': {'standardHours': 8, 'overtimeHours': 0},
        'schedulingConfig': {'dateWeight': 30, 'agingWeight': 20},
    }


@pytest.fixture
def line_product():
    """Three-step stator line."""
    return {
        'id': 'stator',
        'name': 'Stator Line',
        'steps': ['Cut', 'Weld', 'Inspect'],
        'stepDurations': {'Cut': 1, 'Weld': 2, 'Inspect': 0.5},
        'stepStaffCounts': {'Cut': 2, 'Weld': 1, 'Inspect': 1},
        'stepMachineCounts': {'Cut': 1, 'Weld': 2},
        'shiftConfig': {'standardHours': 8, 'overtimeHours': 2},
        'schedulingConfig': {'dateWeight': 30, 'agingWeight': 20, 'flowWeight': 500},
    }


@pytest.fixture
def make_order(now):
    """Factory for order snapshots with neutral defaults."""
    def _make(wo_id, created_days_ago=0, due_in_days=None, priority='', **steps):
        order = {
            'id': f"id-{wo_id}",
            'woId': wo_id,
            'createdAt': now - timedelta(days=created_days_ago),
            'Priority': priority,
        }
        if due_in_days is not None:
            order['WO DUE'] = (now + timedelta(days=due_in_days)).strftime('%Y-%m-%d')
        order.update(steps)
        return order
    return _make


@pytest.fixture
def sample_orders(make_order):
    """Mixed orders for the three-step line."""
    return [
        make_order('WO-001', created_days_ago=10, due_in_days=2, priority='Red'),
        make_order('WO-002', created_days_ago=20, due_in_days=30, priority='Yellow'),
        make_order('WO-003', created_days_ago=3, due_in_days=1, Cut='2026-02-16 07:30'),
        make_order('WO-004', created_days_ago=5, due_in_days=5, Cut='WIP'),
        make_order('WO-005', created_days_ago=8, due_in_days=3, Material_Status='Shortage'),
        make_order('WO-006', created_days_ago=8, due_in_days=3, Weld='Hold'),
    ]
