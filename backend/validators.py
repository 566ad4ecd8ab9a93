"""
Data Validators
Validation of product configuration and order snapshots before scheduling.
"""

import math
from typing import Dict, List, Any

import pandas as pd


STEP_KEYED_FIELDS = ('stepDurations', 'stepStaffCounts', 'stepMachineCounts')
WEIGHT_FIELDS = ('dateWeight', 'agingWeight', 'flowWeight', 'priorityWeight')
SHIFT_FIELDS = ('standardHours', 'overtimeHours')


class ValidationReport:
    """Container for validation results."""

    def __init__(self):
        self.errors = []  # Blocking errors
        self.warnings = []  # Non-blocking warnings
        self.info = []  # Informational messages

    @property
    def is_valid(self) -> bool:
        """Returns True if no blocking errors."""
        return len(self.errors) == 0

    def add_error(self, message: str):
        """Add a blocking error."""
        self.errors.append(message)

    def add_warning(self, message: str):
        """Add a warning."""
        self.warnings.append(message)

    def add_info(self, message: str):
        """Add informational message."""
        self.info.append(message)

    def print_report(self):
        """Print formatted validation report."""
        print("\n" + "=" * 70)
        print("VALIDATION REPORT")
        print("=" * 70)

        if self.is_valid:
            print("\n[OK] VALIDATION PASSED")
        else:
            print("\n[FAIL] VALIDATION FAILED")

        if self.errors:
            print(f"\n[ERROR] ERRORS ({len(self.errors)}):")
            for i, error in enumerate(self.errors[:10], 1):
                print(f"   {i}. {error}")
            if len(self.errors) > 10:
                print(f"   ... and {len(self.errors) - 10} more errors")

        if self.warnings:
            print(f"\n[WARN] WARNINGS ({len(self.warnings)}):")
            for i, warning in enumerate(self.warnings[:10], 1):
                print(f"   {i}. {warning}")
            if len(self.warnings) > 10:
                print(f"   ... and {len(self.warnings) - 10} more warnings")

        if self.info:
            print(f"\n[INFO] INFO ({len(self.info)}):")
            for i, info in enumerate(self.info[:5], 1):
                print(f"   {i}. {info}")
            if len(self.info) > 5:
                print(f"   ... and {len(self.info) - 5} more")


def is_blank(value: Any) -> bool:
    """None, NaN/NaT or whitespace-only string."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ''
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _as_number(value: Any):
    """float(value) for finite numbers, else None."""
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def validate_product_config(product: Any,
                            capacity_overrides: Dict[str, Dict] = None) -> ValidationReport:
    """
    Validate a product configuration.

    Errors (blocking) make the configuration unusable; warnings describe
    legal but notable setups such as unconstrained or blocked steps.

    Returns:
        ValidationReport with all validation results
    """
    report = ValidationReport()

    if not isinstance(product, dict):
        report.add_error("Product configuration must be a mapping")
        return report

    steps = product.get('steps')
    if not isinstance(steps, (list, tuple)) or len(steps) == 0:
        report.add_error("Product has no steps configured")
        return report

    step_names = [str(s) for s in steps]
    if any(is_blank(s) for s in steps):
        report.add_error("Step names must not be empty")

    duplicates = sorted({s for s in step_names if step_names.count(s) > 1})
    if duplicates:
        report.add_error(f"Duplicate step names: {duplicates}")

    report.add_info(f"Found {len(step_names)} steps: {' -> '.join(step_names)}")

    known = set(step_names)

    # 1. Step-keyed mappings
    for field_name in STEP_KEYED_FIELDS:
        mapping = product.get(field_name)
        if mapping is None:
            continue
        if not isinstance(mapping, dict):
            report.add_error(f"{field_name} must be a mapping of step -> number")
            continue
        _validate_step_mapping(field_name, mapping, known, report)

    # 2. Shift hours
    shift = product.get('shiftConfig') or {}
    if not isinstance(shift, dict):
        report.add_error("shiftConfig must be a mapping")
    else:
        for key in SHIFT_FIELDS:
            if key in shift and shift[key] is not None:
                number = _as_number(shift[key])
                if number is None or number < 0:
                    report.add_error(f"shiftConfig.{key} must be a non-negative number, got {shift[key]!r}")

    # 3. Scoring weights
    weights = product.get('schedulingConfig') or {}
    if not isinstance(weights, dict):
        report.add_error("schedulingConfig must be a mapping")
    else:
        for key, value in weights.items():
            if isinstance(value, dict):
                unknown = sorted(str(s) for s in value if str(s) not in known)
                if unknown:
                    report.add_error(f"schedulingConfig.{key} references unknown steps: {unknown}")
                continue
            if key in WEIGHT_FIELDS and value is not None:
                number = _as_number(value)
                if number is None or number < 0:
                    report.add_error(f"schedulingConfig.{key} must be a non-negative number, got {value!r}")

    # 4. Capacity overrides
    if capacity_overrides is not None and not isinstance(capacity_overrides, dict):
        report.add_error("capacity_overrides must be a mapping of step -> override")
        capacity_overrides = {}
    for step, override in (capacity_overrides or {}).items():
        if str(step) not in known:
            report.add_error(f"Capacity override for unknown step '{step}'")
            continue
        if not isinstance(override, dict):
            report.add_error(f"Capacity override for '{step}' must be a mapping with capacityMinutes, got {override!r}")
            continue
        minutes = _as_number(override.get('capacityMinutes'))
        if minutes is None or minutes < 0:
            report.add_error(f"Capacity override for '{step}' needs a non-negative capacityMinutes")

    if not report.is_valid:
        return report

    # 5. Notable but legal setups
    durations = product.get('stepDurations') or {}
    staff = product.get('stepStaffCounts') or {}
    machines = product.get('stepMachineCounts') or {}

    instant = [s for s in step_names if not _as_number(durations.get(s))]
    if instant:
        report.add_warning(f"{len(instant)} steps have no duration and are treated as instantaneous: {instant}")

    unconstrained = [s for s in step_names if staff.get(s) is None and machines.get(s) is None]
    if unconstrained:
        report.add_info(f"Unconstrained steps (no staff or machine count): {unconstrained}")

    blocked = [s for s in step_names
               if _as_number(staff.get(s)) == 0 or _as_number(machines.get(s)) == 0]
    if blocked:
        report.add_warning(f"Steps with zero resources will not receive orders: {blocked}")

    return report


def _validate_step_mapping(field_name: str, mapping: Dict, known: set, report: ValidationReport):
    """Every key must be a configured step and every value a non-negative number."""
    unknown = sorted(str(s) for s in mapping if str(s) not in known)
    if unknown:
        report.add_error(f"{field_name} references unknown steps: {unknown}")

    for step, value in mapping.items():
        if value is None:
            continue
        number = _as_number(value)
        if number is None or number < 0:
            report.add_error(f"{field_name}['{step}'] must be a non-negative number, got {value!r}")


def validate_orders(orders: List[Dict], steps: List[str]) -> ValidationReport:
    """
    Validate order snapshots against a product's steps.

    Order problems never block a run (bad orders are skipped), so everything
    here is a warning or info.
    """
    report = ValidationReport()

    if not orders:
        report.add_warning("No orders supplied")
        return report

    report.add_info(f"Found {len(orders)} orders")

    missing_id = []
    wo_ids = []
    for i, order in enumerate(orders):
        if not isinstance(order, dict):
            missing_id.append(f"Order {i}: not a mapping")
            continue
        wo_id = order.get('woId') if not is_blank(order.get('woId')) else order.get('WO ID')
        if is_blank(wo_id):
            missing_id.append(f"Order {i} (id {order.get('id', 'UNKNOWN')}): missing woId")
        else:
            wo_ids.append(str(wo_id).strip())

    for msg in missing_id[:5]:
        report.add_warning(msg)
    if len(missing_id) > 5:
        report.add_warning(f"... and {len(missing_id) - 5} more orders with missing data")

    duplicates = sorted({wo for wo in wo_ids if wo_ids.count(wo) > 1})
    if duplicates:
        report.add_warning(f"Found {len(duplicates)} duplicate WO numbers: {duplicates[:5]}")

    # Orders carrying none of the product's step columns are likely from another product
    no_steps = sum(1 for o in orders if isinstance(o, dict) and not any(s in o for s in steps))
    if no_steps:
        report.add_warning(f"{no_steps} orders have no columns for this product's steps")

    return report
