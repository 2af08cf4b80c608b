"""
Tests for the split calculator and validator.

These are pure functions: no database fixture is needed.
"""

from decimal import Decimal

import pytest

from expense_ledger.errors import ErrorCode, SplitValidationError
from expense_ledger.models.enums import SplitMethod
from expense_ledger.services.split_calculator import (
    Allocation,
    allocation_map,
    compute_allocations,
    split_equally,
)
from expense_ledger.services.split_validator import (
    validate_allocations,
    validate_percentages,
)


def amounts(allocations):
    return [a.amount for a in allocations]


def rejected_with(code, *args):
    with pytest.raises(SplitValidationError) as exc_info:
        compute_allocations(*args)
    assert exc_info.value.code == code
    return exc_info.value


class TestEqualSplit:

    def test_remainder_goes_to_first_participant(self):
        allocations = compute_allocations(
            Decimal("100"), SplitMethod.EQUAL, ["a", "b", "c"]
        )
        assert amounts(allocations) == [
            Decimal("33.34"), Decimal("33.33"), Decimal("33.33"),
        ]
        assert sum(amounts(allocations)) == Decimal("100.00")

    def test_percentages_reported_for_equal_split(self):
        allocations = compute_allocations(
            Decimal("100"), SplitMethod.EQUAL, ["a", "b", "c"]
        )
        assert [a.percentage for a in allocations] == [
            Decimal("33.34"), Decimal("33.33"), Decimal("33.33"),
        ]

    def test_two_cents_over_three_people(self):
        assert split_equally(Decimal("0.02"), 3) == [
            Decimal("0.01"), Decimal("0.01"), Decimal("0.00"),
        ]

    def test_duplicate_participants_collapsed(self):
        allocations = compute_allocations(
            Decimal("10"), SplitMethod.EQUAL, ["a", "b", "a"]
        )
        assert [a.member_id for a in allocations] == ["a", "b"]
        assert amounts(allocations) == [Decimal("5.00"), Decimal("5.00")]

    def test_inputs_ignored(self):
        allocations = compute_allocations(
            Decimal("10"), SplitMethod.EQUAL, ["a", "b"], {"a": Decimal("99")}
        )
        assert amounts(allocations) == [Decimal("5.00"), Decimal("5.00")]


class TestPercentageSplit:

    def test_forty_sixty(self):
        allocations = compute_allocations(
            Decimal("200"), SplitMethod.PERCENTAGE, ["a", "b"],
            {"a": Decimal("40"), "b": Decimal("60")},
        )
        assert allocation_map(allocations) == {
            "a": Decimal("80.00"), "b": Decimal("120.00"),
        }

    def test_sum_below_hundred_rejected(self):
        rejected_with(
            ErrorCode.PERCENTAGE_MISMATCH,
            Decimal("200"), SplitMethod.PERCENTAGE, ["a", "b"],
            {"a": Decimal("40"), "b": Decimal("59")},
        )

    @pytest.mark.parametrize("second", ["59.9", "60.2", "59.99"])
    def test_sum_outside_tolerance_rejected(self, second):
        rejected_with(
            ErrorCode.PERCENTAGE_MISMATCH,
            Decimal("100"), SplitMethod.PERCENTAGE, ["a", "b"],
            {"a": Decimal("40"), "b": Decimal(second)},
        )

    @pytest.mark.parametrize("second", ["60", "60.0", "59.995"])
    def test_sum_within_tolerance_accepted(self, second):
        allocations = compute_allocations(
            Decimal("100"), SplitMethod.PERCENTAGE, ["a", "b"],
            {"a": Decimal("40"), "b": Decimal(second)},
        )
        assert sum(amounts(allocations)) == Decimal("100.00")

    def test_residual_cent_goes_to_truncated_share(self):
        allocations = compute_allocations(
            Decimal("100"), SplitMethod.PERCENTAGE, ["a", "b"],
            {"a": Decimal("50"), "b": Decimal("49.995")},
        )
        assert amounts(allocations) == [Decimal("50.00"), Decimal("50.00")]

    def test_missing_input_counts_as_zero(self):
        allocations = compute_allocations(
            Decimal("30"), SplitMethod.PERCENTAGE, ["a", "b"],
            {"a": Decimal("100")},
        )
        assert amounts(allocations) == [Decimal("30.00"), Decimal("0.00")]

    def test_negative_percentage_rejected(self):
        rejected_with(
            ErrorCode.PERCENTAGE_MISMATCH,
            Decimal("100"), SplitMethod.PERCENTAGE, ["a", "b"],
            {"a": Decimal("-10"), "b": Decimal("110")},
        )

    def test_validate_percentages_tolerance_override(self):
        total = validate_percentages(
            [Decimal("50"), Decimal("49.5")], tolerance=Decimal("1")
        )
        assert total == Decimal("99.5")


class TestUnequalSplit:

    def test_amounts_over_total_rejected(self):
        error = rejected_with(
            ErrorCode.AMOUNT_MISMATCH,
            Decimal("50"), SplitMethod.UNEQUAL, ["a", "b"],
            {"a": Decimal("20"), "b": Decimal("31")},
        )
        assert error.context["actual"] == "51.00"

    def test_matching_amounts_accepted(self):
        allocations = compute_allocations(
            Decimal("50"), SplitMethod.UNEQUAL, ["a", "b"],
            {"a": Decimal("20"), "b": Decimal("30")},
        )
        assert allocation_map(allocations) == {
            "a": Decimal("20.00"), "b": Decimal("30.00"),
        }
        assert [a.percentage for a in allocations] == [
            Decimal("40.00"), Decimal("60.00"),
        ]

    def test_exact_amount_keeps_its_value(self):
        allocations = compute_allocations(
            Decimal("50"), SplitMethod.UNEQUAL, ["a", "b"],
            {"a": Decimal("20"), "b": Decimal("29.995")},
        )
        assert amounts(allocations) == [Decimal("20.00"), Decimal("30.00")]

    def test_negative_amount_rejected(self):
        rejected_with(
            ErrorCode.AMOUNT_MISMATCH,
            Decimal("50"), SplitMethod.UNEQUAL, ["a", "b"],
            {"a": Decimal("-10"), "b": Decimal("60")},
        )


class TestSharesSplit:

    def test_one_to_two(self):
        allocations = compute_allocations(
            Decimal("90"), SplitMethod.SHARES, ["a", "b"],
            {"a": Decimal("1"), "b": Decimal("2")},
        )
        assert allocation_map(allocations) == {
            "a": Decimal("30.00"), "b": Decimal("60.00"),
        }
        assert [a.shares for a in allocations] == [Decimal("1"), Decimal("2")]

    def test_zero_weight_never_receives_residual(self):
        allocations = compute_allocations(
            Decimal("10"), SplitMethod.SHARES, ["a", "b", "c"],
            {"a": Decimal("0"), "b": Decimal("1"), "c": Decimal("2")},
        )
        assert amounts(allocations) == [
            Decimal("0.00"), Decimal("3.33"), Decimal("6.67"),
        ]

    def test_equal_weights_settle_from_first(self):
        allocations = compute_allocations(
            Decimal("100"), SplitMethod.SHARES, ["a", "b", "c"],
            {"a": Decimal("1"), "b": Decimal("1"), "c": Decimal("1")},
        )
        assert amounts(allocations) == [
            Decimal("33.34"), Decimal("33.33"), Decimal("33.33"),
        ]

    def test_zero_total_shares_rejected(self):
        rejected_with(
            ErrorCode.INVALID_SHARES,
            Decimal("90"), SplitMethod.SHARES, ["a", "b"],
            {"a": Decimal("0"), "b": Decimal("0")},
        )

    def test_negative_share_rejected(self):
        rejected_with(
            ErrorCode.INVALID_SHARES,
            Decimal("90"), SplitMethod.SHARES, ["a", "b"],
            {"a": Decimal("-1"), "b": Decimal("3")},
        )


class TestCommonValidation:

    def test_empty_selection(self):
        rejected_with(ErrorCode.EMPTY_SELECTION, Decimal("10"), SplitMethod.EQUAL, [])

    @pytest.mark.parametrize("total", ["0", "-5", "0.004", "abc"])
    def test_non_positive_total(self, total):
        rejected_with(
            ErrorCode.NON_POSITIVE_TOTAL, total, SplitMethod.EQUAL, ["a"]
        )

    def test_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            compute_allocations(Decimal("10"), SplitMethod.EQUAL, [])

    def test_error_serializes_code(self):
        error = rejected_with(
            ErrorCode.EMPTY_SELECTION, Decimal("10"), SplitMethod.EQUAL, []
        )
        assert error.to_dict()["code"] == "empty-selection"

    def test_negative_hand_built_allocation_rejected(self):
        with pytest.raises(SplitValidationError) as exc_info:
            validate_allocations(Decimal("10"), [
                Allocation("a", Decimal("11"), Decimal("110")),
                Allocation("b", Decimal("-1"), Decimal("-10")),
            ])
        assert exc_info.value.code == ErrorCode.AMOUNT_MISMATCH


class TestSumInvariant:

    @pytest.mark.parametrize("total", ["0.01", "1", "10.01", "99.99", "1000.07"])
    @pytest.mark.parametrize("method, inputs", [
        (SplitMethod.EQUAL, None),
        (SplitMethod.PERCENTAGE, {"a": "33.33", "b": "33.33", "c": "33.34"}),
        (SplitMethod.SHARES, {"a": "1", "b": "1", "c": "1"}),
    ])
    def test_allocations_sum_to_total(self, total, method, inputs):
        allocations = compute_allocations(
            Decimal(total), method, ["a", "b", "c"], inputs
        )
        assert sum(amounts(allocations)) == Decimal(total)
        assert all(a.amount >= 0 for a in allocations)
