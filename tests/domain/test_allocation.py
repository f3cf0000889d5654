"""Tests for branchgoals.domain.allocation pure functions."""

from branchgoals.domain.allocation import (
    SplitChoice,
    normalize_allocations,
    parse_amount_text,
    parse_branch_choice,
    validate_entry,
)
from branchgoals.domain.models import Allocation, Amount, BranchId


def choices(*specs: tuple[str, int]) -> list[SplitChoice]:
    return [SplitChoice(BranchId(branch), Amount(amount)) for branch, amount in specs]


def amounts(allocations: list[Allocation]) -> list[int]:
    return [a.amount for a in allocations]


class TestNormalizeAllocations:
    """Tests for normalize_allocations."""

    def test_equal_split_even(self) -> None:
        """Should split evenly when no amounts were typed."""
        result = normalize_allocations(Amount(10), choices(("A", 0), ("B", 0)))
        assert result == [Allocation(BranchId("A"), Amount(5)), Allocation(BranchId("B"), Amount(5))]

    def test_proportional_split_tie_goes_to_first(self) -> None:
        """7.5 and 2.5 tie on fraction; the first selection gets the extra unit."""
        result = normalize_allocations(Amount(10), choices(("A", 3), ("B", 1)))
        assert result == [Allocation(BranchId("A"), Amount(8)), Allocation(BranchId("B"), Amount(2))]

    def test_larger_fraction_beats_selection_order(self) -> None:
        """The last selection wins the first extra unit; the tie behind it keeps selection order."""
        # Shares: 18/7=2.57, 18/7=2.57, 27/7=3.86
        result = normalize_allocations(Amount(9), choices(("A", 2), ("B", 2), ("C", 3)))
        assert amounts(result) == [3, 2, 4]

    def test_equal_split_of_seven_into_three(self) -> None:
        """Should give the remainder to the first selection on equal fractions."""
        result = normalize_allocations(Amount(7), choices(("A", 0), ("B", 0), ("C", 0)))
        assert amounts(result) == [3, 2, 2]

    def test_remainder_goes_to_largest_fraction(self) -> None:
        """Should favor the largest fractional part regardless of position."""
        # Shares: 10*1/6=1.67, 10*2/6=3.33, 10*3/6=5.0
        result = normalize_allocations(Amount(10), choices(("A", 1), ("B", 2), ("C", 3)))
        assert amounts(result) == [2, 3, 5]

    def test_output_keeps_selection_order(self) -> None:
        """Should return rows in input order even when the last one got the extra unit."""
        # Shares: 0.8, 0.8, 2.4
        result = normalize_allocations(Amount(4), choices(("A", 1), ("B", 1), ("C", 3)))
        assert [a.branch_id for a in result] == ["A", "B", "C"]
        assert amounts(result) == [1, 1, 2]

    def test_unset_amount_gets_nothing_when_others_typed(self) -> None:
        """Should give zero to selections without a typed amount."""
        result = normalize_allocations(Amount(10), choices(("A", 5), ("B", 0)))
        assert amounts(result) == [10, 0]

    def test_amounts_larger_than_total_are_scaled(self) -> None:
        """Typed amounts are proportions, not absolute values."""
        result = normalize_allocations(Amount(10), choices(("A", 1000), ("B", 1)))
        assert amounts(result) == [10, 0]

    def test_exact_proportions_have_no_remainder(self) -> None:
        result = normalize_allocations(Amount(5), choices(("A", 1), ("B", 2), ("C", 2)))
        assert amounts(result) == [1, 2, 2]

    def test_small_total_across_three(self) -> None:
        """Should hand single units out in selection order."""
        assert amounts(normalize_allocations(Amount(1), choices(("A", 0), ("B", 0), ("C", 0)))) == [1, 0, 0]
        assert amounts(normalize_allocations(Amount(2), choices(("A", 0), ("B", 0), ("C", 0)))) == [1, 1, 0]

    def test_single_branch_gets_everything(self) -> None:
        result = normalize_allocations(Amount(137), choices(("A", 12)))
        assert amounts(result) == [137]

    def test_zero_total_gives_zero_rows(self) -> None:
        """Should return one zero row per selection when total is not positive."""
        result = normalize_allocations(Amount(0), choices(("A", 3), ("B", 1)))
        assert amounts(result) == [0, 0]

    def test_negative_total_gives_zero_rows(self) -> None:
        result = normalize_allocations(Amount(-5), choices(("A", 0)))
        assert amounts(result) == [0]

    def test_empty_choices(self) -> None:
        """Should not fail on empty input."""
        assert normalize_allocations(Amount(10), []) == []

    def test_sum_is_exact_for_every_valid_total(self) -> None:
        """Should always sum exactly to the total."""
        selections = [
            choices(("A", 0)),
            choices(("A", 0), ("B", 0)),
            choices(("A", 0), ("B", 0), ("C", 0)),
            choices(("A", 3), ("B", 1)),
            choices(("A", 1), ("B", 1), ("C", 1)),
            choices(("A", 7), ("B", 0), ("C", 13)),
            choices(("A", 499), ("B", 2), ("C", 333)),
        ]
        for total in range(1, 501):
            for selection in selections:
                result = normalize_allocations(Amount(total), selection)
                assert sum(amounts(result)) == total
                assert all(a >= 0 for a in amounts(result))

    def test_equal_split_within_one_unit(self) -> None:
        """Should keep each equal share within one unit of total/n."""
        for total in range(1, 501):
            for n in (1, 2, 3):
                selection = choices(*[(f"B{i}", 0) for i in range(n)])
                for amount in amounts(normalize_allocations(Amount(total), selection)):
                    assert abs(amount - total / n) < 1


class TestValidateEntry:
    """Tests for validate_entry."""

    def test_valid_entry(self) -> None:
        assert validate_entry(100, choices(("A", 0), ("B", 0))) == (True, None)

    def test_missing_total(self) -> None:
        assert validate_entry(None, choices(("A", 0))) == (False, "Enter a valid total.")

    def test_zero_total(self) -> None:
        assert validate_entry(0, choices(("A", 0))) == (False, "Enter a valid total.")

    def test_negative_total(self) -> None:
        assert validate_entry(-3, choices(("A", 0))) == (False, "Enter a valid total.")

    def test_total_over_cap(self) -> None:
        assert validate_entry(501, choices(("A", 0))) == (False, "The maximum per entry is 500.")

    def test_total_at_cap(self) -> None:
        assert validate_entry(500, choices(("A", 0))) == (True, None)

    def test_no_branch(self) -> None:
        assert validate_entry(10, []) == (False, "Select at least one branch.")

    def test_duplicate_branches(self) -> None:
        is_valid, error = validate_entry(10, choices(("A", 0), ("A", 5)))
        assert not is_valid
        assert error == "Duplicate branches. Select different branches."

    def test_too_many_branches(self) -> None:
        is_valid, error = validate_entry(10, choices(("A", 0), ("B", 0), ("C", 0), ("D", 0)))
        assert not is_valid
        assert error == "Maximum 3 branches per entry."

    def test_unknown_branch(self) -> None:
        is_valid, error = validate_entry(10, choices(("A", 0), ("Z", 0)), [BranchId("A"), BranchId("B")])
        assert not is_valid
        assert error == "Unknown branch: Z"

    def test_known_branches_not_checked_when_omitted(self) -> None:
        assert validate_entry(10, choices(("anything", 0))) == (True, None)


class TestParsing:
    """Tests for parse_amount_text and parse_branch_choice."""

    def test_amount_digits_only(self) -> None:
        assert parse_amount_text("1a2") == 12

    def test_amount_blank(self) -> None:
        assert parse_amount_text("") == 0
        assert parse_amount_text(None) == 0

    def test_amount_minus_sign_dropped(self) -> None:
        assert parse_amount_text("-5") == 5

    def test_branch_with_amount(self) -> None:
        assert parse_branch_choice("moca:30") == SplitChoice(BranchId("moca"), Amount(30))

    def test_branch_without_amount(self) -> None:
        assert parse_branch_choice(" la-vega ") == SplitChoice(BranchId("la-vega"), Amount(0))

    def test_branch_with_blank_amount(self) -> None:
        assert parse_branch_choice("moca:") == SplitChoice(BranchId("moca"), Amount(0))
