"""Tests for prime-field arithmetic and the linear solver."""

import pytest

from lsss import (
    InconsistentLinearSystem,
    Zp,
    batch_inverse,
    solve_linear_system,
)


class TestZpElement:
    def test_arithmetic_wraps_modulus(self, f13: Zp) -> None:
        assert f13(7) + f13(9) == 3
        assert f13(3) - f13(5) == 11
        assert f13(3) * f13(5) == 2
        assert -f13(1) == 12
        assert f13(2).inv() == 7
        assert f13(1) / f13(2) == 7

    def test_int_operands_are_reduced(self, f13: Zp) -> None:
        x = f13(4)
        assert x * 3 == 12
        assert 3 * x == 12
        assert 1 - x == 10
        assert x + 13 == x
        assert 1 / f13(2) == 7

    def test_sum_starts_from_int_zero(self, f13: Zp) -> None:
        assert sum([f13(5), f13(6), f13(7)]) == 5

    def test_pow(self, f13: Zp) -> None:
        assert f13(2) ** 4 == 3
        assert f13(2) ** -1 == 7
        assert f13(5) ** 0 == 1

    def test_invert_zero_raises(self, f13: Zp) -> None:
        with pytest.raises(ZeroDivisionError):
            f13.zero().inv()
        with pytest.raises(ZeroDivisionError):
            f13(3) / f13(13)

    def test_mixing_fields_raises(self, f13: Zp, f11: Zp) -> None:
        with pytest.raises(ValueError, match="cannot combine"):
            f13(1) + f11(1)
        with pytest.raises(ValueError, match="not an element"):
            f13.element(f11(3))

    def test_equality_and_hash(self, f13: Zp, f11: Zp) -> None:
        assert f13(14) == f13(1)
        assert f13(1) != f11(1)
        assert len({f13(1), f13(14), f13(2)}) == 2
        assert f13(0).is_zero()
        assert not f13(0)
        assert int(f13(20)) == 7

    def test_random_in_range(self, f13: Zp) -> None:
        for _ in range(100):
            assert 0 <= f13.random().value < 13
            assert 1 <= f13.random_unit().value < 13


class TestZp:
    def test_modulus_validation(self) -> None:
        with pytest.raises(ValueError, match="modulus"):
            Zp(1)

    def test_field_equality(self) -> None:
        assert Zp(13) == Zp(13)
        assert Zp(13) != Zp(11)
        assert hash(Zp(13)) == hash(Zp(13))


class TestBatchInverse:
    def test_matches_individual_inverses(self, f13: Zp) -> None:
        elements = [f13(i) for i in range(1, 13)]
        for e, inv in zip(elements, batch_inverse(elements)):
            assert e * inv == 1

    def test_empty_and_single(self, f13: Zp) -> None:
        assert batch_inverse([]) == []
        assert batch_inverse([f13(2)]) == [f13(7)]

    def test_zero_raises(self, f13: Zp) -> None:
        with pytest.raises(ZeroDivisionError):
            batch_inverse([f13(2), f13(0), f13(3)])


class TestSolveLinearSystem:
    def _apply(self, matrix, x, field):
        return [sum((a * b for a, b in zip(row, x)), field.zero()) for row in matrix]

    def test_square_system(self, f13: Zp) -> None:
        m = [[f13(1), f13(1)], [f13(1), f13(2)]]
        b = [f13(3), f13(5)]
        x = solve_linear_system(m, b, f13)
        assert x == [1, 2]

    def test_underdetermined_system(self, f13: Zp) -> None:
        m = [[f13(1), f13(2), f13(3)]]
        b = [f13(4)]
        x = solve_linear_system(m, b, f13)
        assert self._apply(m, x, f13) == b

    def test_overdetermined_consistent(self, f13: Zp) -> None:
        m = [[f13(1)], [f13(2)], [f13(3)]]
        b = [f13(5), f13(10), f13(15)]
        assert solve_linear_system(m, b, f13) == [5]

    def test_inconsistent_raises(self, f13: Zp) -> None:
        m = [[f13(1), f13(1)], [f13(2), f13(2)]]
        b = [f13(1), f13(3)]
        with pytest.raises(InconsistentLinearSystem):
            solve_linear_system(m, b, f13)

    def test_no_unknowns(self, f13: Zp) -> None:
        assert solve_linear_system([[]], [f13(0)], f13) == []
        with pytest.raises(InconsistentLinearSystem):
            solve_linear_system([[]], [f13(1)], f13)

    def test_inputs_not_mutated(self, f13: Zp) -> None:
        m = [[f13(2), f13(4)], [f13(1), f13(3)]]
        b = [f13(2), f13(1)]
        snapshot = [row[:] for row in m]
        solve_linear_system(m, b, f13)
        assert m == snapshot
        assert b == [2, 1]

    def test_ragged_matrix_rejected(self, f13: Zp) -> None:
        with pytest.raises(ValueError, match="inconsistent lengths"):
            solve_linear_system([[f13(1)], [f13(1), f13(2)]], [f13(1), f13(1)], f13)
