# test_problem.py

import pytest
import numpy as np
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

from simplex import Status, DimensionMismatchError, InvalidConfigurationError
from problem import (
    Constraint,
    Objective,
    build_tableau,
    problem_from_arrays,
    solve_lp,
    solve_lp_scipy,
    OP_LE,
    OP_EQ,
    OP_GE,
)
from utils import convert_to_fraction, create_example_3d


# --- Constraint / Objective validation ---

def test_constraint_operator_aliases():
    assert Constraint([1], 1, "≤").operator == OP_LE
    assert Constraint([1], 1, "==").operator == OP_EQ
    assert Constraint([1], 1, "≥").operator == OP_GE
    assert Constraint([1, 2], 3).operator == OP_LE


def test_constraint_validation():
    """Bad coefficient lists, constants and operators are rejected at construction."""
    with pytest.raises(InvalidConfigurationError, match="operator"):
        Constraint([1, 2], 3, "<")
    with pytest.raises(InvalidConfigurationError, match="at least one coefficient"):
        Constraint([], 3)
    with pytest.raises(InvalidConfigurationError, match="1D"):
        Constraint([[1, 2], [3, 4]], 3)
    with pytest.raises(InvalidConfigurationError):
        Constraint([[1, 2], [3]], 3)
    with pytest.raises(InvalidConfigurationError, match="non-finite"):
        Constraint([1, np.nan], 3)
    with pytest.raises(InvalidConfigurationError, match="non-finite"):
        Constraint([1, 2], np.inf)


def test_constraint_copies_coefficients():
    coefficients = [1.0, 2.0]
    con = Constraint(coefficients, 5)
    coefficients[0] = 100.0

    assert len(con) == 2
    assert con.coefficients.tolist() == [1.0, 2.0]


def test_objective_validation():
    assert Objective([1, 2]).direction == "max"
    assert Objective([1, 2], "minimize").direction == "min"

    with pytest.raises(InvalidConfigurationError, match="at least one coefficient"):
        Objective([], "max")
    with pytest.raises(InvalidConfigurationError, match="direction"):
        Objective([1], "up")


# --- Problem Builder ---

def test_build_tableau_layout():
    """Coefficients, slack signs, constants and the negated objective land in place."""
    tableau = build_tableau(
        [
            Constraint([1, 2], 10, "<="),
            Constraint([3], 4, "="),
            Constraint([5, 6, 7], 8, ">="),
        ],
        Objective([1, 1], "max"),
    )

    assert tableau.m == 3 and tableau.n == 3 and tableau.n_slack == 2
    assert tableau.matrix.tolist() == [
        [1.0, 2.0, 0.0, 1.0, 0.0, 10.0],
        [3.0, 0.0, 0.0, 0.0, 0.0, 4.0],
        [5.0, 6.0, 7.0, 0.0, -1.0, 8.0],
        [-1.0, -1.0, 0.0, 0.0, 0.0, 0.0],
    ]
    assert tableau.basis == [3, None, None, None]
    assert tableau.names == ["x1", "x2", "x3", "s1", "s2"]
    assert tableau.requires_two_phase
    assert tableau.sense == "max"


def test_build_tableau_minimize_sign():
    tableau = build_tableau([Constraint([1, 1], 4)], Objective([2, 3], "min"))

    assert tableau.matrix[tableau.objective_row].tolist() == [2.0, 3.0, 0.0, 0.0]
    assert tableau.sense == "min"
    assert not tableau.requires_two_phase


def test_build_tableau_names():
    tableau = build_tableau(
        [Constraint([1, 1], 4)], Objective([1, 1]), names=["wheat", "corn"]
    )
    assert tableau.names == ["wheat", "corn", "s1"]

    with pytest.raises(DimensionMismatchError):
        build_tableau([Constraint([1, 1], 4)], Objective([1, 1]), names=["a", "b", "c"])


def test_build_tableau_negative_constant_needs_two_phase():
    tableau = build_tableau([Constraint([1, -1], -1)], Objective([1, 1], "min"))
    assert tableau.requires_two_phase


def test_build_tableau_errors():
    with pytest.raises(InvalidConfigurationError, match="at least one constraint"):
        build_tableau([], Objective([1]))
    with pytest.raises(DimensionMismatchError):
        build_tableau([Constraint([1], 4)], Objective([1, 2]))


def test_problem_from_arrays():
    constraints, objective = problem_from_arrays(
        [1, 2], [[1, 0], [0, 1]], [3, 4], operators=["<=", ">="], direction="min"
    )

    assert [con.operator for con in constraints] == [OP_LE, OP_GE]
    assert [con.constant for con in constraints] == [3.0, 4.0]
    assert objective.direction == "min"

    with pytest.raises(DimensionMismatchError):
        problem_from_arrays([1], [[1], [2]], [1])
    with pytest.raises(DimensionMismatchError):
        problem_from_arrays([1], [[1], [2]], [1, 2], operators=["<="])


# --- Driver ---

def test_solve_lp_routes_single_phase():
    c, A, b = create_example_3d()
    constraints, objective = problem_from_arrays(c, A, b)
    status, tableau = solve_lp(constraints, objective, names=["tables", "chairs", "desks"])

    assert status is Status.SOLVED
    assert tableau.phase_one_objective is None
    assert tableau.read_solution().objective_value == pytest.approx(16.0)


def test_solve_lp_routes_two_phase():
    constraints = [Constraint([1, 1], 2, ">="), Constraint([1, 0], 3, "<=")]
    status, tableau = solve_lp(constraints, Objective([2, 1], "min"))

    assert status is Status.SOLVED
    assert tableau.phase_one_objective == pytest.approx(0.0)
    _, scipy_z = solve_lp_scipy(constraints, Objective([2, 1], "min"))
    assert tableau.read_solution().objective_value == pytest.approx(scipy_z)
    assert tableau.read_solution().objective_value == pytest.approx(2.0)


def test_solve_lp_scipy_direction():
    """The reference solver reports values in the objective's direction."""
    x, value = solve_lp_scipy([Constraint([1, 1], 4)], Objective([1, 2], "max"))

    assert value == pytest.approx(8.0)
    assert x == pytest.approx([0.0, 4.0])


# --- utils ---

def test_convert_to_fraction():
    assert convert_to_fraction(0.4) == "2/5"
    assert convert_to_fraction(-3.4) == "-17/5"
    assert convert_to_fraction(36.0) == "36"
    assert convert_to_fraction(1e-14) == "0"
    assert convert_to_fraction(0.4, force_float=True) == "0.400"
    assert convert_to_fraction(np.pi, fraction_digits=2) == "3.14"
    assert convert_to_fraction("abc") == "abc"


# --- Run the tests ---
if __name__ == '__main__':
    pytest.main([__file__, "-v"])
