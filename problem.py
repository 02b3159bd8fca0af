import numpy as np
from scipy.optimize import linprog

from simplex import (
    Tableau,
    DimensionMismatchError,
    InvalidConfigurationError,
)


OP_LE = "<="
OP_EQ = "="
OP_GE = ">="

MAXIMIZE = "max"
MINIMIZE = "min"

_OPERATOR_ALIASES = {
    "<=": OP_LE, "≤": OP_LE,
    "=": OP_EQ, "==": OP_EQ,
    ">=": OP_GE, "≥": OP_GE,
}

_DIRECTION_ALIASES = {
    "max": MAXIMIZE, "maximize": MAXIMIZE,
    "min": MINIMIZE, "minimize": MINIMIZE,
}


def _coefficient_vector(coefficients, what):
    """Validate a coefficient list and return it as a 1D float array."""
    try:
        vector = np.array(coefficients, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidConfigurationError(f"{what} coefficients are not a flat list of numbers: {e}") from e

    if vector.ndim != 1:
        raise InvalidConfigurationError(f"{what} coefficients must be 1D, got shape {vector.shape}.")
    if len(vector) == 0:
        raise InvalidConfigurationError(f"{what} must have at least one coefficient.")
    if not np.all(np.isfinite(vector)):
        raise InvalidConfigurationError(f"{what} coefficients contain non-finite values (NaN or Inf).")
    return vector


class Constraint:
    """A linear constraint ``coefficients . x  <op>  constant``."""

    def __init__(self, coefficients, constant, operator=OP_LE):
        if operator not in _OPERATOR_ALIASES:
            raise InvalidConfigurationError(f"Unknown constraint operator {operator!r}.")

        self.coefficients = _coefficient_vector(coefficients, "Constraint")
        self.constant = float(constant)
        self.operator = _OPERATOR_ALIASES[operator]

        if not np.isfinite(self.constant):
            raise InvalidConfigurationError("Constraint constant is non-finite (NaN or Inf).")

    def __len__(self):
        return len(self.coefficients)

    def __repr__(self):
        return f"Constraint({self.coefficients.tolist()}, {self.constant}, {self.operator!r})"


class Objective:
    """A linear objective to maximize or minimize."""

    def __init__(self, coefficients, direction=MAXIMIZE):
        if direction not in _DIRECTION_ALIASES:
            raise InvalidConfigurationError(f"Unknown objective direction {direction!r}.")

        self.coefficients = _coefficient_vector(coefficients, "Objective")
        self.direction = _DIRECTION_ALIASES[direction]

    def __len__(self):
        return len(self.coefficients)

    def __repr__(self):
        return f"Objective({self.coefficients.tolist()}, {self.direction!r})"


def build_tableau(constraints, objective, names=None):
    """
    Build the initial tableau for a list of constraints and an objective.

    The number of structural variables is the longest coefficient list; shorter
    lists are padded with zeros. Every ``<=`` or ``>=`` constraint gets a slack
    column (+1 and -1 respectively); ``=`` constraints get none. The objective
    row holds ``-c`` when maximizing and ``c`` when minimizing.

    Only ``<=`` rows start with a basic variable. If any ``>=`` or ``=`` row is
    present, or a constant is negative, the slack basis is not feasible and
    the tableau is marked as requiring ``solve_two_phase()``.
    """
    constraints = list(constraints)
    if not constraints:
        raise InvalidConfigurationError("Problem must have at least one constraint.")

    n = max(len(con) for con in constraints)
    if len(objective) > n:
        raise DimensionMismatchError(
            f"Objective has {len(objective)} coefficients but constraints use only {n} variables."
        )
    n_slack = sum(1 for con in constraints if con.operator in (OP_LE, OP_GE))

    tableau = Tableau(len(constraints), n, n_slack=n_slack, sense=objective.direction)

    slack_col = n
    for i, con in enumerate(constraints):
        tableau.matrix[i, :len(con)] = con.coefficients
        if con.operator == OP_LE:
            tableau.matrix[i, slack_col] = 1.0
            tableau.basis[i] = slack_col
            slack_col += 1
        elif con.operator == OP_GE:
            tableau.matrix[i, slack_col] = -1.0
            tableau.basis[i] = None
            slack_col += 1
        else:
            tableau.basis[i] = None
        tableau.matrix[i, tableau.constant_col] = con.constant

    sign = -1.0 if objective.direction == MAXIMIZE else 1.0
    tableau.matrix[tableau.objective_row, :len(objective)] = sign * objective.coefficients

    tableau.requires_two_phase = any(con.operator != OP_LE or con.constant < 0 for con in constraints)

    if names is not None:
        tableau.set_variable_names(names)
    return tableau


def problem_from_arrays(c, A, b, operators=OP_LE, direction=MAXIMIZE):
    """
    Turn array data into constraints and an objective:
    Maximize (or minimize) c^T x
    Subject to A x <operators> b

    ``operators`` is either a single operator for every row or one per row.
    """
    A = np.atleast_2d(np.asarray(A, dtype=float))
    b = np.asarray(b, dtype=float).ravel()

    if A.shape[0] != len(b):
        raise DimensionMismatchError(
            f"Constraint matrix has {A.shape[0]} rows but {len(b)} right-hand sides were given."
        )
    if isinstance(operators, str):
        operators = [operators] * len(b)
    elif len(operators) != len(b):
        raise DimensionMismatchError(
            f"Got {len(operators)} operators for {len(b)} constraints."
        )

    constraints = [Constraint(A[i], b[i], operators[i]) for i in range(len(b))]
    return constraints, Objective(c, direction)


def solve_lp(constraints, objective, names=None, max_iterations=None, verbose=False):
    """
    Build and solve a problem, choosing the two-phase method when needed.

    Returns ``(status, tableau)``; read the result with ``tableau.read_solution()``.
    """
    tableau = build_tableau(constraints, objective, names)
    if tableau.requires_two_phase:
        status = tableau.solve_two_phase(max_iterations, verbose=verbose)
    else:
        status = tableau.solve(max_iterations, verbose=verbose)
    return status, tableau


def solve_lp_scipy(constraints, objective):
    """
    Solve the same problem with SciPy's linprog for cross-checking.

    Returns ``(x, value)`` where ``value`` is in the objective's own direction.
    """
    constraints = list(constraints)
    if not constraints:
        raise InvalidConfigurationError("Problem must have at least one constraint.")

    n = max(len(con) for con in constraints)
    if len(objective) > n:
        raise DimensionMismatchError(
            f"Objective has {len(objective)} coefficients but constraints use only {n} variables."
        )

    c = np.zeros(n)
    c[:len(objective)] = objective.coefficients
    if objective.direction == MAXIMIZE:
        c = -c

    A_ub, b_ub, A_eq, b_eq = [], [], [], []
    for con in constraints:
        row = np.zeros(n)
        row[:len(con)] = con.coefficients
        if con.operator == OP_LE:
            A_ub.append(row)
            b_ub.append(con.constant)
        elif con.operator == OP_GE:
            A_ub.append(-row)
            b_ub.append(-con.constant)
        else:
            A_eq.append(row)
            b_eq.append(con.constant)

    result = linprog(
        c,
        A_ub=np.array(A_ub) if A_ub else None,
        b_ub=np.array(b_ub) if b_ub else None,
        A_eq=np.array(A_eq) if A_eq else None,
        b_eq=np.array(b_eq) if b_eq else None,
        bounds=[(0, None)] * n,
        method='highs',
    )

    if result.success:
        value = -result.fun if objective.direction == MAXIMIZE else result.fun
        return result.x, value
    else:
        error_messages = {
            2: "Problem is infeasible",
            3: "Problem is unbounded"
        }
        msg = error_messages.get(result.status, f"SciPy linprog failed: {result.message} (Status: {result.status})")
        raise ValueError(msg)


# Example Usage
if __name__ == "__main__":
    """
    Example problem:

        Minimize:    z = 4x₁ + x₂

        Subject to:
            3x₁ +  x₂  = 3
            4x₁ + 3x₂ ≥ 6
             x₁ + 2x₂ ≤ 4
            xⱼ ≥ 0   for j = 1, 2
    """

    constraints = [
        Constraint([3, 1], 3, "="),
        Constraint([4, 3], 6, ">="),
        Constraint([1, 2], 4, "<="),
    ]
    objective = Objective([4, 1], "min")

    status, tableau = solve_lp(constraints, objective, verbose=True)
    solution = tableau.read_solution()
    print(f"Status: {status.name}")
    print(f"Optimal solution: {tableau.solution_vector()}")
    print(f"Optimal value: {solution.objective_value}")
