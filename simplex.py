import warnings
from collections import namedtuple
from enum import Enum

import numpy as np
from tabulate import tabulate

from utils import convert_to_fraction


DEFAULT_MAX_ITERATIONS = 15
TOLERANCE = 1e-12
FEASIBILITY_TOLERANCE = 1e-8
ZERO_CLEANUP = 1e-15

SENSES = ("max", "min")


# Custom Exception Classes for better error handling
class SimplexError(Exception):
    """Base class for simplex-related errors."""
    pass

class DimensionMismatchError(SimplexError, ValueError):
    """Raised when caller-supplied data is smaller than the tableau or ragged."""
    pass

class InvalidConfigurationError(SimplexError, ValueError):
    """Raised for bad iteration budgets, empty problems or unknown options."""
    pass

class DegeneratePivotError(SimplexError):
    """Raised when a pivot on an exactly zero entry is requested."""
    pass

class TableauCorruptionError(SimplexError):
    """Raised when the tableau appears to be in an invalid state."""
    pass


class Status(Enum):
    SOLVED = 0
    UNBOUNDED = 1
    NOT_SOLVED = 2
    INFEASIBLE = 3


VariableValue = namedtuple("VariableValue", ["index", "name", "value"])
Solution = namedtuple("Solution", ["objective_value", "values", "slacks"])


def _check_iterations(max_iterations):
    """Resolve an iteration budget, ``None`` meaning the default."""
    if max_iterations is None:
        return DEFAULT_MAX_ITERATIONS
    if isinstance(max_iterations, bool) or not isinstance(max_iterations, (int, np.integer)):
        raise InvalidConfigurationError(
            f"Iteration budget must be a positive integer, got {max_iterations!r}."
        )
    if max_iterations <= 0:
        raise InvalidConfigurationError(
            f"Iteration budget must be positive, got {max_iterations}."
        )
    return int(max_iterations)


class Tableau:
    def __init__(self, n_constraints, n_structural, n_slack=None, sense="max", tolerance=TOLERANCE):
        """
        Dense simplex tableau for the problem:
        Maximize (or minimize) c^T x
        Subject to m linear constraints, x >= 0

        Layout is ``m + 1`` rows by ``n + n_slack + 1`` columns. The last row is
        the objective row and the last column holds the constants (RHS).
        Instances hold no locks; callers sharing one across threads must
        serialize access.

        :param n_constraints: int, number of constraint rows (m)
        :param n_structural: int, number of structural variables (n)
        :param n_slack: int, number of slack columns, defaults to m
        :param sense: "max" or "min", the sign convention of the objective row
        :param tolerance: float, threshold used by pivot selection
        """
        if n_slack is None:
            n_slack = n_constraints
        if n_constraints < 1:
            raise InvalidConfigurationError("Problem must have at least one constraint.")
        if n_structural < 1:
            raise InvalidConfigurationError("Problem must have at least one variable.")
        if n_slack < 0:
            raise InvalidConfigurationError(f"Slack column count must be non-negative, got {n_slack}.")
        if sense not in SENSES:
            raise InvalidConfigurationError(f"sense must be one of {SENSES}, got {sense!r}.")

        self.m = int(n_constraints)
        self.n = int(n_structural)
        self.n_slack = int(n_slack)
        self.n_rows = self.m + 1
        self.n_cols = self.n + self.n_slack + 1
        self.sense = sense
        self.tolerance = tolerance

        self.clear()

    @property
    def objective_row(self):
        return self.m

    @property
    def constant_col(self):
        return self.n_cols - 1

    def clear(self):
        """Reset the matrix to zeros, the basis to the slack columns and the names to defaults."""
        self.matrix = np.zeros((self.n_rows, self.n_cols), dtype=float)

        self.basis = []
        for i in range(self.m):
            col = self.n + i
            self.basis.append(col if col < self.constant_col else None)
        self.basis.append(None)  # objective row

        self.names = [f"x{j + 1}" for j in range(self.n)]
        self.names.extend(f"s{j + 1}" for j in range(self.n_slack))

        self.requires_two_phase = False
        self.phase_one_objective = None
        return self

    def set_variable_names(self, names):
        """Overwrite structural variable names positionally; ``None`` entries are skipped."""
        names = list(names)
        if len(names) > self.n:
            raise DimensionMismatchError(
                f"Got {len(names)} names for {self.n} structural variables."
            )
        for j, name in enumerate(names):
            if name is not None:
                self.names[j] = str(name)
        return self

    def load_matrix(self, matrix):
        """
        Copy a caller-supplied matrix into the tableau.

        The source must have at least ``n_rows`` rows and ``n_cols`` columns;
        extra rows and columns are ignored. Values are copied, so later changes
        to ``matrix`` do not affect the tableau.
        """
        try:
            source = np.array(matrix, dtype=float)
        except ValueError as e:
            raise DimensionMismatchError(f"Matrix could not be read as a 2D array: {e}") from e

        if source.ndim != 2:
            raise DimensionMismatchError(f"Matrix must be 2D, got {source.ndim} dimension(s).")
        if source.shape[0] < self.n_rows or source.shape[1] < self.n_cols:
            raise DimensionMismatchError(
                f"Matrix shape {source.shape} is smaller than tableau shape ({self.n_rows}, {self.n_cols})."
            )

        self.matrix[:, :] = source[:self.n_rows, :self.n_cols]
        return self

    def _column_name(self, index):
        if 0 <= index < len(self.names):
            return self.names[index]
        return f"v{index + 1}"

    def format_tableau(self, use_fractions=False, fraction_digits=3):
        """Render the tableau as a table with variable names as headers."""
        headers = list(self.names) + ["RHS"]

        rows = []
        for i in range(self.n_rows):
            if i == self.objective_row:
                label = "z"
            elif self.basis[i] is None:
                label = f"R{i + 1}"
            else:
                label = self._column_name(self.basis[i])

            if use_fractions:
                values = [convert_to_fraction(v, fraction_digits=fraction_digits) for v in self.matrix[i, :]]
            else:
                values = [f"{v:.4f}" for v in self.matrix[i, :]]
            rows.append([label] + values)

        return tabulate(rows, headers=[""] + headers, stralign="right", disable_numparse=True)

    def __str__(self):
        return self.format_tableau()

    def _print_tableau(self, iteration):
        """Print the simplex tableau for one iteration."""
        print(f"\nIteration {iteration}:")
        print(self.format_tableau())
        basis = [self._column_name(j) for j in self.basis[:self.m] if j is not None]
        print("Current Basis:", basis)

    def _check_tableau_integrity(self):
        """Check tableau for corruption (NaN/Inf values)."""
        if not np.all(np.isfinite(self.matrix)):
            rows, cols = np.where(~np.isfinite(self.matrix))
            first_bad_row, first_bad_col = rows[0], cols[0]
            bad_value = self.matrix[first_bad_row, first_bad_col]
            raise TableauCorruptionError(
                f"Tableau corruption: non-finite value {bad_value} at ({first_bad_row}, {first_bad_col}). "
                f"Total {len(rows)} corrupted entries."
            )

    def _find_pivot_column(self):
        """Find the entering variable: most negative reduced cost, lowest index on ties."""
        reduced_costs = self.matrix[self.objective_row, :self.constant_col]
        col = int(np.argmin(reduced_costs))
        if reduced_costs[col] < -self.tolerance:
            return col
        return None

    def _find_pivot_row(self, pivot_col):
        """Find the leaving variable using the minimum ratio test, first row wins ties."""
        pivot_row = None
        min_ratio = None

        for i in range(self.m):
            pivot_col_entry = self.matrix[i, pivot_col]
            rhs_entry = self.matrix[i, self.constant_col]

            if pivot_col_entry <= self.tolerance:
                continue
            if rhs_entry < -self.tolerance:
                continue

            ratio = max(0.0, rhs_entry) / pivot_col_entry
            if min_ratio is None or ratio < min_ratio:
                min_ratio = ratio
                pivot_row = i

        return pivot_row

    def _pivot(self, pivot_row, pivot_col):
        """Gauss-Jordan elimination around (pivot_row, pivot_col)."""
        pivot_element = self.matrix[pivot_row, pivot_col]

        if pivot_element == 0 or not np.isfinite(pivot_element):
            raise DegeneratePivotError(
                f"Pivot element {pivot_element} at ({pivot_row}, {pivot_col}) cannot be used."
            )

        self.basis[pivot_row] = pivot_col

        # Normalize pivot row
        self.matrix[pivot_row, :] /= pivot_element

        # Eliminate other entries in pivot column
        for i in range(self.n_rows):
            if i != pivot_row:
                factor = self.matrix[i, pivot_col]
                if factor != 0:
                    self.matrix[i, :] -= factor * self.matrix[pivot_row, :]

        # Clean up numerical errors
        self.matrix[np.abs(self.matrix) < ZERO_CLEANUP] = 0.0
        self.matrix[:, pivot_col] = 0.0
        self.matrix[pivot_row, pivot_col] = 1.0

    def solve(self, max_iterations=None, verbose=False):
        """
        Run the single-phase simplex method on the current tableau.

        Only valid when the current basis is feasible, i.e. for problems with
        ``<=`` constraints only (or a caller-loaded tableau with a feasible
        basis). Problems with ``>=`` or ``=`` constraints go through
        ``solve_two_phase``.

        The tableau is modified in place. When the budget runs out before a
        terminal state, ``Status.NOT_SOLVED`` is returned and a later call
        resumes from where this one stopped.
        """
        budget = _check_iterations(max_iterations)
        if self.requires_two_phase:
            raise InvalidConfigurationError(
                "Tableau has >= or = constraints without a feasible basis; use solve_two_phase()."
            )

        self._check_tableau_integrity()
        if verbose:
            self._print_tableau(0)

        for iteration in range(1, budget + 1):
            pivot_col = self._find_pivot_column()
            if pivot_col is None:
                return Status.SOLVED

            pivot_row = self._find_pivot_row(pivot_col)
            if pivot_row is None:
                return Status.UNBOUNDED

            self._pivot(pivot_row, pivot_col)

            try:
                self._check_tableau_integrity()
            except TableauCorruptionError:
                raise TableauCorruptionError(
                    f"Tableau corruption after pivot at iteration {iteration}. "
                    f"Pivot: row {pivot_row}, column {pivot_col}."
                )

            if verbose:
                self._print_tableau(iteration)

        if self._find_pivot_column() is None:
            return Status.SOLVED

        warnings.warn(f"Maximum iterations ({budget}) reached without convergence.", UserWarning)
        return Status.NOT_SOLVED

    def _build_phase_one(self):
        """Auxiliary tableau: original columns plus one artificial variable per row."""
        n_original = self.constant_col
        aux = Tableau(self.m, n_original, n_slack=self.m, sense="min", tolerance=self.tolerance)
        aux.names[:n_original] = self.names
        aux.names[n_original:] = [f"a{i + 1}" for i in range(self.m)]

        for i in range(self.m):
            row = self.matrix[i, :]
            sign = -1.0 if row[self.constant_col] < 0 else 1.0
            aux.matrix[i, :n_original] = sign * row[:n_original]
            aux.matrix[i, n_original + i] = 1.0
            aux.matrix[i, aux.constant_col] = sign * row[self.constant_col]

        # Minimize the sum of artificials, expressed in non-artificial variables
        aux.matrix[aux.objective_row, n_original:aux.constant_col] = 1.0
        aux.matrix[aux.objective_row, :] -= aux.matrix[:aux.m, :].sum(axis=0)
        return aux

    def _drive_out_artificials(self, aux):
        """Pivot artificial variables left basic at zero level out of the auxiliary basis."""
        n_original = self.constant_col
        for i in range(aux.m):
            if aux.basis[i] is None or aux.basis[i] < n_original:
                continue

            candidates = np.where(np.abs(aux.matrix[i, :n_original]) > self.tolerance)[0]
            if len(candidates) > 0:
                aux._pivot(i, int(candidates[0]))
            else:
                warnings.warn(f"Constraint row {i + 1} is redundant and has no basic variable.", UserWarning)
                aux.basis[i] = None

    def _price_out_objective(self):
        """Re-express the objective row in terms of the non-basic variables."""
        obj = self.objective_row
        for i in range(self.m):
            col = self.basis[i]
            if col is None:
                continue
            factor = self.matrix[obj, col]
            if factor != 0:
                self.matrix[obj, :] -= factor * self.matrix[i, :]
        self.matrix[np.abs(self.matrix) < ZERO_CLEANUP] = 0.0

    def solve_two_phase(self, max_iterations=None, verbose=False):
        """
        Solve with the two-phase method.

        Phase I minimizes the sum of one artificial variable per constraint row
        on an auxiliary tableau. If its optimum is not zero the problem has no
        feasible point and ``Status.INFEASIBLE`` is returned with this tableau
        untouched. Otherwise the feasible basis is copied back and Phase II
        optimizes the real objective. Each phase gets ``max_iterations``.
        """
        budget = _check_iterations(max_iterations)
        self._check_tableau_integrity()

        aux = self._build_phase_one()
        if verbose:
            print("\nPhase I")
        status = aux.solve(budget, verbose=verbose)
        if status is Status.NOT_SOLVED:
            return status
        if status is not Status.SOLVED:
            raise TableauCorruptionError(f"Phase I ended with status {status.name}; its objective is bounded below.")

        self.phase_one_objective = -aux.matrix[aux.objective_row, aux.constant_col]
        if self.phase_one_objective > FEASIBILITY_TOLERANCE:
            return Status.INFEASIBLE

        self._drive_out_artificials(aux)

        n_original = self.constant_col
        self.matrix[:self.m, :n_original] = aux.matrix[:aux.m, :n_original]
        self.matrix[:self.m, self.constant_col] = aux.matrix[:aux.m, aux.constant_col]
        self.basis[:self.m] = aux.basis[:aux.m]
        self._price_out_objective()
        self.requires_two_phase = False

        if verbose:
            print("\nPhase II")
        return self.solve(budget, verbose=verbose)

    def read_solution(self):
        """
        Read the objective value and basic variable values.

        Non-basic variables are zero and are not listed in ``values`` or
        ``slacks``.
        """
        rhs = self.matrix[:, self.constant_col]
        objective_value = rhs[self.objective_row]
        if self.sense == "min":
            objective_value = -objective_value

        values = []
        slacks = []
        for i in range(self.m):
            col = self.basis[i]
            if col is None:
                continue
            entry = VariableValue(col, self._column_name(col), float(rhs[i]))
            if col < self.n:
                values.append(entry)
            else:
                slacks.append(entry)

        values.sort(key=lambda v: v.index)
        slacks.sort(key=lambda v: v.index)
        return Solution(float(objective_value), values, slacks)

    def solution_vector(self):
        """Structural variable values as a numpy vector (zero for non-basic)."""
        solution = np.zeros(self.n)
        for entry in self.read_solution().values:
            solution[entry.index] = entry.value
        return solution
