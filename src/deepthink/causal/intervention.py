"""InterventionAnalyzer — is P(Y | do(X)) identifiable, and how.

Runs the identification cascade

    backdoor → frontdoor → instrumental variable → general rule

and turns the first success into an adjustment formula. "Not identifiable"
is an ordinary answer, never an exception.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import networkx as nx

from .adjustment import AdjustmentEngine
from .formulas import (
    generate_backdoor_formula,
    generate_frontdoor_formula,
    generate_general_formula,
    generate_iv_formula,
)
from .graph import CausalGraph
from .types import (
    AdjustmentFormula,
    AdjustmentMethod,
    IdentifiabilityResult,
    InterventionRequest,
    InterventionResult,
)

logger = logging.getLogger(__name__)


@dataclass
class InterventionAnalyzer:
    """Identification of interventional effects on one graph.

    Usage::

        analyzer = InterventionAnalyzer(graph)
        result = analyzer.analyze_intervention(
            InterventionRequest(interventions=[Intervention("X", 1)], outcomes=["Y"])
        )
        if result.identifiable:
            print(result.adjustment.latex)
    """

    graph: CausalGraph
    max_path_length: int = 10
    max_set_size: int = 5
    _adjustment: AdjustmentEngine = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._adjustment = AdjustmentEngine(
            self.graph,
            max_path_length=self.max_path_length,
            max_set_size=self.max_set_size,
        )

    @property
    def adjustment(self) -> AdjustmentEngine:
        return self._adjustment

    # ------------------------------------------------------------------
    # Identification
    # ------------------------------------------------------------------

    def is_identifiable(self, treatment: str, outcome: str) -> IdentifiabilityResult:
        """Try each identification strategy in turn; report the first that works."""
        engine = self._adjustment

        backdoor = engine.find_backdoor_adjustment_set(treatment, outcome)
        if backdoor is not None:
            return IdentifiabilityResult(
                identifiable=True,
                reason="Backdoor criterion satisfied",
                method=AdjustmentMethod.BACKDOOR,
                witness=backdoor,
            )

        frontdoor = engine.check_frontdoor_criterion(treatment, outcome)
        if frontdoor.satisfied:
            return IdentifiabilityResult(
                identifiable=True,
                reason="Frontdoor criterion satisfied",
                method=AdjustmentMethod.FRONTDOOR,
                witness=frontdoor.mediators,
            )

        instrument = engine.find_instrumental_variable(treatment, outcome)
        if instrument is not None:
            return IdentifiabilityResult(
                identifiable=True,
                reason="Instrumental variable available",
                method=AdjustmentMethod.INSTRUMENTAL,
                witness=(instrument,),
            )

        if self._general_rule(treatment, outcome):
            return IdentifiabilityResult(
                identifiable=True,
                reason="Identifiable via do-calculus",
                method=AdjustmentMethod.GENERAL,
            )

        return IdentifiabilityResult(
            identifiable=False,
            reason=(
                "No valid adjustment set found and frontdoor criterion not satisfied; "
                f"{treatment} and {outcome} are linked by latent confounding"
            ),
        )

    def _general_rule(self, treatment: str, outcome: str) -> bool:
        """Simplified do-calculus check.

        Without bidirected edges there is no latent confounding and the
        effect is identifiable. Otherwise it is not when X and Y sit in the
        same bidirected component.
        """
        if not self.graph.has_bidirected_edges:
            return True
        return not bidirected_connected(self.graph, treatment, outcome)

    # ------------------------------------------------------------------
    # Full analysis
    # ------------------------------------------------------------------

    def analyze_intervention(self, request: InterventionRequest) -> InterventionResult:
        """Identify P(outcome | do(treatment)) and render its estimand.

        Only the first intervention and the first outcome are analysed.
        Caller-supplied ``covariates`` are used as the adjustment set when
        they satisfy the backdoor criterion.
        """
        treatment = request.interventions[0].variable if request.interventions else None
        outcome = request.outcomes[0] if request.outcomes else None

        if not treatment or not outcome:
            return InterventionResult(
                identifiable=False,
                treatment=treatment,
                outcome=outcome,
                non_identifiable_reason="Missing treatment or outcome variable",
            )

        if len(request.interventions) > 1 or len(request.outcomes) > 1:
            logger.debug(
                "Analysing only do(%s) on %s; %d intervention(s), %d outcome(s) given",
                treatment,
                outcome,
                len(request.interventions),
                len(request.outcomes),
            )

        if request.covariates is not None and self._adjustment.is_valid_backdoor_adjustment(
            treatment, outcome, request.covariates
        ):
            formula = generate_backdoor_formula(treatment, outcome, request.covariates)
            return self._identified(treatment, outcome, AdjustmentMethod.BACKDOOR, formula)

        ident = self.is_identifiable(treatment, outcome)
        if not ident.identifiable or ident.method is None:
            return InterventionResult(
                identifiable=False,
                treatment=treatment,
                outcome=outcome,
                non_identifiable_reason=ident.reason,
            )

        if ident.method == AdjustmentMethod.BACKDOOR:
            formula = generate_backdoor_formula(treatment, outcome, ident.witness)
        elif ident.method == AdjustmentMethod.FRONTDOOR:
            formula = generate_frontdoor_formula(treatment, outcome, ident.witness)
        elif ident.method == AdjustmentMethod.INSTRUMENTAL:
            formula = generate_iv_formula(treatment, outcome, ident.witness[0])
        else:
            formula = generate_general_formula(treatment, outcome)
        return self._identified(treatment, outcome, ident.method, formula)

    @staticmethod
    def _identified(
        treatment: str,
        outcome: str,
        method: AdjustmentMethod,
        formula: AdjustmentFormula,
    ) -> InterventionResult:
        return InterventionResult(
            identifiable=True,
            treatment=treatment,
            outcome=outcome,
            method=method,
            estimand=formula.latex,
            adjustment=formula,
        )


def bidirected_connected(graph: CausalGraph, a: str, b: str) -> bool:
    """Whether a chain of bidirected edges links *a* to *b*."""
    g = graph.bidirected_graph
    if a not in g or b not in g:
        return False
    return nx.has_path(g, a, b)


def is_identifiable(graph: CausalGraph, treatment: str, outcome: str) -> IdentifiabilityResult:
    return InterventionAnalyzer(graph).is_identifiable(treatment, outcome)


def analyze_intervention(graph: CausalGraph, request: InterventionRequest) -> InterventionResult:
    return InterventionAnalyzer(graph).analyze_intervention(request)
