"""Estimand rendering — LaTeX and plain-text adjustment formulas."""

from __future__ import annotations

from collections.abc import Sequence

from .types import AdjustmentFormula, AdjustmentMethod


def generate_backdoor_formula(
    treatment: str, outcome: str, adjustment_set: Sequence[str]
) -> AdjustmentFormula:
    """``P(Y|do(X)) = Σ_Z P(Y|X,Z) P(Z)``, collapsing to ``P(Y|X)`` for empty Z."""
    z = tuple(adjustment_set)
    if not z:
        latex = f"P({outcome} | do({treatment})) = P({outcome} | {treatment})"
        plain = f"P({outcome}|do({treatment})) = P({outcome}|{treatment})"
    else:
        z_latex = ", ".join(z)
        z_plain = ",".join(z)
        latex = (
            f"P({outcome} | do({treatment})) = \\sum_{{{z_latex}}} "
            f"P({outcome} | {treatment}, {z_latex}) P({z_latex})"
        )
        plain = (
            f"P({outcome}|do({treatment})) = Σ_{{{z_plain}}} "
            f"P({outcome}|{treatment},{z_plain}) P({z_plain})"
        )
    return AdjustmentFormula(
        adjustment_set=z,
        latex=latex,
        plain_text=plain,
        method=AdjustmentMethod.BACKDOOR,
    )


def generate_frontdoor_formula(
    treatment: str, outcome: str, mediators: Sequence[str]
) -> AdjustmentFormula:
    """Pearl's frontdoor adjustment through mediator set M."""
    m = tuple(mediators)
    m_latex = ", ".join(m)
    m_plain = ",".join(m)
    x_prime = f"{treatment}'"
    latex = (
        f"P({outcome} | do({treatment})) = \\sum_{{{m_latex}}} P({m_latex} | {treatment}) "
        f"\\sum_{{{x_prime}}} P({outcome} | {m_latex}, {x_prime}) P({x_prime})"
    )
    plain = (
        f"P({outcome}|do({treatment})) = Σ_{{{m_plain}}} P({m_plain}|{treatment}) "
        f"Σ_{{{x_prime}}} P({outcome}|{m_plain},{x_prime}) P({x_prime})"
    )
    return AdjustmentFormula(
        adjustment_set=m,
        latex=latex,
        plain_text=plain,
        method=AdjustmentMethod.FRONTDOOR,
    )


def generate_iv_formula(treatment: str, outcome: str, instrument: str) -> AdjustmentFormula:
    """Wald / IV ratio estimand for a linear effect."""
    latex = (
        f"\\beta_{{{treatment} \\to {outcome}}} = "
        f"\\frac{{Cov({outcome}, {instrument})}}{{Cov({treatment}, {instrument})}}"
    )
    plain = (
        f"β_{treatment}→{outcome} = Cov({outcome},{instrument}) / Cov({treatment},{instrument})"
    )
    return AdjustmentFormula(
        adjustment_set=(instrument,),
        latex=latex,
        plain_text=plain,
        method=AdjustmentMethod.INSTRUMENTAL,
    )


def generate_general_formula(treatment: str, outcome: str) -> AdjustmentFormula:
    """Estimand reached through do-calculus without a closed adjustment form."""
    return AdjustmentFormula(
        adjustment_set=(),
        latex=f"P({outcome} | do({treatment}))",
        plain_text=f"P({outcome}|do({treatment})) (identified via do-calculus)",
        method=AdjustmentMethod.GENERAL,
    )


def render_do_expression(
    y: Sequence[str],
    do: Sequence[str],
    observed: Sequence[str] = (),
) -> str:
    """``P(y|do(x),w)``; empty groups are omitted rather than left as stray commas."""
    conditions: list[str] = []
    if do:
        conditions.append(f"do({','.join(do)})")
    conditions.extend(observed)
    head = ",".join(y)
    if not conditions:
        return f"P({head})"
    return f"P({head}|{','.join(conditions)})"
