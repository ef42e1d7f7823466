"""Verdict engine: an explicit state machine over a ``SolutionFacts`` bundle.

Stages run in a fixed order::

    STRUCTURE -> SIGNATURE -> OPTIMALITY -> TIPS

Each stage is a transition function that either continues with an updated
``RunState`` or terminates with a verdict. A blocking comment always
terminates the run as Disapproved, so a result never mixes comments from
more than one of the structure, signature and tip stages.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Callable, Mapping, Union

from autoreview import comments
from autoreview.comments import Comment
from autoreview.languages.registry import annotate_type, parameter_name
from autoreview.matchers import has_inline_export, is_optimal_map_join, is_optimal_reduce
from autoreview.models import ParamKind, SolutionFacts
from autoreview.rules.canonical import CanonicalRules, load_canonical_rules

log = logging.getLogger(__name__)


class Verdict(str, Enum):
    APPROVED = "approve"
    DISAPPROVED = "disapprove"
    REFERRED_TO_MENTOR = "refer_to_mentor"


class Stage(str, Enum):
    STRUCTURE = "structure"
    SIGNATURE = "signature"
    OPTIMALITY = "optimality"
    TIPS = "tips"


@dataclass(frozen=True)
class RunState:
    stage: Stage = Stage.STRUCTURE
    comments: tuple[Comment, ...] = ()
    matches: Mapping[str, bool] = field(default_factory=lambda: MappingProxyType({}))
    visited: tuple[Stage, ...] = ()

    def add(self, *new: Comment) -> "RunState":
        return replace(self, comments=self.comments + new)


@dataclass(frozen=True)
class Continue:
    state: RunState


@dataclass(frozen=True)
class Terminate:
    state: RunState
    verdict: Verdict


Transition = Union[Continue, Terminate]


@dataclass(frozen=True)
class AnalysisResult:
    """Terminal outcome of one run."""

    verdict: Verdict
    comments: tuple[Comment, ...]
    matches: Mapping[str, bool]
    stages: tuple[Stage, ...]

    @property
    def is_approved(self) -> bool:
        return self.verdict is Verdict.APPROVED

    @property
    def blocking(self) -> tuple[Comment, ...]:
        return tuple(c for c in self.comments if c.is_blocking)

    def to_dict(self) -> dict:
        return {
            "verdict": self.verdict.value,
            "comments": [c.to_dict() for c in self.comments],
            "matches": dict(self.matches),
            "stages": [s.value for s in self.stages],
        }


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------


def check_structure(state: RunState, facts: SolutionFacts, rules: CanonicalRules) -> Transition:
    name = rules.main_method
    found: list[Comment] = []
    if facts.main_method is None:
        found.append(comments.NO_METHOD({"method.name": name}))
    if facts.main_export is None:
        found.append(comments.NO_NAMED_EXPORT({"export.name": name}))
    if found:
        return Terminate(state.add(*found), Verdict.DISAPPROVED)
    return Continue(replace(state, stage=Stage.SIGNATURE))


def check_signature(state: RunState, facts: SolutionFacts, rules: CanonicalRules) -> Transition:
    fn = facts.main_method
    if not fn.params:
        return Terminate(
            state.add(comments.NO_PARAMETER({"function.name": rules.main_method})),
            Verdict.DISAPPROVED,
        )
    first = fn.params[0]
    if first.kind is ParamKind.REST:
        comment = comments.UNEXPECTED_SPLAT_ARGS(
            {"splat-arg.name": parameter_name(first), "parameter.type": annotate_type(first)}
        )
        return Terminate(state.add(comment), Verdict.DISAPPROVED)
    return Continue(replace(state, stage=Stage.OPTIMALITY))


def check_optimality(state: RunState, facts: SolutionFacts, rules: CanonicalRules) -> Transition:
    matches = {
        "map_join": is_optimal_map_join(facts, rules),
        "reduce": is_optimal_reduce(facts, rules),
    }
    state = replace(state, matches=MappingProxyType(matches))
    if not any(matches.values()):
        log.debug("~> Solution is not optimal")
        return Terminate(state, Verdict.REFERRED_TO_MENTOR)
    return Continue(replace(state, stage=Stage.TIPS))


def check_tips(state: RunState, facts: SolutionFacts, rules: CanonicalRules) -> Transition:
    if not has_inline_export(facts):
        state = state.add(comments.TIP_EXPORT_INLINE())
    return Terminate(state, Verdict.APPROVED)


STAGES: Mapping[Stage, Callable[[RunState, SolutionFacts, CanonicalRules], Transition]] = MappingProxyType(
    {
        Stage.STRUCTURE: check_structure,
        Stage.SIGNATURE: check_signature,
        Stage.OPTIMALITY: check_optimality,
        Stage.TIPS: check_tips,
    }
)


def run(facts: SolutionFacts, rules: CanonicalRules | None = None) -> AnalysisResult:
    """Drive the stages until one terminates; return the verdict and comments."""
    rules = rules or load_canonical_rules()
    state = RunState()
    while True:
        state = replace(state, visited=state.visited + (state.stage,))
        log.debug("stage %s", state.stage.value)
        step = STAGES[state.stage](state, facts, rules)
        if isinstance(step, Terminate):
            final = step.state
            log.debug("verdict %s with %d comment(s)", step.verdict.value, len(final.comments))
            return AnalysisResult(
                verdict=step.verdict,
                comments=final.comments,
                matches=final.matches,
                stages=final.visited,
            )
        state = step.state
