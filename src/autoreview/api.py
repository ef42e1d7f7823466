"""Programmatic Python API for analysing submissions in-process.

    >>> from autoreview.api import analyze_source
    >>> analyze_source("export const value = () => 10").verdict
    <Verdict.DISAPPROVED: 'disapprove'>

Parse failures propagate as ``ParseFailureError``; they are never turned
into a verdict.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path

from autoreview.config import AnalyzerConfig
from autoreview.engine import AnalysisResult, run
from autoreview.languages.registry import get_extractor
from autoreview.models import SolutionFacts
from autoreview.parser import ParsedSubmission, parse_file, parse_source
from autoreview.rules.canonical import CanonicalRules, load_canonical_rules

log = logging.getLogger(__name__)


def _rules_for(config: AnalyzerConfig) -> CanonicalRules:
    rules = load_canonical_rules(config.exercise)
    if rules.main_method != config.method_name:
        rules = replace(rules, main_method=config.method_name)
    return rules


def extract_facts(submission: ParsedSubmission, config: AnalyzerConfig | None = None) -> SolutionFacts:
    """Run the fact extractor for the submission's language once."""
    config = config or AnalyzerConfig()
    extractor = get_extractor(submission.language)
    return extractor.extract_facts(
        submission.tree,
        submission.source,
        config.method_name,
        config.constant_kinds,
    )


def analyze_parsed(submission: ParsedSubmission, config: AnalyzerConfig | None = None) -> AnalysisResult:
    config = config or AnalyzerConfig()
    facts = extract_facts(submission, config)
    result = run(facts, _rules_for(config))
    log.debug("%s: %s", submission.path, result.verdict.value)
    return result


def analyze_source(
    source: str | bytes,
    language: str = "javascript",
    config: AnalyzerConfig | None = None,
) -> AnalysisResult:
    """Analyse source text and return its verdict and comments."""
    return analyze_parsed(parse_source(source, language), config)


def analyze_file(path: str | Path, config: AnalyzerConfig | None = None) -> AnalysisResult:
    """Analyse a submission file; the language follows its extension."""
    return analyze_parsed(parse_file(path), config)
