"""
Answer evaluation.

Scorers and a small runner for checking answers produced by the agent loop
against expected answers.
"""

import logging
import re
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Literal

from pydantic import BaseModel, Field
from strands.models.model import Model

from .agents.base_agent import BaseAgent

logger = logging.getLogger("deep_search")

MARKDOWN_LINK_PATTERN = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")


@dataclass(frozen=True)
class EvalCase:
    input: str
    expected: str


@dataclass
class ScoreResult:
    name: str
    score: float
    rationale: str = ""


@dataclass
class EvalResult:
    case: EvalCase
    output: str
    scores: list[ScoreResult] = field(default_factory=list)

    @property
    def mean_score(self) -> float:
        if not self.scores:
            return 0.0
        return sum(s.score for s in self.scores) / len(self.scores)


Scorer = Callable[[EvalCase, str], Awaitable[ScoreResult]]

# Recency-sensitive: update the expectations when the season changes.
DEFAULT_EVAL_CASES = [
    EvalCase(
        input="Who is Arsenal's top scorer this season?",
        expected=(
            "Arsenal's top scorer this season varies based on the current date, but "
            "typically includes players like Bukayo Saka, Gabriel Jesus, or Martin "
            "Ødegaard among the leading goal scorers."
        ),
    ),
]


def contains_links(output: str) -> int:
    """Return 1 if the output contains at least one markdown link, else 0."""
    return 1 if MARKDOWN_LINK_PATTERN.search(output) else 0


async def contains_links_scorer(case: EvalCase, output: str) -> ScoreResult:
    return ScoreResult(name="Contains Links", score=float(contains_links(output)))


FACTUALITY_PROMPT = """You are comparing a submitted answer to an expert answer on a given question. Here is the data:
[BEGIN DATA]
************
[Question]: {question}
************
[Expert]: {expected}
************
[Submission]: {output}
************
[END DATA]

Compare the factual content of the submitted answer with the expert answer. Ignore any differences in style, grammar, or punctuation.
The submitted answer may either be a subset or superset of the expert answer, or it may conflict with it. Determine which case applies. Answer the question by selecting one of the following options:
(A) The submitted answer is a subset of the expert answer and is fully consistent with it.
(B) The submitted answer is a superset of the expert answer and is fully consistent with it.
(C) The submitted answer contains all the same details as the expert answer.
(D) There is a disagreement between the submitted answer and the expert answer.
(E) The answers differ, but these differences don't matter from the perspective of factuality."""

FACTUALITY_SCORES = {"A": 0.4, "B": 0.6, "C": 1.0, "D": 0.0, "E": 1.0}


class FactualityGrade(BaseModel):
    answer: Literal["A", "B", "C", "D", "E"] = Field(
        description="The selected option."
    )
    rationale: str = Field(description="Why this option was selected.")


class Factuality(BaseAgent):
    """LLM-graded factual agreement between an answer and an expected answer."""

    name = "Factuality"

    def __init__(self, model: Model):
        super().__init__(model)

    async def __call__(self, case: EvalCase, output: str) -> ScoreResult:
        prompt = FACTUALITY_PROMPT.format(
            question=case.input, expected=case.expected, output=output
        )
        grade = await self.create_agent().structured_output_async(
            FactualityGrade, prompt
        )
        return ScoreResult(
            name=self.name,
            score=FACTUALITY_SCORES[grade.answer],
            rationale=grade.rationale,
        )


async def run_evals(
    task: Callable[[str], Awaitable[str]],
    cases: Sequence[EvalCase] = DEFAULT_EVAL_CASES,
    scorers: Sequence[Scorer] = (contains_links_scorer,),
) -> list[EvalResult]:
    """Run every case through the task sequentially and score the outputs."""
    results = []
    for case in cases:
        output = await task(case.input)
        result = EvalResult(case=case, output=output)
        for scorer in scorers:
            result.scores.append(await scorer(case, output))
        logger.info(
            f"🧪 Eval '{case.input}': "
            + ", ".join(f"{s.name}={s.score:.2f}" for s in result.scores)
        )
        results.append(result)
    return results
