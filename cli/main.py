"""
Deep Search - Command Line Entry Point

Answers a question by letting the agent search the web, scrape pages and
synthesize an answer, printing each action as it is taken.
"""

import argparse
import asyncio
import sys

from deep_search import DeepSearchError, create_orchestrator
from deep_search.evals import Factuality, contains_links_scorer, run_evals
from deep_search.types import MessageAnnotation


def print_annotation(annotation: MessageAnnotation) -> None:
    """Print a chosen action as it arrives."""
    action = annotation["action"]
    print(f"\n🧭 {action['title']}")
    print(f"   {action['reasoning']}")
    if action["type"] == "search":
        print(f"   🔎 {action['query']}")
    elif action["type"] == "scrape":
        for url in action["urls"]:
            print(f"   🌐 {url}")


async def answer(question: str) -> int:
    orchestrator = create_orchestrator(print_annotation)

    print("🚀 Deep Search")
    print("=" * 50)
    print(f"❓ Question: {question}")
    print("=" * 50)

    try:
        result = await orchestrator.answer(question)
    except DeepSearchError as e:
        print(f"❌ Error during deep search: {e}", file=sys.stderr)
        return 1

    print("\n✨ Answer")
    print("=" * 60)
    print(result["answer"])
    print("=" * 60)
    mode = "best effort" if result["best_effort"] else "complete"
    print(f"📋 {len(result['actions'])} actions, {result['steps']} steps ({mode})")
    return 0


async def evaluate() -> int:
    orchestrator = create_orchestrator()

    async def task(question: str) -> str:
        return (await orchestrator.answer(question))["answer"]

    results = await run_evals(
        task, scorers=[contains_links_scorer, Factuality(orchestrator.model)]
    )
    for result in results:
        print(f"\n🧪 {result.case.input}")
        for score in result.scores:
            print(f"   {score.name}: {score.score:.2f} {score.rationale}")
        print(f"   Mean: {result.mean_score:.2f}")

    failed = [
        result.case.input
        for result in results
        if any(s.name == "Contains Links" and s.score == 0 for s in result.scores)
    ]
    if failed:
        print(f"\n❌ {len(failed)} answer(s) cite no sources:", file=sys.stderr)
        for question in failed:
            print(f"   - {question}", file=sys.stderr)
        return 1
    return 0


async def main() -> int:
    parser = argparse.ArgumentParser(
        description="Deep Search - web research question answering",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python cli/main.py "What is the capital of France?"
  python cli/main.py "Who is Arsenal's top scorer this season?"
  python cli/main.py --eval
        """,
    )
    parser.add_argument("question", nargs="?", help="Question to answer")
    parser.add_argument(
        "--eval", action="store_true", help="Run the built-in evaluation cases"
    )

    args = parser.parse_args()

    if args.eval:
        return await evaluate()
    if not args.question:
        parser.error("a question is required unless --eval is given")
    return await answer(args.question)


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
