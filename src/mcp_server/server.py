"""
Deep Search MCP Server Implementation

Exposes the deep search agent as an MCP tool.
"""

from mcp.server.fastmcp import FastMCP

from deep_search import DeepSearchError, create_orchestrator
from deep_search.types import AgentLoopResult

# Create the FastMCP server instance
mcp = FastMCP("Deep Search")


def format_result(result: AgentLoopResult) -> str:
    """Render the answer followed by the research steps that led to it."""
    lines = [result["answer"], "", "---", "Research steps:"]
    for i, action in enumerate(result["actions"], 1):
        if action["type"] == "search":
            detail = f" (query: {action['query']})"
        elif action["type"] == "scrape":
            detail = f" ({', '.join(action['urls'])})"
        else:
            detail = ""
        lines.append(f"{i}. {action['title']}{detail}")
    if result["best_effort"]:
        lines.append("")
        lines.append(
            "Note: the step budget ran out before the research was complete; "
            "this is a best-effort answer."
        )
    return "\n".join(lines)


@mcp.tool()
async def deep_search(question: str) -> str:
    """
    <tool_description>
    Answer a question using live web research.

    The agent searches the web, scrapes the most promising pages and writes an
    answer with markdown source links. It takes at most 10 research steps.
    </tool_description>

    <tool_usage_guidelines>
    Use this tool for questions that need current or verifiable information:
    recent events, statistics, product details, or anything likely to have
    changed since your training data.

    DO NOT use this tool for creative writing or opinion-based responses.
    </tool_usage_guidelines>

    Args:
        question: The question to answer, phrased as a single focused question.

    Returns:
        The answer followed by the list of research steps taken
    """
    # Each call gets its own orchestrator so no state is shared between questions
    orchestrator = create_orchestrator()
    try:
        result = await orchestrator.answer(question)
    except DeepSearchError as e:
        return f"Error answering question: {str(e)}"
    return format_result(result)


def main() -> None:
    mcp.run()


if __name__ == "__main__":
    main()
