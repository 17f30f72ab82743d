"""Web search tool."""

from urllib.parse import quote_plus

from pydantic import BaseModel, Field

from colleague.tools.base import ToolDefinition, ToolResult


class WebSearchInput(BaseModel):
    """Input schema for the web search tool."""

    query: str = Field(..., min_length=1, description="Search query")
    max_results: int = Field(default=5, ge=1, le=20, description="Maximum number of results")


async def perform_web_search(query: str, max_results: int) -> list[dict[str, str]]:
    """Placeholder search backend returning a canned result."""
    # TODO: wire a real search API (Brave, Serper or Tavily) behind this function
    return [
        {
            "title": f"{query} - result 1",
            "url": f"https://example.com/search?q={quote_plus(query)}",
            "snippet": f'Search results for "{query}".',
        }
    ][:max_results]


def create_web_search_tool() -> ToolDefinition:
    async def web_search_handler(params: WebSearchInput) -> ToolResult:
        results = await perform_web_search(params.query, params.max_results)
        return ToolResult(
            success=True,
            output={"query": params.query, "results": results, "total_results": len(results)},
        )

    return ToolDefinition(
        name="web_search",
        description="Search the web. Use when up-to-date or external information is needed.",
        input_schema_class=WebSearchInput,
        risk_level=1,
        handler=web_search_handler,
    )
