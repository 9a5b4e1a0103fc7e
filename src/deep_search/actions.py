"""
Agent actions.

The model fills the flat ``ActionDecision`` schema; it is then converted into
one of the strict ``Action`` variants so that a search always carries a query
and a scrape always carries at least one URL.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from .errors import InvalidActionError


class _BaseAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    reasoning: str


class SearchAction(_BaseAction):
    type: Literal["search"] = "search"
    query: str = Field(min_length=1)


class ScrapeAction(_BaseAction):
    type: Literal["scrape"] = "scrape"
    urls: tuple[str, ...] = Field(min_length=1)


class AnswerAction(_BaseAction):
    type: Literal["answer"] = "answer"


Action = Annotated[
    SearchAction | ScrapeAction | AnswerAction, Field(discriminator="type")
]

_action_adapter: TypeAdapter[Action] = TypeAdapter(Action)


class ActionDecision(BaseModel):
    """Structured decision requested from the model on every loop iteration."""

    title: str = Field(
        description=(
            "The title of the action, to be displayed in the UI. Be extremely concise. "
            "'Searching Saka's injury history', 'Checking HMRC industrial action', "
            "'Comparing toaster ovens'"
        )
    )
    reasoning: str = Field(description="The reason you chose this step.")
    type: Literal["search", "scrape", "answer"] = Field(
        description="""The type of action to take.
      - 'search': Search the web for more information.
      - 'scrape': Scrape a URL.
      - 'answer': Answer the user's question and complete the loop."""
    )
    query: str | None = Field(
        default=None,
        description="The query to search for. Required if type is 'search'.",
    )
    urls: list[str] | None = Field(
        default=None,
        description="The URLs to scrape. Required if type is 'scrape'.",
    )

    def to_action(self) -> Action:
        """
        Convert the decision into its strict variant.

        Raises:
            InvalidActionError: If ``query`` or ``urls`` is missing for its action type
        """
        if self.type == "search" and not (self.query and self.query.strip()):
            raise InvalidActionError(
                f"Search action '{self.title}' is missing a query"
            )
        if self.type == "scrape" and not self.urls:
            raise InvalidActionError(f"Scrape action '{self.title}' has no URLs")

        data: dict[str, Any] = {
            "title": self.title,
            "reasoning": self.reasoning,
            "type": self.type,
        }
        if self.type == "search":
            data["query"] = self.query
        elif self.type == "scrape":
            data["urls"] = self.urls
        return parse_action(data)


def parse_action(data: dict[str, Any]) -> Action:
    """
    Validate a plain mapping into an ``Action``.

    Raises:
        InvalidActionError: If the mapping does not describe a valid action
    """
    try:
        return _action_adapter.validate_python(data)
    except ValidationError as e:
        raise InvalidActionError(f"Invalid action: {e}") from e


def action_to_dict(action: Action) -> dict[str, Any]:
    """JSON-friendly representation of an action, as sent in annotations."""
    return action.model_dump(mode="json")
