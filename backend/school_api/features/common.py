"""Building blocks shared by the feature modules: paging queries and their rules."""

from pydantic import Field

from school_api.config import settings
from school_api.mediator import Query
from school_api.validation import CommandValidator, Rules

# Keeps (page_number - 1) * page_size inside a 64-bit OFFSET.
MAX_PAGE_NUMBER = 1_000_000


class PagedQuery(Query):
    """Base for queries that return one page of a collection."""

    page_number: int = Field(default=1)
    page_size: int = Field(default_factory=lambda: settings.default_page_size)


class PagedQueryValidator(CommandValidator[PagedQuery]):
    def rules(self, query: PagedQuery, rules: Rules) -> None:
        rules.in_range("pageNumber", query.page_number, 1, MAX_PAGE_NUMBER)
        rules.in_range("pageSize", query.page_size, 1, settings.max_page_size)


def clean(value):
    """Strip surrounding whitespace from an optional string."""
    return value.strip() if isinstance(value, str) else value
