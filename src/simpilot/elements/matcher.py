"""Element matching against an ElementQuery."""

from collections.abc import Sequence

from ..automation_exceptions import ElementNotFoundError
from .types import ElementQuery, UIElement


def _contains(haystack: str | None, needle: str) -> bool:
    return haystack is not None and needle.lower() in haystack.lower()


class ElementMatcher:
    """Filters a flattened element list.

    Matching is a single linear pass that keeps the input order, so the
    result is a subsequence of the input and matching it again yields the
    same list.
    """

    @staticmethod
    def matches(element: UIElement, query: ElementQuery) -> bool:
        """Check a single element against every provided query field."""
        if query.label and not _contains(element.label, query.label):
            return False
        if query.type and not _contains(element.type, query.type):
            return False
        if query.contains_text and not (
            _contains(element.label, query.contains_text)
            or _contains(element.value, query.contains_text)
        ):
            return False
        return True

    def match(self, elements: Sequence[UIElement], query: ElementQuery) -> list[UIElement]:
        """Return all elements satisfying the query, in input order."""
        return [e for e in elements if self.matches(e, query)]

    def select(
        self, elements: Sequence[UIElement], query: ElementQuery, kind: str = "element"
    ) -> UIElement:
        """Return the ``query.index``-th match.

        Raises:
            ElementNotFoundError: If there are not more than ``query.index`` matches
        """
        found = self.match(elements, query)
        if len(found) <= query.index:
            raise ElementNotFoundError(query.to_dict(), len(found), kind=kind)
        return found[query.index]
