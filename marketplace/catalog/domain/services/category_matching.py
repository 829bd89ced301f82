"""
Category matching strategies used when filtering products by category.

``fuzzy`` accepts any category whose slug or name contains the requested
value (case-insensitive); ``exact`` only accepts a slug match. The active
strategy is read from ``STOREFRONT["CATEGORY_MATCH_STRATEGY"]``.
"""

from abc import ABC, abstractmethod

from django.conf import settings
from django.db.models import Q


class CategoryMatcher(ABC):
    name = ""

    @abstractmethod
    def q(self, value: str) -> Q:
        """Return a Product filter for the requested category value."""


class ExactCategoryMatcher(CategoryMatcher):
    name = "exact"

    def q(self, value: str) -> Q:
        return Q(category__slug=value)


class FuzzyCategoryMatcher(CategoryMatcher):
    name = "fuzzy"

    def q(self, value: str) -> Q:
        return Q(category__slug__icontains=value) | Q(category__name__icontains=value)


MATCHERS = {
    ExactCategoryMatcher.name: ExactCategoryMatcher,
    FuzzyCategoryMatcher.name: FuzzyCategoryMatcher,
}


def get_category_matcher(strategy: str = None) -> CategoryMatcher:
    if strategy is None:
        strategy = getattr(settings, "STOREFRONT", {}).get("CATEGORY_MATCH_STRATEGY", FuzzyCategoryMatcher.name)
    try:
        return MATCHERS[strategy]()
    except KeyError:
        raise ValueError(f"Unknown category match strategy: {strategy}. Choose from {sorted(MATCHERS)}")
