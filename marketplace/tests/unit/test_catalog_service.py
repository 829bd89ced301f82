from decimal import Decimal

import pytest
from django.test import TestCase

from marketplace.catalog.domain.services import (
    CatalogService,
    ExactCategoryMatcher,
    FuzzyCategoryMatcher,
    get_category_matcher,
)
from marketplace.services.base import ErrorCodes
from marketplace.tests.factories import CategoryFactory, ProductFactory, ProductOutOfStockFactory


class CatalogServiceTest(TestCase):
    def setUp(self):
        self.service = CatalogService(category_matcher=FuzzyCategoryMatcher())
        self.lighting = CategoryFactory(name="Home Lighting", slug="home-lighting")
        self.garden = CategoryFactory(name="Garden", slug="garden")
        self.lamp = ProductFactory(name="Desk Lamp", category=self.lighting, price=Decimal("45.00"), is_featured=True)
        self.bulb = ProductFactory(name="Smart Bulb", category=self.lighting, price=Decimal("15.00"))
        self.hose = ProductFactory(name="Garden Hose", category=self.garden, price=Decimal("30.00"))

    def test_listing_excludes_inactive_and_out_of_stock(self):
        ProductFactory(is_active=False)
        ProductOutOfStockFactory()

        result = self.service.list_products()

        self.assertEqual(result.value["total"], 3)

    def test_fuzzy_category_filter_matches_partial_name(self):
        result = self.service.list_products({"category": "lighting"})

        self.assertEqual({p.id for p in result.value["results"]}, {self.lamp.id, self.bulb.id})

    def test_price_range_and_sorting(self):
        result = self.service.list_products(
            {"min_price": Decimal("20"), "max_price": Decimal("50"), "sort_by": "price", "sort_order": "asc"}
        )

        self.assertEqual([p.name for p in result.value["results"]], ["Garden Hose", "Desk Lamp"])

    def test_unknown_sort_field_falls_back_to_created_at(self):
        result = self.service.list_products({"sort_by": "stock_quantity"})

        self.assertTrue(result.ok)
        self.assertEqual(result.value["total"], 3)

    def test_pagination_reports_full_total(self):
        result = self.service.list_products({"sort_by": "name", "sort_order": "asc"}, offset=1, limit=1)

        self.assertEqual(result.value["total"], 3)
        self.assertEqual([p.name for p in result.value["results"]], ["Garden Hose"])

    def test_search_matches_name_and_description(self):
        ProductFactory(name="Rug", description="Pairs well with any lamp")

        result = self.service.search_products("lamp")

        self.assertEqual([p.name for p in result.value["results"]], ["Desk Lamp", "Rug"])

    def test_search_requires_two_characters(self):
        result = self.service.search_products(" a ")

        self.assertEqual(result.error, ErrorCodes.VALIDATION_ERROR)

    def test_get_product_by_id_or_slug(self):
        self.assertEqual(self.service.get_product(str(self.lamp.id)).value, self.lamp)
        self.assertEqual(self.service.get_product(self.lamp.slug).value, self.lamp)

    def test_get_inactive_product_is_not_found(self):
        hidden = ProductFactory(is_active=False)

        result = self.service.get_product(str(hidden.id))

        self.assertEqual(result.error, ErrorCodes.PRODUCT_NOT_FOUND)

    def test_list_categories_counts_active_products(self):
        ProductFactory(category=self.garden, is_active=False)

        categories = {c.slug: c.product_count for c in self.service.list_categories().value}

        self.assertEqual(categories, {"garden": 1, "home-lighting": 2})

    def test_featured_products(self):
        result = self.service.get_featured_products()

        self.assertEqual(result.value, [self.lamp])

    def test_products_by_empty_category_is_not_found(self):
        CategoryFactory(name="Toys", slug="toys")

        result = self.service.get_products_by_category("toys")

        self.assertEqual(result.error, ErrorCodes.PRODUCT_NOT_FOUND)

    def test_related_products_share_category(self):
        result = self.service.get_related_products(str(self.lamp.id))

        self.assertEqual(result.value, [self.bulb])


@pytest.mark.unit
class TestCategoryMatching:
    def test_exact_matcher_uses_slug(self):
        assert "category__slug" in str(ExactCategoryMatcher().q("garden"))

    def test_fuzzy_matcher_checks_slug_and_name(self):
        q = str(FuzzyCategoryMatcher().q("garden"))

        assert "category__slug__icontains" in q
        assert "category__name__icontains" in q

    def test_strategy_from_settings(self, settings):
        settings.STOREFRONT = {"CATEGORY_MATCH_STRATEGY": "exact"}

        assert isinstance(get_category_matcher(), ExactCategoryMatcher)

    def test_default_strategy_is_fuzzy(self, settings):
        settings.STOREFRONT = {}

        assert isinstance(get_category_matcher(), FuzzyCategoryMatcher)

    def test_unknown_strategy(self):
        with pytest.raises(ValueError):
            get_category_matcher("phonetic")


class ExactCategoryFilterTest(TestCase):
    def test_exact_matcher_rejects_partial_slug(self):
        ProductFactory(category=CategoryFactory(name="Home Lighting", slug="home-lighting"))
        service = CatalogService(category_matcher=ExactCategoryMatcher())

        self.assertEqual(service.list_products({"category": "lighting"}).value["total"], 0)
        self.assertEqual(service.list_products({"category": "home-lighting"}).value["total"], 1)
