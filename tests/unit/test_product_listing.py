"""
Unit tests for ProductService.list_products() and completeness status.
"""

import pytest

from models.product import Completeness, ProductRecord, ProductSummary, StatusColor
from models.save_target import TRACKED_FIELDS

from tests.factories import ProductFactory


class TestCompleteness:

    def test_no_tracked_fields_is_empty(self):
        record = ProductRecord(**ProductFactory.create(sku="E-1"))

        assert record.filled_count() == 0
        assert record.completeness() is Completeness.EMPTY

    def test_all_tracked_fields_is_full(self):
        record = ProductRecord(**ProductFactory.create_complete(sku="F-1"))

        assert record.filled_count() == len(TRACKED_FIELDS)
        assert record.completeness() is Completeness.FULL

    def test_some_tracked_fields_is_partial(self):
        record = ProductRecord(**ProductFactory.create_partial(sku="P-1"))

        assert record.completeness() is Completeness.PARTIAL

    def test_untracked_fields_do_not_count(self):
        """Meta title and the original image are not part of completeness."""
        row = ProductFactory.create(
            sku="U-1",
            meta_title="Title",
            meta_description="Meta",
            pre_image_url="https://cdn.test/images/pre.webp"
        )

        assert ProductRecord(**row).completeness() is Completeness.EMPTY

    def test_empty_strings_do_not_count(self):
        row = ProductFactory.create(sku="U-2", wax_description="")

        assert ProductRecord(**row).completeness() is Completeness.EMPTY

    @pytest.mark.parametrize("factory,color", [
        (ProductFactory.create, StatusColor.NORMAL),
        (ProductFactory.create_partial, StatusColor.ORANGE),
        (ProductFactory.create_complete, StatusColor.GREEN),
    ])
    def test_status_color(self, factory, color):
        summary = ProductSummary.from_record(ProductRecord(**factory()))

        assert summary.status_color is color

    def test_summary_serializes_status_color_key(self):
        summary = ProductSummary.from_record(ProductRecord(**ProductFactory.create_complete(sku="F-1")))

        data = summary.model_dump(by_alias=True, mode="json")

        assert data["statusColor"] == "green"
        assert data["completeness"] == "full"
        assert data["sku"] == "F-1"


class TestListProducts:

    def test_sorted_by_status_then_natural_sku(self, mock_supabase, product_service):
        # Arrange
        mock_supabase.set_table_data("products", [
            ProductFactory.create_complete(sku="R-1"),
            ProductFactory.create(sku="R-10"),
            ProductFactory.create(sku="R-2"),
            ProductFactory.create_partial(sku="R-3"),
        ])

        # Act
        summaries = product_service.list_products()

        # Assert
        assert [s.sku for s in summaries] == ["R-3", "R-2", "R-10", "R-1"]
        assert [s.status_color for s in summaries] == [
            StatusColor.ORANGE, StatusColor.NORMAL, StatusColor.NORMAL, StatusColor.GREEN
        ]

    def test_no_products(self, mock_supabase, product_service):
        mock_supabase.set_table_data("products", [])

        assert product_service.list_products() == []

    def test_category_filter(self, mock_supabase, product_service):
        mock_supabase.set_table_data("products", [
            ProductFactory.create(sku="R-1", category="Rings"),
            ProductFactory.create(sku="N-1", category="Necklaces"),
        ])

        summaries = product_service.list_products(category="Necklaces")

        assert [s.sku for s in summaries] == ["N-1"]

    def test_search_matches_sku_or_title(self, mock_supabase, product_service):
        mock_supabase.set_table_data("products", [
            ProductFactory.create(sku="R-1", meta_title="Custom Gold Ring"),
            ProductFactory.create(sku="GOLD-7", meta_title=None),
            ProductFactory.create(sku="S-1", meta_title="Silver Band"),
        ])

        summaries = product_service.list_products(search="gold")

        assert sorted(s.sku for s in summaries) == ["GOLD-7", "R-1"]

    def test_database_error(self, mock_supabase, product_service):
        from exceptions import DatabaseError

        mock_supabase.set_table_error("products", RuntimeError("down"))

        with pytest.raises(DatabaseError):
            product_service.list_products()
