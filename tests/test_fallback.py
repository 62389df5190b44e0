# tests/test_fallback.py
"""
Fallback catalog tests
"""
from resource_hub.models import ResourceQuery
from resource_hub.services import FallbackController, FALLBACK_CATALOG

from conftest import make_resource


class TestFallbackController:
    """Static catalog served on failure"""

    def test_unfiltered(self):
        result = FallbackController().on_failure(ResourceQuery())

        assert [r.id for r in result.items] == ['local:ex1', 'local:ex2']
        assert result.total == 2
        assert result.total_pages == 1
        assert result.total_is_estimate is False

    def test_filters_apply(self):
        result = FallbackController().on_failure(ResourceQuery(language='javascript'))

        assert [r.title for r in result.items] == ['React Official Docs']

    def test_nothing_matches(self):
        result = FallbackController().on_failure(ResourceQuery(type='video'))

        assert result.items == []
        assert result.total == 0
        assert result.total_pages == 1

    def test_slices_requested_page(self):
        catalog = [make_resource(str(i)) for i in range(5)]
        controller = FallbackController(catalog)

        result = controller.on_failure(ResourceQuery(page=2, page_size=2))

        assert [r.id for r in result.items] == ['devto:2', 'devto:3']
        assert result.total == 5
        assert result.total_pages == 3

    def test_catalog_is_not_shared(self):
        controller = FallbackController()
        controller.catalog.clear()

        assert len(FALLBACK_CATALOG) == 2
