"""Tests for page resolution, widget lookup and the descriptor cache."""
from unittest.mock import patch

from django.core.cache import cache
from django.test import TestCase

from extensions.models import Extension
from extensions.runtime import (
    descriptor_cache_key,
    extension_json,
    get_descriptor,
    get_widget,
    resolve_page,
)
from extensions.tests.helpers import PAGE_SOURCE, make_menu, make_page, make_widget


class ResolvePageTests(TestCase):
    def test_resolves_linked_enabled_page(self):
        page = make_page(menu=make_menu())

        self.assertEqual(resolve_page("/reports"), page)

    def test_path_is_normalized(self):
        page = make_page(menu=make_menu())

        self.assertEqual(resolve_page("reports/"), page)

    def test_unknown_path(self):
        self.assertIsNone(resolve_page("/missing"))

    def test_menu_without_extension(self):
        make_menu()

        self.assertIsNone(resolve_page("/reports"))

    def test_disabled_extension_never_resolves(self):
        make_page(menu=make_menu(), is_enabled=False)

        self.assertIsNone(resolve_page("/reports"))

    def test_disabled_menu_never_resolves(self):
        make_page(menu=make_menu(is_enabled=False))

        self.assertIsNone(resolve_page("/reports"))

    def test_page_only_reachable_through_its_menu(self):
        make_page(menu=make_menu(path="/reports"))
        make_menu(path="/other", label="Other")

        self.assertIsNone(resolve_page("/other"))

    def test_widget_linked_by_database_edit_does_not_resolve(self):
        menu = make_menu()
        widget = make_widget()
        Extension.objects.filter(pk=widget.pk).update(menu=menu)

        self.assertIsNone(resolve_page("/reports"))

    def test_unlinked_after_menu_delete(self):
        menu = make_menu()
        make_page(menu=menu)
        menu.delete()

        self.assertIsNone(resolve_page("/reports"))


class GetWidgetTests(TestCase):
    def test_by_numeric_id(self):
        widget = make_widget()

        self.assertEqual(get_widget(widget.pk), widget)
        self.assertEqual(get_widget(str(widget.pk)), widget)

    def test_disabled_widget(self):
        widget = make_widget(is_enabled=False)

        self.assertIsNone(get_widget(widget.pk))

    def test_page_is_not_a_widget(self):
        page = make_page()

        self.assertIsNone(get_widget(page.pk))

    def test_non_numeric_id(self):
        self.assertIsNone(get_widget("abc"))
        self.assertIsNone(get_widget(None))


class DescriptorCacheTests(TestCase):
    def setUp(self):
        cache.clear()

    def test_descriptor_is_cached(self):
        widget = make_widget()

        descriptor = get_descriptor(widget)

        self.assertEqual(cache.get(descriptor_cache_key(widget)), descriptor)

    def test_stale_cache_entry_ignored(self):
        widget = make_widget()
        cache.set(descriptor_cache_key(widget), {"checksum": "old"})

        descriptor = get_descriptor(widget)

        self.assertEqual(descriptor["checksum"], widget.checksum)

    def test_save_invalidates_cache(self):
        widget = make_widget()
        get_descriptor(widget)

        widget.save()

        self.assertIsNone(cache.get(descriptor_cache_key(widget)))

    def test_delete_invalidates_cache(self):
        widget = make_widget()
        get_descriptor(widget)
        key = descriptor_cache_key(widget)

        widget.delete()

        self.assertIsNone(cache.get(key))

    def test_missing_compiled_output_is_rebuilt(self):
        page = make_page()
        Extension.objects.filter(pk=page.pk).update(compiled={})
        page.refresh_from_db()

        descriptor = get_descriptor(page)
        page.refresh_from_db()

        self.assertEqual(descriptor["source"], PAGE_SOURCE)
        self.assertEqual(page.compiled["checksum"], page.checksum)

    @patch("extensions.runtime.cache")
    def test_cache_failure_falls_back_to_stored_output(self, mock_cache):
        mock_cache.get.side_effect = ConnectionError("redis down")
        mock_cache.set.side_effect = ConnectionError("redis down")
        widget = make_widget()

        descriptor = get_descriptor(widget)

        self.assertEqual(descriptor, widget.compiled)


class ExtensionJsonTests(TestCase):
    def test_page_json(self):
        page = make_page(menu=make_menu(), version="2.1.0")

        data = extension_json(page)

        self.assertEqual(data["id"], page.pk)
        self.assertEqual(data["type"], "page")
        self.assertEqual(data["menu"], "/reports")
        self.assertEqual(data["version"], "2.1.0")
        self.assertEqual(data["descriptor"]["extension_id"], page.extension_id)

    def test_without_descriptor(self):
        data = extension_json(make_widget(), include_descriptor=False)

        self.assertNotIn("descriptor", data)
        self.assertIsNone(data["menu"])
