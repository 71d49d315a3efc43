"""
Tests for the Module Cache.

Requires Python 3.11+.
"""

from types import ModuleType

from impmon.loader.cache import ModuleCache


class TestModuleCache:
    """Test cases for ModuleCache."""

    def test_get_through_binding(self):
        table = {"app.views": ModuleType("app.views")}
        cache = ModuleCache(table)
        cache.bind("/srv/app/views.py", "app.views")

        assert cache.get("/srv/app/views.py") is table["app.views"]
        assert "/srv/app/views.py" in cache
        assert cache.name_for("/srv/app/views.py") == "app.views"

    def test_unbound_path(self):
        cache = ModuleCache({})

        assert cache.get("/srv/app/views.py") is None
        assert "/srv/app/views.py" not in cache
        assert cache.evict("/srv/app/views.py") is None

    def test_bound_but_not_loaded(self):
        cache = ModuleCache({})
        cache.bind("/srv/app/views.py", "app.views")

        assert cache.get("/srv/app/views.py") is None
        assert "/srv/app/views.py" not in cache

    def test_evict_keeps_binding(self):
        module = ModuleType("app.views")
        table = {"app.views": module}
        cache = ModuleCache(table)
        cache.bind("/srv/app/views.py", "app.views")

        assert cache.evict("/srv/app/views.py") is module
        assert "app.views" not in table
        assert cache.name_for("/srv/app/views.py") == "app.views"

    def test_store(self):
        table = {}
        module = ModuleType("__mp_main__")
        cache = ModuleCache(table)
        cache.store("/srv/run.py", "__mp_main__", module)

        assert table == {"__mp_main__": module}
        assert cache.get("/srv/run.py") is module

    def test_forget_leaves_table_alone(self):
        table = {"app": ModuleType("app")}
        cache = ModuleCache(table)
        cache.bind("/srv/app/__init__.py", "app")
        cache.forget()

        assert cache.name_for("/srv/app/__init__.py") is None
        assert "app" in table

    def test_submodules_are_direct_children(self):
        views = ModuleType("app.views")
        table = {
            "app": ModuleType("app"),
            "app.views": views,
            "app.views.detail": ModuleType("app.views.detail"),
            "app.broken": None,
            "apps": ModuleType("apps"),
        }
        cache = ModuleCache(table)

        assert cache.submodules("app") == {"views": views}
