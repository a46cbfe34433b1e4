"""Test the component registry and the resource packager in AppEngine/core"""

import re
import sys
from pathlib import Path

import pytest

# Add project root directory to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from AppEngine.core import ComponentRegistry, Plugin, ResourcePackager, create_default_registry
from AppEngine.engine import create_engine


class RecordingPlugin(Plugin):
    name = "recorder"
    version = "1.2.3"

    def __init__(self, render_result=None):
        self.events = []
        self.render_result = render_result

    def on_init(self, registry):
        self.events.append(("init", registry))

    def on_config_load(self, config):
        self.events.append(("config", config))

    def on_render(self, kind, resource_id, context=None):
        self.events.append(("render", kind, resource_id))
        return self.render_result

    def on_error(self, error):
        self.events.append(("error", str(error)))


class FailingPlugin(RecordingPlugin):
    name = "failing"

    def on_config_load(self, config):
        raise RuntimeError("config hook failed")


class TestComponentRegistry:
    """Kind -> renderer mapping and plugin hooks"""

    def setup_method(self):
        self.registry = ComponentRegistry()

    def test_register_and_lookup(self):
        def renderer(config, resource_id, context=None):
            return "rendered"

        self.registry.register("badge", renderer)
        assert self.registry.has_renderer("badge") is True
        assert self.registry.get_renderer("badge") is renderer
        assert self.registry.get_registered_types() == ["badge"]
        assert self.registry.get_renderer("missing") is None
        assert self.registry.has_renderer("missing") is False

    def test_register_requires_callable(self):
        with pytest.raises(TypeError):
            self.registry.register("badge", "not callable")

    def test_reregister_same_is_noop(self):
        def renderer(config, resource_id, context=None):
            return None

        self.registry.register("badge", renderer)
        self.registry.register("badge", renderer)
        assert self.registry.get_registered_types() == ["badge"]

    def test_reregister_different_overwrites(self):
        self.registry.register("badge", lambda *args: 1)
        replacement = lambda *args: 2  # noqa: E731
        self.registry.register("badge", replacement)
        assert self.registry.get_renderer("badge") is replacement

    def test_plugin_lifecycle(self):
        plugin = RecordingPlugin()
        self.registry.register_plugin(plugin)
        assert plugin.events[0] == ("init", self.registry)
        assert self.registry.get_plugins() == [plugin]

        self.registry.notify_config_load({"k": "v"})
        assert plugin.events[-1] == ("config", {"k": "v"})

        assert self.registry.notify_render("survey", "s1") is None
        assert plugin.events[-1] == ("render", "survey", "s1")

    def test_first_render_result_wins(self):
        first = RecordingPlugin(render_result="from-first")
        second = RecordingPlugin(render_result="from-second")
        self.registry.register_plugin(first)
        self.registry.register_plugin(second)
        assert self.registry.notify_render("survey", "s1") == "from-first"
        assert ("render", "survey", "s1") not in second.events

    def test_hook_errors_forwarded_not_raised(self):
        plugin = FailingPlugin()
        self.registry.register_plugin(plugin)
        self.registry.notify_config_load({})
        assert plugin.events[-1] == ("error", "config hook failed")

    def test_notify_error(self):
        plugin = RecordingPlugin()
        self.registry.register_plugin(plugin)
        self.registry.notify_error(ValueError("bad"))
        assert plugin.events[-1] == ("error", "bad")

    def test_default_registry(self):
        engine = create_engine()
        registry = create_default_registry(engine)
        assert registry.get_registered_types() == ["survey", "visualization", "productCard"]
        assert registry.get_renderer("survey") == engine.render_survey

    def test_registries_are_independent(self):
        first = create_engine()
        second = create_engine()
        first.registry.register("badge", lambda *args: None)
        assert second.registry.has_renderer("badge") is False


class TestResourcePackager:
    """URI construction and envelope wire shape"""

    def setup_method(self):
        self.packager = ResourcePackager("ui")

    def test_instance_id_format(self):
        instance_id = self.packager.new_instance_id()
        assert re.match(r"^\d{13,}-[0-9a-z]{9}$", instance_id)

    def test_instance_ids_differ(self):
        ids = {self.packager.new_instance_id() for _ in range(500)}
        assert len(ids) == 500

    def test_package_with_contextual_id(self):
        resource = self.packager.package_resource("survey", "<p>x</p>", "s1/123-abc")
        assert resource.uri == "ui://survey/s1/123-abc"
        assert resource.kind == "survey"
        assert resource.html == "<p>x</p>"
        assert resource.to_dict() == {
            "uri": "ui://survey/s1/123-abc",
            "content": {"type": "rawHtml", "htmlString": "<p>x</p>"},
            "encoding": "text",
        }

    def test_package_without_contextual_id(self):
        resource = self.packager.package_resource("product-cards", "<div></div>")
        assert re.match(r"^ui://product-cards/\d+-[0-9a-z]{9}$", resource.uri)

    def test_external_url(self):
        resource = self.packager.package_external_url("survey", "s1", "https://apps.example.com/survey")
        assert resource.to_dict() == {
            "uri": "ui://survey/s1",
            "content": {"type": "externalUrl", "iframeUrl": "https://apps.example.com/survey"},
            "encoding": "text",
        }
        assert resource.html is None

    def test_custom_scheme(self):
        packager = ResourcePackager("app")
        assert packager.build_uri("visualization", "v1") == "app://visualization/v1"
