"""Tests for trellis.plugins: reference classification, resolution, lookup."""

import json

import pytest

from trellis.errors import PluginResolutionError
from trellis.plugins import (
    Factory,
    FunctionRedirect,
    Indirect,
    Literal,
    PackageRedirect,
    PluginDescriptor,
    PluginResolver,
    classify_ref,
    import_lookup,
)


def hook(ctx):
    return None


class TestClassifyRef:
    def test_string_is_indirect(self) -> None:
        assert classify_ref("auth") == Indirect("auth")

    def test_callable_is_factory(self) -> None:
        assert classify_ref(hook) == Factory(hook)

    def test_pkg_mapping(self) -> None:
        assert classify_ref({"pkg": "auth", "level": 2}) == PackageRedirect("auth", {"level": 2})

    def test_fn_mapping(self) -> None:
        ref = {"fn": hook, "level": 2}
        assert classify_ref(ref) == FunctionRedirect(hook, ref)

    def test_fn_must_be_callable(self) -> None:
        with pytest.raises(PluginResolutionError):
            classify_ref({"fn": "nope"})

    def test_plain_mapping_is_literal(self) -> None:
        assert classify_ref({"before": hook}) == Literal({"before": hook})

    def test_descriptor_is_literal(self) -> None:
        assert isinstance(classify_ref(PluginDescriptor()), Literal)

    def test_unrecognized(self) -> None:
        with pytest.raises(PluginResolutionError, match="unrecognized plugin reference"):
            classify_ref(42)


class TestResolve:
    def test_literal(self) -> None:
        descriptor = PluginResolver().resolve({"before": hook, "origin": "*"})
        assert descriptor.before == (hook,)
        assert descriptor.get("origin") == "*"

    def test_literal_fields_win_over_params(self) -> None:
        descriptor = PluginResolver().resolve({"origin": "*"}, {"origin": "x", "max_age": 5})
        assert descriptor.options == {"origin": "*", "max_age": 5}

    def test_factory_receives_params(self) -> None:
        received = []

        def factory(params):
            received.append(params)
            return {"after": hook}

        descriptor = PluginResolver().resolve(factory, {"level": 1})
        assert received == [{"level": 1}]
        assert descriptor.after == (hook,)
        assert descriptor.get("level") == 1

    def test_indirect_uses_injected_lookup(self) -> None:
        registry = {"auth": {"before": hook}}
        descriptor = PluginResolver(registry.__getitem__).resolve("auth")
        assert descriptor.before == (hook,)

    def test_indirect_missing_name(self) -> None:
        with pytest.raises(PluginResolutionError, match="'auth'"):
            PluginResolver({}.__getitem__).resolve("auth")

    def test_package_redirect_fields_win(self) -> None:
        received = []

        def factory(params):
            received.append(params)
            return {}

        PluginResolver().resolve({"pkg": factory, "origin": "*"}, {"origin": "x", "a": 1})
        assert received == [{"origin": "*", "a": 1}]

    def test_function_redirect_params_win(self) -> None:
        received = []

        def build(source):
            received.append(source)
            return {"before": hook}

        ref = {"fn": build, "level": 1, "name": "audit"}
        descriptor = PluginResolver().resolve(ref, {"level": 2})
        assert received[0]["level"] == 1
        assert descriptor.get("level") == 2
        assert descriptor.get("name") == "audit"
        assert "fn" not in descriptor.options

    def test_chained_indirection(self) -> None:
        registry = {"a": "b", "b": lambda params: {"before": hook}}
        assert PluginResolver(registry.__getitem__).resolve("a").before == (hook,)

    def test_cycle_is_bounded(self) -> None:
        resolver = PluginResolver(lambda name: name, max_depth=5)
        with pytest.raises(PluginResolutionError, match="exceeded 5 levels"):
            resolver.resolve("loop")

    def test_descriptor_round_trips(self) -> None:
        descriptor = PluginDescriptor(before=(hook,), options={"x": 1})
        resolved = PluginResolver().resolve(descriptor, {"y": 2})
        assert resolved.before == (hook,)
        assert resolved.options == {"y": 2, "x": 1}

    def test_resolution_has_no_side_effects(self) -> None:
        ref = {"before": hook}
        PluginResolver().resolve(ref, {"a": 1})
        assert ref == {"before": hook}


class TestDescriptor:
    def test_routes_must_be_mapping(self) -> None:
        with pytest.raises(PluginResolutionError, match="routes"):
            PluginDescriptor.from_mapping({"routes": ["/a"]})

    def test_requires_normalized(self) -> None:
        assert PluginDescriptor.from_mapping({"requires": "auth"}).requires == ("auth",)

    def test_hooks_only(self) -> None:
        assert PluginDescriptor.from_mapping({"before": hook, "x": 1}).has_hooks_only
        assert not PluginDescriptor.from_mapping({"before_acc": hook}).has_hooks_only
        assert not PluginDescriptor.from_mapping({"routes": {"/a": hook}}).has_hooks_only


class TestImportLookup:
    def test_named_attribute(self) -> None:
        assert import_lookup("json:dumps") is json.dumps

    def test_default_plugin_attribute(self, tmp_path, monkeypatch) -> None:
        (tmp_path / "trellis_sample_plugin.py").write_text("plugin = {'origin': '*'}\n")
        monkeypatch.syspath_prepend(str(tmp_path))
        assert import_lookup("trellis_sample_plugin") == {"origin": "*"}

    def test_missing_attribute(self) -> None:
        with pytest.raises(PluginResolutionError, match="no attribute 'plugin'"):
            import_lookup("json")

    def test_missing_module(self) -> None:
        with pytest.raises(PluginResolutionError, match="trellis_no_such_plugin") as info:
            import_lookup("trellis_no_such_plugin")
        assert isinstance(info.value.__cause__, ModuleNotFoundError)
