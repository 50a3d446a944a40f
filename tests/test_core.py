"""Tests for hmi_core — Value, Variable, VariableStore."""
import pytest

from hmi_core import Value, Variable, VariableNotFound, VariableStore, VType, value_to_string


class TestValue:
    def test_equals_same_tag(self):
        assert Value.make_int(10).equals(Value.make_int(10))
        assert not Value.make_int(10).equals(Value.make_int(11))
        assert Value.make_string("a") == Value.make_string("a")

    def test_different_tags_never_equal(self):
        assert not Value.make_int(10).equals(Value.make_float(10.0))
        assert not Value.make_int(1).equals(Value.make_bool(True))
        assert not Value.make_int(0).equals(Value.make_bool(False))
        assert not Value.make_string("1").equals(Value.make_int(1))
        assert Value.make_float(1.0) != Value.make_int(1)

    def test_immutable(self):
        v = Value.make_int(3)
        with pytest.raises(AttributeError):
            v.data = 4

    def test_default_is_int_zero(self):
        assert Value() == Value.make_int(0)

    def test_constructors_coerce(self):
        assert Value.make_float(3).type is VType.FLOAT
        assert isinstance(Value.make_float(3).data, float)

    def test_hashable(self):
        assert len({Value.make_int(1), Value.make_int(1), Value.make_bool(True)}) == 2

    @pytest.mark.parametrize("v, text", [
        (Value.make_int(-7), "-7"),
        (Value.make_float(23.5), "23.50"),
        (Value.make_float(24.25), "24.25"),
        (Value.make_bool(True), "true"),
        (Value.make_bool(False), "false"),
        (Value.make_string("Ivan"), "Ivan"),
    ])
    def test_value_to_string(self, v, text):
        assert value_to_string(v) == text


class TestVariable:
    def test_subscribe_immediately_receives_current_value(self):
        var = Variable(Value.make_bool(True))
        got = []
        var.subscribe(got.append)
        assert got == [Value.make_bool(True)]

    def test_set_notifies_only_on_change(self):
        var = Variable(Value.make_int(1))
        calls = []
        var.subscribe(calls.append)
        assert len(calls) == 1

        var.set(Value.make_int(1))
        assert len(calls) == 1

        var.set(Value.make_int(2))
        assert len(calls) == 2
        assert var.get() == Value.make_int(2)

    def test_tag_change_counts_as_change(self):
        var = Variable(Value.make_int(1))
        calls = []
        var.subscribe(calls.append)
        var.set(Value.make_float(1.0))
        assert calls[-1].type is VType.FLOAT

    def test_subscribers_called_in_order(self):
        var = Variable(Value.make_int(0))
        order = []
        var.subscribe(lambda v: order.append("a"))
        var.subscribe(lambda v: order.append("b"))
        order.clear()
        var.set(Value.make_int(1))
        assert order == ["a", "b"]

    def test_ids_increase(self):
        var = Variable()
        a = var.subscribe(lambda v: None)
        b = var.subscribe(lambda v: None)
        assert b > a

    def test_unsubscribe(self):
        var = Variable(Value.make_int(0))
        calls = []
        sid = var.subscribe(calls.append)
        var.unsubscribe(sid)
        var.set(Value.make_int(5))
        assert len(calls) == 1
        assert var.subscriber_count == 0

    def test_unsubscribe_unknown_is_noop(self):
        var = Variable()
        sid = var.subscribe(lambda v: None)
        var.unsubscribe(sid)
        var.unsubscribe(sid)
        var.unsubscribe(9999)

    def test_reentrant_set_in_callback(self):
        var = Variable(Value.make_int(0))
        seen = []

        def clamp(v):
            seen.append(v.data)
            if v.data > 10:
                var.set(Value.make_int(10))

        var.subscribe(clamp)
        var.set(Value.make_int(50))
        assert var.get() == Value.make_int(10)
        assert seen == [0, 50, 10]

    def test_unsubscribe_during_notify(self):
        var = Variable(Value.make_int(0))
        calls = []
        ids = {}

        def once(v):
            calls.append(v.data)
            if v.data == 1:
                var.unsubscribe(ids["once"])

        ids["once"] = var.subscribe(once)
        var.set(Value.make_int(1))
        var.set(Value.make_int(2))
        assert calls == [0, 1]

    def test_callback_error_propagates(self):
        var = Variable(Value.make_int(0))

        def boom(v):
            if v.data:
                raise RuntimeError("boom")

        var.subscribe(boom)
        with pytest.raises(RuntimeError):
            var.set(Value.make_int(1))


class TestVariableStore:
    def test_ensure_creates_if_missing(self):
        s = VariableStore()
        assert not s.has("a")
        s.ensure("a", Value.make_int(5))
        assert s.has("a")
        assert "a" in s
        assert s.get("a") == Value.make_int(5)

    def test_ensure_is_idempotent(self):
        s = VariableStore()
        first = s.ensure("a", Value.make_int(1))
        second = s.ensure("a", Value.make_int(2))
        assert first is second
        assert s.get("a") == Value.make_int(1)

    def test_set_creates_and_updates(self):
        s = VariableStore()
        s.set("t", Value.make_float(1.0))
        s.set("t", Value.make_float(2.0))
        assert s.get("t") == Value.make_float(2.0)

    def test_indexed_access_missing_raises(self):
        s = VariableStore()
        with pytest.raises(VariableNotFound):
            s.at("nope")
        with pytest.raises(KeyError):
            s["nope"]
        with pytest.raises(VariableNotFound):
            s.get("nope")

    def test_fallbacks_when_missing(self):
        s = VariableStore()
        assert s.get_bool("missing", True) is True
        assert s.get_float("missing", 1.5) == 1.5
        assert s.get_string("missing", "x") == "x"
        assert s.get_int("missing", 7) == 7

    def test_typed_getters(self):
        s = VariableStore()
        s.set("b", Value.make_bool(False))
        s.set("f", Value.make_float(2.25))
        s.set("s", Value.make_string("hello"))
        s.set("i", Value.make_int(4))
        assert s.get_bool("b", True) is False
        assert s.get_float("f", 0.0) == 2.25
        assert s.get_string("s", "") == "hello"
        assert s.get_int("i", 0) == 4

    def test_fallback_on_tag_mismatch(self):
        s = VariableStore()
        s.set("s", Value.make_string("hello"))
        s.set("i", Value.make_int(1))
        assert s.get_bool("s", True) is True
        assert s.get_float("s", 9.0) == 9.0
        assert s.get_string("i", "fb") == "fb"
        assert s.get_bool("i", False) is False
        assert s.get_int("s", -1) == -1

    def test_get_float_widens_int(self):
        s = VariableStore()
        s.set("t", Value.make_int(3))
        got = s.get_float("t", 0.0)
        assert got == 3.0
        assert isinstance(got, float)

    def test_set_equal_value_does_not_notify(self):
        s = VariableStore()
        s.set("x", Value.make_string("a"))
        calls = []
        s.at("x").subscribe(calls.append)
        s.set("x", Value.make_string("a"))
        assert len(calls) == 1

    def test_derived_variable_chain(self):
        s = VariableStore()
        s.set("pump.enabled", Value.make_bool(False))
        s.set("pump.enabled.view", Value.make_string("OFF"))
        s.at("pump.enabled").subscribe(
            lambda v: s.set("pump.enabled.view", Value.make_string("ON" if v.data else "OFF")))
        views = []
        s.at("pump.enabled.view").subscribe(views.append)
        s.set("pump.enabled", Value.make_bool(True))
        s.set("pump.enabled", Value.make_bool(True))
        assert [v.data for v in views] == ["OFF", "ON"]

    def test_names_and_as_dict(self):
        s = VariableStore()
        s.set("b", Value.make_int(1))
        s.set("a", Value.make_string("x"))
        assert s.names() == ["a", "b"]
        assert len(s) == 2
        d = s.as_dict()
        assert d == {"a": Value.make_string("x"), "b": Value.make_int(1)}
        # Returned dict should be a copy
        d["c"] = Value.make_int(9)
        assert not s.has("c")

    def test_repr(self):
        s = VariableStore()
        s.set("x", Value.make_int(1))
        assert "VariableStore" in repr(s)
        assert "x" in repr(s)

    def test_not_found_message(self):
        err = VariableNotFound("pump.enabled")
        assert err.name == "pump.enabled"
        assert "pump.enabled" in str(err)
