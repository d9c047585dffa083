"""Unit tests for the constructor wrapper builder."""

from unihook.core.constructor_wrapper import HookedConstructor, build_constructor


class Widget:
    """A widget."""

    category = "ui"

    def __init__(self, label, size=1):
        self.label = label
        self.size = size

    def render(self, times=1):
        return self.label * times

    def area(self):
        return self.size * self.size


class SlottedWidget:
    __slots__ = ("label",)

    def __init__(self, label):
        self.label = label

    def render(self):
        return self.label


class TestHookedConstructor:
    """Test intercepting instance creation."""

    def test_instances_are_original_class(self):
        hooked = build_constructor(Widget, "render", lambda result, *rest: result)
        widget = hooked("x")
        assert type(widget) is Widget
        assert isinstance(widget, Widget)
        assert isinstance(widget, hooked)
        assert widget.label == "x"

    def test_callback_sees_each_call(self):
        calls = []

        def callback(result, args, method, instance):
            calls.append((result, args, method, instance))
            return result.upper()

        hooked = build_constructor(Widget, "render", callback)
        widget = hooked("ab")

        assert widget.render(2) == "ABAB"
        assert widget.render() == "AB"
        assert len(calls) == 2
        result, args, method, instance = calls[0]
        assert (result, args) == ("abab", (2,))
        assert instance is widget
        assert method.__func__ is Widget.render

    def test_callback_result_always_wins(self):
        hooked = build_constructor(Widget, "render", lambda *a: None)
        assert hooked("ab").render() is None

    def test_other_methods_untouched(self):
        hooked = build_constructor(Widget, "render", lambda *a: "hooked")
        widget = hooked("a", size=3)
        assert widget.area() == 9

    def test_missing_method_leaves_instance_alone(self):
        hooked = build_constructor(Widget, "missing", lambda *a: "hooked")
        widget = hooked("a")
        assert not hasattr(widget, "missing")
        assert widget.render() == "a"

    def test_instances_from_original_class_unaffected(self):
        hooked = build_constructor(Widget, "render", lambda *a: "hooked")
        hooked("a")
        assert Widget("a").render() == "a"

    def test_slotted_instance_is_returned_unmodified(self):
        hooked = build_constructor(SlottedWidget, "render", lambda *a: "hooked")
        widget = hooked("s")
        assert widget.render() == "s"

    def test_metadata_copied(self):
        hooked = build_constructor(Widget, "render", lambda *a: None)
        assert hooked.__name__ == "Widget"
        assert hooked.__doc__ == "A widget."
        assert hooked.category == "ui"
        assert hooked.__wrapped__ is Widget

    def test_subclass_checks(self):
        class Gadget(Widget):
            pass

        hooked = build_constructor(Widget, "render", lambda *a: None)
        assert issubclass(Gadget, hooked)

        class Derived(hooked):
            pass

        assert Derived.__mro__[1] is Widget
        assert Derived("d").render() == "d"

    def test_repr(self):
        hooked = HookedConstructor(Widget, "render", lambda *a: None)
        assert repr(hooked) == "<HookedConstructor Widget.render>"
