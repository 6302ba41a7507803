import datetime as dt
import unittest
from pathlib import PurePosixPath

from safe_stringify.hooks import NO_JSON_FORM, SupportsJSON, json_form, register_json_form
from safe_stringify.traversal import prepare_for_serialization


class _Money:
    def __init__(self, cents: int) -> None:
        self.cents = cents


@register_json_form(_Money)
def _money_form(value: _Money) -> str:
    return f"{value.cents / 100:.2f}"


class _Tagged:
    def __json__(self) -> dict[str, str]:
        return {"tag": "ok"}


class JsonFormTests(unittest.TestCase):
    def test_plain_objects_have_no_form(self) -> None:
        self.assertIs(json_form(object()), NO_JSON_FORM)
        self.assertIs(json_form({"a": 1}), NO_JSON_FORM)

    def test_dunder_json_method_is_used(self) -> None:
        self.assertEqual(json_form(_Tagged()), {"tag": "ok"})
        self.assertIsInstance(_Tagged(), SupportsJSON)

    def test_instance_level_attribute_is_not_a_hook(self) -> None:
        money = _Money(5)
        money.__json__ = lambda: "instance"  # type: ignore[attr-defined]
        self.assertEqual(json_form(money), "0.05")
        plain = type("Plain", (), {})()
        plain.__json__ = lambda: "instance"
        self.assertIs(json_form(plain), NO_JSON_FORM)

    def test_registered_adapter_is_used_by_the_traversal(self) -> None:
        self.assertEqual(prepare_for_serialization({"price": _Money(1999)}), {"price": "19.99"})

    def test_standard_library_adapters(self) -> None:
        self.assertEqual(json_form(dt.time(12, 30)), "12:30:00")
        self.assertEqual(json_form(PurePosixPath("/tmp/x")), "/tmp/x")
        self.assertEqual(json_form(bytearray(b"\xffok")), "\ufffdok")
        self.assertEqual(json_form(KeyError("k")), {"name": "KeyError", "message": "'k'"})


if __name__ == "__main__":
    unittest.main()
