from __future__ import annotations

import pytest

from rowbridge.services.column_mapper import space_pascal_case


@pytest.mark.parametrize(
    "name, expected",
    [
        ("HelloWorld", "Hello World"),
        ("_Hello_World", "Hello World"),
        ("helloWorld_", "hello World"),
        ("ThisHasMore_Spaces__ForSure", "This Has More Spaces For Sure"),
        ("", ""),
        ("UserID", "User ID"),
        ("first_name", "first name"),
        ("Name", "Name"),
    ],
)
def test_space_pascal_case_examples(name: str, expected: str):
    assert space_pascal_case(name) == expected


def test_space_pascal_case_is_pure():
    """Same input gives same output, no hidden state between calls."""
    assert space_pascal_case("AbcDef") == space_pascal_case("AbcDef") == "Abc Def"
