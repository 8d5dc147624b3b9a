"""Tests for string utilities."""

from datetime import datetime, timezone

from jdl.core.strings import (
    camel_case,
    changelog_date,
    format_comment,
    kebab_case,
    lower_first,
    snake_case,
    trim_comment,
    words,
)


class TestCaseConversions:
    def test_camel_case(self) -> None:
        assert camel_case("MyEntity") == "myEntity"
        assert camel_case("my_field") == "myField"
        assert camel_case("my-field name") == "myFieldName"
        assert camel_case("") == ""

    def test_camel_case_keeps_inner_casing(self) -> None:
        assert camel_case("someHTTPThing") == "someHTTPThing"

    def test_lower_first(self) -> None:
        assert lower_first("Owner") == "owner"
        assert lower_first("") == ""

    def test_kebab_case(self) -> None:
        assert kebab_case("OneToMany") == "one-to-many"

    def test_snake_case(self) -> None:
        assert snake_case("MyEntity") == "my_entity"
        assert snake_case("tableA") == "table_a"
        assert snake_case("shop_owner") == "shop_owner"

    def test_non_ascii_letters_kept(self) -> None:
        assert snake_case("Café") == "café"
        assert snake_case("Ärger") == "ärger"
        assert kebab_case("GroßeStraße") == "große-straße"

    def test_acronyms(self) -> None:
        assert words("XMLHttpRequest") == ["XML", "Http", "Request"]
        assert words("order2Item") == ["order", "2", "Item"]


class TestComments:
    def test_trim_comment(self) -> None:
        assert trim_comment("/** Login name */") == " Login name "
        assert trim_comment("/* plain */") == " plain "

    def test_format_single_line(self) -> None:
        assert format_comment(" Login name ") == "Login name"

    def test_format_multi_line(self) -> None:
        comment = "\n * First line\n * Second line\n "
        assert format_comment(comment) == "First line\nSecond line"

    def test_format_skips_leading_empty_lines(self) -> None:
        assert format_comment("*\n * b") == "b"
        assert format_comment("*\n * a\n *\n * b") == "a\n\nb"

    def test_format_empty(self) -> None:
        assert format_comment(None) is None
        assert format_comment("") is None


def test_changelog_date_increments_by_seconds():
    base = datetime(2020, 1, 1, 23, 59, 59, tzinfo=timezone.utc)
    assert changelog_date(base) == "20200101235959"
    assert changelog_date(base, 1) == "20200102000000"
