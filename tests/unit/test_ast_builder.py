"""Tests for the AST builder."""

import pytest

from jdl.core.ast_builder import AstBuilder
from jdl.core.cst import CstKind
from jdl.core.ir.catalog import RelationshipType
from jdl.core.ir.document import JdlDocument
from jdl.core.reader import parse


def _build(text: str) -> JdlDocument:
    return parse(text)


class TestHandlerTable:
    def test_every_kind_has_a_handler(self) -> None:
        builder = AstBuilder()
        assert set(builder._handlers) == set(CstKind)

    def test_missing_handler_fails_at_construction(self) -> None:
        class IncompleteBuilder(AstBuilder):
            visit_pattern = None

        with pytest.raises(TypeError, match="pattern"):
            IncompleteBuilder()


class TestEntities:
    def test_entity_defaults(self) -> None:
        document = _build("entity A")
        entity = document.entities[0]
        assert entity.name == "A"
        assert entity.table_name == "A"
        assert entity.fields == []
        assert entity.javadoc is None

    def test_table_name_and_javadoc(self, shop_jdl: str) -> None:
        owner = _build(shop_jdl).entities[0]
        assert owner.table_name == "shop_owner"
        assert owner.javadoc == "\n * The shop owner\n "

    def test_fields_and_validations(self, shop_jdl: str) -> None:
        owner = _build(shop_jdl).entities[0]
        login = owner.fields[0]
        assert login.name == "login"
        assert login.type == "String"
        assert login.javadoc == " Login name "
        assert [(v.key, v.value, v.constant) for v in login.validations] == [
            ("required", "", False),
            ("minlength", 3, False),
            ("maxlength", "MAX_LOGIN", True),
        ]

    def test_pattern_delimiters_stripped(self, shop_jdl: str) -> None:
        product = _build(shop_jdl).entities[1]
        pattern = product.fields[0].validations[1]
        assert pattern.key == "pattern"
        assert pattern.value == "^[A-Z].*$"

    def test_constants_last_wins(self) -> None:
        document = _build("MAX = 1\nMIN = 0\nMAX = 5")
        assert document.constants == {"MAX": 5, "MIN": 0}


class TestRelationships:
    def test_cardinality_stamped_on_every_pair(self) -> None:
        document = _build("relationship OneToOne { A to B, C to D }")
        assert [r.cardinality for r in document.relationships] == [
            RelationshipType.ONE_TO_ONE,
            RelationshipType.ONE_TO_ONE,
        ]

    def test_injected_field_with_param(self) -> None:
        document = _build("relationship ManyToOne { A{owner(login) required} to B }")
        side = document.relationships[0].from_side
        assert side.injected_field == "owner(login)"
        assert side.required is True

    def test_required_dropped_without_injected_field(self) -> None:
        document = _build("relationship ManyToOne { A to B{parent} }")
        relationship = document.relationships[0]
        assert relationship.from_side.required is None
        assert relationship.to_side.required is False

    def test_lone_required_flag_dropped(self) -> None:
        document = _build("relationship ManyToOne { A{required} to B }")
        side = document.relationships[0].from_side
        assert side.injected_field is None
        assert side.required is None

    def test_side_comment(self) -> None:
        document = _build("relationship OneToMany { /** owns */ A{b} to B }")
        assert document.relationships[0].from_side.javadoc == " owns "


class TestEnums:
    def test_values_keep_order_without_duplicates(self) -> None:
        document = _build("enum Color { RED, GREEN, RED, BLUE }")
        assert document.enums[0].values == ["RED", "GREEN", "BLUE"]


class TestOptions:
    def test_keyed_option_grouped_by_value(self) -> None:
        document = _build("dto A, B with mapstruct except C")
        entry = document.dto["mapstruct"]
        assert entry.names == ["A", "B"]
        assert entry.excluded == ["C"]

    def test_repeated_declarations_merge(self) -> None:
        document = _build(
            "service A with serviceClass\n"
            "service B, A with serviceClass except C\n"
            "service D with serviceImpl"
        )
        assert document.service["serviceClass"].names == ["A", "B"]
        assert document.service["serviceClass"].excluded == ["C"]
        assert document.service["serviceImpl"].names == ["D"]

    def test_merge_is_idempotent(self) -> None:
        once = _build("paginate A, B with pager except C")
        twice = _build("paginate A, B with pager except C\npaginate A, B with pager except C")
        assert once.pagination == twice.pagination

    def test_duplicates_within_one_declaration(self) -> None:
        document = _build("skipServer for A, A, B")
        assert document.no_server.names == ["A", "B"]

    def test_unary_sections(self) -> None:
        document = _build("skipClient for * except A\nnoFluentMethod B\nfilter all")
        assert document.no_client.names == ["*"]
        assert document.no_client.excluded == ["A"]
        assert document.no_fluent_method.names == ["B"]
        assert document.filter.names == ["*"]

    def test_list_serializes_under_legacy_name(self) -> None:
        document = _build("microservice A with billing")
        dumped = document.model_dump(by_alias=True)
        assert dumped["microservice"]["billing"] == {"list": ["A"], "excluded": []}


class TestApplications:
    def test_config_values(self) -> None:
        document = _build(
            """
            application {
              config {
                baseName shop
                packageName com.example.shop
                frontEndBuilder webpack
                languages [en, fr]
                serverPort 8080
                jhiPrefix "app"
                enableTranslation true
                serviceDiscoveryType "false"
              }
            }
            """
        )
        config = document.applications[0].config
        assert config == {
            "baseName": "shop",
            "packageName": "com.example.shop",
            "packageFolder": "com/example/shop",
            "frontendBuilder": "webpack",
            "languages": ["en", "fr"],
            "serverPort": 8080,
            "jhiPrefix": "app",
            "enableTranslation": True,
            "serviceDiscoveryType": False,
        }

    def test_service_discovery_name_passes_through(self) -> None:
        document = _build("application { config { baseName a serviceDiscoveryType eureka } }")
        assert document.applications[0].config["serviceDiscoveryType"] == "eureka"

    def test_last_blocks_win(self) -> None:
        document = _build(
            """
            application {
              config { baseName first }
              entities A
              config { baseName second }
              entities B, C except C
            }
            """
        )
        application = document.applications[0]
        assert application.config == {"baseName": "second"}
        assert application.entities.entity_list == ["B", "C"]
        assert application.entities.excluded == ["C"]

    def test_application_blocks_do_not_merge_unlike_options(self) -> None:
        document = _build(
            """
            application { entities A entities B }
            dto A with mapstruct
            dto B with mapstruct
            """
        )
        assert document.applications[0].entities.entity_list == ["B"]
        assert document.dto["mapstruct"].names == ["A", "B"]
