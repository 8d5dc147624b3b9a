"""Tests for the entity resolver."""

import logging

import pytest

from jdl.core.api import parse_document
from jdl.core.entity_resolver import InjectedField, extract_field, resolve_entities
from jdl.core.errors import ResolutionError
from jdl.core.linker import build_object_model


def _relationship(entity, name):
    return next(r for r in entity.relationships if r.relationship_name == name)


class TestExtractField:
    def test_plain_name(self) -> None:
        assert extract_field("owner") == InjectedField("owner", "id")

    def test_with_other_field(self) -> None:
        assert extract_field("owner(login)") == InjectedField("owner", "login")

    def test_missing(self) -> None:
        assert extract_field(None) == InjectedField("", "id")


class TestShopResolution:
    @pytest.fixture
    def entities(self, resolve, shop_jdl):
        return resolve(shop_jdl)

    def test_records_in_declaration_order(self, entities) -> None:
        assert list(entities) == ["Owner", "Product", "Tag"]
        assert [e.changelog_date for e in entities.values()] == [
            "20200101000000",
            "20200101000001",
            "20200101000002",
        ]

    def test_entity_attributes(self, entities) -> None:
        owner = entities["Owner"]
        assert owner.table_name == "shop_owner"
        assert owner.javadoc == "The shop owner"
        assert owner.applications == "*"
        assert entities["Product"].table_name == "product"

    def test_options(self, entities) -> None:
        owner, product, tag = entities["Owner"], entities["Product"], entities["Tag"]
        assert owner.dto == "mapstruct"
        assert product.dto == "mapstruct"
        assert tag.dto == "no"
        assert product.pagination == "pagination"
        assert owner.pagination == "no"
        assert owner.jpa_metamodel_filtering
        assert not tag.jpa_metamodel_filtering

    def test_filter_forces_service_class(self, entities) -> None:
        assert entities["Owner"].service == "serviceClass"
        assert entities["Product"].service == "serviceImpl"
        assert entities["Tag"].service == "no"

    def test_validations(self, entities) -> None:
        login = entities["Owner"].fields[0]
        assert login.field_name == "login"
        assert login.field_type == "String"
        assert login.javadoc == "Login name"
        assert login.field_validate_rules == ["required", "minlength", "maxlength"]
        assert login.field_validate_rules_minlength == 3
        assert login.field_validate_rules_maxlength == 50

        name = entities["Product"].fields[0]
        assert name.field_validate_rules_pattern == "^[A-Z].*$"

    def test_blobs_rewritten(self, entities) -> None:
        _, picture, notes = entities["Owner"].fields
        assert (picture.field_type, picture.field_type_blob_content) == ("byte[]", "image")
        assert (notes.field_type, notes.field_type_blob_content) == ("byte[]", "text")

    def test_enum_field(self, entities) -> None:
        status = entities["Product"].fields[1]
        assert status.field_type == "Status"
        assert status.field_values == "DRAFT,PUBLISHED"

    def test_one_to_many_with_synthesized_inverse(self, entities) -> None:
        (products,) = entities["Owner"].relationships
        assert products.relationship_type == "one-to-many"
        assert products.relationship_name == "product"
        assert products.other_entity_name == "product"
        assert products.other_entity_relationship_name == "owner"

        owner = _relationship(entities["Product"], "owner")
        assert owner.relationship_type == "many-to-one"
        assert owner.other_entity_name == "owner"
        assert owner.other_entity_field == "id"

    def test_many_to_many_both_sides(self, entities) -> None:
        tag = _relationship(entities["Product"], "tag")
        assert tag.relationship_type == "many-to-many"
        assert tag.other_entity_field == "name"
        assert tag.owner_side is True
        assert tag.other_entity_relationship_name == "product"

        (product,) = entities["Tag"].relationships
        assert product.relationship_name == "product"
        assert product.other_entity_name == "product"
        assert product.owner_side is False
        assert product.other_entity_relationship_name == "tag"

    def test_json_shape(self, entities) -> None:
        data = entities["Owner"].to_json_dict()
        assert data["entityName"] == "Owner"
        assert data["changelogDate"] == "20200101000000"
        assert data["jpaMetamodelFiltering"] is True
        assert data["fields"][0]["fieldValidateRulesMaxlength"] == 50
        assert "skipClient" not in data


class TestRelationships:
    def test_inverse_synthesized_once(self, creation_time) -> None:
        jdl_object = build_object_model(
            parse_document(
                "entity A\nentity B\n"
                "relationship OneToMany { A{b} to B }\n"
                "relationship OneToMany { A{other} to B }"
            )
        )
        first = resolve_entities(jdl_object, "sql", creation_time=creation_time)
        second = resolve_entities(jdl_object, "sql", creation_time=creation_time)
        for entities in (first, second):
            inverses = [
                r for r in entities["B"].relationships if r.relationship_type == "many-to-one"
            ]
            assert len(inverses) == 2
        assert jdl_object.relationships[0].injected_field_in_to is None

    def test_declared_inverse_not_synthesized(self, resolve) -> None:
        entities = resolve("entity A\nentity B\nrelationship OneToMany { A{b} to B{a(name)} }")
        (inverse,) = entities["B"].relationships
        assert inverse.relationship_type == "many-to-one"
        assert inverse.relationship_name == "a"
        assert inverse.other_entity_field == "name"
        assert entities["A"].relationships[0].other_entity_relationship_name == "a"

    def test_one_to_one(self, resolve) -> None:
        entities = resolve(
            "entity A\nentity B\nrelationship OneToOne { A{b(name) required} to B{a} }"
        )
        (owner,) = entities["A"].relationships
        assert owner.relationship_name == "b"
        assert owner.other_entity_field == "name"
        assert owner.owner_side is True
        assert owner.other_entity_relationship_name == "a"
        assert owner.relationship_validate_rules == "required"

        (inverse,) = entities["B"].relationships
        assert inverse.relationship_name == "a"
        assert inverse.other_entity_name == "a"
        assert inverse.owner_side is False
        assert inverse.other_entity_relationship_name == "b"

    def test_one_to_one_inverse_name_without_field_param(self, resolve) -> None:
        entities = resolve("entity A\nentity B\nrelationship OneToOne { A{b} to B{a(name)} }")
        (owner,) = entities["A"].relationships
        assert owner.other_entity_relationship_name == "a"
        assert owner.other_entity_field == "id"

        (inverse,) = entities["B"].relationships
        assert inverse.relationship_name == "a"

    def test_many_to_one_with_inverse(self, resolve) -> None:
        entities = resolve(
            "entity A\nentity B\nrelationship ManyToOne { A{b(title)} to B{a} }"
        )
        (forward,) = entities["A"].relationships
        assert forward.relationship_type == "many-to-one"
        assert forward.other_entity_field == "title"
        (inverse,) = entities["B"].relationships
        assert inverse.relationship_type == "one-to-many"
        assert inverse.other_entity_relationship_name == "b"

    def test_relationships_toward_user(self, resolve, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="jdl.core.entity_resolver"):
            entities = resolve(
                "entity User { login String }\nentity A\n"
                "relationship ManyToOne { A{user(login)} to User }\n"
                "relationship OneToMany { A{friend} to User }"
            )
        assert list(entities) == ["A"]
        assert entities["A"].changelog_date == "20200101000001"
        assert [r.relationship_name for r in entities["A"].relationships] == ["user", "friend"]
        assert "'User' is an entity created by default" in caplog.text

    def test_relationships_rejected_on_nosql(self, resolve) -> None:
        with pytest.raises(ResolutionError, match="NoSQL entities don't have relationships"):
            resolve("entity A\nentity B\nrelationship OneToOne { A to B }", "mongodb")

    def test_gateway_skips_nosql_check(self, resolve) -> None:
        entities = resolve(
            "entity A { data Geometry }\nentity B\nrelationship ManyToMany { A{b} to B{a} }",
            "mongodb",
            "gateway",
        )
        assert entities["A"].fields[0].field_type == "Geometry"


class TestOptions:
    def test_wildcard_with_exclusions(self, resolve) -> None:
        entities = resolve(
            "entity User\nentity A\nentity B\nentity C\n"
            "skipClient * except B\nnoFluentMethod for C"
        )
        assert "User" not in entities
        assert {name: e.skip_client for name, e in entities.items()} == {
            "A": True,
            "B": None,
            "C": True,
        }
        assert entities["C"].fluent_methods is False

    def test_search_engine_exclusions_disabled(self, resolve) -> None:
        entities = resolve("entity A\nentity B\nsearch * with elasticsearch except B")
        assert entities["A"].search_engine == "elasticsearch"
        assert entities["B"].search_engine is False

    def test_microservice_options(self, resolve) -> None:
        entities = resolve(
            "entity A { data Geometry }\nmicroservice A with billing\n"
            "angularSuffix A with mySuffix\nclientRootFolder A with billing"
        )
        record = entities["A"]
        assert record.microservice_name == "billing"
        assert record.angular_js_suffix == "mySuffix"
        assert record.client_root_folder == "billing"
        assert record.fields[0].field_type == "Geometry"
        assert record.to_json_dict()["angularJSSuffix"] == "mySuffix"


class TestFields:
    def test_unknown_type_is_fatal(self, resolve) -> None:
        with pytest.raises(ResolutionError) as exc_info:
            resolve("entity A { data Geometry }")
        assert exc_info.value.message == (
            "No valable field type could be resolved for field 'data' of entity 'A', "
            "got 'Geometry'."
        )

    def test_types_depend_on_database(self, resolve) -> None:
        assert resolve("entity A { notes TextBlob }", "postgresql")["A"].fields
        with pytest.raises(ResolutionError):
            resolve("entity A { notes TextBlob }", "mongodb")

    def test_field_names_camel_cased(self, resolve) -> None:
        entities = resolve("entity A { first_name String, LastName String }")
        assert [f.field_name for f in entities["A"].fields] == ["firstName", "lastName"]

    def test_generic_blob(self, resolve) -> None:
        (data,) = resolve("entity A { data Blob }")["A"].fields
        assert data.field_type == "byte[]"
        assert data.field_type_blob_content == "any"


class TestApplications:
    def test_entities_scoped_to_applications(self, resolve) -> None:
        entities = resolve(
            "entity A\nentity B\n"
            "application { config { baseName shop } entities A }\n"
            "application { config { baseName admin } entities * }"
        )
        assert entities["A"].applications == ["shop", "admin"]
        assert entities["B"].applications == ["admin"]

    def test_entity_outside_every_application(self, resolve) -> None:
        entities = resolve(
            "entity A\nentity B\napplication { config { baseName shop } entities A }"
        )
        assert entities["B"].applications == []


class TestArguments:
    def test_missing_object_model(self) -> None:
        with pytest.raises(ResolutionError, match="both mandatory"):
            resolve_entities(None, "sql")

    def test_missing_database_type(self) -> None:
        jdl_object = build_object_model(parse_document("entity A"))
        with pytest.raises(ResolutionError, match="both mandatory"):
            resolve_entities(jdl_object, None)

    def test_unknown_database_type(self) -> None:
        jdl_object = build_object_model(parse_document("entity A"))
        with pytest.raises(ResolutionError, match="Invalid resolver settings"):
            resolve_entities(jdl_object, "filesystem")

    def test_creation_time_defaults_to_now(self) -> None:
        jdl_object = build_object_model(parse_document("entity A"))
        record = resolve_entities(jdl_object, "sql")["A"]
        assert len(record.changelog_date) == 14
