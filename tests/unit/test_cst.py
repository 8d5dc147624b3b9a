"""Tests for the concrete syntax tree parser."""

import pytest

from jdl.core.cst import CstKind, CstNode, parse_cst
from jdl.core.errors import JdlSyntaxError
from jdl.core.lexer import tokenize


def _parse(text: str) -> CstNode:
    return parse_cst(tokenize(text), text=text)


def test_prog_groups_declarations_by_kind():
    cst = _parse("entity A\nentity B\nenum E { X }\nMAX = 3")
    assert cst.kind == CstKind.PROG
    assert len(cst.nodes("entityDeclaration")) == 2
    assert len(cst.nodes("enumDeclaration")) == 1
    assert cst.node("constantDeclaration").image("INTEGER") == "3"


def test_field_with_validations():
    cst = _parse("entity A { name String required minlength(2) pattern(/x/) }")
    field = cst.node("entityDeclaration").node("entityBody").node("fieldDeclaration")
    assert field.image("NAME") == "name"
    assert field.node("type").image("NAME") == "String"
    validations = field.nodes("validation")
    assert len(validations) == 3
    assert validations[0].has("REQUIRED")
    assert validations[1].node("minMaxValidation").image("MIN_MAX_KEYWORD") == "minlength"
    assert validations[2].node("pattern").image("REGEX") == "/x/"


def test_keyword_as_field_name():
    cst = _parse("entity A { required Boolean, filter String }")
    fields = cst.node("entityDeclaration").node("entityBody").nodes("fieldDeclaration")
    assert [f.image("NAME") for f in fields] == ["required", "filter"]


def test_trailing_comment_on_same_line_belongs_to_field():
    text = "entity A {\n  name String /** trailing */\n  age Integer\n}"
    fields = _parse(text).node("entityDeclaration").node("entityBody").nodes("fieldDeclaration")
    assert fields[0].image("COMMENT") == "/** trailing */"
    assert not fields[1].has("COMMENT")


def test_comment_on_next_line_leads_next_field():
    text = "entity A {\n  name String,\n  /** age doc */\n  age Integer\n}"
    fields = _parse(text).node("entityDeclaration").node("entityBody").nodes("fieldDeclaration")
    assert not fields[0].has("COMMENT")
    assert fields[1].image("COMMENT") == "/** age doc */"


def test_relationship_sides():
    cst = _parse("relationship ManyToOne { A{b(name) required} to B, C to D }")
    relation = cst.node("relationDeclaration")
    assert relation.node("relationshipType").has("MANY_TO_ONE")
    bodies = relation.nodes("relationshipBody")
    assert len(bodies) == 2
    side = bodies[0].node("from")
    assert side.image("InjectedField") == "b"
    assert side.image("InjectedFieldParam") == "name"
    assert side.has("REQUIRED")
    assert bodies[1].node("to").image("NAME") == "D"


def test_keyed_option_entity_list():
    cst = _parse("dto A, B with mapstruct except C")
    declaration = cst.node("dtoDeclaration")
    entity_list = declaration.node("entityList")
    assert [t.image for t in entity_list.tokens("NAME")] == ["A", "B"]
    assert entity_list.image("Method") == "mapstruct"
    assert declaration.node("exclusion").image("NAME") == "C"


def test_unary_option_with_wildcard():
    cst = _parse("skipClient for all except A")
    declaration = cst.node("noClientDeclaration")
    assert declaration.node("filterDef").has("ALL")


def test_application_blocks():
    text = """
    application {
      config {
        baseName shop
        packageName com.example.shop
        languages [en, fr]
        serverPort 8080
        jhiPrefix "app"
        enableTranslation true
      }
      entities * except A
    }
    """
    sub = _parse(text).node("applicationDeclaration").node("applicationSubDeclaration")
    config = sub.node("applicationSubConfig")
    keys = [d.image("CONFIG_KEY") for d in config.nodes("applicationConfigDeclaration")]
    assert keys == [
        "baseName",
        "packageName",
        "languages",
        "serverPort",
        "jhiPrefix",
        "enableTranslation",
    ]
    entities = sub.node("applicationSubEntities")
    assert entities.node("filterDef").has("STAR")
    assert entities.node("exclusion").image("NAME") == "A"


def test_unexpected_token_reports_location():
    with pytest.raises(JdlSyntaxError) as exc_info:
        _parse("entity A {\n  name String\n  ) }")
    context = exc_info.value.context
    assert context is not None
    assert (context.line, context.column) == (3, 3)
    assert context.snippet is not None


def test_missing_to_in_relationship():
    with pytest.raises(JdlSyntaxError, match="Expected 'to'"):
        _parse("relationship OneToOne { A B }")
