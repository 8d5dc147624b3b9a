"""Core JDL functionality: reader, lexer, CST parser, AST builder, linker, entity resolver."""

from . import ir
from .api import convert_text_to_entities, convert_to_entities, parse_document
from .ast_builder import build_ast
from .cst import CstKind, CstNode, parse_cst
from .entity_resolver import ResolverSettings, resolve_entities
from .errors import (
    ErrorContext,
    JdlError,
    JdlInputError,
    JdlSyntaxError,
    LinkError,
    ResolutionError,
)
from .linker import build_object_model
from .manifest import ProjectManifest, load_manifest
from .reader import check_file_is_jdl_file, parse, parse_from_files

__all__ = [
    "ir",
    "JdlError",
    "JdlInputError",
    "JdlSyntaxError",
    "LinkError",
    "ResolutionError",
    "ErrorContext",
    "CstKind",
    "CstNode",
    "parse_cst",
    "build_ast",
    "build_object_model",
    "resolve_entities",
    "ResolverSettings",
    "check_file_is_jdl_file",
    "parse",
    "parse_from_files",
    "parse_document",
    "convert_to_entities",
    "convert_text_to_entities",
    "ProjectManifest",
    "load_manifest",
]
