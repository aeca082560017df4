"""SyntaxBuilder: turns a lark parse tree into facadegen syntax nodes.

The grammar only recognises declaration shape. Opaque regions (bodies,
initializers, default values, attribute arguments) are recovered as source
text by slicing the original input with the node positions lark records.
"""
from __future__ import annotations
from typing import List, Optional

from lark import Tree, Token

from facadegen.internals.report import span_of
from facadegen.semantics.syntax import (
    Node, CompilationUnit, UsingDirective, NamespaceDeclaration,
    TypeDeclaration, ClassDeclaration, StructDeclaration, InterfaceDeclaration,
    RecordDeclaration, EnumDeclaration, DelegateDeclaration,
    MethodDeclaration, MemberDeclaration, ParameterSyntax,
    TypeParameterSyntax, ConstraintClause, ConstraintSyntax,
    TypeSyntax, PredefinedTypeSyntax, NamedTypeSyntax, SimpleNameSyntax,
    ArrayTypeSyntax, NullableTypeSyntax, PointerTypeSyntax,
    TupleTypeSyntax, TupleElementSyntax, link_parents,
)
from facadegen.semantics.tree_navigation import (
    first_ident, first_tree, first_tree_child, trees, token_values,
)


_TYPE_DECLS = {
    "class_declaration": ClassDeclaration,
    "struct_declaration": StructDeclaration,
    "interface_declaration": InterfaceDeclaration,
    "record_declaration": RecordDeclaration,
    "enum_declaration": EnumDeclaration,
    "delegate_declaration": DelegateDeclaration,
}

_MEMBER_KINDS = {
    "constructor_declaration": "constructor",
    "destructor_declaration": "destructor",
    "property_declaration": "property",
    "indexer_declaration": "indexer",
    "field_declaration": "field",
    "operator_declaration": "operator",
    "conversion_declaration": "conversion",
}


class SyntaxBuilder:
    def __init__(self, source: str, path: str = "<input>"):
        self.source = source
        self.path = path

    def build(self, tree: Tree) -> CompilationUnit:
        assert isinstance(tree, Tree) and tree.data == "start"
        usings: List[UsingDirective] = []
        members: List[Node] = []

        for ch in tree.children:
            if not isinstance(ch, Tree):
                continue
            if ch.data == "using_directive":
                usings.append(self.using_directive(ch))
            elif ch.data == "file_scoped_namespace":
                members.append(self.namespace(ch, file_scoped=True))
            else:
                members.append(self.namespace_member(ch))

        unit = CompilationUnit(loc=span_of(tree), path=self.path, usings=usings, members=members)
        link_parents(unit)
        return unit

    # ---------- namespaces ----------

    def using_directive(self, t: Tree) -> UsingDirective:
        words = token_values(t.children)
        is_global = "global" in words
        is_static = "static" in words
        qn = first_tree(t.children, "qualified_name")
        if qn is not None:
            return UsingDirective(loc=span_of(t), name=self.qualified_name(qn),
                                  is_static=is_static, is_global=is_global)
        alias = first_ident(t.children)
        target = self.type(first_tree(t.children, "type"))
        return UsingDirective(loc=span_of(t), name=str(target), alias=str(alias),
                              target=target, is_global=is_global)

    def qualified_name(self, t: Tree) -> str:
        return ".".join(token_values(t.children))

    def namespace(self, t: Tree, file_scoped: bool = False) -> NamespaceDeclaration:
        name = self.qualified_name(first_tree(t.children, "qualified_name"))
        usings = [self.using_directive(u) for u in trees(t.children, "using_directive")]
        members = [self.namespace_member(ch) for ch in t.children
                   if isinstance(ch, Tree) and ch.data in ("namespace_declaration", "type_declaration")]
        return NamespaceDeclaration(loc=span_of(t), name=name, usings=usings,
                                    members=members, file_scoped=file_scoped)

    def namespace_member(self, t: Tree) -> Node:
        if t.data == "namespace_declaration":
            return self.namespace(t)
        if t.data == "type_declaration":
            return self.declaration(t)
        raise NotImplementedError(f"namespace member: unexpected node '{t.data}'")

    # ---------- declarations ----------

    def declaration(self, t: Tree) -> Node:
        """type_declaration / member: attribute_section* modifier* <core>"""
        attributes = [self.text_of(a) for a in trees(t.children, "attribute_section")]
        modifiers = [str(m.children[0]) for m in trees(t.children, "modifier")]
        core = next(ch for ch in t.children
                    if isinstance(ch, Tree) and ch.data not in ("attribute_section", "modifier"))

        if core.data in _TYPE_DECLS:
            decl = self.type_declaration(core)
        elif core.data == "method_declaration":
            decl = self.method(core)
        elif core.data in _MEMBER_KINDS:
            decl = self.other_member(core)
        else:
            raise NotImplementedError(f"declaration: unexpected node '{core.data}'")

        decl.modifiers = modifiers
        decl.attributes = attributes
        decl.loc = span_of(t)
        return decl

    def type_declaration(self, t: Tree) -> TypeDeclaration:
        cls = _TYPE_DECLS[t.data]
        name_tok = first_ident(t.children)
        if name_tok is None:
            raise NotImplementedError(f"{t.data}: missing name")

        tpl = first_tree(t.children, "type_parameter_list")
        type_params = self.type_parameters(tpl) if tpl is not None else []
        constraints = [self.constraint_clause(c) for c in trees(t.children, "constraint_clause")]

        base_types: List[TypeSyntax] = []
        base_list = first_tree(t.children, "base_list")
        if base_list is not None:
            base_types = [self.type(first_tree(b.children, "type")) for b in trees(base_list.children, "base_type")]
        elif t.data == "enum_declaration":
            underlying = first_tree(t.children, "type")
            if underlying is not None:
                base_types = [self.type(underlying)]

        members: List[Node] = []
        body = first_tree(t.children, "class_body")
        if body is not None:
            members = [self.declaration(m) for m in trees(body.children, "member")]

        kwargs = dict(
            loc=span_of(t),
            name=str(name_tok),
            type_parameters=type_params,
            base_types=base_types,
            constraints=constraints,
            members=members,
            name_span=span_of(name_tok),
        )
        if cls is RecordDeclaration:
            kind = first_tree(t.children, "record_kind")
            kwargs["is_struct"] = kind is not None and str(kind.children[0]) == "struct"
        if cls is DelegateDeclaration:
            kwargs["return_type"] = self.type(first_tree(t.children, "type"))
            kwargs["parameters"] = self.parameters(first_tree(t.children, "parameter_list"))
        return cls(**kwargs)

    def method(self, t: Tree) -> MethodDeclaration:
        name_node = first_tree(t.children, "member_name")
        name = ".".join(token_values(name_node.children))
        tpl = first_tree(t.children, "type_parameter_list")
        body = first_tree(t.children, "member_body")
        return MethodDeclaration(
            loc=span_of(t),
            name=name,
            return_type=self.type(first_tree(t.children, "type")),
            parameters=self.parameters(first_tree(t.children, "parameter_list")),
            type_parameters=self.type_parameters(tpl) if tpl is not None else [],
            constraints=[self.constraint_clause(c) for c in trees(t.children, "constraint_clause")],
            has_body=body is not None and bool(body.children),
            name_span=span_of(name_node),
        )

    def other_member(self, t: Tree) -> MemberDeclaration:
        kind = _MEMBER_KINDS[t.data]
        name: Optional[str] = None
        if kind in ("constructor", "destructor"):
            name = str(first_ident(t.children))
        elif kind == "property":
            name = ".".join(token_values(first_tree(t.children, "member_name").children))
        elif kind == "indexer":
            name = "this[]"
        elif kind == "field":
            name = ", ".join(str(first_ident(v.children)) for v in trees(t.children, "variable_declarator"))
        elif kind == "operator":
            name = "operator " + str(t.children[1])
        elif kind == "conversion":
            name = f"operator {self.type(first_tree(t.children, 'type'))}"
        return MemberDeclaration(loc=span_of(t), kind=kind, name=name)

    # ---------- parameters ----------

    def parameters(self, t: Optional[Tree]) -> List[ParameterSyntax]:
        if t is None:
            return []
        return [self.parameter(p) for p in trees(t.children, "parameter")]

    def parameter(self, t: Tree) -> ParameterSyntax:
        name_tok = first_ident(t.children)
        modifiers = [str(m.children[0]) for m in trees(t.children, "parameter_modifier")]
        default = first_tree(t.children, "default_value")
        default_text = None
        if default is not None:
            default_text = self.text_of(default).lstrip("=").strip()
        return ParameterSyntax(
            loc=span_of(t),
            name=str(name_tok),
            type=self.type(first_tree(t.children, "type")),
            modifiers=modifiers,
            default=default_text,
            name_span=span_of(name_tok),
        )

    def type_parameters(self, t: Tree) -> List[TypeParameterSyntax]:
        out: List[TypeParameterSyntax] = []
        for tp in trees(t.children, "type_parameter"):
            words = token_values(tp.children)
            variance = words[0] if words[0] in ("in", "out") else None
            out.append(TypeParameterSyntax(loc=span_of(tp), name=str(first_ident(tp.children)),
                                           variance=variance))
        return out

    def constraint_clause(self, t: Tree) -> ConstraintClause:
        constraints: List[ConstraintSyntax] = []
        for c in trees(t.children, "constraint"):
            inner = first_tree(c.children, "type")
            if inner is not None:
                constraints.append(self.type(inner))
            else:
                constraints.append("".join(token_values(c.children)))
        return ConstraintClause(loc=span_of(t), type_parameter=str(first_ident(t.children)),
                                constraints=constraints)

    # ---------- types ----------

    def type(self, t: Tree) -> TypeSyntax:
        """type: _base_type type_suffix*"""
        assert t.data == "type"
        base = first_tree_child(t.children)
        result = self.base_type(base)
        for suffix in trees(t.children, "type_suffix"):
            words = token_values(suffix.children)
            if words[0] == "?":
                result = NullableTypeSyntax(result)
            elif words[0] == "*":
                result = PointerTypeSyntax(result)
            else:
                result = ArrayTypeSyntax(result, rank=words.count(",") + 1)
        return result

    def base_type(self, t: Tree) -> TypeSyntax:
        if t.data == "predefined_type":
            return PredefinedTypeSyntax(str(t.children[0]))
        if t.data == "named_type":
            parts = tuple(self.simple_name(s) for s in trees(t.children, "simple_name"))
            return NamedTypeSyntax(parts, is_global=first_tree(t.children, "global_prefix") is not None)
        if t.data == "tuple_type":
            elements = []
            for el in trees(t.children, "tuple_element"):
                name = first_ident(el.children)
                elements.append(TupleElementSyntax(self.type(first_tree(el.children, "type")),
                                                   str(name) if name is not None else None))
            return TupleTypeSyntax(tuple(elements))
        raise NotImplementedError(f"type: unexpected node '{t.data}'")

    def simple_name(self, t: Tree) -> SimpleNameSyntax:
        args = first_tree(t.children, "type_argument_list")
        type_args = tuple(self.type(a) for a in trees(args.children, "type")) if args is not None else ()
        return SimpleNameSyntax(str(first_ident(t.children)), type_args)

    # ---------- helpers ----------

    def text_of(self, t: Tree) -> str:
        """Source text covered by a parse node."""
        meta = t.meta
        if getattr(meta, "empty", True):
            return ""
        return self.source[meta.start_pos:meta.end_pos]
