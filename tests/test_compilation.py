"""Binder and semantic model: merged partials, lookup, interfaces, substitution."""
import pytest

from facadegen.semantics.compilation import Compilation, declared_accessibility
from facadegen.semantics.symbols import (
    Accessibility, ConstructedTypeSymbol, TypeKind, UnresolvedTypeSymbol,
)


def symbol_of(compilation, find_decl, name):
    return compilation.get_semantic_model().get_declared_symbol(find_decl(compilation, name))


@pytest.mark.parametrize("modifiers, expected", [
    (["public"], Accessibility.PUBLIC),
    (["internal", "partial"], Accessibility.INTERNAL),
    (["protected"], Accessibility.PROTECTED),
    (["private"], Accessibility.PRIVATE),
    (["private", "protected"], Accessibility.PROTECTED_AND_INTERNAL),
    (["protected", "private"], Accessibility.PROTECTED_AND_INTERNAL),
    (["protected", "internal"], Accessibility.PROTECTED_OR_INTERNAL),
    (["internal", "protected"], Accessibility.PROTECTED_OR_INTERNAL),
    (["file", "partial"], Accessibility.NOT_APPLICABLE),
    (["static", "partial"], Accessibility.INTERNAL),
])
def test_declared_accessibility(modifiers, expected):
    assert declared_accessibility(modifiers, Accessibility.INTERNAL) == expected


def test_default_accessibility(compile_cs, find_decl):
    comp = compile_cs("""
        namespace N
        {
            class TopLevel
            {
                class Nested { }
            }
            interface IHost
            {
                class InInterface { }
            }
        }
        """)

    assert symbol_of(comp, find_decl, "TopLevel").accessibility == Accessibility.INTERNAL
    assert symbol_of(comp, find_decl, "Nested").accessibility == Accessibility.PRIVATE
    assert symbol_of(comp, find_decl, "InInterface").accessibility == Accessibility.PUBLIC


def test_partial_declarations_merge_across_trees(compile_cs):
    comp = compile_cs(
        """
        namespace N
        {
            public interface IA { }
            public partial class Merged : IA { }
        }
        """,
        """
        namespace N
        {
            public interface IB { }
            partial class Merged : IB { void Extra() { } }
        }
        """,
    )
    model = comp.get_semantic_model()
    merged = comp.get_type_by_metadata_name("N.Merged")

    assert merged is not None
    assert len(merged.declarations) == 2
    assert all(model.get_declared_symbol(d) is merged for d in merged.declarations)
    assert [i.display_string() for i in merged.interfaces] == ["N.IA", "N.IB"]
    assert merged.accessibility == Accessibility.PUBLIC
    assert merged.is_partial


def test_metadata_names():
    from facadegen.internals.parser import parse_source

    unit, _ = parse_source("namespace A.B { class Outer<T> { class Inner { } } }", "m.cs")
    comp = Compilation([unit])

    assert comp.get_type_by_metadata_name("A.B.Outer`1") is not None
    inner = comp.get_type_by_metadata_name("A.B.Outer`1+Inner")
    assert inner is not None
    assert inner.display_string() == "A.B.Outer<T>.Inner"
    assert comp.get_type_by_metadata_name("A.B.Missing") is None


def test_lookup_through_usings_and_enclosing_namespaces(compile_cs, find_decl):
    comp = compile_cs(
        """
        namespace Lib.Contracts
        {
            public interface IService { }
        }
        namespace Lib
        {
            public class Shared { }
        }
        """,
        """
        using Lib.Contracts;

        namespace Lib.App
        {
            class Consumer : Shared, IService { }
        }
        """,
    )
    consumer = symbol_of(comp, find_decl, "Consumer")

    assert consumer.base_type.display_string() == "Lib.Shared"
    assert [i.display_string() for i in consumer.interfaces] == ["Lib.Contracts.IService"]


def test_qualified_and_global_names(compile_cs, find_decl):
    comp = compile_cs("""
        namespace Deep.Inside
        {
            public interface IThing { }
        }
        namespace Other
        {
            class ByQualified : Deep.Inside.IThing { }
            class ByGlobal : global::Deep.Inside.IThing { }
        }
        """)

    for name in ("ByQualified", "ByGlobal"):
        iface = symbol_of(comp, find_decl, name).interfaces[0]
        assert iface.kind == TypeKind.INTERFACE
        assert iface.display_string() == "Deep.Inside.IThing"


def test_alias_lookup(compile_cs, find_decl):
    comp = compile_cs("""
        using Svc = Lib.IService;

        namespace Lib
        {
            public interface IService { }
        }
        namespace App
        {
            class UsesAlias : Svc { }
        }
        """)

    [iface] = symbol_of(comp, find_decl, "UsesAlias").interfaces
    assert iface.display_string() == "Lib.IService"


def test_unknown_types_are_displayed_as_written(compile_cs, find_decl):
    comp = compile_cs("""
        namespace N
        {
            public class Poco { }
            interface IUsesExternal
            {
                IDictionary<string, List<Poco>> Index(System.Text.StringBuilder builder);
            }
        }
        """)
    [method] = symbol_of(comp, find_decl, "IUsesExternal").get_methods()

    assert isinstance(method.return_type, UnresolvedTypeSymbol)
    assert method.return_type.display_string() == "IDictionary<string, List<N.Poco>>"
    assert method.parameters[0].type.display_string() == "System.Text.StringBuilder"


def test_nested_types_and_type_parameters(compile_cs, find_decl):
    comp = compile_cs("""
        namespace N
        {
            class Outer<T>
            {
                public class Node { }
                interface IWalker
                {
                    Node Next(T current);
                }
            }
        }
        """)
    [method] = symbol_of(comp, find_decl, "IWalker").get_methods()

    assert method.return_type.display_string() == "N.Outer<T>.Node"
    assert method.parameters[0].type.display_string() == "T"
    assert method.parameters[0].type.kind == TypeKind.TYPE_PARAMETER


def test_all_interfaces_is_transitive_and_ordered(compile_cs, find_decl):
    comp = compile_cs("""
        namespace N
        {
            interface IRoot { }
            interface ILeft : IRoot { }
            interface IRight : IRoot { }
            interface IBaseOnly { }
            class Base : IBaseOnly { }
            class Derived : Base, ILeft, IRight { }
        }
        """)
    derived = symbol_of(comp, find_decl, "Derived")
    model = comp.get_semantic_model()

    assert [i.display_string() for i in model.all_interfaces(derived)] == [
        "N.ILeft", "N.IRoot", "N.IRight", "N.IBaseOnly",
    ]


def test_all_interfaces_terminates_on_cycles(compile_cs, find_decl):
    comp = compile_cs("""
        namespace N
        {
            interface IA : IB { }
            interface IB : IA { }
            class C : IA { }
        }
        """)
    names = [i.display_string() for i in symbol_of(comp, find_decl, "C").all_interfaces]

    assert names == ["N.IA", "N.IB"]


def test_constructed_interface_substitutes_members(compile_cs, find_decl):
    comp = compile_cs("""
        namespace N
        {
            public class Poco { }
            public interface IRepo<T>
            {
                T Get(int id);
                void Put(T[] items, T? fallback);
                IEnumerable<T> All<TKey>(Func<T, TKey> order);
            }
            class Store : IRepo<Poco> { }
        }
        """)
    [iface] = symbol_of(comp, find_decl, "Store").interfaces

    assert isinstance(iface, ConstructedTypeSymbol)
    assert iface.display_string() == "N.IRepo<N.Poco>"
    assert iface.original_definition.display_string() == "N.IRepo<T>"
    get, put, all_ = iface.get_methods()
    assert get.return_type.display_string() == "N.Poco"
    assert [p.type.display_string() for p in put.parameters] == ["N.Poco[]", "N.Poco?"]
    assert all_.return_type.display_string() == "IEnumerable<N.Poco>"
    assert all_.parameters[0].type.display_string() == "Func<N.Poco, TKey>"


def test_interface_method_defaults(compile_cs, find_decl):
    comp = compile_cs("""
        namespace N
        {
            interface IMixed
            {
                void Plain();
                static void Helper() { }
                private void Hidden() { }
                void IOther.Explicit();
            }
        }
        """)
    methods = {m.name: m for m in symbol_of(comp, find_decl, "IMixed").get_methods()}

    assert methods["Plain"].accessibility == Accessibility.PUBLIC
    assert not methods["Plain"].is_static
    assert methods["Helper"].is_static
    assert methods["Hidden"].accessibility == Accessibility.PRIVATE
    assert methods["IOther.Explicit"].kind == "explicit"


def test_add_syntax_trees_returns_a_new_compilation(compile_cs):
    from facadegen.internals.parser import parse_source

    comp = compile_cs("namespace N { class A { } }", with_marker=False)
    extra, _ = parse_source("namespace N { class B { } }", "b.cs")
    bigger = comp.add_syntax_trees(extra)

    assert len(comp.syntax_trees) == 1
    assert len(bigger.syntax_trees) == 2
    assert comp.get_type_by_metadata_name("N.B") is None
    assert bigger.get_type_by_metadata_name("N.B") is not None


def test_declared_symbol_is_none_for_non_types(compile_cs):
    comp = compile_cs("namespace N { class A { void M() { } } }", with_marker=False)
    model = comp.get_semantic_model()
    tree = comp.syntax_trees[0]
    method = tree.members[0].members[0].members[0]

    assert model.get_declared_symbol(method) is None
    assert model.get_declared_symbol(tree) is None
