"""Front end: declaration-level parsing into syntax nodes."""
import textwrap

import pytest
from lark import UnexpectedInput

from facadegen.internals.parse_errors import handle_parse_exception
from facadegen.internals.parser import parse_source
from facadegen.internals.report import Reporter
from facadegen.semantics import syntax as sx


def parse(src: str) -> sx.CompilationUnit:
    unit, _ = parse_source(textwrap.dedent(src), "test.cs")
    return unit


def types_named(unit: sx.CompilationUnit):
    return {n.name: n for n in sx.walk(unit) if isinstance(n, sx.TypeDeclaration)}


def test_sample_consumer_declarations(itest_source):
    unit = parse(itest_source)

    assert [str(u) for u in unit.usings] == ["using FacadeGenerator;"]
    ns = unit.members[0]
    assert isinstance(ns, sx.NamespaceDeclaration)
    assert ns.name == "TestFacadeSourceGen"
    assert [type(m) for m in ns.members] == [
        sx.ClassDeclaration, sx.InterfaceDeclaration, sx.ClassDeclaration,
    ]

    facade = types_named(unit)["TestFacade"]
    assert facade.modifiers == ["internal", "partial"]
    assert facade.is_partial
    assert [str(b) for b in facade.base_types] == ["IFacadeGenerator<ITest>"]

    itest = types_named(unit)["ITest"]
    methods = [m for m in itest.members if isinstance(m, sx.MethodDeclaration)]
    assert [m.name for m in methods] == ["Test", "TestTwo"]
    assert [(p.name, str(p.type)) for p in methods[1].parameters] == [
        ("argument", "string"), ("moreArguments", "ICollection<Poco>"),
    ]
    assert not methods[0].has_body


def test_parents_are_linked(itest_source):
    unit = parse(itest_source)
    facade = types_named(unit)["TestFacade"]

    assert sx.enclosing_unit(facade) is unit
    assert sx.enclosing_namespace_name(facade) == "TestFacadeSourceGen"
    assert sx.enclosing_types(facade) == []


def test_file_scoped_namespace():
    unit = parse("""
        using System;
        namespace Acme.Tools;

        using Acme.Shared;

        public interface ITool { void Use(); }
        """)

    ns = unit.members[0]
    assert ns.file_scoped
    assert ns.name == "Acme.Tools"
    assert [str(u) for u in ns.usings] == ["using Acme.Shared;"]
    assert sx.enclosing_namespace_name(ns.members[0]) == "Acme.Tools"


def test_nested_namespaces_join_to_full_name():
    unit = parse("""
        namespace Outer
        {
            namespace Inner.Deep
            {
                class Leaf { }
            }
        }
        """)
    leaf = types_named(unit)["Leaf"]

    assert sx.enclosing_namespace_name(leaf) == "Outer.Inner.Deep"


def test_parameter_modifiers_and_defaults():
    unit = parse("""
        interface IParams
        {
            void M(ref int a, out string b, in long c, int d = 5, string e = "x, y", params object[] rest);
        }
        """)
    method = types_named(unit)["IParams"].members[0]

    assert [(p.modifiers, str(p.type), p.name, p.default) for p in method.parameters] == [
        (["ref"], "int", "a", None),
        (["out"], "string", "b", None),
        (["in"], "long", "c", None),
        ([], "int", "d", "5"),
        ([], "string", "e", '"x, y"'),
        (["params"], "object[]", "rest", None),
    ]


def test_generic_method_with_constraints():
    unit = parse("""
        interface IFactory
        {
            T Create<T, TKey>(TKey key) where T : class, new() where TKey : struct;
        }
        """)
    method = types_named(unit)["IFactory"].members[0]

    assert [tp.name for tp in method.type_parameters] == ["T", "TKey"]
    assert [str(c) for c in method.constraints] == [
        "where T : class, new()",
        "where TKey : struct",
    ]


def test_type_suffixes_and_tuples():
    unit = parse("""
        interface IShapes
        {
            (int Count, string? Name) Describe(int[,] grid, global::System.IO.Stream? stream);
        }
        """)
    method = types_named(unit)["IShapes"].members[0]

    assert str(method.return_type) == "(int Count, string? Name)"
    assert [str(p.type) for p in method.parameters] == ["int[,]", "global::System.IO.Stream?"]


def test_opaque_bodies_with_braces_in_literals():
    unit = parse("""
        namespace N
        {
            class Tricky
            {
                string Open() { var s = "}"; var c = '{'; /* } */ return s + c; }
                string Verbatim() => @"C:\\{dir}\\";
                int[] Values = new[] { 1, 2, 3 };
            }
        }
        """)
    tricky = types_named(unit)["Tricky"]

    assert [m.name for m in tricky.members] == ["Open", "Verbatim", "Values"]
    assert tricky.members[0].has_body


@pytest.mark.parametrize("body, names", [
    ("void M() { var x = 1; }\nvoid N() { }", ["M", "N"]),
    ("public C() { Init(); }\npublic void Run() { }", ["C", "Run"]),
    ("public C(int x) : base(Wrap(x)) { }\nint _x;", ["C", "_x"]),
    ("public int Count { get; set; }\npublic string Name { get; } = \"\";\nvoid M() { }", ["Count", "Name", "M"]),
    ("[Obsolete]\npublic void Old() { }\n[Conditional(\"DEBUG\"), Pure]\nvoid Log() { }", ["Old", "Log"]),
    ("int[] Values = new[] { 1, 2 };\nAction Run = () => { };\nvoid M() { }", ["Values", "Run", "M"]),
    ("void M(int a = default(int), [Optional] int b = 2) { }\nvoid N() { }", ["M", "N"]),
])
def test_members_following_braced_regions(body, names):
    source = "namespace N\n{\n    [Serializable]\n    public class C\n    {\n" + textwrap.indent(body, "        ") + "\n    }\n}\n"
    c = types_named(parse(source))["C"]

    assert [m.name for m in c.members] == names
    assert c.attributes == ["[Serializable]"]


def test_default_value_with_call_keeps_text():
    unit = parse("""
        namespace N
        {
            interface IOptions
            {
                void Set(int a = default(int), string b = nameof(Set));
            }
        }
        """)
    method = types_named(unit)["IOptions"].members[0]

    assert [p.default for p in method.parameters] == ["default(int)", "nameof(Set)"]


def test_member_kinds():
    unit = parse("""
        namespace N
        {
            public class Money
            {
                private readonly decimal _amount;
                public event EventHandler Changed;
                public Money(decimal amount) : this() { _amount = amount; }
                ~Money() { }
                public decimal Amount { get; init; } = 0m;
                public decimal this[int index] => _amount;
                public static Money operator +(Money a, Money b) => a;
                public static implicit operator decimal(Money m) => m._amount;
            }
        }
        """)
    members = types_named(unit)["Money"].members

    assert [m.kind for m in members] == [
        "field", "field", "constructor", "destructor", "property", "indexer", "operator", "conversion",
    ]
    assert members[1].modifiers == ["public", "event"]
    assert members[6].name == "operator +"


def test_records_enums_and_delegates():
    unit = parse("""
        namespace N
        {
            public readonly partial record struct Point(int X, int Y);
            public record Person(string Name) : Entity(Name);
            enum Color : byte { Red, Green }
            public delegate void Handler<T>(T value);
        }
        """)
    types = types_named(unit)

    assert types["Point"].keyword == "record struct"
    assert types["Point"].is_partial
    assert types["Person"].keyword == "record"
    assert [str(b) for b in types["Person"].base_types] == ["Entity"]
    assert [str(b) for b in types["Color"].base_types] == ["byte"]
    handler = types["Handler"]
    assert str(handler.return_type) == "void"
    assert [p.name for p in handler.parameters] == ["value"]


def test_attributes_are_kept_as_text():
    unit = parse("""
        [Serializable]
        [Obsolete("gone]")]
        public class Old { }
        """)
    old = types_named(unit)["Old"]

    assert old.attributes == ["[Serializable]", '[Obsolete("gone]")]']


def test_using_forms():
    unit = parse("""
        global using System;
        using static System.Math;
        using Json = System.Text.Json.JsonSerializer;
        class C { }
        """)

    assert [str(u) for u in unit.usings] == [
        "global using System;",
        "using static System.Math;",
        "using Json = System.Text.Json.JsonSerializer;",
    ]
    assert unit.usings[2].alias == "Json"


def test_preprocessor_and_assembly_attributes_are_ignored():
    unit = parse("""
        #nullable enable
        [assembly: InternalsVisibleTo("Tests")]
        #region Types
        namespace N { class A { } }
        #endregion
        """)

    assert list(types_named(unit)) == ["A"]


def test_keywords_are_identifiers_where_no_keyword_fits():
    unit = parse("""
        namespace N
        {
            class Holder
            {
                int record;
                void Run(string value, int partial) { }
            }
        }
        """)
    members = types_named(unit)["Holder"].members

    assert members[0].name == "record"
    assert [p.name for p in members[1].parameters] == ["value", "partial"]


def test_syntax_error_is_reported():
    src = "namespace Broken\n{\n    interface I\n    {\n        void Run(\n    }\n}\n"
    with pytest.raises(UnexpectedInput) as info:
        parse_source(src, "broken.cs")

    reporter = Reporter()
    assert handle_parse_exception(info.value, reporter, "broken.cs")
    [diag] = reporter.items
    assert diag.code == "FG1001"
    assert diag.kind == "error"
    assert diag.span is not None and diag.span.line == 6
    assert reporter.exit_code() == 2


def test_non_parse_exception_is_not_handled():
    assert handle_parse_exception(ValueError("boom"), Reporter()) is False
