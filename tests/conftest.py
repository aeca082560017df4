"""Shared fixtures: parse C# snippets, bind them and run the generator."""
from __future__ import annotations

import textwrap
from typing import Callable, List

import pytest

from facadegen.compiler.host import GeneratorDriver, GeneratorRunResult
from facadegen.generator.marker import MARKER_HINT_NAME, MARKER_SOURCE
from facadegen.internals.parser import parse_source
from facadegen.semantics import syntax as sx
from facadegen.semantics.compilation import Compilation


ITEST_SOURCE = """\
using FacadeGenerator;

namespace TestFacadeSourceGen
{
    public class Poco {};

    public interface ITest
    {
        void Test();
        string TestTwo(string argument, ICollection<Poco> moreArguments);
    }

    internal partial class TestFacade : IFacadeGenerator<ITest>
    {
        int counter = 0;
        private readonly ITest _first = null;
        private readonly ITest _second = null;

        public TestFacade()
        {
            counter = 0;
        }

        private partial ITest GetImplementation()
        {
            if (counter++ % 2 == 0)
            {
                return _first;
            }

            return _second;
        }
    }
}
"""


def parse_units(*sources: str) -> List[sx.CompilationUnit]:
    return [parse_source(textwrap.dedent(src), f"src{i}.cs")[0] for i, src in enumerate(sources)]


def build_compilation(*sources: str, with_marker: bool = True) -> Compilation:
    units = parse_units(*sources)
    if with_marker:
        units.append(parse_source(MARKER_SOURCE, MARKER_HINT_NAME)[0])
    return Compilation(units)


def find_type(compilation: Compilation, name: str) -> sx.TypeDeclaration:
    """First type declaration called ``name`` across the compilation's trees."""
    for tree in compilation.syntax_trees:
        for node in sx.walk(tree):
            if isinstance(node, sx.TypeDeclaration) and node.name == name:
                return node
    raise LookupError(name)


@pytest.fixture
def itest_source() -> str:
    return ITEST_SOURCE


@pytest.fixture
def compile_cs() -> Callable[..., Compilation]:
    return build_compilation


@pytest.fixture
def run_generator() -> Callable[..., GeneratorRunResult]:
    def _run(*sources: str) -> GeneratorRunResult:
        return GeneratorDriver().run(build_compilation(*sources, with_marker=False))
    return _run


@pytest.fixture
def unit_text() -> Callable[[GeneratorRunResult, str], str]:
    def _text(result: GeneratorRunResult, name: str) -> str:
        for unit in result.units:
            if unit.name == name:
                return unit.text
        raise AssertionError(f"no unit generated for {name}: {[u.name for u in result.units]}")
    return _text


@pytest.fixture
def find_decl() -> Callable[[Compilation, str], sx.TypeDeclaration]:
    return find_type
