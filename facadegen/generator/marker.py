"""The marker interface consumers realize to request a facade."""

MARKER_NAMESPACE = "FacadeGenerator"
MARKER_NAME = "IFacadeGenerator"

# Identity the resolver matches against the unconstructed definition.
MARKER_DISPLAY_NAME = f"{MARKER_NAMESPACE}.{MARKER_NAME}<T>"

MARKER_HINT_NAME = f"{MARKER_NAME}.generated"

MARKER_SOURCE = """\
#nullable enable
namespace FacadeGenerator
{
    internal interface IFacadeGenerator<T> where T: class
    {
    }
}
"""
