"""Tests for duet.views — props, header normalization, and TemplateView."""

import pytest
from kida.template import Markup

from duet.views import RenderProps, TemplateView, is_renderable, normalize_headers, render_value


class TestNormalizeHeaders:
    def test_none_is_empty(self) -> None:
        assert dict(normalize_headers(None)) == {}

    def test_mapping_lowercased(self) -> None:
        headers = normalize_headers({"Accept-Language": "fi", "X-Trace": "1"})
        assert dict(headers) == {"accept-language": "fi", "x-trace": "1"}

    def test_pairs_first_value_wins(self) -> None:
        headers = normalize_headers([("Cookie", "a=1"), ("cookie", "b=2")])
        assert headers["cookie"] == "a=1"

    def test_immutable(self) -> None:
        headers = normalize_headers({"a": "1"})
        with pytest.raises(TypeError):
            headers["b"] = "2"  # type: ignore[index]


class TestRenderProps:
    def test_header_case_insensitive(self) -> None:
        props = RenderProps("/", headers=normalize_headers({"Accept": "text/html"}))
        assert props.header("ACCEPT") == "text/html"
        assert props.header("missing") is None
        assert props.header("missing", "x") == "x"

    def test_with_outlet_is_markup(self) -> None:
        props = RenderProps("/", params={"id": "1"})
        nested = props.with_outlet("<b>hi</b>")

        assert isinstance(nested.outlet, Markup)
        assert str(nested.outlet) == "<b>hi</b>"
        assert nested.params == {"id": "1"}
        assert props.outlet == ""

    def test_frozen(self) -> None:
        props = RenderProps("/")
        with pytest.raises(AttributeError):
            props.path = "/x"  # type: ignore[misc]


class TestTemplateView:
    def test_outlet_not_escaped(self) -> None:
        layout = TemplateView("<main>{{ outlet }}</main>")
        props = RenderProps("/").with_outlet("<h1>Home</h1>")
        assert layout(props) == "<main><h1>Home</h1></main>"

    def test_path_autoescaped(self) -> None:
        view = TemplateView("<p>{{ path }}</p>")
        assert view(RenderProps("/<x>")) == "<p>/&lt;x&gt;</p>"

    def test_extra_context(self) -> None:
        view = TemplateView("<p>{{ greeting }}</p>", greeting="hello")
        assert view(RenderProps("/")) == "<p>hello</p>"
        assert view.context == {"greeting": "hello"}

    def test_repr_truncates_source(self) -> None:
        assert repr(TemplateView("<p>x</p>")) == "TemplateView('<p>x</p>')"


class TestRenderValue:
    def test_static_markup(self) -> None:
        assert render_value("<p>static</p>", RenderProps("/")) == "<p>static</p>"

    def test_callable(self) -> None:
        assert render_value(lambda props: f"<p>{props.path}</p>", RenderProps("/a")) == "<p>/a</p>"

    def test_is_renderable(self) -> None:
        assert is_renderable("x")
        assert is_renderable(lambda props: "")
        assert not is_renderable(42)
        assert not is_renderable(None)
