"""Tests for text decoding and markup stripping."""

from chmread.lib.text_utils import decode_help_text, extract_title, python_codec, strip_html


def test_strip_html_entities_and_tags():
    assert strip_html("<p>A &amp; <b>B</b></p>") == "A & B"


def test_strip_html_removes_script():
    assert strip_html("<script>x</script>Hello") == "Hello"


def test_strip_html_removes_style_and_multiline_script():
    html = """<html><head>
<style type="text/css">
p { color: red; }
</style>
<SCRIPT language="JavaScript">
var s = "<p>not text</p>";
</SCRIPT>
</head><body><p>Visible</p></body></html>"""
    assert strip_html(html) == "Visible"


def test_strip_html_decodes_fixed_entities():
    html = "&lt;tag&gt;&nbsp;&quot;q&quot; &#39;s&#39; &amp;lt;"
    assert strip_html(html) == "<tag> \"q\" 's' &lt;"


def test_strip_html_collapses_whitespace():
    assert strip_html("  <p>one\n\n\ttwo</p>\r\n<p>three</p>  ") == "one two three"


def test_strip_html_is_deterministic():
    html = "<div><p>Same <i>input</i></p><script>x()</script></div>"
    assert strip_html(html) == strip_html(html)


def test_extract_title():
    assert extract_title("<html><head><TITLE>\n  My  Page </TITLE></head></html>") == "My Page"
    assert extract_title("<html><title></title></html>") is None
    assert extract_title("<html><body>no title</body></html>") is None


def test_python_codec():
    assert python_codec("UTF-8") == "utf-8"
    assert python_codec("GBK") == "gbk"
    assert python_codec("Big5") == "big5"
    assert python_codec("WINDOWS-1252") == "windows-1252"


def test_decode_help_text_with_label():
    data = "中文".encode("gbk")
    assert decode_help_text(data, "GBK") == "中文"


def test_decode_help_text_replaces_invalid_bytes():
    assert decode_help_text(b"ok\xff", "UTF-8") == "ok\ufffd"


def test_decode_help_text_unknown_label_falls_back():
    assert decode_help_text("héllo".encode("utf-8"), "X-UNKNOWN") == "héllo"
    assert decode_help_text("中文".encode("gbk"), "X-UNKNOWN") == "中文"
    assert decode_help_text(b"", "GBK") == ""
