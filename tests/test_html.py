from cortex_plugins.tools import html

PAGE = """
<html><head>
<title> Example Page </title>
<meta name="description" content="A test page">
<meta property="og:title" content="OG Title">
<meta charset="utf-8">
<style>body { color: red; }</style>
<script src="/static/app.js"></script>
<script>var secret = "/api/hidden";</script>
</head>
<body>
<a href="/about">About us</a>
<a href='https://other.example/x'>Other</a>
<form action="/login" method="post">
  <input type="text" name="user">
  <input type="password" name="pass" value="">
  <input name="remember">
</form>
</body></html>
"""


def test_title_and_text():
    assert html.extract_title(PAGE) == "Example Page"
    text = html.extract_text(PAGE)
    assert "About us" in text
    assert "color: red" not in text
    assert "/api/hidden" not in text
    assert html.extract_text(PAGE, limit=5) == text[:5]


def test_links_resolved_against_base():
    links = html.extract_links(PAGE, "https://example.com/index.html")
    assert links[0] == {
        "type": "link",
        "url": "https://example.com/about",
        "relative": "/about",
        "text": "About us",
    }
    assert links[1]["url"] == "https://other.example/x"


def test_forms_and_inputs():
    forms = html.extract_forms(PAGE)
    assert len(forms) == 1
    assert forms[0]["action"] == "/login"
    assert forms[0]["method"] == "POST"
    assert forms[0]["inputs"][0] == {"name": "user", "type": "text", "value": ""}
    assert forms[0]["inputs"][2]["type"] == "text"


def test_scripts_and_meta():
    scripts = html.extract_scripts(PAGE, "https://example.com/")
    assert scripts == [
        {"type": "external", "url": "https://example.com/static/app.js", "relative": "/static/app.js"}
    ]
    meta = html.extract_meta_tags(PAGE)
    assert {"name": "description", "content": "A test page", "type": "name"} in meta
    assert {"name": "og:title", "content": "OG Title", "type": "property"} in meta
    assert len(meta) == 2


def test_malformed_markup_gives_empty_results():
    junk = "<a href=<form <script src= <<<>>"
    assert html.extract_links(junk, "http://x") == []
    assert html.extract_forms(junk) == []
    assert html.extract_scripts(junk, "http://x") == []
    assert html.extract_meta_tags(junk) == []
    assert html.extract_title(junk) == ""


def test_security_headers_allow_list():
    headers = {"X-Frame-Options": "DENY", "Server": "nginx", "referrer-policy": "no-referrer"}
    assert html.pick_security_headers(headers) == {
        "x-frame-options": "DENY",
        "referrer-policy": "no-referrer",
    }


def test_attr_reads_quoted_value_or_none():
    tag = "<input NAME='user' value=\"\">"
    assert html._attr(tag, "name") == "user"
    assert html._attr(tag, "value") == ""
    assert html._attr(tag, "type") is None
