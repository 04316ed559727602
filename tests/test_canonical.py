import pytest

from urlsigner.canonical import append_query_params, canonicalize, parse_query, split_url
from urlsigner.errors import InvalidURLError


def test_canonicalize_keeps_parameter_order():
    assert canonicalize("https://example.com/files?b=2&a=1&c=3") == "https://example.com/files?b=2&a=1&c=3"


def test_canonicalize_excludes_named_parameters():
    url = "https://example.com/files?a=1&expires=5&b=2&signature=abc"
    assert canonicalize(url, {"expires", "signature"}) == "https://example.com/files?a=1&b=2"


def test_canonicalize_drops_trailing_question_mark():
    assert canonicalize("https://example.com/path?") == "https://example.com/path"
    assert canonicalize("https://example.com/path?") == canonicalize("https://example.com/path")


def test_canonicalize_root_without_path_has_no_trailing_slash():
    assert canonicalize("https://example.com") == "https://example.com"
    assert canonicalize("https://example.com/") == "https://example.com/"


def test_canonicalize_decodes_values_without_reencoding():
    assert canonicalize("https://example.com/?q=a+b&r=%2Fdocs%2F") == "https://example.com/?q=a b&r=/docs/"


def test_canonicalize_collapses_duplicate_keys_to_last_value():
    assert canonicalize("https://example.com/?a=1&b=2&a=3") == "https://example.com/?a=3&b=2"


def test_canonicalize_keeps_port_and_ignores_fragment():
    assert canonicalize("http://example.com:8080/p?x=1#top") == "http://example.com:8080/p?x=1"


def test_canonicalize_when_every_parameter_is_excluded():
    assert canonicalize("https://example.com/p?expires=1&signature=x", {"expires", "signature"}) == "https://example.com/p"


@pytest.mark.parametrize(
    "url",
    ["", "example.com/path", "/relative/path", "mailto:someone@example.com", "http://[::1", "http://example.com:99999/"],
)
def test_split_url_rejects_urls_without_scheme_or_host(url):
    with pytest.raises(InvalidURLError):
        split_url(url)


def test_parse_query_keeps_blank_values_and_skips_empty_names():
    assert parse_query("flag&=orphan&x=1") == {"flag": "", "x": "1"}
    assert parse_query("") == {}


def test_append_query_params_creates_query():
    assert append_query_params("https://example.com", {"a": "1"}) == "https://example.com?a=1"
    assert append_query_params("https://example.com/p?", {"a": "1"}) == "https://example.com/p?a=1"


def test_append_query_params_preserves_raw_segments_and_fragment():
    url = "https://example.com/p?q=a%20b&z=9#section"
    assert append_query_params(url, {"expires": "10"}) == "https://example.com/p?q=a%20b&z=9&expires=10#section"


def test_append_query_params_overwrites_existing_names():
    url = "https://example.com/p?expires=1&keep=yes&signature=old"
    result = append_query_params(url, {"expires": "2", "signature": "new"})
    assert result == "https://example.com/p?keep=yes&expires=2&signature=new"
