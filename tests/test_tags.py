"""Tag-string normalization — pure function, no database."""
import pytest

from solo.services.article_service import normalize_tag_str


def test_duplicates_collapse_to_first_occurrence():
    assert normalize_tag_str("go,go,go") == "go"
    assert normalize_tag_str("rust,go,rust,ts,go") == "rust,go,ts"


def test_cjk_and_semicolon_delimiters_become_commas():
    assert normalize_tag_str("go，rust；ts") == "go,rust,ts"
    assert normalize_tag_str("go、rust;ts") == "go,rust,ts"


def test_whitespace_and_empty_tags_are_dropped():
    assert normalize_tag_str("  ,  , go ") == "go"
    assert normalize_tag_str("machine learning, deep\tlearning") == "machinelearning,deeplearning"


def test_empty_input():
    assert normalize_tag_str("") == ""
    assert normalize_tag_str(" , ;，") == ""


def test_dedup_is_case_sensitive():
    assert normalize_tag_str("Go,go,GO") == "Go,go,GO"


def test_tags_without_allowed_characters_are_dropped():
    assert normalize_tag_str("!!!,go,@#$") == "go"


def test_allowed_punctuation_and_cjk():
    assert normalize_tag_str("c++,R&D,node.js,vue-router") == "c++,R&D,node.js,vue-router"
    assert normalize_tag_str("博客，开源、博客") == "博客,开源"


@pytest.mark.parametrize(
    "raw",
    [
        "go,go,go",
        "go，rust；ts",
        "  ,  , go ",
        "Java, 编程 ，c++;;R&D、!!!",
        "",
        "a,b!,b!,?",
    ],
)
def test_normalize_is_idempotent(raw):
    once = normalize_tag_str(raw)
    assert normalize_tag_str(once) == once
