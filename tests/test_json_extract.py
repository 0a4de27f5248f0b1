import json

from tools.json_extract import extract_balanced_json, parse_json_object


def test_isolates_object_from_surrounding_noise():
    text = 'noise {"a": "b{c}", "d": 1} trailing'
    assert extract_balanced_json(text) == '{"a": "b{c}", "d": 1}'


def test_pure_json_is_returned_unchanged():
    pure = '{"objective": "x", "sections": ["hero", "footer"], "nested": {"k": [1, 2]}}'
    assert extract_balanced_json(pure) == pure
    assert extract_balanced_json(extract_balanced_json(pure)) == pure


def test_escaped_quotes_do_not_end_the_string():
    text = 'prefix {"path": "say \\"}\\" twice", "n": 2} suffix'
    extracted = extract_balanced_json(text)
    assert json.loads(extracted) == {"path": 'say "}" twice', "n": 2}


def test_unclosed_object_returns_none():
    assert extract_balanced_json('{"a": {"b": 1}') is None
    assert extract_balanced_json("no braces here") is None


def test_markdown_fenced_response_parses():
    text = 'Here you go:\n```json\n{"message": "ok", "files": {"src/App.tsx": "x"}}\n```'
    assert parse_json_object(text) == {"message": "ok", "files": {"src/App.tsx": "x"}}


def test_non_object_json_is_rejected():
    assert parse_json_object("[1, 2, 3]") is None
    assert parse_json_object("not json at all") is None
    assert parse_json_object("") is None
