import pytest

from rbac_rule_agent.llm_core import ExtractionError, RuleOutputExtractor, extract_json


def test_fenced_json_is_parsed() -> None:
    text = 'Here is the rule:\n```json\n{"name":"RBAC_X","type":"R"}\n```'

    assert extract_json(text) == {"name": "RBAC_X", "type": "R"}


def test_first_fenced_block_wins() -> None:
    text = '```json\n[{"name":"A"}]\n```\nand also\n```json\n{"name":"B"}\n```'

    assert extract_json(text) == [{"name": "A"}]


def test_plain_json_text_is_parsed() -> None:
    assert extract_json('  [{"name": "RBAC_Y"}]  ') == [{"name": "RBAC_Y"}]


def test_non_json_text_is_returned_unchanged() -> None:
    text = "I could not produce a rule for that requirement."

    assert extract_json(text) == text


def test_invalid_fenced_block_returns_raw_text() -> None:
    text = '```json\n{"name": "broken",}\n```'

    assert extract_json(text) == text


def test_extraction_is_idempotent() -> None:
    once = extract_json('```json\n{"overridable":"N"}\n```')

    assert extract_json(once) == once == {"overridable": "N"}
    assert extract_json(extract_json("plain words")) == "plain words"
    quoted = '"{\\"name\\": \\"RBAC_X\\"}"'
    assert extract_json(extract_json(quoted)) == extract_json(quoted) == quoted


def test_strict_mode_raises() -> None:
    with pytest.raises(ExtractionError) as exc_info:
        extract_json("not json", strict=True)

    assert exc_info.value.raw == "not json"


def test_rule_output_extractor_is_callable() -> None:
    extractor = RuleOutputExtractor()

    assert extractor('```json\n{"hybrid":"Y"}\n```') == {"hybrid": "Y"}
    assert RuleOutputExtractor(strict=False).extract("nope") == "nope"
    with pytest.raises(ExtractionError):
        RuleOutputExtractor(strict=True)("nope")


@pytest.mark.parametrize("text", ['"{\\"name\\": \\"RBAC_X\\"}"', "42", "true", "null", '```json\n"RBAC_X"\n```'])
def test_json_scalars_are_not_extracted(text: str) -> None:
    once = extract_json(text)

    assert once == text
    assert extract_json(once) == once


def test_json_scalar_raises_in_strict_mode() -> None:
    with pytest.raises(ExtractionError):
        extract_json('"{\\"name\\": \\"RBAC_X\\"}"', strict=True)
