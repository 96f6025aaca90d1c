import pytest

from ansible_collections.awx.automation.plugins.module_utils.awx.errors import (
    InvalidQuestionType,
    SpecDecodeError,
)
from ansible_collections.awx.automation.plugins.module_utils.awx.survey import (
    QUESTION_TYPES,
    Question,
    decode_question,
    decode_survey,
)


def question(**overrides):
    entry = {
        "question_name": "Environment",
        "required": True,
        "variable": "env",
        "type": "text",
    }
    entry.update(overrides)
    return entry


def test_decode_applies_defaults():
    decoded = decode_question(question())

    assert decoded == Question(
        question_name="Environment",
        required=True,
        variable="env",
        type="text",
        question_description="",
        min=0,
        max=1024,
        default="",
        choices="",
    )


@pytest.mark.parametrize("question_type", QUESTION_TYPES)
def test_decode_accepts_every_survey_type(question_type):
    assert decode_question(question(type=question_type)).type == question_type


@pytest.mark.parametrize("question_type", ["textarea", "TEXT", "", "bool"])
def test_decode_rejects_unknown_types(question_type):
    with pytest.raises(InvalidQuestionType):
        decode_question(question(type=question_type))


def test_invalid_type_is_a_decode_error():
    assert issubclass(InvalidQuestionType, SpecDecodeError)


@pytest.mark.parametrize(
    "overrides",
    [
        {"required": "yes"},
        {"min": "0"},
        {"max": 1.5},
        {"min": True},
        {"question_name": 5},
        {"variable": None},
        {"default": ["a"]},
        {"choices": ["a", 1]},
        {"choices": 3},
    ],
)
def test_decode_rejects_wrongly_typed_fields(overrides):
    with pytest.raises(SpecDecodeError):
        decode_question(question(**overrides))


def test_decode_rejects_non_mapping_entries():
    with pytest.raises(SpecDecodeError):
        decode_question(["not", "a", "mapping"])


def test_decode_normalizes_api_shapes():
    decoded = decode_question(
        question(type="multiplechoice", choices=["staging", "production"], default=5, min=None)
    )

    assert decoded.choices == "staging\nproduction"
    assert decoded.default == "5"
    assert decoded.min == 0


def test_decode_survey_aborts_on_first_bad_question():
    with pytest.raises(SpecDecodeError) as excinfo:
        decode_survey("s", "", [question(), question(variable="b", type="nope")])

    assert "#1" in excinfo.value.detail


def test_decode_survey_builds_api_payload():
    survey = decode_survey("deploy", None, [question()])

    payload = survey.to_api()
    assert payload["name"] == "deploy"
    assert payload["description"] == ""
    assert payload["spec"][0]["variable"] == "env"
    assert payload["spec"][0]["max"] == 1024


def test_decode_survey_requires_a_list():
    with pytest.raises(SpecDecodeError):
        decode_survey("s", "", {"question_name": "x"})
