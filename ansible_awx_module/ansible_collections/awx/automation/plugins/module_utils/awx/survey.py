"""
Typed representation of AWX survey questions.

A survey spec travels as untyped JSON in both directions: as module options
on the way in and as the `survey_spec` API payload on the way out and back.
`decode_question()` is the single boundary where such a mapping becomes a
`Question`; anything that does not fit the shape raises `SpecDecodeError`
instead of leaking raw dictionary lookups into the runner.
"""

from dataclasses import asdict, dataclass

from ansible_collections.awx.automation.plugins.module_utils.awx.errors import (
    InvalidQuestionType,
    SpecDecodeError,
)

QUESTION_TYPES = ("text", "multiplechoice", "multiselect", "password", "integer", "float")

QUESTION_DEFAULTS = {
    "question_description": "",
    "min": 0,
    "max": 1024,
    "default": "",
    "choices": "",
}

QUESTION_FIELDS = (
    "question_name",
    "question_description",
    "required",
    "variable",
    "type",
    "min",
    "max",
    "default",
    "choices",
)


@dataclass(frozen=True)
class Question:
    question_name: str
    required: bool
    variable: str
    type: str
    question_description: str = ""
    min: int = 0
    max: int = 1024
    default: str = ""
    choices: str = ""

    def to_api(self) -> dict:
        return asdict(self)

    def to_local(self) -> dict:
        return {field: getattr(self, field) for field in QUESTION_FIELDS}


@dataclass(frozen=True)
class Survey:
    name: str
    description: str
    spec: tuple

    def to_api(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "spec": [question.to_api() for question in self.spec],
        }


def decode_question(entry, position: int = 0) -> Question:
    """
    Decodes one question mapping into a `Question`.

    Missing optional fields take their defaults. A `choices` list is joined
    with newlines and a numeric `default` is rendered as a string, which is
    how the API may return them.

    Raises:
        InvalidQuestionType: if `type` is not one of `QUESTION_TYPES`.
        SpecDecodeError: for any other field that does not fit.
    """
    if not isinstance(entry, dict):
        raise SpecDecodeError(
            f"Question #{position} must be a mapping, got {type(entry).__name__}."
        )

    where = f"Question #{position} ({entry.get('variable', '?')})"

    question_type = _require(entry, "type", str, where)
    if question_type not in QUESTION_TYPES:
        raise InvalidQuestionType(
            f"{where}: {question_type!r} is not one of {list(QUESTION_TYPES)}."
        )

    return Question(
        question_name=_require(entry, "question_name", str, where),
        required=_require(entry, "required", bool, where),
        variable=_require(entry, "variable", str, where),
        type=question_type,
        question_description=_optional(entry, "question_description", where, str),
        min=_optional_int(entry, "min", where),
        max=_optional_int(entry, "max", where),
        default=_decode_default(entry, where),
        choices=_decode_choices(entry, where),
    )


def decode_survey(name, description, entries) -> Survey:
    """
    Decodes a whole survey. Every question must decode; the first failure
    aborts the whole survey.
    """
    if entries is None:
        entries = []
    if not isinstance(entries, list):
        raise SpecDecodeError(
            f"Survey spec must be a list of questions, got {type(entries).__name__}."
        )
    return Survey(
        name=name or "",
        description=description or "",
        spec=tuple(decode_question(entry, i) for i, entry in enumerate(entries)),
    )


def _require(entry: dict, key: str, expected: type, where: str):
    if entry.get(key) is None:
        raise SpecDecodeError(f"{where}: missing required field '{key}'.")
    return _check(entry[key], key, expected, where)


def _optional(entry: dict, key: str, where: str, expected: type):
    value = entry.get(key)
    if value is None:
        return QUESTION_DEFAULTS[key]
    return _check(value, key, expected, where)


def _optional_int(entry: dict, key: str, where: str) -> int:
    value = entry.get(key)
    if value is None or value == "":
        return QUESTION_DEFAULTS[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise SpecDecodeError(
            f"{where}: field '{key}' must be an integer, got {value!r}."
        )
    return value


def _decode_default(entry: dict, where: str) -> str:
    value = entry.get("default")
    if value is None:
        return QUESTION_DEFAULTS["default"]
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise SpecDecodeError(
            f"{where}: field 'default' must be a string or a number, got {value!r}."
        )
    return str(value)


def _decode_choices(entry: dict, where: str) -> str:
    value = entry.get("choices")
    if value is None:
        return QUESTION_DEFAULTS["choices"]
    if isinstance(value, list):
        if not all(isinstance(choice, str) for choice in value):
            raise SpecDecodeError(
                f"{where}: field 'choices' must only contain strings, got {value!r}."
            )
        return "\n".join(value)
    return _check(value, "choices", str, where)


def _check(value, key: str, expected: type, where: str):
    if not isinstance(value, expected) or (
        expected is not bool and isinstance(value, bool)
    ):
        raise SpecDecodeError(
            f"{where}: field '{key}' must be of type {expected.__name__}, got {value!r}."
        )
    return value
