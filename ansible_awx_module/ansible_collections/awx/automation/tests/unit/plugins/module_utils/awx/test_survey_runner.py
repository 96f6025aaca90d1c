import pytest

from ansible_collections.awx.automation.plugins.module_utils.awx.errors import (
    CreateFailed,
    InvalidQuestionType,
    NotFound,
    SpecDecodeError,
    UpdateFailed,
)
from ansible_collections.awx.automation.plugins.module_utils.awx.survey_runner import (
    SurveyRunner,
)
from ansible_collections.awx.automation.plugins.modules.job_template_survey import (
    RUNNER_CONTEXT,
)

SURVEY_7 = "/api/v2/job_templates/7/survey_spec/"


def question(variable, **overrides):
    entry = {
        "question_name": variable.title(),
        "question_description": "",
        "required": True,
        "variable": variable,
        "type": "text",
        "min": 0,
        "max": 1024,
        "default": "",
        "choices": "",
    }
    entry.update(overrides)
    return entry


QUESTIONS = [
    question("env", type="multiplechoice", choices="staging\nproduction", default="staging"),
    question("replicas", type="integer", min=1, max=10, default="3", required=False),
    question("token", type="password"),
]


class FakeSurveyEndpoint:
    """Stores whatever survey is posted, like the AWX survey_spec endpoint."""

    def __init__(self, client, stored=None):
        self.stored = stored
        client.on("GET", SURVEY_7, lambda data, query: self.stored or {})
        client.on("POST", SURVEY_7, self.post)
        client.on("DELETE", SURVEY_7, self.delete)

    def post(self, data, query):
        # The server keeps its own order; reversing proves order does not matter.
        self.stored = dict(data, spec=list(reversed(data["spec"])))
        return None

    def delete(self, data, query):
        self.stored = None
        return None


@pytest.fixture
def setup(make_module, make_client):
    def _setup(check_mode=False, **params):
        defaults = dict(
            state="present", job_template_id=7, name="deploy", description="", spec=QUESTIONS
        )
        defaults.update(params)
        module = make_module(check_mode=check_mode, **defaults)
        client = make_client(module)
        return SurveyRunner(module, RUNNER_CONTEXT, client=client), module, client

    return _setup


def as_set(spec):
    return {tuple(sorted(item.items())) for item in spec}


class TestWrite:
    def test_write_then_read_round_trips(self, setup):
        runner, _, client = setup()
        endpoint = FakeSurveyEndpoint(client)

        runner.create()
        assert runner.identity == "7"

        reader, _, reader_client = setup(spec=None)
        FakeSurveyEndpoint(reader_client, stored=endpoint.stored)
        reader.read()

        assert reader.identity == "7"
        assert reader.state["name"] == "deploy"
        assert len(reader.state["spec"]) == len(QUESTIONS)
        assert as_set(reader.state["spec"]) == as_set(QUESTIONS)

    def test_create_and_update_send_the_same_replace_call(self, setup):
        runner, _, client = setup()
        FakeSurveyEndpoint(client)

        runner.create()
        runner.update()

        posts = client.requests("POST")
        assert len(posts) == 2
        assert posts[0].data == posts[1].data
        assert posts[0].data["spec"][0]["variable"] == "env"

    def test_invalid_type_is_rejected_before_any_request(self, setup):
        runner, _, client = setup(spec=[question("env", type="dropdown")])

        with pytest.raises(InvalidQuestionType):
            runner.create()
        assert client.calls == []
        assert runner.identity == ""

    def test_malformed_question_is_rejected(self, setup):
        runner, _, client = setup(spec=[question("env", required="sometimes")])

        with pytest.raises(SpecDecodeError):
            runner.update()
        assert client.calls == []

    def test_write_failure_names_the_job_template(self, setup):
        runner, _, client = setup()
        client.on("POST", SURVEY_7, error=400)

        with pytest.raises(CreateFailed) as excinfo:
            runner.write()
        assert "job template 7" in excinfo.value.detail

        with pytest.raises(UpdateFailed):
            runner.update()
        assert runner.identity == ""


class TestRead:
    def test_missing_survey_is_not_found(self, setup):
        runner, _, client = setup()
        FakeSurveyEndpoint(client)

        with pytest.raises(NotFound):
            runner.read()

    def test_missing_job_template_is_not_found(self, setup):
        runner, _, client = setup()
        client.on("GET", SURVEY_7, error=404)

        with pytest.raises(NotFound):
            runner.read()

    def test_malformed_remote_question_aborts_read(self, setup):
        runner, _, client = setup()
        stored = {"name": "deploy", "description": "", "spec": [question("env"), {"variable": "x"}]}
        FakeSurveyEndpoint(client, stored=stored)

        with pytest.raises(SpecDecodeError):
            runner.read()
        assert runner.identity == ""


class TestDelete:
    def test_delete_clears_survey_fields(self, setup):
        runner, _, client = setup(state="absent")
        FakeSurveyEndpoint(client, stored={"name": "deploy", "description": "", "spec": QUESTIONS})
        runner.read()

        runner.delete()

        assert runner.identity == ""
        assert runner.state["name"] is None
        assert runner.state["description"] is None
        assert runner.state["spec"] is None

    def test_delete_of_missing_survey_succeeds(self, setup):
        runner, _, client = setup(state="absent")
        runner.mark_present("7")
        client.on("DELETE", SURVEY_7, error=404)

        runner.delete()

        assert runner.identity == ""


class TestRun:
    def test_unchanged_survey_in_different_order_is_not_rewritten(self, setup):
        runner, module, client = setup(spec=list(reversed(QUESTIONS)))
        FakeSurveyEndpoint(client, stored={"name": "deploy", "description": "", "spec": QUESTIONS})

        runner.run()

        assert client.requests("POST") == []
        assert module.exit_json.call_args.kwargs["changed"] is False

    def test_changed_question_replaces_whole_survey(self, setup):
        changed = QUESTIONS[:2] + [question("token", type="password", required=False)]
        runner, module, client = setup(spec=changed)
        endpoint = FakeSurveyEndpoint(
            client, stored={"name": "deploy", "description": "", "spec": QUESTIONS}
        )

        runner.run()

        assert len(client.requests("POST")) == 1
        assert as_set(endpoint.stored["spec"]) == as_set(changed)
        assert module.exit_json.call_args.kwargs["changed"] is True

    def test_encrypted_password_default_is_not_rewritten(self, setup):
        desired = QUESTIONS[:2] + [question("token", type="password", default="s3cret")]
        remote = QUESTIONS[:2] + [question("token", type="password", default="$encrypted$")]
        runner, module, client = setup(spec=desired)
        FakeSurveyEndpoint(client, stored={"name": "deploy", "description": "", "spec": remote})

        runner.run()

        assert client.requests("POST") == []
        assert module.exit_json.call_args.kwargs["changed"] is False
        module.warn.assert_called_once()

    def test_encrypted_default_does_not_hide_other_changes(self, setup):
        desired = [question("token", type="password", default="s3cret", required=False)]
        remote = [question("token", type="password", default="$encrypted$")]
        runner, _, client = setup(spec=desired)
        FakeSurveyEndpoint(client, stored={"name": "deploy", "description": "", "spec": remote})

        runner.run()

        posted = client.requests("POST")[0].data["spec"]
        assert posted[0]["default"] == "s3cret"

    def test_duplicated_question_is_not_collapsed(self, setup):
        runner, module, client = setup(spec=[question("env"), question("env")])
        FakeSurveyEndpoint(
            client, stored={"name": "deploy", "description": "", "spec": [question("env")]}
        )

        runner.run()

        assert len(client.requests("POST")) == 1
        assert module.exit_json.call_args.kwargs["changed"] is True

    def test_missing_survey_is_created(self, setup):
        runner, module, client = setup()
        FakeSurveyEndpoint(client)

        runner.run()

        result = module.exit_json.call_args.kwargs
        assert result["changed"] is True
        assert result["id"] == "7"
        assert as_set(result["resource"]["spec"]) == as_set(QUESTIONS)

    def test_absent_state_deletes_existing_survey(self, setup):
        runner, module, client = setup(state="absent", spec=None)
        endpoint = FakeSurveyEndpoint(
            client, stored={"name": "deploy", "description": "", "spec": QUESTIONS}
        )

        runner.run()

        assert endpoint.stored is None
        assert module.exit_json.call_args.kwargs["id"] is None

    def test_invalid_type_fails_run_without_writing(self, setup):
        runner, module, client = setup(spec=[question("env", type="dropdown")])
        FakeSurveyEndpoint(client)

        runner.run()

        assert module.fail_json.call_args.kwargs["summary"] == InvalidQuestionType.summary
        assert client.requests("POST") == []
