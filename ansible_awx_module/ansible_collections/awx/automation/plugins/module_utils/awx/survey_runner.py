from ansible_collections.awx.automation.plugins.module_utils.awx.base_runner import (
    BaseRunner,
)
from ansible_collections.awx.automation.plugins.module_utils.awx.command import (
    Command,
)
from ansible_collections.awx.automation.plugins.module_utils.awx.crud_runner import (
    ENCRYPTED,
)
from ansible_collections.awx.automation.plugins.module_utils.awx.errors import (
    AwxApiError,
    CreateFailed,
    DeleteFailed,
    NotFound,
    UpdateFailed,
    UpstreamLookupFailed,
)
from ansible_collections.awx.automation.plugins.module_utils.awx.survey import (
    QUESTION_DEFAULTS,
    QUESTION_FIELDS,
    decode_survey,
)

SURVEY_FIELDS = ("name", "description", "spec")


class SurveyRunner(BaseRunner):
    """
    Runner for the survey spec of a job template.

    A job template has at most one survey, so the survey is identified by the
    job template id alone. The survey spec is always replaced as a whole: create and
    update both submit the complete question list in a single request, and
    there is no per-question patching.

    Locally the questions form an unordered collection, so drift detection
    compares them as a multiset; remotely they are an ordered list.

    Context keys:
    - `parent`: `{"param", "resource_type"}` of the owning job template.
    - `survey_path`: The survey endpoint, templated with `{id}`.
    """

    def read(self):
        """
        Fetches the survey and decodes every question into local state.

        Raises:
            NotFound: if the job template has no survey (it must be created).
            SpecDecodeError: if any remote question is malformed; no question
                             is ever silently dropped.
        """
        parent_id = self._parent_id()
        try:
            body, _ = self.client.send_request(
                "GET", self.context["survey_path"], path_params={"id": parent_id}
            )
        except AwxApiError as e:
            if e.is_not_found:
                raise NotFound(
                    f"{self._parent_type()} with id {parent_id} not found: {e.message}"
                ) from e
            raise UpstreamLookupFailed(e.message) from e

        if not isinstance(body, dict) or "spec" not in body:
            raise NotFound(f"{self._parent_type()} with id {parent_id} has no survey.")

        survey = decode_survey(body.get("name"), body.get("description"), body["spec"])
        self.resource = body
        self._mark_written(parent_id, survey)

    def create(self):
        self.write()

    def update(self):
        self.write(failure=UpdateFailed)

    def write(self, failure=CreateFailed):
        """
        Replaces the whole survey with the desired one. Every question is
        decoded (and its type validated) before any request is sent.
        """
        self.execute_change_plan([self._build_write_command(failure)])

    def plan_creation(self) -> list:
        return [self._build_write_command(CreateFailed)]

    def plan_update(self) -> list:
        """
        Plans a full replace only if the name or the description differs, or
        if the questions differ in any order.
        """
        command = self._build_write_command(UpdateFailed)
        desired = command.data
        current_spec = self.state.get("spec") or []

        if (
            desired["name"] != self.state.get("name")
            or desired["description"] != self.state.get("description")
            or self._normalize_spec(self._mask_write_only(desired["spec"], current_spec))
            != self._normalize_spec(current_spec)
        ):
            return [command]
        return []

    def plan_deletion(self) -> list:
        parent_id = self._parent_id()
        return [
            Command(
                self,
                method="DELETE",
                path=self.context["survey_path"],
                command_type="delete",
                description=f"Delete survey of {self._parent_type()} {parent_id}",
                path_params={"id": parent_id},
                failure=DeleteFailed,
                missing_ok=True,
            )
        ]

    def apply(self, command, result):
        if command.command_type == "survey":
            survey = decode_survey(
                command.data["name"], command.data["description"], command.data["spec"]
            )
            self._mark_written(command.path_params["id"], survey)
        elif command.command_type == "delete":
            self.mark_absent(clear=SURVEY_FIELDS)

    def _build_write_command(self, failure) -> Command:
        parent_id = self._parent_id()
        survey = decode_survey(
            self.desired.get("name"),
            self.desired.get("description"),
            self.desired.get("spec"),
        )
        return Command(
            self,
            method="POST",
            path=self.context["survey_path"],
            command_type="survey",
            description=f"Replace survey of {self._parent_type()} {parent_id}",
            data=survey.to_api(),
            path_params={"id": parent_id},
            failure=failure,
        )

    def _mark_written(self, parent_id, survey):
        self.mark_present(
            str(parent_id),
            {
                self.context["parent"]["param"]: parent_id,
                "name": survey.name,
                "description": survey.description,
                "spec": [question.to_local() for question in survey.spec],
            },
        )

    def _mask_write_only(self, desired_spec: list, current_spec: list) -> list:
        """
        AWX reads password defaults back as `$encrypted$`. Such a default
        cannot be compared, so the desired one is taken as matching.
        """
        masked = {
            question["variable"]
            for question in current_spec
            if question.get("type") == "password" and question.get("default") == ENCRYPTED
        }
        result = []
        for question in desired_spec:
            if question["type"] == "password" and question["variable"] in masked:
                if question["default"] != ENCRYPTED:
                    self.module.warn(
                        f"Default of password question '{question['variable']}' is write-only "
                        "and cannot be compared; it is left unchanged."
                    )
                question = dict(question, default=ENCRYPTED)
            result.append(question)
        return result

    def _normalize_spec(self, spec: list):
        return self._normalize_for_comparison(
            spec, list(QUESTION_FIELDS), QUESTION_DEFAULTS
        )

    def _parent_id(self):
        return self.state.get(self.context["parent"]["param"]) or self.desired.get(
            self.context["parent"]["param"]
        )

    def _parent_type(self) -> str:
        return self.context["parent"]["resource_type"]
