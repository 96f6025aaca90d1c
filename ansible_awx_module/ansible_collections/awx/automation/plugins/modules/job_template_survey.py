#!/usr/bin/python

DOCUMENTATION = r"""
---
module: job_template_survey
short_description: Manage the survey of an AWX job template
description:
  - Sets or removes the survey spec of a job template.
  - The whole survey is replaced on every change; the order of O(spec) does not matter when comparing with the server.
options:
  api_url:
    description: Base URL of the AWX server.
    type: str
    required: true
  access_token:
    description: OAuth2 token used to authenticate against the API.
    type: str
    required: true
  validate_certs:
    description: Whether to verify the server's TLS certificate.
    type: bool
    default: true
  request_timeout:
    description: Timeout in seconds for each API request.
    type: int
    default: 30
  state:
    description: Whether the survey should exist.
    type: str
    choices: [present, absent]
    default: present
  job_template_id:
    description: Id of the job template owning the survey.
    type: int
    required: true
  name:
    description: Name of the survey.
    type: str
    default: ""
  description:
    description: Description of the survey.
    type: str
    default: ""
  spec:
    description: Survey questions. C(variable) must be unique within the survey.
    type: list
    elements: dict
    suboptions:
      question_name:
        type: str
        required: true
      question_description:
        type: str
        default: ""
      required:
        type: bool
        required: true
      variable:
        type: str
        required: true
      type:
        type: str
        required: true
        choices: [text, multiplechoice, multiselect, password, integer, float]
      min:
        type: int
        default: 0
      max:
        type: int
        default: 1024
      default:
        type: str
        default: ""
      choices:
        description: Newline separated choices for C(multiplechoice) and C(multiselect).
        type: str
        default: ""
"""

EXAMPLES = r"""
- name: Ask for the target environment
  awx.automation.job_template_survey:
    api_url: https://awx.example.com
    access_token: "{{ awx_token }}"
    job_template_id: 7
    name: deploy
    spec:
      - question_name: Environment
        variable: env
        required: true
        type: multiplechoice
        choices: "staging\nproduction"
        default: staging
"""

RETURN = r"""
id:
  description: Id of the job template owning the survey. Null when there is no survey.
  returned: always
  type: str
resource:
  description: The survey as it is on the server.
  returned: when present
  type: dict
  contains:
    job_template_id:
      type: int
    name:
      type: str
    description:
      type: str
    spec:
      type: list
commands:
  description: HTTP requests made, or planned in check mode.
  returned: always
  type: list
"""

from ansible.module_utils.basic import AnsibleModule

from ansible_collections.awx.automation.plugins.module_utils.awx.client import (
    awx_argument_spec,
)
from ansible_collections.awx.automation.plugins.module_utils.awx.survey import (
    QUESTION_TYPES,
)
from ansible_collections.awx.automation.plugins.module_utils.awx.survey_runner import (
    SurveyRunner,
)

ARGUMENT_SPEC = awx_argument_spec(
    state=dict(type="str", choices=["present", "absent"], default="present"),
    job_template_id=dict(type="int", required=True),
    name=dict(type="str", default=""),
    description=dict(type="str", default=""),
    spec=dict(
        type="list",
        elements="dict",
        options=dict(
            question_name=dict(type="str", required=True),
            question_description=dict(type="str", default=""),
            required=dict(type="bool", required=True),
            variable=dict(type="str", required=True),
            type=dict(type="str", required=True, choices=list(QUESTION_TYPES)),
            min=dict(type="int", default=0),
            max=dict(type="int", default=1024),
            default=dict(type="str", default=""),
            choices=dict(type="str", default=""),
        ),
    ),
)

RUNNER_CONTEXT = {
    "resource_type": "survey",
    "parent": {"param": "job_template_id", "resource_type": "job template"},
    "survey_path": "/api/v2/job_templates/{id}/survey_spec/",
    "state_fields": ["job_template_id", "name", "description", "spec"],
}


def main():
    module = AnsibleModule(argument_spec=ARGUMENT_SPEC, supports_check_mode=True)
    runner = SurveyRunner(module, RUNNER_CONTEXT)
    runner.run()


if __name__ == "__main__":
    main()
