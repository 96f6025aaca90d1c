#!/usr/bin/python

DOCUMENTATION = r"""
---
module: job_template_credential
short_description: Attach a credential to an AWX job template
description:
  - Associates a credential with a job template, or disassociates it.
  - Neither the job template nor the credential is created or deleted.
  - The link is identified by C(<job_template_id>-<credential_id>), which can be passed as O(id) instead of the two ids.
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
    description: Whether the credential should be attached.
    type: str
    choices: [present, absent]
    default: present
  job_template_id:
    description: Id of the job template.
    type: int
  credential_id:
    description: Id of the credential.
    type: int
  id:
    description: Composite id C(<job_template_id>-<credential_id>).
    type: str
"""

EXAMPLES = r"""
- name: Attach the machine credential
  awx.automation.job_template_credential:
    api_url: https://awx.example.com
    access_token: "{{ awx_token }}"
    job_template_id: 7
    credential_id: 9

- name: Detach it again, by composite id
  awx.automation.job_template_credential:
    api_url: https://awx.example.com
    access_token: "{{ awx_token }}"
    id: "7-9"
    state: absent
"""

RETURN = r"""
id:
  description: Composite id of the link. Null when it does not exist.
  returned: always
  type: str
  sample: "7-9"
resource:
  description: The job template and credential ids.
  returned: when present
  type: dict
commands:
  description: HTTP requests made, or planned in check mode.
  returned: always
  type: list
"""

from ansible.module_utils.basic import AnsibleModule

from ansible_collections.awx.automation.plugins.module_utils.awx.client import (
    awx_argument_spec,
)
from ansible_collections.awx.automation.plugins.module_utils.awx.link_runner import (
    LinkRunner,
)

ARGUMENT_SPEC = awx_argument_spec(
    state=dict(type="str", choices=["present", "absent"], default="present"),
    job_template_id=dict(type="int"),
    credential_id=dict(type="int"),
    id=dict(type="str"),
)

RUNNER_CONTEXT = {
    "resource_type": "job template credential",
    "parent": {
        "param": "job_template_id",
        "resource_type": "job template",
        "path": "/api/v2/job_templates/{id}/",
    },
    "child": {"param": "credential_id", "resource_type": "credential"},
    "link_path": "/api/v2/job_templates/{parent_id}/credentials/",
    "import_format": "<job_template_id>-<credential_id>",
    "state_fields": ["job_template_id", "credential_id"],
}


def main():
    module = AnsibleModule(
        argument_spec=ARGUMENT_SPEC,
        mutually_exclusive=[("id", "job_template_id"), ("id", "credential_id")],
        required_one_of=[("id", "job_template_id")],
        required_together=[("job_template_id", "credential_id")],
        supports_check_mode=True,
    )
    runner = LinkRunner(module, RUNNER_CONTEXT)
    runner.run()


if __name__ == "__main__":
    main()
