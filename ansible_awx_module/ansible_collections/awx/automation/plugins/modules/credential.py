#!/usr/bin/python

DOCUMENTATION = r"""
---
module: credential
short_description: Manage AWX credentials
description:
  - Create, update and delete a credential on an AWX / Automation Controller server.
  - The credential is identified by its name, scoped to an organization when one is given.
  - Changing O(credential_type) recreates the credential.
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
    description: Whether the credential should exist.
    type: str
    choices: [present, absent]
    default: present
  name:
    description: Name of the credential.
    type: str
    required: true
  description:
    description: Description of the credential.
    type: str
  organization:
    description: Organization owning the credential, by id or name.
    type: str
  credential_type:
    description: Credential type, by id or name. Required to create a credential.
    type: str
  inputs:
    description:
      - Input values of the credential, such as C(username) and C(password).
      - Secret values are write-only and cannot be compared with the server.
    type: dict
"""

EXAMPLES = r"""
- name: Machine credential for the service account
  awx.automation.credential:
    api_url: https://awx.example.com
    access_token: "{{ awx_token }}"
    name: svc-account
    organization: Default
    credential_type: Machine
    inputs:
      username: svc
      password: "{{ svc_password }}"

- name: Remove the credential
  awx.automation.credential:
    api_url: https://awx.example.com
    access_token: "{{ awx_token }}"
    name: svc-account
    state: absent
"""

RETURN = r"""
id:
  description: Id of the credential, as a string. Null when it is absent.
  returned: always
  type: str
resource:
  description: Local state of the credential.
  returned: when present
  type: dict
  contains:
    id:
      type: int
    name:
      type: str
    username:
      description: Username derived from the credential inputs.
      type: str
    kind:
      type: str
commands:
  description: HTTP requests made, or planned in check mode.
  returned: always
  type: list
"""

from ansible.module_utils.basic import AnsibleModule

from ansible_collections.awx.automation.plugins.module_utils.awx.client import (
    awx_argument_spec,
)
from ansible_collections.awx.automation.plugins.module_utils.awx.crud_runner import (
    CrudRunner,
)

ARGUMENT_SPEC = awx_argument_spec(
    state=dict(type="str", choices=["present", "absent"], default="present"),
    name=dict(type="str", required=True),
    description=dict(type="str"),
    organization=dict(type="str"),
    credential_type=dict(type="str"),
    inputs=dict(type="dict", no_log=True),
)

RUNNER_CONTEXT = {
    "resource_type": "credential",
    "list_path": "/api/v2/credentials/",
    "create_path": "/api/v2/credentials/",
    "detail_path": "/api/v2/credentials/{id}/",
    "required_for_create": ["credential_type"],
    "model_param_names": [
        "name",
        "description",
        "organization",
        "credential_type",
        "inputs",
    ],
    "update_fields": ["description", "organization", "inputs"],
    "force_new_fields": ["credential_type"],
    "check_filter_keys": {"organization": "organization"},
    "resolvers": {
        "organization": {
            "url": "/api/v2/organizations/",
            "error_message": "Organization '{value}' not found.",
        },
        "credential_type": {
            "url": "/api/v2/credential_types/",
            "error_message": "Credential type '{value}' not found.",
        },
    },
    "state_fields": [
        "id",
        "name",
        "username",
        "kind",
        "description",
        "organization",
        "credential_type",
    ],
    "state_map": {
        "id": "id",
        "name": "name",
        "username": "inputs.username",
        "kind": "kind",
        "description": "description",
        "organization": "organization",
        "credential_type": "credential_type",
    },
}


def main():
    module = AnsibleModule(argument_spec=ARGUMENT_SPEC, supports_check_mode=True)
    runner = CrudRunner(module, RUNNER_CONTEXT)
    runner.run()


if __name__ == "__main__":
    main()
