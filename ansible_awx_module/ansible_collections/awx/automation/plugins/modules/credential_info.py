#!/usr/bin/python

DOCUMENTATION = r"""
---
module: credential_info
short_description: Look up an AWX credential
description:
  - Finds exactly one credential by O(id), O(name) or both.
  - Fails when no selector is given, when nothing matches, or when more than one credential matches.
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
  id:
    description: Credential id.
    type: int
  name:
    description: Credential name.
    type: str
"""

EXAMPLES = r"""
- name: Find the service account credential
  awx.automation.credential_info:
    api_url: https://awx.example.com
    access_token: "{{ awx_token }}"
    name: svc-account
  register: svc
"""

RETURN = r"""
id:
  description: Id of the credential found, as a string.
  returned: success
  type: str
resource:
  description: The credential found.
  returned: success
  type: dict
  contains:
    id:
      type: int
    name:
      type: str
    username:
      description: Username from the credential inputs.
      type: str
    kind:
      type: str
"""

from ansible.module_utils.basic import AnsibleModule

from ansible_collections.awx.automation.plugins.module_utils.awx.client import (
    awx_argument_spec,
)
from ansible_collections.awx.automation.plugins.module_utils.awx.facts_runner import (
    FactsRunner,
)

ARGUMENT_SPEC = awx_argument_spec(
    id=dict(type="int"),
    name=dict(type="str"),
)

RUNNER_CONTEXT = {
    "resource_type": "credential",
    "list_path": "/api/v2/credentials/",
    "state_fields": ["id", "name", "username", "kind"],
    "state_map": {
        "id": "id",
        "name": "name",
        "username": "inputs.username",
        "kind": "kind",
    },
}


def main():
    module = AnsibleModule(argument_spec=ARGUMENT_SPEC, supports_check_mode=True)
    runner = FactsRunner(module, RUNNER_CONTEXT)
    runner.run()


if __name__ == "__main__":
    main()
