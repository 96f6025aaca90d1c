import json
from urllib.parse import urlencode

from ansible.module_utils.basic import AnsibleModule, env_fallback
from ansible.module_utils.urls import fetch_url

from ansible_collections.awx.automation.plugins.module_utils.awx.errors import (
    AwxApiError,
)


def awx_argument_spec(**kwargs) -> dict:
    """
    Returns the connection options shared by every module in the collection,
    merged with the module-specific options passed as keyword arguments.
    """
    spec = dict(
        api_url=dict(
            type="str",
            required=True,
            fallback=(env_fallback, ["CONTROLLER_HOST", "AWX_HOST"]),
        ),
        access_token=dict(
            type="str",
            required=True,
            no_log=True,
            fallback=(env_fallback, ["CONTROLLER_OAUTH_TOKEN", "AWX_TOKEN"]),
        ),
        validate_certs=dict(
            type="bool",
            default=True,
            fallback=(env_fallback, ["CONTROLLER_VERIFY_SSL"]),
        ),
        request_timeout=dict(type="int", default=30),
    )
    spec.update(kwargs)
    return spec


class AwxClient:
    """
    Thin HTTP client for the AWX REST API built on Ansible's `fetch_url`.

    The client is created once per module invocation and handed to the runner
    explicitly. It performs no retries and keeps no state between requests;
    every failure is raised as `AwxApiError` so that callers can decide whether
    a 404 is acceptable in their context.
    """

    def __init__(self, module: AnsibleModule):
        self.module = module

    def send_request(
        self, method, path, data=None, query_params=None, path_params=None
    ) -> tuple[any, int]:
        """
        Sends a single request to the API.

        Args:
            method (str): The HTTP method (e.g., 'GET', 'POST', 'DELETE').
            path (str): The relative API endpoint path (e.g., '/api/v2/credentials/')
                        or an absolute URL.
            data (dict, optional): The request body payload.
            query_params (dict, optional): Query parameters; list values are repeated.
            path_params (dict, optional): Parameters to format into the path.

        Returns:
            A tuple of the parsed JSON response (an empty list for a bodiless GET,
            None for any other bodiless response) and the HTTP status code.

        Raises:
            AwxApiError: for a status >= 400 or a transport failure.
        """
        if path_params:
            path = path.format(**path_params)

        if path.startswith("http://") or path.startswith("https://"):
            url = path
        else:
            url = f"{self.module.params['api_url'].rstrip('/')}/{path.lstrip('/')}"

        if query_params:
            encoded_params = []
            for key, value in query_params.items():
                if isinstance(value, list):
                    for item in value:
                        encoded_params.append((key, item))
                else:
                    encoded_params.append((key, value))
            url += "?" + urlencode(encoded_params)

        if data is not None and not isinstance(data, str):
            data = self.module.jsonify(data)

        self.module.debug(f"AWX request: {method} {url}")

        response, info = fetch_url(
            self.module,
            url,
            data=data,
            headers={
                "Authorization": f"Bearer {self.module.params['access_token']}",
                "Content-Type": "application/json",
            },
            method=method,
            timeout=self.module.params.get("request_timeout") or 30,
        )

        status_code = info["status"]

        # fetch_url reports connection failures and timeouts as status -1.
        if status_code < 0 or status_code >= 400:
            raise self._build_error(status_code, url, info)

        body_content = response.read() if response else None

        if status_code == 204 or not body_content:
            return ([] if method == "GET" else None), status_code

        try:
            return json.loads(body_content), status_code
        except json.JSONDecodeError:
            raise AwxApiError(
                status_code,
                url,
                f"API returned a success status ({status_code}) but the response was not valid JSON.",
                body=body_content.decode(errors="ignore"),
            )

    def list_objects(self, path, filters=None, path_params=None) -> tuple[list, dict]:
        """
        Queries a list endpoint and unwraps AWX's paginated envelope.

        Returns:
            The `results` list and a `meta` dict with `count`, `next` and `previous`.
        """
        body, _ = self.send_request(
            "GET", path, query_params=filters, path_params=path_params
        )
        if isinstance(body, dict) and "results" in body:
            meta = {
                "count": body.get("count", len(body["results"])),
                "next": body.get("next"),
                "previous": body.get("previous"),
            }
            return body["results"], meta
        results = body or []
        return results, {"count": len(results), "next": None, "previous": None}

    def get_object(self, path, object_id) -> dict:
        body, _ = self.send_request("GET", path, path_params={"id": object_id})
        return body

    def _build_error(self, status_code, url, info) -> AwxApiError:
        error_body = info.get("body", b"")
        error_json = None
        error_details = "No detailed error message from API."
        if error_body:
            try:
                error_json = json.loads(error_body)
                error_details = f"API Response: {json.dumps(error_json)}"
            except (json.JSONDecodeError, TypeError):
                if isinstance(error_body, bytes):
                    error_body = error_body.decode(errors="ignore")
                error_details = f"API Response (raw): {error_body}"

        msg = (
            f"Request to {url} failed. Status: {status_code}. "
            f"Message: {info.get('msg')}. {error_details}"
        )
        return AwxApiError(status_code, url, msg, body=error_json)
