from typing import Any, Dict

from ansible_collections.awx.automation.plugins.module_utils.awx.errors import (
    AwxApiError,
    ReconcileError,
)


class Command:
    """
    A self-contained object representing a single, atomic change to AWX.

    This class encapsulates all information needed to perform an API request and
    to represent the change in a user-friendly diff format. It is the core of
    the "plan-and-execute" workflow: runners build lists of commands while
    planning, and only `execute()` ever writes to the API.
    """

    def __init__(
        self,
        runner,
        method: str,
        path: str,
        command_type: str,
        description: str,
        data: Dict[str, Any] | None = None,
        path_params: Dict[str, Any] | None = None,
        failure: type[ReconcileError] = ReconcileError,
        missing_ok: bool = False,
    ):
        """
        Initializes the command.

        Args:
            runner: The runner instance that will execute this command.
            method (str): The HTTP method (e.g., 'POST', 'PATCH', 'DELETE').
            path (str): The API endpoint path.
            command_type (str): The logical type of command ('create', 'update',
                                'delete', 'associate', 'disassociate', 'survey').
                                This tells the runner how to apply the result.
            description (str): A human-readable summary of the command's purpose.
                               It is also the prefix of any failure detail, so it
                               should name every id needed to diagnose a failure.
            data (dict, optional): The request body payload.
            path_params (dict, optional): Parameters to format into the path.
            failure: The `ReconcileError` subclass raised when the request fails.
            missing_ok (bool): Treat a 404 as success. Used for idempotent deletes.
        """
        self.runner = runner
        self.method = method
        self.path = path
        self.command_type = command_type
        self.description = description
        self.data = data
        self.path_params = path_params
        self.failure = failure
        self.missing_ok = missing_ok
        self.response = None
        self.status_code = 0

    def execute(self) -> Any:
        """
        Executes the command by sending the configured HTTP request.
        Stores the response and status code on the instance for later inspection.

        Returns:
            The parsed JSON response from the API, or None when a tolerated
            404 was absorbed.
        """
        try:
            self.response, self.status_code = self.runner.client.send_request(
                self.method, self.path, data=self.data, path_params=self.path_params
            )
        except AwxApiError as e:
            if self.missing_ok and e.is_not_found:
                self.runner.module.warn(
                    f"{self.description}: object already absent, nothing to do."
                )
                self.status_code = e.status
                return None
            raise self.failure(f"{self.description}: {e.message}") from e
        return self.response

    def serialize_request(self) -> dict:
        """
        Generates a serializable dictionary representing the HTTP request this
        command will make. This is used for the module's `commands` output.
        """
        final_path = self.path
        if self.path_params:
            final_path = self.path.format(**self.path_params)

        api_url = self.runner.module.params["api_url"].rstrip("/")
        serialized: dict[str, str | dict] = {
            "method": self.method,
            "url": f"{api_url}/{final_path.lstrip('/')}",
            "description": self.description,
        }
        if self.data is not None:
            serialized["body"] = self.data
        return serialized

    def to_diff(self) -> Dict[str, Any]:
        """
        Generates a dictionary describing the change for Ansible's diff output.
        """
        if self.command_type == "update":
            return {"updated_attributes": self.data}
        if self.command_type in ("delete", "disassociate"):
            return {"state": f"{self.description} will be performed."}
        return {
            "state": f"{self.description} will be performed.",
            "new_attributes": self.data,
        }
