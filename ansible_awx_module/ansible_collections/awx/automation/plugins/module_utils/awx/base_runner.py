from abc import abstractmethod
import json

from ansible.module_utils.basic import AnsibleModule

from ansible_collections.awx.automation.plugins.module_utils.awx.client import (
    AwxClient,
)
from ansible_collections.awx.automation.plugins.module_utils.awx.errors import (
    NotFound,
    ReconcileError,
)


class BaseRunner:
    """
    Abstract base class for all module runners.

    A runner reconciles one AWX resource kind. It holds three pieces of state:

    - `desired`: the user's desired state (a copy of the module parameters).
      The reconciliation operations only read it.
    - `state`: the observed local state, i.e. the schema fields refreshed from
      the server by `read()` or written back by `create()`.
    - `identity`: the local identity of the resource. An empty string means the
      resource is Absent; anything else means Present. Only `mark_present()`
      and `mark_absent()` change it, so an operation that fails half-way never
      leaves a synthesized identity behind.

    The universal `run()` method orchestrates a two-phase "plan and execute"
    workflow using the Command pattern, the same way for every resource kind.
    """

    def __init__(self, module: AnsibleModule, context: dict, client=None):
        """
        Initializes the runner.

        Args:
            module: The AnsibleModule instance.
            context: A dictionary containing configuration and data for the runner.
            client: The `AwxClient` to talk to. Built from the module when omitted.
        """
        self.module = module
        self.context = context
        self.client = client or AwxClient(module)
        self.desired = dict(module.params)
        self.state = {
            key: self.desired.get(key) for key in context.get("state_fields", [])
        }
        self.identity = ""
        self.has_changed = False
        self.resource = None
        self.plan = []

    @abstractmethod
    def read(self):
        """
        Re-fetches the remote object and re-applies it to `state`.
        Subclasses must transition to Absent (or raise `NotFound`) when the
        object no longer exists.
        """
        pass

    @abstractmethod
    def plan_creation(self) -> list:
        """Returns the commands that bring an Absent resource to Present."""
        pass

    @abstractmethod
    def plan_update(self) -> list:
        """Returns the commands that reconcile a Present resource, or []."""
        pass

    @abstractmethod
    def plan_deletion(self) -> list:
        """Returns the commands that bring a Present resource to Absent."""
        pass

    @property
    def present(self) -> bool:
        return bool(self.identity)

    def mark_present(self, identity: str, fields: dict | None = None):
        """Absent -> Present transition (or a Present refresh)."""
        if fields:
            self.state.update(fields)
        self.identity = identity

    def mark_absent(self, clear=()):
        """
        Present -> Absent transition. The local identity is cleared so that the
        next run recreates the resource; `clear` names state fields to blank.
        """
        self.identity = ""
        self.resource = None
        for key in clear:
            self.state[key] = None

    def create(self):
        self.execute_change_plan(self.plan_creation())

    def update(self):
        self.execute_change_plan(self.plan_update())

    def delete(self):
        self.execute_change_plan(self.plan_deletion())

    def check_existence(self):
        """
        Reads the current remote state. A `NotFound` here only means the
        resource has to be created; it is never fatal.
        """
        try:
            self.read()
        except NotFound:
            self.mark_absent()

    def run(self):
        """
        The universal, final `run` method for all runners.

        It determines the current state of the resource and then delegates the
        "planning" of what to do to the specialized abstract methods
        (`plan_creation`, `plan_update`, `plan_deletion`). Every
        `ReconcileError` raised on the way becomes a structured failure.
        """
        try:
            # Step 1: Determine the initial state of the resource.
            self.check_existence()

            # Step 2: Plan based on the desired state and current existence.
            state = self.module.params["state"]
            if self.present:
                if state == "present":
                    self.plan = self.plan_update()
                elif state == "absent":
                    self.plan = self.plan_deletion()
            elif state == "present":
                self.plan = self.plan_creation()

            # Step 3: Handle Check Mode.
            if self.module.check_mode:
                self.handle_check_mode(self.plan)
                return

            # Step 4: Execute the generated plan.
            self.execute_change_plan(self.plan)
        except ReconcileError as e:
            self.fail(e)
            return

        # Step 5: Exit with the final state.
        self.exit(plan=self.plan)

    def execute_change_plan(self, plan: list):
        """
        Executes a list of Command objects, making the actual API calls, and
        applies each result to the runner's state.
        """
        if not plan:
            return

        self.has_changed = True
        needs_refetch = False

        for command in plan:
            result = command.execute()
            self.apply(command, result)
            if command.command_type == "update":
                needs_refetch = True

        # An update is always followed by a fresh read so drift is re-detected.
        if needs_refetch:
            self.check_existence()

    def apply(self, command, result):
        """
        Updates the runner's state after a command ran. Subclasses extend this
        for their own command types.
        """
        if command.command_type == "create":
            self.resource = result
        elif command.command_type == "update":
            if self.resource and result:
                self.resource.update(result)
        elif command.command_type == "delete":
            self.mark_absent()

    def state_from_resource(self, resource: dict) -> dict:
        """
        Maps a remote object onto the local state fields.

        `context["state_map"]` maps each local field to a dotted path into the
        remote object (e.g., `{"username": "inputs.username"}`); a missing path
        segment yields None.
        """
        fields = {}
        for key, source in self.context.get("state_map", {}).items():
            value = resource
            for part in source.split("."):
                value = value.get(part) if isinstance(value, dict) else None
            fields[key] = value
        return fields

    def handle_check_mode(self, plan: list):
        """
        Generates a predictive diff from a change plan and exits.
        """
        if plan:
            self.has_changed = True
        self.exit(plan=plan, diff=[cmd.to_diff() for cmd in plan])

    def exit(self, plan: list | None = None, diff: list | None = None):
        """
        Formats the final response for Ansible and exits the module.
        """
        result = dict(
            changed=self.has_changed,
            id=self.identity or None,
            resource=self.state if self.present else None,
            commands=[cmd.serialize_request() for cmd in plan] if plan else [],
        )
        if diff is not None:
            result["diff"] = diff
        self.module.exit_json(**result)

    def fail(self, error: ReconcileError):
        """
        Reports a `ReconcileError` as a structured Ansible failure.
        """
        self.module.fail_json(
            msg=f"{error.summary}: {error.detail}", **error.to_diagnostic()
        )

    def _normalize_for_comparison(
        self, value: any, idempotency_keys: list[str], defaults_map: dict | None = None
    ) -> any:
        """
        Normalizes complex values (especially lists) into a canonical, order-insensitive,
        and comparable format.

        -   **Mode A (Complex Object Normalization):** a list of dictionaries is
            turned into a sorted list of canonical JSON strings built from the
            `idempotency_keys` of each item (after applying `defaults_map`).
            Duplicates are kept, so `[q, q]` and `[q]` differ.

        -   **Mode B (Simple Value Normalization):** a list of hashable values
            becomes a set.

        Non-list values are returned unchanged.
        """
        defaults_map = defaults_map or {}

        if not isinstance(value, list):
            return value

        if not value:
            return []

        is_complex_list = idempotency_keys and isinstance(value[0], dict)

        if is_complex_list:
            canonical_forms = []
            for item in value:
                # A mixed list cannot be normalized; the comparison then just fails safely.
                if not isinstance(item, dict):
                    return value

                item_to_process = self._apply_defaults(item, defaults_map)
                filtered_item = {key: item_to_process.get(key) for key in idempotency_keys}
                canonical_forms.append(
                    json.dumps(filtered_item, sort_keys=True, separators=(",", ":"))
                )
            return sorted(canonical_forms)

        try:
            return set(value)
        except TypeError:
            return value

    def _apply_defaults(self, item: dict, defaults_map: dict) -> dict:
        """
        Normalizes a single dictionary item by applying default values for any
        keys that are missing from it (or explicitly None).
        """
        normalized_item = item.copy()
        for key, default_value in defaults_map.items():
            if normalized_item.get(key) is None:
                normalized_item[key] = default_value
        return normalized_item
