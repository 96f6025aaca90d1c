from ansible_collections.awx.automation.plugins.module_utils.awx.base_runner import (
    BaseRunner,
)
from ansible_collections.awx.automation.plugins.module_utils.awx.command import (
    Command,
)
from ansible_collections.awx.automation.plugins.module_utils.awx.errors import (
    AmbiguousResult,
    CreateFailed,
    DeleteFailed,
    NotFound,
    UpdateFailed,
)
from ansible_collections.awx.automation.plugins.module_utils.awx.resolver import (
    LookupResolver,
)

# AWX masks write-only secrets with this marker when reading an object back.
ENCRYPTED = "$encrypted$"


class CrudRunner(BaseRunner):
    """
    A declarative runner for standalone objects with Create, Read, Update,
    Delete (CRUD) semantics, such as credentials.

    Its primary responsibility is to translate the user's desired state into a
    "change plan" by implementing the three planning methods, and to map the
    remote object back into local state on every read. Orchestration lives in
    `BaseRunner.run()`.

    Context keys:
    - `resource_type`: Human-readable name of the object kind.
    - `list_path`, `create_path`, `detail_path`: API endpoints; `detail_path`
      is templated with `{id}`.
    - `model_param_names`: Parameters copied into the create payload.
    - `update_fields`: Parameters that can be patched in place.
    - `force_new_fields`: Parameters whose change recreates the object.
    - `check_filter_keys`: Parameters that scope the existence lookup, mapped
      to their API query filter.
    - `resolvers`: Reference parameters resolved from a name to an id.
    - `state_map`: Local state field -> dotted path in the remote object.
    """

    def __init__(self, module, context, client=None):
        super().__init__(module, context, client)
        self.resolver = LookupResolver(self)

    def read(self):
        """
        Looks the object up by its selectors. If it vanished, the runner moves
        to Absent so the next run recreates it; any other failure propagates.

        When the lookup is scoped (e.g., by organization) and misses, the
        object may still exist under another scope. It is then looked up
        without the scope, so that a changed scope parameter is patched in
        place instead of creating a second object.
        """
        scope = self._scope_filters()
        try:
            resource = self._lookup(scope)
        except NotFound:
            resource = self._lookup_outside_scope() if scope else None

        if resource is None:
            self.mark_absent(clear=["id"])
            return

        self.resource = resource
        self.mark_present(str(resource["id"]), self.state_from_resource(resource))

    def plan_creation(self) -> list:
        """
        Builds the change plan for creating a new object: one POST carrying
        every desired parameter present in the model, with references resolved
        to ids.
        """
        for key in self.context.get("required_for_create", []):
            if self.desired.get(key) is None:
                raise CreateFailed(
                    f"Parameter '{key}' is required when state is 'present' for a new {self.context['resource_type']}."
                )

        payload = {}
        for key in self.context.get("model_param_names", []):
            value = self.desired.get(key)
            if value is None:
                continue
            payload[key] = self._resolve_param(key, value)

        return [
            Command(
                self,
                method="POST",
                path=self.context["create_path"],
                command_type="create",
                description=f"Create {self.context['resource_type']} '{self.desired.get('name')}'",
                data=payload,
                failure=CreateFailed,
            )
        ]

    def plan_update(self) -> list:
        """
        Builds the change plan for an existing object.

        If any ForceNew field differs, the object is destroyed and recreated.
        Otherwise the changed mutable fields are collected into a single PATCH,
        and nothing is planned when the object is already up to date.
        """
        for field in self.context.get("force_new_fields", []):
            new_value = self.desired.get(field)
            if new_value is None:
                continue
            if self._resolve_param(field, new_value) != self.resource.get(field):
                return self.plan_deletion() + self.plan_creation()

        return self._build_simple_update_command()

    def plan_deletion(self) -> list:
        """
        Builds the change plan for deleting the object. A 404 from the API
        means it is already gone, which is the desired outcome.
        """
        return [
            Command(
                self,
                method="DELETE",
                path=self.context["detail_path"],
                command_type="delete",
                description=f"Delete {self.context['resource_type']} {self.resource['id']}",
                path_params={"id": self.resource["id"]},
                failure=DeleteFailed,
                missing_ok=True,
            )
        ]

    def apply(self, command, result):
        super().apply(command, result)
        if command.command_type == "create" and result:
            # Server-computed fields (e.g. kind, derived username) flow back here.
            self.mark_present(str(result["id"]), self.state_from_resource(result))

    def _build_simple_update_command(self) -> list:
        """
        Compares every updatable parameter the user provided with the existing
        object and returns a single PATCH `Command` holding only the changed
        values, or an empty list if there is nothing to change.
        """
        update_fields = self.context.get("update_fields", [])
        if not (self.resource and update_fields):
            return []

        payload = {}
        for field in update_fields:
            new_value = self.desired.get(field)
            if new_value is None:
                continue
            new_value = self._resolve_param(field, new_value)
            old_value = self.resource.get(field)

            if isinstance(new_value, dict) and isinstance(old_value, dict):
                if self._dict_differs(new_value, old_value):
                    payload[field] = new_value
            elif new_value != old_value:
                payload[field] = new_value

        if not payload:
            return []

        return [
            Command(
                self,
                method="PATCH",
                path=self.context["detail_path"],
                command_type="update",
                description=f"Update {self.context['resource_type']} {self.resource['id']}",
                data=payload,
                path_params={"id": self.resource["id"]},
                failure=UpdateFailed,
            )
        ]

    def _dict_differs(self, new_value: dict, old_value: dict) -> bool:
        """
        Compares the keys the user provided. Values the API returns as
        `$encrypted$` cannot be read back and are taken as matching.
        """
        for key, value in new_value.items():
            old = old_value.get(key)
            if old == ENCRYPTED:
                self.module.warn(
                    f"Value of '{key}' is write-only and cannot be compared; it is left unchanged."
                )
                continue
            if value != old:
                return True
        return False

    def _resolve_param(self, key, value):
        if key in self.context.get("resolvers", {}):
            return self.resolver.resolve_reference(key, value)
        return value

    def _lookup(self, scope: dict) -> dict:
        return self.resolver.resolve(
            self.context["list_path"],
            {"id": self.state.get("id"), "name": self.desired.get("name")},
            resource_type=self.context["resource_type"],
            extra_filters=scope,
        )

    def _lookup_outside_scope(self):
        # Several candidates in other scopes cannot be told apart; none is claimed.
        try:
            return self._lookup({})
        except (NotFound, AmbiguousResult):
            return None

    def _scope_filters(self) -> dict:
        filters = {}
        for param_name, filter_key in self.context.get("check_filter_keys", {}).items():
            value = self.desired.get(param_name)
            if value is not None:
                filters[filter_key] = self.resolver.resolve_reference(param_name, value)
        return filters
