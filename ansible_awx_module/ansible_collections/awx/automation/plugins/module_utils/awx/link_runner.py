from ansible_collections.awx.automation.plugins.module_utils.awx.base_runner import (
    BaseRunner,
)
from ansible_collections.awx.automation.plugins.module_utils.awx.command import (
    Command,
)
from ansible_collections.awx.automation.plugins.module_utils.awx.errors import (
    AmbiguousAssociation,
    AssociateFailed,
    AwxApiError,
    DisassociateFailed,
    ParentNotFound,
    ReconcileError,
    UpstreamLookupFailed,
)
from ansible_collections.awx.automation.plugins.module_utils.awx.identity import (
    decode_composite_id,
    encode_composite_id,
)


class LinkRunner(BaseRunner):
    """
    Runner for modules that manage a many-to-many link between two objects,
    e.g. a credential attached to a job template.

    Creating the link associates the child with the parent, deleting it
    disassociates them; neither endpoint object is ever created or deleted.
    Both ids are immutable, so there is no update: a different id means a
    different link. The link is identified by the composite id
    "<parent_id>-<child_id>".

    Context keys:
    - `parent` / `child`: `{"param", "resource_type"}`; the parent also has a
      `path` templated with `{id}`.
    - `link_path`: The parent's sub-collection, templated with `{parent_id}`.
    - `import_format`: The composite id format shown in parse errors.
    """

    def run(self):
        """
        Imports the composite `id` parameter when given, then runs the
        standard workflow.
        """
        external_id = self.desired.get("id")
        if external_id:
            try:
                imported = self.import_state(external_id)
            except ReconcileError as e:
                self.fail(e)
                return
            self.desired.update(imported)
            self.state.update(imported)
        super().run()

    def import_state(self, external_id: str) -> dict:
        """
        Decodes a composite id into the desired state it stands for. Nothing
        is written when the id is malformed.
        """
        parent_id, child_id = decode_composite_id(
            external_id, self.context.get("import_format", "<parent>-<child>")
        )
        return {
            self.context["parent"]["param"]: parent_id,
            self.context["child"]["param"]: child_id,
        }

    def read(self):
        """
        Verifies the link still exists by listing the parent's children
        filtered by the child id.
        """
        parent_id, child_id = self._ids(self.state)
        if parent_id is None or child_id is None:
            self.mark_absent()
            return

        try:
            links, _ = self.client.list_objects(
                self.context["link_path"],
                {"id": str(child_id)},
                path_params={"parent_id": parent_id},
            )
        except AwxApiError as e:
            if e.is_not_found:
                raise ParentNotFound(
                    f"{self._parent_type()} with id {parent_id} not found: {e.message}"
                ) from e
            raise UpstreamLookupFailed(
                f"Fail to find the {self._child_type()} for {self._parent_type()} ID {parent_id} "
                f"and {self._child_type()} ID {child_id}: {e.message}"
            ) from e

        if len(links) > 1:
            raise AmbiguousAssociation(
                f"The query returned more than one {self._child_type()} for "
                f"{self._parent_type()} ID {parent_id} and {self._child_type()} ID {child_id}: {len(links)}"
            )
        if not links:
            # The link is gone; blank both ids so the next run recreates it.
            self.mark_absent(
                clear=[self.context["parent"]["param"], self.context["child"]["param"]]
            )
            return

        self.resource = links[0]
        self.mark_present(encode_composite_id(parent_id, child_id))

    def plan_creation(self) -> list:
        """Plan to associate the child with the parent."""
        parent_id, child_id = self._ids(self.desired)
        parent = self._get_parent(parent_id)

        return [
            Command(
                self,
                method="POST",
                path=self.context["link_path"],
                command_type="associate",
                description=(
                    f"Associate {self._child_type()} {child_id} with "
                    f"{self._parent_type()} {parent_id}"
                ),
                data={"id": child_id},
                path_params={"parent_id": parent["id"]},
                failure=AssociateFailed,
            )
        ]

    def plan_update(self) -> list:
        """Linking is binary; there is no 'update' state."""
        return []

    def plan_deletion(self) -> list:
        """
        Plan to disassociate the child from the parent. The parent must still
        exist; a child that is already unlinked is fine.
        """
        parent_id, child_id = self._ids(self.state)
        parent = self._get_parent(parent_id)

        return [
            Command(
                self,
                method="POST",
                path=self.context["link_path"],
                command_type="disassociate",
                description=(
                    f"Disassociate {self._child_type()} {child_id} from "
                    f"{self._parent_type()} {parent_id}"
                ),
                data={"id": child_id, "disassociate": True},
                path_params={"parent_id": parent["id"]},
                failure=DisassociateFailed,
                missing_ok=True,
            )
        ]

    def apply(self, command, result):
        if command.command_type == "associate":
            parent_id, child_id = self._ids(self.desired)
            self.mark_present(
                encode_composite_id(parent_id, child_id),
                {
                    self.context["parent"]["param"]: parent_id,
                    self.context["child"]["param"]: child_id,
                },
            )
        elif command.command_type == "disassociate":
            self.mark_absent()

    def _get_parent(self, parent_id) -> dict:
        try:
            return self.client.get_object(self.context["parent"]["path"], parent_id)
        except AwxApiError as e:
            if e.is_not_found:
                raise ParentNotFound(
                    f"{self._parent_type()} with id {parent_id} not found: {e.message}"
                ) from e
            raise UpstreamLookupFailed(e.message) from e

    def _ids(self, source: dict):
        return (
            source.get(self.context["parent"]["param"]),
            source.get(self.context["child"]["param"]),
        )

    def _parent_type(self) -> str:
        return self.context["parent"]["resource_type"]

    def _child_type(self) -> str:
        return self.context["child"]["resource_type"]
