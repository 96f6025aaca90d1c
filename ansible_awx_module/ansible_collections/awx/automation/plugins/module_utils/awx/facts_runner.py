from ansible_collections.awx.automation.plugins.module_utils.awx.base_runner import (
    BaseRunner,
)
from ansible_collections.awx.automation.plugins.module_utils.awx.errors import (
    ReconcileError,
)
from ansible_collections.awx.automation.plugins.module_utils.awx.resolver import (
    LookupResolver,
)


class FactsRunner(BaseRunner):
    """
    A runner for modules that only retrieve information ('facts').

    The object is selected by `id`, `name` or both; exactly one match is
    required, and an empty result is an error rather than an absent state.
    """

    def __init__(self, module, context, client=None):
        super().__init__(module, context, client)
        self.resolver = LookupResolver(self)

    def plan_creation(self) -> list:
        return []

    def plan_update(self) -> list:
        return []

    def plan_deletion(self) -> list:
        return []

    def read(self):
        resource = self.resolver.resolve(
            self.context["list_path"],
            {key: self.desired.get(key) for key in ("id", "name")},
            resource_type=self.context["resource_type"],
        )
        self.resource = resource
        self.mark_present(str(resource["id"]), self.state_from_resource(resource))

    def run(self):
        """
        The main execution path of the runner.
        """
        try:
            self.read()
        except ReconcileError as e:
            self.fail(e)
            return
        self.module.exit_json(changed=False, id=self.identity, resource=self.state)
