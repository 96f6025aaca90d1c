"""
This module contains the LookupResolver class, a centralized utility for
turning user-supplied selectors into exactly one remote AWX object.

Every read operation that accepts flexible selectors (a numeric id, a name, or
both, optionally scoped under a parent object) goes through this class. It
never guesses: zero matches, several matches and missing selectors are all
reported as distinct errors, and transport or server errors are wrapped so the
upstream message reaches the user verbatim.

The resolver is instantiated by a runner and uses the runner's `AwxClient`
for all API calls. It keeps no cache; each call queries the server.
"""

from ansible_collections.awx.automation.plugins.module_utils.awx.errors import (
    AmbiguousResult,
    AwxApiError,
    MissingSelector,
    NotFound,
    UpstreamLookupFailed,
)

SELECTOR_KEYS = ("id", "name")


class LookupResolver:
    """
    Resolves selectors against an AWX list endpoint.

    This class supports:
    - Lookup of a single object by `id`, `name`, or both combined.
    - Scoping a lookup under a parent through path parameters
      (e.g., `/api/v2/job_templates/{parent_id}/credentials/`).
    - Resolving reference parameters (e.g., an organization given by id or
      name) into the numeric id that the API payload needs.
    """

    def __init__(self, runner):
        """
        Initializes the resolver.

        Args:
            runner: The runner that owns this resolver. It provides the API client
                    and the context holding per-parameter resolver configuration.
        """
        self.runner = runner
        self.client = runner.client
        self.context = runner.context

    def find(self, path: str, filters: dict, scope: dict | None = None) -> list:
        """
        Returns every object on `path` matching `filters`.

        Raises:
            UpstreamLookupFailed: wrapping any error reported by the API.
        """
        try:
            results, _ = self.client.list_objects(path, filters, path_params=scope)
        except AwxApiError as e:
            raise UpstreamLookupFailed(e.message) from e
        return results

    def resolve(
        self,
        path: str,
        selectors: dict,
        scope: dict | None = None,
        resource_type: str = "object",
        extra_filters: dict | None = None,
    ) -> dict:
        """
        Disambiguates `selectors` to exactly one remote object.

        Args:
            path: The API list endpoint, possibly templated with `scope` keys.
            selectors: User-supplied selectors; only `id` and `name` are honoured,
                       and `None` values are ignored.
            scope: Path parameters identifying the parent the lookup is scoped to.
            resource_type: A human-readable name used in error messages.
            extra_filters: Additional query filters that narrow the lookup
                           (e.g., `{"organization": 1}`). They never count as
                           selectors.

        Returns:
            The single matching object.

        Raises:
            MissingSelector: if neither `id` nor `name` was given.
            UpstreamLookupFailed: if the API call failed.
            AmbiguousResult: if more than one object matched.
            NotFound: if nothing matched.
        """
        filters = {
            key: str(selectors[key])
            for key in SELECTOR_KEYS
            if selectors.get(key) is not None and selectors.get(key) != ""
        }
        if not filters:
            raise MissingSelector(
                f"Please use one of the selectors ({' or '.join(SELECTOR_KEYS)}) to look up the {resource_type}."
            )

        query = {key: str(value) for key, value in (extra_filters or {}).items()}
        query.update(filters)
        results = self.find(path, query, scope)

        if len(results) > 1:
            raise AmbiguousResult(
                f"The query returned more than one {resource_type}: {len(results)}. Narrow the selectors.",
                count=len(results),
            )
        if not results:
            raise NotFound(
                f"The query returned no {resource_type} matching {self._describe(filters)}."
            )
        return results[0]

    def resolve_reference(self, param_name: str, value) -> int:
        """
        Resolves a reference parameter to the numeric id of the object it names.

        The parameter's resolver configuration comes from `context["resolvers"]`,
        e.g. `{"organization": {"url": "/api/v2/organizations/"}}`. A value that
        is already numeric is used as the id without a lookup.
        """
        if self._is_numeric(value):
            return int(value)

        resolver_conf = self.context.get("resolvers", {}).get(param_name)
        if not resolver_conf:
            raise UpstreamLookupFailed(
                f"Configuration error: No resolver found for parameter '{param_name}'."
            )

        try:
            found = self.resolve(
                resolver_conf["url"], {"name": value}, resource_type=param_name
            )
        except NotFound as e:
            error_template = resolver_conf.get("error_message")
            if error_template:
                raise NotFound(error_template.format(value=value)) from e
            raise
        return found["id"]

    def _is_numeric(self, value) -> bool:
        if isinstance(value, bool):
            return False
        if isinstance(value, int):
            return True
        return isinstance(value, str) and value.isascii() and value.isdigit()

    def _describe(self, filters: dict) -> str:
        return ", ".join(f"{key}={value!r}" for key, value in sorted(filters.items()))
