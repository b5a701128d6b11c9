import dataclasses
from collections.abc import Mapping
from typing import Any


@dataclasses.dataclass(frozen=True)
class CreateResourceRequest:
    """
    A payload for creating a custom resource, with the K8s API modifiers.

    The body is the full manifest of the object and is passed through as is.
    It is not validated locally: an incomplete body is rejected by the API.
    """

    body: Mapping[str, Any] | None

    pretty: str | None = None
    """ If ``'true'``, the API pretty-prints its output. """

    dry_run: str | None = None
    """ If ``'All'``, all the stages are processed, but nothing is persisted. """

    field_manager: str | None = None
    """ The name of the actor making the change, as used by server-side apply. """

    @property
    def params(self) -> dict[str, str | None]:
        return {
            'pretty': self.pretty,
            'dryRun': self.dry_run,
            'fieldManager': self.field_manager,
        }
