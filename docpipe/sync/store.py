"""Current multimodal configuration snapshot and the field-by-field merge."""

from __future__ import annotations

from docpipe.models.multimodal import MultimodalConfig, PartialMultimodalConfig


def apply_partial(
    config: MultimodalConfig, partial: PartialMultimodalConfig
) -> MultimodalConfig:
    """Merge ``partial`` into ``config``.

    Fields the partial leaves as ``None`` keep their current value. The input
    config is never modified; an empty partial returns it unchanged.

    Args:
        config: Current configuration.
        partial: Requested changes.

    Returns:
        MultimodalConfig: The merged configuration.
    """
    changes = partial.changes()
    if not changes:
        return config
    return config.model_copy(update=changes)


class ConfigValueStore:
    """Holds the configuration snapshot of one session.

    Only the session's update queue calls ``apply``; everything else reads
    ``current``.
    """

    def __init__(self, initial: MultimodalConfig | None = None) -> None:
        self._current = initial if initial is not None else MultimodalConfig()

    @property
    def current(self) -> MultimodalConfig:
        return self._current

    def apply(self, partial: PartialMultimodalConfig) -> MultimodalConfig:
        """Merge ``partial`` into the snapshot and return the new snapshot."""
        self._current = apply_partial(self._current, partial)
        return self._current


__all__ = ["ConfigValueStore", "apply_partial"]
