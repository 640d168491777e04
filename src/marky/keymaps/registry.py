"""Shortcut registry storing actions, bindings, and chord lookup."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Mapping, Optional, Sequence

from marky.runtime.telemetry import span

from .models import ActionRef, Binding, KeyChord


@dataclass(slots=True)
class RegistryStats:
    """Lightweight snapshot describing registry state."""

    action_count: int
    binding_count: int
    chords: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ShortcutMatch:
    """Resolved binding paired with its action."""

    binding: Binding
    action: ActionRef


class KeymapConflictError(RuntimeError):
    """Raised when a new binding conflicts with existing entries."""

    def __init__(self, binding: Binding, conflicts: Iterable[Binding]):
        conflicts_tuple = tuple(conflicts)
        message = (
            f"Binding '{binding.id}' conflicts with {[b.id for b in conflicts_tuple]}"
        )
        super().__init__(message)
        self.binding = binding
        self.conflicts = conflicts_tuple


class ShortcutRegistry:
    """Owns action references and the chord index used for lookup."""

    def __init__(self, *, logger_name: str | None = None) -> None:
        self._actions: Dict[str, ActionRef] = {}
        self._bindings: Dict[str, Binding] = {}
        self._chord_index: Dict[str, set[str]] = {}
        self._logger_name = logger_name
        self._revision = 0

    def revision(self) -> int:
        return self._revision

    def get_action(self, action_id: str) -> ActionRef:
        try:
            return self._actions[action_id]
        except KeyError as exc:
            raise KeyError(f"Action '{action_id}' is not registered") from exc

    def get_binding(self, binding_id: str) -> Binding:
        try:
            return self._bindings[binding_id]
        except KeyError as exc:
            raise KeyError(f"Binding '{binding_id}' is not registered") from exc

    def register_action(self, action: ActionRef, *, replace: bool = False) -> ActionRef:
        with span(
            "keymaps::register_action",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"action_id": action.id},
        ):
            if not replace and action.id in self._actions:
                raise ValueError(f"Action '{action.id}' already registered")
            self._actions[action.id] = action
            return action

    def register_binding(self, binding: Binding, *, replace: bool = False) -> Binding:
        with span(
            "keymaps::register_binding",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"binding_id": binding.id, "chord": binding.key_signature},
        ) as handle:
            if binding.action_id not in self._actions:
                handle.add_metadata("missing_action", binding.action_id)
                raise KeyError(
                    f"Binding '{binding.id}' references unknown action '{binding.action_id}'"
                )

            conflicts = self.detect_conflicts(binding, ignore=(binding.id,) if replace else None)
            if conflicts and not replace:
                handle.add_metadata(
                    "conflicts", ",".join(conflict.id for conflict in conflicts)
                )
                raise KeymapConflictError(binding, conflicts)

            if replace:
                for conflict in conflicts:
                    self._remove_binding(conflict)
                    self._bindings.pop(conflict.id, None)
                existing = self._bindings.get(binding.id)
                if existing:
                    self._remove_binding(existing)
                    self._bindings.pop(existing.id, None)
            elif binding.id in self._bindings:
                raise ValueError(f"Binding id '{binding.id}' already registered")

            self._bindings[binding.id] = binding
            self._index_binding(binding)
            self._revision += 1
            return binding

    def unregister_binding(self, binding_id: str) -> Optional[Binding]:
        with span(
            "keymaps::unregister_binding",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"binding_id": binding_id},
        ):
            binding = self._bindings.pop(binding_id, None)
            if not binding:
                return None
            self._remove_binding(binding)
            self._revision += 1
            return binding

    def lookup(
        self,
        chord: KeyChord | str,
        *,
        context: Optional[Mapping[str, bool]] = None,
    ) -> Optional[ShortcutMatch]:
        """Return the binding for ``chord`` whose ``when`` gates pass, if any.

        Among several candidates the most specific (most ``when`` clauses) wins,
        then the lowest binding id.
        """

        target = KeyChord.parse(chord) if isinstance(chord, str) else chord
        ctx = context or {}
        with span(
            "keymaps::lookup",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"chord": target.token},
        ) as handle:
            candidates = [
                self._bindings[binding_id]
                for binding_id in self._chord_index.get(target.token, ())
            ]
            allowed = [binding for binding in candidates if binding.allows(ctx)]
            if not allowed:
                handle.add_metadata("status", "miss")
                return None
            allowed.sort(key=lambda b: (-len(b.when), b.id))
            binding = allowed[0]
            handle.add_metadata("status", "match")
            handle.add_metadata("binding_id", binding.id)
            return ShortcutMatch(binding=binding, action=self.get_action(binding.action_id))

    def iter_bindings(self) -> Iterator[Binding]:
        yield from self._bindings.values()

    def stats(self) -> RegistryStats:
        return RegistryStats(
            action_count=len(self._actions),
            binding_count=len(self._bindings),
            chords=tuple(sorted(self._chord_index)),
        )

    def detect_conflicts(
        self, binding: Binding, *, ignore: Sequence[str] | None = None
    ) -> list[Binding]:
        ignored = set(ignore or ())
        conflicts: list[Binding] = []
        for match_id in sorted(self._chord_index.get(binding.key_signature, set())):
            if match_id in ignored:
                continue
            existing = self._bindings[match_id]
            if _contexts_overlap(binding, existing):
                conflicts.append(existing)
        return conflicts

    def _index_binding(self, binding: Binding) -> None:
        self._chord_index.setdefault(binding.key_signature, set()).add(binding.id)

    def _remove_binding(self, binding: Binding) -> None:
        bucket = self._chord_index.get(binding.key_signature)
        if not bucket:
            return
        bucket.discard(binding.id)
        if not bucket:
            self._chord_index.pop(binding.key_signature, None)


def _contexts_overlap(left: Binding, right: Binding) -> bool:
    left_map = left.when_map
    right_map = right.when_map

    if not left.when and not right.when:
        return True

    for flag, expected in left_map.items():
        if flag in right_map and right_map[flag] != expected:
            return False

    if not left.when or not right.when:
        return False

    return left_map == right_map


__all__ = [
    "KeymapConflictError",
    "RegistryStats",
    "ShortcutMatch",
    "ShortcutRegistry",
]
