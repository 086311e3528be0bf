# ==============================================
# Context — Load / Save Orchestrator
# ==============================================
#
# PURPOSE:
#   Runs one render or submit cycle for a field tree against a
#   StorageBackend:
#
#     render_field()   → nonce field + field markup
#     validate_token() → was this a submission, and a genuine one?
#     save(data)       → walk the tree, sanitize, write
#     load()           → walk the tree, read
#
# HOW SAVE WALKS THE TREE:
#
#   root.serialize_data ─── True ──▶ save_field(root)   (one blob)
#          │
#        False
#          ▼
#   save_walk_children(node, data)
#     ├─ leaf or serialized node → save_field(node, data)
#     └─ group → for each child present in data:
#                  save_walk_children(child, data[child.name])
#
#   save_field(node, data)
#     1. stamp data_id / data_type from the root
#     2. duplicate element key → DuplicateKeyError
#        (save() also checks the whole tree up front, so a
#        duplicate aborts before the first write)
#     3. current = store.get_data(...)
#     4. prepared = prepare_data(current, data, node)
#     5. skip_save → stop
#     6. serialized → update_data(key, prepared)
#        else       → delete_data(key), add_data(key, v) for v in prepared
#
# CLASS: Context
# --------------
#   Constructor:
#   ------------
#   - __init__(fm, store, request=None, nonce=None,
#              before_presave=(), after_presave=(),
#              data_id=None, out=None)
#       fm      → root Field / Group
#       store   → StorageBackend for the object type being edited
#       request → submitted form payload (mapping), if any
#       nonce   → NonceManager; built from config when omitted
#       before_presave / after_presave → callbacks
#                 (new_value, old_value, context) -> new_value,
#                 applied in order around field.presave_all()
#       data_id → stamped onto the root when given
#       out     → stream render_field(echo=True) writes to
#
# ==============================================

import sys
from typing import Any, Callable, Iterable, List, Mapping, Optional, Set

from fieldmeta.errors import DuplicateKeyError, UnauthorizedError
from fieldmeta.security.nonce import NonceManager
from fieldmeta.storage.backend import StorageBackend

PresaveHook = Callable[[Any, Any, 'Context'], Any]

_MISSING = object()


class Context:
    def __init__(
        self,
        fm,
        store: StorageBackend,
        request: Optional[Mapping[str, Any]] = None,
        nonce: Optional[NonceManager] = None,
        before_presave: Iterable[PresaveHook] = (),
        after_presave: Iterable[PresaveHook] = (),
        data_id=None,
        out=None,
    ):
        self.fm = fm
        self.store = store
        self.request = request if request is not None else {}
        self.nonce = nonce if nonce is not None else NonceManager.from_config()
        self.before_presave: List[PresaveHook] = list(before_presave)
        self.after_presave: List[PresaveHook] = list(after_presave)
        self.out = out
        if data_id is not None:
            self.fm.data_id = data_id
        self.fm.data_type = store.data_type

    # ------------------------------------------
    # Request handling
    # ------------------------------------------

    @property
    def nonce_name(self) -> str:
        return f"fieldmanager-{self.fm.name}-nonce"

    @property
    def nonce_action(self) -> str:
        return f"fieldmanager-save-{self.fm.name}"

    def add_before_presave(self, hook: PresaveHook) -> None:
        self.before_presave.append(hook)

    def add_after_presave(self, hook: PresaveHook) -> None:
        self.after_presave.append(hook)

    def _submitted_value(self) -> Any:
        return self.request.get(self.fm.name, "")

    def validate_token(self) -> bool:
        """
        Check the nonce submitted with the request.

        Returns:
            False if no nonce was submitted (not a submission),
            True if it is valid

        Raises:
            UnauthorizedError: a nonce was submitted but is invalid
        """
        token = self.request.get(self.nonce_name)
        if not token:
            return False
        if not self.nonce.verify(token, self.nonce_action):
            raise UnauthorizedError("Nonce validation failed")
        return True

    def prepare_data(self, old_value: Any = None, new_value: Any = None, field=None) -> Any:
        """
        Run a value through the presave pipeline.

        before_presave hooks → field.presave_all() → after_presave hooks

        Args:
            old_value: What the store currently holds
            new_value: Submitted value; taken from the request when None
            field: Field to sanitize with; the root when None

        Returns:
            The filtered and sanitized value, safe to save
        """
        if field is None:
            field = self.fm
        if new_value is None:
            new_value = self._submitted_value()
        for hook in self.before_presave:
            new_value = hook(new_value, old_value, self)
        data = field.presave_all(new_value, old_value)
        for hook in self.after_presave:
            data = hook(data, old_value, self)
        return data

    def render_field(self, data: Any = _MISSING, echo: bool = True) -> Optional[str]:
        # Loads stored data unless data is passed explicitly (None included)
        if data is _MISSING:
            data = self.load()
        markup = self.nonce.field(self.nonce_action, self.nonce_name) + self.fm.element_markup(data)
        if echo:
            (self.out or sys.stdout).write(markup)
            return None
        return markup

    # ------------------------------------------
    # Saving
    # ------------------------------------------

    def save(self, data: Any = None) -> None:
        """
        Save submitted data for the whole field tree.

        Args:
            data: Raw submitted value for the root; taken from the
                  request when None
        """
        self.check_element_keys(self.fm)

        save_keys: Set[str] = set()
        if self.fm.serialize_data:
            self.save_field(self.fm, data, save_keys)
        else:
            if data is None:
                data = self._submitted_value()
            self.save_walk_children(self.fm, data, save_keys)

    def check_element_keys(self, field, seen: Optional[Set[str]] = None) -> Set[str]:
        """
        Walk every node save() could write and fail on the first
        element key used twice, before anything is written.

        Raises:
            DuplicateKeyError: two nodes resolve to the same key
        """
        if seen is None:
            seen = set()
        if field.serialize_data or not field.is_group():
            key = field.get_element_key()
            if key in seen:
                raise DuplicateKeyError(key)
            seen.add(key)
            return seen
        for child in field.children:
            self.check_element_keys(child, seen)
        return seen

    def save_field(self, field, data: Any, save_keys: Set[str]) -> None:
        field.data_id = self.fm.data_id
        field.data_type = self.store.data_type
        key = field.get_element_key()

        if key in save_keys:
            raise DuplicateKeyError(key)
        save_keys.add(key)

        current = self.store.get_data(self.fm.data_id, key, field.serialize_data)
        data = self.prepare_data(current, data, field)
        if field.skip_save:
            return

        if field.serialize_data:
            self.store.update_data(self.fm.data_id, key, data)
        else:
            self.store.delete_data(self.fm.data_id, key)
            for value in self._as_list(data):
                self.store.add_data(self.fm.data_id, key, value)

    @staticmethod
    def _as_list(data: Any) -> list:
        if data is None:
            return []
        if isinstance(data, (list, tuple)):
            return list(data)
        return [data]

    def save_walk_children(self, field, data: Any, save_keys: Set[str]) -> None:
        if field.serialize_data or not field.is_group():
            self.save_field(field, data, save_keys)
            return
        if not isinstance(data, Mapping):
            return
        for child in field.children:
            if data.get(child.name) is not None:
                self.save_walk_children(child, data[child.name], save_keys)

    # ------------------------------------------
    # Loading
    # ------------------------------------------

    def load(self) -> Any:
        if self.fm.serialize_data:
            return self.load_field(self.fm)
        return self.load_walk_children(self.fm)

    def load_field(self, field) -> Any:
        data = self.store.get_data(self.fm.data_id, field.get_element_key())
        if field.serialize_data:
            return data[0] if data else None
        return data

    def load_walk_children(self, field) -> Any:
        if field.serialize_data or not field.is_group():
            return self.load_field(field)
        return {
            child.name: self.load_walk_children(child)
            for child in field.children
        }
