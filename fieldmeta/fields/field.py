# ==============================================
# Field / Group
# ==============================================
#
# PURPOSE:
#   The field tree a Context loads and saves. A Field is a leaf
#   holding one value (limit=1) or a list of values (limit=0 for
#   unlimited, N for at most N). A Group aggregates named children.
#
# STORAGE MODES:
#   serialize_data=True   → the node's whole value is one blob
#                           stored under one key.
#   serialize_data=False  → every leaf below the node is stored
#                           under its own key. Children of such a
#                           group inherit serialize_data=False.
#
# ELEMENT KEYS:
#   A node's storage key is its name, prefixed with "<group>_"
#   for every ancestor group whose add_to_prefix is True:
#
#     Group("seo", [Field("title")])          → "seo_title"
#     Group("seo", [...], add_to_prefix=False) → "title"
#
# ==============================================

from html import escape
from typing import Any, Callable, Dict, List, Optional

from fieldmeta.errors import DeveloperError


class Field:
    """A single form field (leaf of the tree)."""

    field_class = "text"

    def __init__(
        self,
        name: str,
        label: Optional[str] = None,
        limit: int = 1,
        serialize_data: bool = True,
        skip_save: bool = False,
        default_value: Any = None,
        sanitize: Optional[Callable[[Any], Any]] = None,
        attributes: Optional[Dict[str, str]] = None,
    ):
        if not name:
            raise DeveloperError("Fields must have a name")
        if limit < 0:
            raise DeveloperError(f"Field '{name}' has a negative limit")
        self.name = name
        self.label = label
        self.limit = limit
        self.serialize_data = serialize_data
        self.skip_save = skip_save
        self.default_value = default_value
        self.sanitize = sanitize
        self.attributes = attributes or {}
        self.children: List['Field'] = []
        self.parent: Optional['Group'] = None
        # Stamped by the Context for the duration of a save
        self.data_id = None
        self.data_type = None

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r})"

    def is_group(self) -> bool:
        return False

    def get_element_key(self) -> str:
        key = self.name
        el = self.parent
        while el is not None:
            if el.add_to_prefix:
                key = f"{el.name}_{key}"
            el = el.parent
        return key

    def get_form_name(self) -> str:
        # root[child][grandchild]
        names = []
        el = self
        while el is not None:
            names.append(el.name)
            el = el.parent
        names.reverse()
        return names[0] + "".join(f"[{name}]" for name in names[1:])

    def _disable_serialization(self) -> None:
        self.serialize_data = False
        for child in self.children:
            child._disable_serialization()

    # ------------------------------------------
    # Presave
    # ------------------------------------------

    def presave(self, value: Any, current_value: Any = None) -> Any:
        """Sanitize one value before it is stored."""
        if self.sanitize is not None:
            return self.sanitize(value)
        if isinstance(value, str):
            return value.strip()
        return value

    def presave_all(self, values: Any, current_values: Any = None) -> Any:
        """
        Sanitize everything submitted for this field.

        Args:
            values: Submitted value, or list of values for multi-value fields
            current_values: What the store currently holds for this field

        Returns:
            The value to store. Multi-value fields always return a list
            with empty entries dropped and the limit applied.
        """
        if self.limit != 1:
            if values is None or values == "":
                values = []
            elif not isinstance(values, (list, tuple)):
                values = [values]
            current = current_values if isinstance(current_values, list) else []
            cleaned = []
            for i, value in enumerate(values):
                if value is None or value == "":
                    continue
                cleaned.append(self.presave(value, current[i] if i < len(current) else None))
            if self.limit > 0:
                cleaned = cleaned[:self.limit]
            return cleaned

        if isinstance(values, (list, tuple)) and not self.serialize_data:
            # Loaded per-key values come back as a list; keep that shape
            return [self.presave(value) for value in values]
        return self.presave(values, current_values)

    # ------------------------------------------
    # Markup
    # ------------------------------------------

    def _input(self, name: str, value: Any) -> str:
        attrs = "".join(
            f' {escape(str(k), quote=True)}="{escape(str(v), quote=True)}"'
            for k, v in self.attributes.items()
        )
        if value is None:
            value = ""
        return (
            f'<input type="{self.field_class}" name="{escape(name, quote=True)}" '
            f'value="{escape(str(value), quote=True)}"{attrs} />'
        )

    def element_markup(self, value: Any = None) -> str:
        form_name = self.get_form_name()
        if value is None:
            value = self.default_value

        if self.limit != 1:
            values = list(value) if isinstance(value, (list, tuple)) else []
            if self.limit == 0 or len(values) < self.limit:
                values.append("")
            inputs = "".join(
                self._input(f"{form_name}[{i}]", v) for i, v in enumerate(values)
            )
        else:
            if isinstance(value, (list, tuple)):
                value = value[0] if value else None
            inputs = self._input(form_name, value)

        label = ""
        if self.label:
            label = f'<label>{escape(self.label)}</label>'
        return f'<div class="fm-item fm-{escape(self.name, quote=True)}">{label}{inputs}</div>'


class Group(Field):
    """A field that aggregates named children."""

    field_class = "group"

    def __init__(self, name: str, children: Optional[List[Field]] = None,
                 add_to_prefix: bool = True, **kwargs):
        super().__init__(name, **kwargs)
        self.add_to_prefix = add_to_prefix
        for child in children or []:
            self.add_child(child)

    def is_group(self) -> bool:
        return True

    def add_child(self, child: Field) -> Field:
        if any(existing.name == child.name for existing in self.children):
            raise DeveloperError(
                f"Group '{self.name}' already has a child named '{child.name}'"
            )
        child.parent = self
        if not self.serialize_data:
            child._disable_serialization()
        self.children.append(child)
        return child

    def presave_all(self, values: Any, current_values: Any = None) -> Dict[str, Any]:
        if not isinstance(values, dict):
            values = {}
        current = current_values if isinstance(current_values, dict) else {}
        return {
            child.name: child.presave_all(values[child.name], current.get(child.name))
            for child in self.children
            if child.name in values
        }

    def element_markup(self, value: Any = None) -> str:
        if not isinstance(value, dict):
            value = {}
        inner = "".join(child.element_markup(value.get(child.name)) for child in self.children)
        label = f'<h4>{escape(self.label)}</h4>' if self.label else ""
        return f'<div class="fm-group fm-{escape(self.name, quote=True)}">{label}{inner}</div>'
