"""
Single-valued parameter storage for OAuth requests.
"""

from collections.abc import MutableMapping
from typing import Iterator, Optional


class ParameterStore(MutableMapping):
    """
    Mapping of parameter name to string value, one value per name.

    Writing a name that is already present replaces its value. Unlike the
    general OAuth protocol, repeated parameter names are not kept.

    Usage:
        store = ParameterStore()
        store.set("oauth_nonce", "abc")
        store.get("oauth_nonce")      # "abc"
        store.get("oauth_callback")   # None
    """

    def __init__(self, initial=None, **kwargs):
        self._values: dict[str, str] = {}
        if initial is not None:
            self.update(initial)
        if kwargs:
            self.update(kwargs)

    def set(self, name: str, value: Optional[str]) -> None:
        """
        Set a parameter, replacing any previous value.

        Args:
            name: Parameter name (case-sensitive)
            value: New value; None removes the parameter
        """
        if value is None:
            self._values.pop(name, None)
        else:
            self._values[name] = str(value)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self._values.get(name, default)

    def copy(self) -> "ParameterStore":
        return ParameterStore(self._values)

    def __getitem__(self, name: str) -> str:
        return self._values[name]

    def __setitem__(self, name: str, value: str) -> None:
        self.set(name, value)

    def __delitem__(self, name: str) -> None:
        del self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ParameterStore({self._values!r})"
