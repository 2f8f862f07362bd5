from dataclasses import asdict, fields, is_dataclass
from typing import Any

def prune(value: Any) -> Any:
    """
    Recursively drop None values from dicts (and dicts nested in lists).
    None in a request struct means 'not set', and the API reads an explicit
    null differently to a missing field, unbounded range sides especially.
    """
    if isinstance(value, dict):
        return {k: prune(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [prune(v) for v in value]
    return value

class GoogleWorkSpaceResourceBase():
    """
    Intended to be subclassed by a dataclass but isnt actually a dataclass.
    With a common base it is easy to filter with isinstance.
    """
    @classmethod
    def from_base(cls, base: dict|None):
        """
        Inverse of to_base(), build the resource from a response dict.
        Keys the dataclass doesn't know about are dropped, the API
        grows fields faster than this package does.
        """
        names = {f.name for f in fields(cls)} if is_dataclass(cls) else set()
        return cls(**{k: v for k, v in dict(base or {}).items() if k in names})

    def to_base(self) -> dict:
        """
        Default just return the dict representation of the object as needed by
        the GWS client, minus unset (None) fields.  Something more complicated can override.
        Calls fixup() first to ensure all fields are in correct format.
        """
        self.fixup()
        return prune(asdict(self))

    def fixup(self) -> None:
        """
        notify a subclass to do any field adjustments
        """
        pass

