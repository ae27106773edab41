from typing import Dict

WRITABLE_FIELDS = (
    "name",
    "description",
    "price",
    "category",
    "stock",
    "image",
    "brand",
    "specifications",
    "discount",
    "featured",
    "status",
)

# fields the storefront admin form always sends; a missing or falsy value means "default"
DEFAULTED_FIELDS = {"discount": 0, "featured": False, "status": "active"}


class UpdatePolicy:
    name = "base"

    def changes(self, payload: Dict) -> Dict:
        """Map a submitted payload to the column values to write."""
        raise NotImplementedError


class ResetDefaultsPolicy(UpdatePolicy):
    """
    Full replace with defaults: discount, featured and status are always written,
    falling back to 0 / False / "active" when absent or falsy. Other writable
    fields are written only when present in the payload (None clears).
    """
    name = "reset_defaults"

    def changes(self, payload: Dict) -> Dict:
        out = {k: payload[k] for k in WRITABLE_FIELDS if k in payload and k not in DEFAULTED_FIELDS}
        for k, default in DEFAULTED_FIELDS.items():
            out[k] = payload.get(k) or default
        return out


class PartialPatchPolicy(UpdatePolicy):
    """True partial patch: only fields present in the payload are written."""
    name = "partial_patch"

    def changes(self, payload: Dict) -> Dict:
        return {k: payload[k] for k in WRITABLE_FIELDS if k in payload}


POLICIES = {p.name: p for p in (ResetDefaultsPolicy, PartialPatchPolicy)}


def get_update_policy(name: str) -> UpdatePolicy:
    try:
        return POLICIES[name]()
    except KeyError:
        raise ValueError(f"unknown product update policy {name!r}; expected one of {sorted(POLICIES)}")


class VersionCheck:
    """Hook consulted before a product row is overwritten."""

    def check(self, product, payload: Dict) -> None:
        raise NotImplementedError


class LastWriteWins(VersionCheck):
    """No concurrency token: the latest committed update wins."""

    def check(self, product, payload: Dict) -> None:
        return None
