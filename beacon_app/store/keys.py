"""
Key naming for the counting store.

Layout:
    <prefix>site_uv:<host>   set of client identities
    <prefix>site_pv          hash, field = host
    <prefix>page_pv:<host>   hash, field = path
"""

KEY_SEPARATOR = ":"


def normalize_prefix(prefix: str, separator: str = KEY_SEPARATOR) -> str:
    """Return prefix ending with one separator, or "" when prefix is empty"""
    if prefix and not prefix.endswith(separator):
        return prefix + separator
    return prefix


class KeySpace:
    """Builds store keys under one deployment prefix"""

    def __init__(self, prefix: str = "", separator: str = KEY_SEPARATOR):
        self.separator = separator
        self.prefix = normalize_prefix(prefix, separator)

    def site_uv(self, host: str) -> str:
        return f"{self.prefix}site_uv{self.separator}{host}"

    def site_pv(self) -> str:
        return f"{self.prefix}site_pv"

    def page_pv(self, host: str) -> str:
        return f"{self.prefix}page_pv{self.separator}{host}"
