"""Registry of the fungible assets the desk knows about.

The order of entries is the order assets are shown to the user, after
the native asset which always comes first.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator

from walletdesk.abi import is_address

# Identity of the native asset. Never a valid contract address.
NATIVE = "native"


@dataclass(frozen=True)
class RegistryEntry:
    """A configured token contract."""

    name: str
    address: str


class AssetRegistry:
    """Fixed, ordered list of known token contracts."""

    def __init__(self, entries: Iterable[RegistryEntry]):
        self._entries: tuple[RegistryEntry, ...] = tuple(entries)

        seen = set()
        for entry in self._entries:
            if not is_address(entry.address):
                raise ValueError(f"Invalid token address for {entry.name}: {entry.address}")
            key = entry.address.lower()
            if key in seen:
                raise ValueError(f"Duplicate token address in registry: {entry.address}")
            seen.add(key)

    @classmethod
    def from_settings(cls, settings) -> "AssetRegistry":
        return cls(RegistryEntry(name=t.name, address=t.address) for t in settings.known_tokens)

    def __iter__(self) -> Iterator[RegistryEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
