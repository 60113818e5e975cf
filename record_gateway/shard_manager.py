import bisect
import hashlib
from typing import Dict, Iterable, List


class HashRing:
    """Consistent-hash ring mapping record keys onto storage node URLs."""

    def __init__(self, node_urls: Iterable[str], replicas: int = 100):
        self.replicas = replicas
        self._ring: Dict[int, str] = {}  # virtual node hash -> node url
        self._points: List[int] = []

        for url in node_urls:
            self.add_node(url)

    @staticmethod
    def _hash(value: str) -> int:
        return int(hashlib.md5(value.encode("utf-8")).hexdigest(), 16)

    def _virtual_points(self, url: str):
        return (self._hash(f"{url}#{i}") for i in range(self.replicas))

    @property
    def nodes(self) -> List[str]:
        return sorted(set(self._ring.values()))

    def add_node(self, url: str) -> None:
        for point in self._virtual_points(url):
            self._ring[point] = url
        self._points = sorted(self._ring)

    def remove_node(self, url: str) -> None:
        for point in self._virtual_points(url):
            if self._ring.get(point) == url:
                del self._ring[point]
        self._points = sorted(self._ring)

    def node_for(self, key: str) -> str:
        if not self._points:
            raise LookupError("No storage nodes available")
        idx = bisect.bisect(self._points, self._hash(key))
        # wrap around past the last point
        return self._ring[self._points[idx % len(self._points)]]
