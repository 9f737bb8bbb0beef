from __future__ import annotations

import threading

from .config import Genesis


class GenesisClock:
    """Holds the agreed genesis timestamp.

    The first call to ``set_genesis_timestamp`` wins; every later call is a
    no-op whatever value it carries. Share one instance with the subsystems
    that need the genesis time instead of handing them the whole config.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._is_set = False
        self._timestamp = 0

    @classmethod
    def from_genesis(cls, genesis: Genesis) -> "GenesisClock":
        clock = cls()
        clock.set_genesis_timestamp(genesis.blockchain.timestamp)
        return clock

    def set_genesis_timestamp(self, ts: int) -> bool:
        with self._lock:
            if self._is_set:
                return False
            self._timestamp = int(ts)
            self._is_set = True
            return True

    def timestamp(self) -> int:
        return self._timestamp

    @property
    def is_set(self) -> bool:
        return self._is_set
