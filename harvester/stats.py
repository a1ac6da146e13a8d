from contextlib import contextmanager
from datetime import timedelta
from threading import Lock
from typing import Any, Generator

import statsd
from statsd.client.timer import Timer

from harvester.config import ConfigStats


class Stats:
    def inc(self, key: str, count: int = 1, rate: int = 1) -> None:
        raise NotImplementedError

    def timer(self, key: str) -> Timer:
        raise NotImplementedError


class NoopStats(Stats):
    def inc(self, key: str, count: int = 1, rate: int = 1) -> None:
        """Empty method due to NoopStats implementation"""
        pass

    def timer(self, key: str) -> Timer:
        @contextmanager
        def noop_context_manager() -> Generator[Any, Any, Any]:
            yield

        return noop_context_manager()


class MemoryClient:
    """
    Statsd compatible client keeping counters and timings in memory. Enrichment tasks
    report from several threads, so updates are serialized.
    """

    def __init__(self) -> None:
        self.memory: dict[str, Any] = {}
        self.__lock = Lock()

    def timer(self, stat: str, rate: int = 1) -> Timer:
        return Timer(self, stat, rate)

    def timing(self, stat: str, delta: timedelta | float, rate: int = 1) -> None:
        """Called by statsd's Timer when a timed block ends. rate is unused"""
        if isinstance(delta, timedelta):
            delta = delta.total_seconds() * 1000.0
        with self.__lock:
            self.memory.setdefault(stat, []).append(delta)

    def incr(self, stat: str, count: int = 1, rate: int = 1) -> None:
        """Increment a stat by `count`. rate is unused"""
        with self.__lock:
            self.memory[stat] = self.memory.get(stat, 0) + count

    def get_memory(self) -> dict[str, Any]:
        with self.__lock:
            return dict(self.memory)


class Statsd(Stats):
    def __init__(self, client: statsd.StatsClient | MemoryClient):
        self.client = client

    def inc(self, key: str, count: int = 1, rate: int = 1) -> None:
        self.client.incr(key, count, rate)

    def timer(self, key: str) -> Timer:
        return self.client.timer(key)


_STATS: Stats = NoopStats()


def setup_stats(config: ConfigStats) -> None:
    if config.enabled is False:
        return
    in_memory = config.host is None or config.host == ""
    client = (
        MemoryClient()
        if in_memory
        else statsd.StatsClient(config.host, config.port or 8125, prefix=config.module_name)
    )
    global _STATS
    _STATS = Statsd(client)


def get_stats() -> Stats:
    return _STATS


def reset_stats() -> None:
    global _STATS
    _STATS = NoopStats()
