# hifzquiz/quran_cache.py
import asyncio
import json
import sys
import threading
from typing import Any, Callable, Dict

from colorama import Fore, Style

from .quran_api_client import DataLoadFailure, QuranDataClient


class QuranCache:
    """
    Process-wide memo of parsed datasets, keyed by dataset name.

    Loads are single-flight: callers arriving while a dataset is still loading
    await the same pending task instead of starting another fetch. A failed
    load is not remembered, so the next caller tries again.
    """

    def __init__(self, client: QuranDataClient):
        self.client = client
        self.cache_data: Dict[str, Any] = {}
        self._pending: Dict[str, asyncio.Future] = {}
        self._lock = threading.Lock()

    def is_loaded(self, name: str) -> bool:
        return name in self.cache_data

    async def load(self, name: str, parser: Callable[[str], Any] = json.loads) -> Any:
        """Return the parsed dataset, loading it on first use."""
        with self._lock:
            if name in self.cache_data:
                return self.cache_data[name]
            task = self._pending.get(name)
            if task is None:
                task = asyncio.ensure_future(self._load(name, parser))
                self._pending[name] = task
        # shield: one waiter being cancelled must not cancel the shared load
        return await asyncio.shield(task)

    async def _load(self, name: str, parser: Callable[[str], Any]) -> Any:
        try:
            raw = await self.client.fetch(name)
            data = parser(raw)
        except DataLoadFailure as e:
            self._forget(name)
            print(f"{Fore.RED}Error: Could not load dataset {name}: {e}{Style.RESET_ALL}", file=sys.stderr)
            raise
        except (ValueError, TypeError, KeyError) as e:
            # json.JSONDecodeError is a ValueError
            self._forget(name)
            print(f"{Fore.RED}Error: Failed to parse dataset {name}: {e}{Style.RESET_ALL}", file=sys.stderr)
            raise DataLoadFailure(f"Failed to parse dataset {name}: {e}") from e
        except asyncio.CancelledError:
            self._forget(name)
            raise

        with self._lock:
            self.cache_data[name] = data
            self._pending.pop(name, None)
        print(f"{Fore.GREEN}Successfully loaded dataset {name}.{Style.RESET_ALL}", file=sys.stderr)
        return data

    def _forget(self, name: str):
        with self._lock:
            self._pending.pop(name, None)
