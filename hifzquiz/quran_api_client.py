# hifzquiz/quran_api_client.py
import asyncio
import concurrent.futures
import sys
from pathlib import Path
from typing import Iterable, Optional, Set

import aiofiles
import aiohttp
import requests
import tqdm
from colorama import Fore, Style

from .settings import QuizSettings

ARABIC_DATASET = "imlaei-script-ayah-by-ayah.json"
TRANSLATION_DATASET = "en-sahih-international-simple.json"
JUZ_DATASET = "juz_breakdown_standard.csv"
SURAH_AUDIO_DATASET = "surah.json"
SEGMENTS_DATASET = "segments.json"

ALL_DATASETS = (
    ARABIC_DATASET,
    TRANSLATION_DATASET,
    JUZ_DATASET,
    SURAH_AUDIO_DATASET,
    SEGMENTS_DATASET,
)


class DataLoadFailure(Exception):
    """A required dataset could not be fetched or parsed"""


class QuranDataClient:
    """
    Fetches raw dataset text.

    Lookup order: bundled data directory, download cache, remote base URL.
    Remote downloads are written to the download cache so later runs stay offline.
    """
    TIMEOUT = 10
    MAX_WORKERS = 5

    def __init__(self, settings: Optional[QuizSettings] = None):
        settings = settings or QuizSettings()
        self.data_dir = Path(settings.data_dir) if settings.data_dir else None
        self.cache_dir = Path(settings.cache_dir) if settings.cache_dir else None
        self.base_url = settings.data_url.rstrip('/') + '/' if settings.data_url else None
        self.timeout = settings.request_timeout or self.TIMEOUT

    def _local_path(self, name: str) -> Optional[Path]:
        for directory in (self.data_dir, self.cache_dir):
            if directory:
                path = directory / name
                if path.is_file():
                    return path
        return None

    async def fetch(self, name: str) -> str:
        """Return the dataset's text or raise DataLoadFailure."""
        path = self._local_path(name)
        if path:
            try:
                async with aiofiles.open(path, 'r', encoding='utf-8') as f:
                    return await f.read()
            except (OSError, UnicodeDecodeError) as e:
                raise DataLoadFailure(f"Could not read {path}: {e}") from e

        if not self.base_url:
            raise DataLoadFailure(
                f"Dataset '{name}' not found in {self.data_dir} or {self.cache_dir}, and no data URL is configured"
            )

        text = await self._download(name)
        await self._write_cache(name, text)
        return text

    async def _download(self, name: str) -> str:
        url = f"{self.base_url}{name}"
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url, headers={"User-Agent": "HifzQuiz/1.0"}) as response:
                    response.raise_for_status()
                    text = await response.text(encoding='utf-8')
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DataLoadFailure(f"Request for {url} failed: {e}") from e
        print(f"{Fore.GREEN}Downloaded dataset {name}.{Style.RESET_ALL}", file=sys.stderr)
        return text

    async def _write_cache(self, name: str, text: str):
        if not self.cache_dir:
            return
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(self.cache_dir / name, 'w', encoding='utf-8') as f:
                await f.write(text)
        except OSError as e:
            print(f"{Fore.YELLOW}Warning: Could not write dataset cache {self.cache_dir / name}: {e}{Style.RESET_ALL}", file=sys.stderr)

    # --- Bulk pre-fetch (synchronous, used by the terminal front end) ---

    def download_datasets(self, names: Optional[Iterable[str]] = None, force: bool = False) -> Set[str]:
        """
        Download datasets into the cache directory in parallel.

        Returns the set of dataset names that could not be downloaded.
        """
        if not self.base_url:
            raise DataLoadFailure("No data URL configured, nothing to download from")
        if not self.cache_dir:
            raise DataLoadFailure("No cache directory configured, nowhere to download to")

        names = list(names or ALL_DATASETS)
        if not force:
            names = [n for n in names if not self._local_path(n)]
        if not names:
            print(Fore.GREEN + "✓ All datasets available locally!", file=sys.stderr)
            return set()

        self.cache_dir.mkdir(parents=True, exist_ok=True)
        session = requests.Session()
        session.headers.update({"User-Agent": "HifzQuiz/1.0"})
        failed = set()

        with concurrent.futures.ThreadPoolExecutor(max_workers=self.MAX_WORKERS) as executor:
            futures = {executor.submit(self._download_single_dataset, session, name): name for name in names}
            with tqdm.tqdm(total=len(names), desc=Fore.RED + "Progress" + Fore.RESET,
                           unit="file", colour='red') as pbar:
                for future in concurrent.futures.as_completed(futures):
                    if not future.result():
                        failed.add(futures[future])
                    pbar.update(1)

        # Retry failed downloads once
        if failed:
            print(Fore.YELLOW + "\nRetrying failed downloads...", file=sys.stderr)
            for name in sorted(failed):
                if self._download_single_dataset(session, name):
                    print(Fore.GREEN + f"Successfully downloaded {name}", file=sys.stderr)
                    failed.discard(name)
                else:
                    print(Fore.RED + f"Failed to download {name}", file=sys.stderr)

        return failed

    def _download_single_dataset(self, session: requests.Session, name: str) -> bool:
        try:
            response = session.get(f"{self.base_url}{name}", timeout=self.timeout)
            response.raise_for_status()
            response.encoding = 'utf-8'
            (self.cache_dir / name).write_text(response.text, encoding='utf-8')
            return True
        except (requests.exceptions.RequestException, OSError):
            return False
