"""Audio repository: the one place the UI gets its track list from."""

from __future__ import annotations

import asyncio
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Optional

from jetaudio.data.content_resolver import ContentResolverHelper
from jetaudio.data.models import Audio

# Shared IO pool; content queries are short and blocking.
_io_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="jetaudio-io")


class AudioRepository:
    def __init__(
        self,
        content_resolver: ContentResolverHelper,
        executor: Optional[Executor] = None,
    ):
        self.content_resolver = content_resolver
        self.executor = executor or _io_executor

    async def get_audio_data(self) -> list[Audio]:
        """Query the media store off the calling thread. Errors propagate as-is."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, self.content_resolver.get_audio_data)
