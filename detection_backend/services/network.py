"""Network signal sources"""
import random
from typing import Optional

from detection_backend.models.schemas import Metadata, NetworkData, SharedContent


class NetworkDataSource:
    """Supplies network signals for a user when the request carries none"""

    def gather(self, user_id: str) -> Optional[NetworkData]:
        raise NotImplementedError


class MockNetworkDataSource(NetworkDataSource):
    """
    Random network signals for demos; not a real signal.

    Value ranges match the dashboard client that used to generate them.
    """

    def __init__(self, seed: Optional[int] = None):
        self._random = random.Random(seed)

    def gather(self, user_id: str) -> Optional[NetworkData]:
        if not user_id:
            return None
        return NetworkData(
            simultaneous_posts=self._random.randrange(20),
            shared_content=SharedContent(suspicious_percentage=self._random.random()),
            account_age=self._random.randrange(365),
            followers_count=self._random.randrange(10000),
            following_count=self._random.randrange(5000),
        )


def resolve_network_data(metadata: Metadata, source: Optional[NetworkDataSource] = None) -> Optional[NetworkData]:
    """Request-supplied signals win; otherwise ask the source (if any) for the author"""
    if metadata.network_data is not None:
        return metadata.network_data
    if source is None or not metadata.user_id:
        return None
    return source.gather(metadata.user_id)
