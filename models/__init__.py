from .requests import FetchMode, WaveHackListParams, WaveHackIdParams
from .responses import (
    ErrorResponse,
    Summary,
    WaveHackDetailResponse,
    WaveHackListResponse,
    utc_timestamp,
)
from .wave_hacks import (
    ActiveWave,
    CommunityLinks,
    Criterion,
    PageMeta,
    Token,
    WaveHack,
    WaveHackDetail,
    WaveHackPage,
)

__all__ = [
    "FetchMode",
    "WaveHackListParams",
    "WaveHackIdParams",
    "ErrorResponse",
    "Summary",
    "WaveHackDetailResponse",
    "WaveHackListResponse",
    "utc_timestamp",
    "ActiveWave",
    "CommunityLinks",
    "Criterion",
    "PageMeta",
    "Token",
    "WaveHack",
    "WaveHackDetail",
    "WaveHackPage",
]
