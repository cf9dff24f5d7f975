import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
)

ENV_PREFIX = "IMAGE_FETCH_"


@dataclass
class ImageFetchConfig:
    max_results: int = 3
    direct_url_timeout_ms: int = 500
    sales_url_timeout_ms: int = 200
    sales_url_image_timeout_ms: int = 50  # 商品页内单张图片的元信息请求超时
    channel_search_timeout_ms: int = 300
    channel_search_min_interval_ms: int = 200  # 这个参数控制渠道搜索的请求间隔，避免触发反爬
    request_deadline_ms: Optional[int] = None  # 为空时按各策略超时之和推算
    user_agent: str = DEFAULT_USER_AGENT
    http_max_retries: int = 0

    def __post_init__(self):
        """
        数据验证
        """
        if self.max_results < 1:
            raise ValueError("max_results 必须大于等于 1")

        for name in (
            'direct_url_timeout_ms',
            'sales_url_timeout_ms',
            'sales_url_image_timeout_ms',
            'channel_search_timeout_ms',
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} 必须为正数")

        if self.channel_search_min_interval_ms < 0:
            raise ValueError("channel_search_min_interval_ms 不能为负数")

        if self.request_deadline_ms is not None and self.request_deadline_ms <= 0:
            raise ValueError("request_deadline_ms 必须为正数")

        if self.http_max_retries < 0:
            raise ValueError("http_max_retries 不能为负数")

    @property
    def effective_deadline_ms(self) -> int:
        """
        整个请求的截止时间（毫秒）

        未显式配置时，取各策略超时之和作为上界：
        直接URL + 商品页 + 商品页内每张图片 + 渠道搜索 + 一次限流等待
        """
        if self.request_deadline_ms is not None:
            return self.request_deadline_ms
        return (
            self.direct_url_timeout_ms
            + self.sales_url_timeout_ms
            + self.sales_url_image_timeout_ms * self.max_results
            + self.channel_search_timeout_ms
            + self.channel_search_min_interval_ms
        )

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "ImageFetchConfig":
        """
        从环境变量加载配置（IMAGE_FETCH_MAX_RESULTS 等），缺省项使用默认值

        参数:
            env_file: .env 文件路径，默认为 backend/.env
        """
        if env_file is None:
            backend_dir = Path(__file__).resolve().parents[4]
            env_file = backend_dir / '.env'
        load_dotenv(env_file)

        def read_int(name: str, default: Optional[int]) -> Optional[int]:
            raw = os.getenv(ENV_PREFIX + name.upper())
            if raw is None or not raw.strip():
                return default
            return int(raw)

        defaults = cls()
        return cls(
            max_results=read_int('max_results', defaults.max_results),
            direct_url_timeout_ms=read_int('direct_url_timeout_ms', defaults.direct_url_timeout_ms),
            sales_url_timeout_ms=read_int('sales_url_timeout_ms', defaults.sales_url_timeout_ms),
            sales_url_image_timeout_ms=read_int('sales_url_image_timeout_ms', defaults.sales_url_image_timeout_ms),
            channel_search_timeout_ms=read_int('channel_search_timeout_ms', defaults.channel_search_timeout_ms),
            channel_search_min_interval_ms=read_int(
                'channel_search_min_interval_ms', defaults.channel_search_min_interval_ms
            ),
            request_deadline_ms=read_int('request_deadline_ms', None),
            user_agent=os.getenv(ENV_PREFIX + 'USER_AGENT') or defaults.user_agent,
            http_max_retries=read_int('http_max_retries', defaults.http_max_retries),
        )
