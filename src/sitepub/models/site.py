"""
사이트 설정(config.toml) 데이터 모델
"""

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from ..errors import ConfigurationMissing

logger = logging.getLogger(__name__)


@dataclass
class MenuItem:
    """메뉴 항목"""

    name: str
    url: str
    weight: int = 0


@dataclass
class SiteConfig:
    """사이트 설정 데이터 모델"""

    base_url: str
    title: str = ""
    themes: list[str] = field(default_factory=list)  # hugo: theme = "a" 또는 ["a", "b"]
    language_code: str = "en-us"
    menu: list[MenuItem] = field(default_factory=list)
    params: dict = field(default_factory=dict)
    raw: dict = field(default_factory=dict)  # 원본 키-값

    def abs_url(self, path: str) -> str:
        """사이트 경로를 base URL 기준 절대 URL로 변환"""
        return self.base_url.rstrip("/") + "/" + path.lstrip("/")


def _lookup(data: dict, key: str):
    """대소문자 구분 없이 키 조회 (baseURL == baseurl)"""
    for k, v in data.items():
        if k.lower() == key.lower():
            return v
    return None


def _parse_menu(data: dict) -> list[MenuItem]:
    menus = _lookup(data, "menu")
    if not isinstance(menus, dict):
        return []

    items = []
    entries = _lookup(menus, "main") or []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        items.append(
            MenuItem(
                name=str(_lookup(entry, "name") or ""),
                url=str(_lookup(entry, "url") or "/"),
                weight=int(_lookup(entry, "weight") or 0),
            )
        )
    items.sort(key=lambda item: (item.weight, item.name))
    return items


def _parse_themes(value) -> list[str]:
    """theme 값을 이름 목록으로 정규화"""
    if value is None or value == "":
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(v, str) and v.strip() for v in value):
        raise ConfigurationMissing(f"theme 은 문자열 또는 문자열 목록이어야 합니다: {value!r}")
    return [v.strip() for v in value]


def parse_site_config(data: dict) -> SiteConfig:
    """키-값 문서에서 SiteConfig 생성"""
    base_url = _lookup(data, "baseurl")
    if not isinstance(base_url, str) or not base_url.strip():
        raise ConfigurationMissing("사이트 설정에 baseURL이 없습니다")

    return SiteConfig(
        base_url=base_url.strip(),
        title=str(_lookup(data, "title") or ""),
        themes=_parse_themes(_lookup(data, "theme")),
        language_code=str(_lookup(data, "languagecode") or "en-us"),
        menu=_parse_menu(data),
        params=dict(_lookup(data, "params") or {}),
        raw=data,
    )


def load_site_config(path: Path) -> SiteConfig:
    """config.toml 로드"""
    path = Path(path)
    if not path.is_file():
        raise ConfigurationMissing(f"사이트 설정 파일이 없습니다: {path}")

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationMissing(f"사이트 설정 파싱 실패: {path}: {e}") from e

    config = parse_site_config(data)
    logger.debug(f"사이트 설정 로드: {path} (baseURL={config.base_url})")
    return config
