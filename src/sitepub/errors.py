"""
빌드/배포 오류 정의
"""


class PublisherError(Exception):
    """sitepub 오류 베이스 클래스"""


class ConfigurationMissing(PublisherError):
    """필수 설정값 누락 (base URL, 원격 저장소 등)"""


class RenderFailure(PublisherError):
    """렌더러가 콘텐츠/템플릿을 처리하지 못함"""


class SyncConflict(PublisherError):
    """배포 브랜치 동기화 실패 (git 오류 메시지 그대로 전달)"""


class PublishStateError(PublisherError):
    """허용되지 않은 파이프라인 상태 전이"""

    def __init__(self, from_state, to_state):
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"잘못된 상태 전이: {from_state.name} -> {to_state.name}"
        )
